#Runs BRouter on this machine: download, data tiles, start/stop.
#Re-exports the public pieces so callers can do
#from brouter_local import BRouterServer

from .errors import DownloadError, JarNotFoundError, ServerError, ServerStateError
from .policy import LaunchPolicy, default_launch_policy
from .server import BRouterServer, default_home
from .state import ServerState

__all__ = [
    "BRouterServer",
    "default_home",
    "LaunchPolicy",
    "default_launch_policy",
    "ServerState",
    "ServerError",
    "DownloadError",
    "JarNotFoundError",
    "ServerStateError",
]
