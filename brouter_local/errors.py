# One-time setup failures (download, install, spawn).
# Kept apart from brouter.errors.BrouterError, which is per-request.


class ServerError(Exception):
    """Raised when the local BRouter server cannot be installed or run."""
    pass


class DownloadError(ServerError):
    """The distribution archive or a segment tile could not be fetched."""
    pass


class JarNotFoundError(ServerError):
    """No brouter-*/ *.jar under the install directory."""
    pass


class ServerStateError(ServerError):
    """Raised when an invalid lifecycle transition is attempted."""
    pass
