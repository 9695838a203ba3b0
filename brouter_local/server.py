"""
Purpose: Download and run BRouter locally.
What it does:
- Owns the install directory layout:
   <base>/brouter-<version>/*.jar    engine
   <base>/segments4/<TILE>.rd5       data tiles
   <base>/custom_profiles/           uploaded profiles
- install(): fetch + unzip the engine distribution (idempotent)
- download_segment() / download_all_segments(): fetch data tiles on demand
- start() / stop(): run the engine as a child process (both idempotent)

Rule: one child process per BRouterServer. Two managers pointed at the same
directory do not coordinate; the second start() may race the first for the port.
"""

from __future__ import annotations

import io
import logging
import os
import subprocess
import time
import weakref
import zipfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import requests

from brouter.config import settings
from brouter.models import Point

from .errors import DownloadError, JarNotFoundError, ServerError
from .policy import LaunchPolicy, default_launch_policy
from .polling import wait_until
from .segments import all_segment_names, is_valid_segment_name, segments_for_points
from .state import ServerState, check_transition

logger = logging.getLogger(__name__)

JAR_DIR_PREFIX = "brouter-"
JAR_SUFFIX = ".jar"

SEGMENTS_DIR_NAME = "segments4"
CUSTOM_PROFILES_DIR_NAME = "custom_profiles"
BUNDLED_PROFILES_DIR_NAME = "profiles2"

# the engine answers "/" with 404 once it is up
SERVING_STATUS = 404

DOWNLOAD_CHUNK_SIZE = 1 << 16


def default_home() -> Path:
    """BROUTER_HOME, else $XDG_DATA_HOME/brouter, else ~/.local/share/brouter."""
    if settings.home:
        return Path(settings.home)
    data_home = os.getenv("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "brouter"


def _terminate(process, timeout: float) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"BRouter server (pid {process.pid}) ignored terminate, killing it")
        process.kill()
        process.wait()


def _reap(process, timeout: float, base_path: Path) -> None:
    # runs when the owning BRouterServer is collected or at interpreter exit;
    # must never raise
    try:
        _terminate(process, timeout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Failed to stop BRouter server at {base_path}: {e}")


class BRouterServer:
    """
    A locally-installed BRouter server.

    Args:
        base_path: install directory
        policy: launch/readiness parameters (default_launch_policy() if omitted)
        session: requests session used for downloads and readiness probes
        process_factory: spawns the engine, subprocess.Popen-compatible
        sleep: used between readiness probes
    """

    def __init__(
        self,
        base_path,
        *,
        policy: Optional[LaunchPolicy] = None,
        session: Optional[requests.Session] = None,
        process_factory: Callable[..., subprocess.Popen] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_path = Path(base_path)
        self.segments_dir = self.base_path / SEGMENTS_DIR_NAME
        self.custom_profile_dir = self.base_path / CUSTOM_PROFILES_DIR_NAME

        self.policy = policy or default_launch_policy()
        self.session = session or requests.Session()
        self._process_factory = process_factory
        self._sleep = sleep

        self._process: Optional[subprocess.Popen] = None
        self._finalizer: Optional[weakref.finalize] = None
        self._has_run = False

        # install marker, filled by the first successful find_jar_file()
        self._jar_path: Optional[Path] = None

    @classmethod
    def home(cls, **kwargs) -> BRouterServer:
        """A server installed in the user's data directory (see default_home)."""
        data_dir = default_home()
        data_dir.mkdir(parents=True, exist_ok=True)
        return cls(data_dir, **kwargs)

    @property
    def base_url(self) -> str:
        return self.policy.base_url

    @property
    def state(self) -> ServerState:
        if self.is_running():
            return ServerState.RUNNING
        if self._has_run:
            return ServerState.STOPPED
        if self.has_downloaded():
            return ServerState.INSTALLED
        return ServerState.UNINSTALLED

    #----------------
    # Install
    #----------------

    def find_jar_file(self) -> Optional[Path]:
        """Locate brouter-*/ *.jar under base_path; the result is cached."""
        if self._jar_path is not None and self._jar_path.is_file():
            return self._jar_path
        self._jar_path = None

        if not self.base_path.is_dir():
            return None

        for entry in sorted(self.base_path.iterdir()):
            if not (entry.name.startswith(JAR_DIR_PREFIX) and entry.is_dir()):
                continue
            for sub_entry in sorted(entry.iterdir()):
                if sub_entry.name.endswith(JAR_SUFFIX) and sub_entry.is_file():
                    self._jar_path = sub_entry
                    return sub_entry
        return None

    def has_downloaded(self) -> bool:
        return self.find_jar_file() is not None

    def install(self) -> Path:
        """
        Download and extract the BRouter distribution, unless already present.

        Not transactional: an interrupted extraction leaves no jar behind as far
        as find_jar_file() is concerned, so calling install() again redoes it.

        Returns:
            path of the engine jar
        """
        jar_path = self.find_jar_file()
        if jar_path is not None:
            logger.debug(f"BRouter already installed at {jar_path}")
            return jar_path

        check_transition(self.state, ServerState.INSTALLED)

        url = self.policy.archive_url
        logger.info(f"Downloading BRouter {self.policy.version} from {url}")
        try:
            response = self.session.get(url, timeout=settings.http_timeout)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download BRouter server: {e}") from e

        if response.status_code != 200:
            raise DownloadError(f"Failed to download BRouter server: {response.status_code}")

        self.base_path.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
                archive.extractall(self.base_path)
        except zipfile.BadZipFile as e:
            raise DownloadError(f"BRouter archive from {url} is not a valid zip file") from e

        jar_path = self.find_jar_file()
        if jar_path is None:
            raise JarNotFoundError(f"No {JAR_DIR_PREFIX}*/*{JAR_SUFFIX} in archive from {url}")

        logger.info(f"BRouter installed at {jar_path}")
        return jar_path

    # older name of install()
    download_brouter = install

    #----------------
    # Segments
    #----------------

    def segment_path(self, segment: str) -> Path:
        return self.segments_dir / f"{segment}.rd5"

    def download_segment(self, segment: str) -> Path:
        """
        Fetch one data tile (e.g. "E10_N50") unless it is already on disk.

        The tile is written to a .part file first, so a crash mid-download
        does not leave a truncated tile that looks present.
        """
        if not is_valid_segment_name(segment):
            raise ValueError(f"Invalid segment name: {segment!r}")

        segment_path = self.segment_path(segment)
        if segment_path.exists():
            return segment_path

        self.segments_dir.mkdir(parents=True, exist_ok=True)

        url = self.policy.segment_url(segment)
        logger.info(f"Downloading segment {segment} from {url}")
        partial_path = segment_path.with_name(segment_path.name + ".part")
        try:
            response = self.session.get(url, stream=True, timeout=settings.http_timeout)
            try:
                if response.status_code != 200:
                    raise DownloadError(f"Failed to download segment {segment}: {response.status_code}")
                with open(partial_path, "wb") as out:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            out.write(chunk)
            finally:
                response.close()
        except requests.RequestException as e:
            partial_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download segment {segment}: {e}") from e

        partial_path.replace(segment_path)
        return segment_path

    def download_all_segments(self) -> None:
        """
        Fetch every tile of the world grid, one after another.

        Long-running and serial. Tiles already on disk are skipped, so a rerun
        picks up where a failed sweep stopped; the first failure aborts.
        """
        self.segments_dir.mkdir(parents=True, exist_ok=True)
        for count, segment in enumerate(all_segment_names(), start=1):
            self.download_segment(segment)
            if count % 100 == 0:
                logger.info(f"{count} segments present")

    def download_segments_for(self, points: Iterable[Point]) -> List[Path]:
        """Fetch the tiles covering `points`."""
        return [self.download_segment(segment) for segment in segments_for_points(points)]

    #----------------
    # Process lifecycle
    #----------------

    def is_running(self) -> bool:
        """Non-blocking check of the child process we started, if any."""
        if self._process is None:
            return False
        return self._process.poll() is None

    def is_serving(self) -> bool:
        """True if something on our port answers "/" the way BRouter does."""
        try:
            response = self.session.get(self.base_url, timeout=settings.http_timeout)
        except requests.RequestException:
            return False
        return response.status_code == SERVING_STATUS

    def command_line(self, jar_path: Path) -> List[str]:
        profile_dir = jar_path.parent / BUNDLED_PROFILES_DIR_NAME
        return [
            self.policy.java,
            *self.policy.jvm_args,
            f"-DmaxRunningTime={self.policy.max_running_time}",
            "-DuseRFCMimeType=false",
            "-cp",
            str(jar_path),
            self.policy.main_class,
            str(self.segments_dir),
            str(profile_dir),
            str(self.custom_profile_dir),
            str(self.policy.port),
            str(self.policy.threads),
            self.policy.host,
        ]

    def start(self) -> str:
        """
        Start the engine (or reuse the one we already started).

        Waits for readiness at most readiness_attempts * readiness_interval
        seconds, then returns the base URL whether or not the engine answered.
        The first request may still hit a server that is not listening yet.

        Returns:
            base URL of the engine, e.g. http://localhost:17777
        """
        if self.is_running():
            logger.debug(f"BRouter server already running at {self.base_url}")
            return self.base_url

        jar_path = self.find_jar_file()
        if jar_path is None:
            raise JarNotFoundError(f"BRouter server JAR file not found under {self.base_path}")

        check_transition(self.state, ServerState.RUNNING)

        self.custom_profile_dir.mkdir(parents=True, exist_ok=True)

        command = self.command_line(jar_path)
        logger.info(f"Starting BRouter server: {' '.join(command)}")
        try:
            process = self._process_factory(command, cwd=str(self.base_path))
        except OSError as e:
            raise ServerError(f"Failed to start BRouter server: {e}") from e

        self._process = process
        self._has_run = True
        if self._finalizer is not None:
            # left over from a process that exited on its own
            self._finalizer.detach()
        self._finalizer = weakref.finalize(self, _reap, process, self.policy.stop_timeout, self.base_path)

        ready = wait_until(
            self.is_serving,
            attempts=self.policy.readiness_attempts,
            interval=self.policy.readiness_interval,
            sleep=self._sleep,
        )
        if ready:
            logger.info(f"BRouter server serving at {self.base_url}")
        else:
            logger.warning(
                f"BRouter server not answering at {self.base_url} after "
                f"{self.policy.readiness_attempts} attempts, continuing anyway"
            )
        return self.base_url

    def stop(self) -> None:
        """Terminate the engine and wait for it. No-op if nothing is running."""
        process = self._process
        if process is None:
            return
        self._process = None

        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None

        logger.info(f"Stopping BRouter server (pid {process.pid})")
        _terminate(process, self.policy.stop_timeout)

    def close(self) -> None:
        """Best-effort stop() for cleanup paths; failures are only logged."""
        try:
            self.stop()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Failed to stop BRouter server at {self.base_path}: {e}")

    def __enter__(self) -> BRouterServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
