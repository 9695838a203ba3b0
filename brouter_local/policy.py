"""
Purpose: Central configuration for running BRouter locally (single source of truth).
What it does:

Stores everything the lifecycle manager hard-codes on the java command line
and in its readiness loop:

VERSION = 1.7.7
PORT = 17777, THREADS = 1, HOST = localhost
READINESS = 10 attempts, 1 second apart

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

BROUTER_VERSION = "1.7.7"

RELEASE_URL = "https://github.com/abrensch/brouter/releases/download"
SEGMENTS_URL = "https://brouter.de/brouter/segments4"


@dataclass(frozen=True)
class LaunchPolicy:
    """
    How a local BRouter server is downloaded, launched and waited for.
    """

    # --- Distribution ---
    version: str = BROUTER_VERSION
    release_url: str = RELEASE_URL
    segments_url: str = SEGMENTS_URL

    # --- JVM ---
    java: str = "java"
    # heap caps: max, initial, young generation
    jvm_args: Tuple[str, ...] = field(default_factory=lambda: ("-Xmx128M", "-Xms128M", "-Xmn8M"))
    # per-request limit inside the engine, in seconds (0 means no limit)
    max_running_time: int = 300
    main_class: str = "btools.server.RouteServer"

    # --- Listening socket ---
    host: str = "localhost"
    port: int = 17777
    threads: int = 1

    # --- Readiness polling ---
    # The engine answers 404 on "/" once it is serving.
    readiness_attempts: int = 10
    readiness_interval: float = 1.0

    # --- Shutdown ---
    # After terminate(), wait this long before killing the JVM.
    stop_timeout: float = 10.0

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def archive_url(self) -> str:
        return f"{self.release_url}/v{self.version}/brouter-{self.version}.zip"

    def segment_url(self, segment: str) -> str:
        return f"{self.segments_url}/{segment}.rd5"

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")

        if self.threads < 1:
            raise ValueError("threads must be >= 1")

        if self.max_running_time < 0:
            raise ValueError("max_running_time must be >= 0")

        if self.readiness_attempts < 0:
            raise ValueError("readiness_attempts must be >= 0")

        if self.readiness_interval < 0:
            raise ValueError("readiness_interval must be >= 0")

        if self.stop_timeout <= 0:
            raise ValueError("stop_timeout must be > 0")


def default_launch_policy() -> LaunchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = LaunchPolicy()
    p.validate()
    return p
