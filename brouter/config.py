#Purpose: Runtime settings for the BRouter client.
#Values come from the environment (or a .env file next to the caller),
#so the same code can talk to a remote engine or a locally-run one.
#
#Example .env:
#BROUTER_URL=http://localhost:17777
#BROUTER_HOME=/srv/brouter
#BROUTER_LOG_LEVEL=DEBUG

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "http://localhost:17777"

# the engine may legitimately take very long on large route graphs
DEFAULT_ROUTE_TIMEOUT_S = 3600.0


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    """
    Client-side settings, read once from the environment.

    http_timeout=None leaves the transport default in place (requests waits
    forever), which matches how downloads and profile uploads behave.
    """

    base_url: str = os.getenv("BROUTER_URL", DEFAULT_BASE_URL)
    route_timeout: float = float(os.getenv("BROUTER_ROUTE_TIMEOUT", DEFAULT_ROUTE_TIMEOUT_S))
    http_timeout: Optional[float] = _optional_float("BROUTER_HTTP_TIMEOUT")

    # where a local engine gets installed (see brouter_local.server.default_home)
    home: Optional[str] = os.getenv("BROUTER_HOME")

    log_level: str = os.getenv("BROUTER_LOG_LEVEL", "INFO")


settings = Settings()
