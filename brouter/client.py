#Purpose: The BRouter "adapter/client".
#Sole responsibility: talk to a BRouter engine over HTTP and return typed results.
#URL/parameter encoding and response decoding live in brouter/protocol.py;
#this module only moves bytes and maps transport failures to HttpError.
#Optionally owns a local engine (BrouterClient.local()) and stops it on close().

from __future__ import annotations

import logging
from typing import Optional, Sequence

import gpxpy.gpx
import requests

from . import protocol
from .config import settings
from .errors import HttpError, InvalidResponseError
from .models import Nogo, Point, RouteRequest, TurnInstructionMode

logger = logging.getLogger(__name__)


class BrouterClient:
    """
    BRouter client

    Args:
        base_url: engine root, e.g. http://localhost:17777 (settings.base_url if omitted)
        timeout: timeout for everything but route calls (None = transport default)
        route_timeout: timeout for route calls, 3600 s by default
        session: requests session, injectable for tests
        server: a brouter_local.BRouterServer this client owns and stops on close()

    Not meant to be shared between threads; a local engine runs with one
    worker thread and serializes requests anyway.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = settings.http_timeout,
        route_timeout: float = settings.route_timeout,
        session: Optional[requests.Session] = None,
        server=None,
    ):
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.timeout = timeout
        self.route_timeout = route_timeout
        self.session = session or requests.Session()
        self.server = server

    @classmethod
    def local(cls, server=None, **kwargs) -> BrouterClient:
        """
        Install (if needed) and start a local engine, and connect to it.

        Install/start failures are brouter_local.ServerError, not BrouterError.
        """
        from brouter_local.server import BRouterServer

        if server is None:
            server = BRouterServer.home()
        server.install()
        url = server.start()
        return cls(url, server=server, **kwargs)

    #----------------
    # Public API
    #----------------

    def route(
        self,
        points: Sequence[Point],
        nogos: Sequence[Nogo] = (),
        profile: str = "trekking",
        alternativeidx: Optional[int] = None,
        timode: Optional[TurnInstructionMode] = None,
        name: Optional[str] = None,
        export_waypoints: bool = False,
    ) -> gpxpy.gpx.GPX:
        """
        Route along `points` (start, via points, end).

        Args:
            points: waypoints, in order
            nogos: areas to avoid
            profile: built-in profile name, or an id from upload_profile()
            alternativeidx: which alternative route to return (0..3)
            timode: turn instruction style
            name: title of the returned track
            export_waypoints: include the waypoints in the GPX

        Raises:
            ValueError: alternativeidx out of range (nothing is sent)
            BrouterError subclasses, see brouter.protocol.decode_route_response
        """
        request = RouteRequest(
            points=points,
            nogos=nogos,
            profile=profile,
            alternativeidx=alternativeidx,
            timode=timode,
            name=name,
            export_waypoints=export_waypoints,
        )
        return self.route_request(request)

    def route_request(self, request: RouteRequest) -> gpxpy.gpx.GPX:
        params = protocol.encode_route_params(request)

        logger.info(f"Planning route along {list(request.points)}")

        try:
            response = self.session.get(
                protocol.route_url(self.base_url),
                params=params,
                timeout=self.route_timeout,
            )
        except requests.RequestException as e:
            raise HttpError(str(e)) from e

        return protocol.decode_route_response(response.status_code, response.content)

    def upload_profile(self, data: bytes) -> str:
        """
        Upload a custom profile.

        Returns:
            the id of the created profile; pass it as `profile` to route()

        Raises:
            UploadProfileError: the engine rejected the profile
            HttpError: transport failure or non-2xx status
        """
        try:
            response = self.session.post(
                protocol.profile_upload_url(self.base_url),
                data=data,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            raise HttpError(str(e), status_code=e.response.status_code if e.response is not None else None) from e
        except requests.RequestException as e:
            raise HttpError(str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError(f"upload response is not JSON: {e}") from e

        profile_id = protocol.decode_upload_response(payload)
        logger.info(f"Uploaded profile {profile_id}")
        return profile_id

    #----------------
    # Cleanup
    #----------------

    def close(self) -> None:
        """Stop an owned local engine. Never raises."""
        if self.server is not None:
            self.server.close()

    def __enter__(self) -> BrouterClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
