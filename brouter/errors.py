# Errors reported by the routing client.
# The engine answers most failures with "200 OK" and a line of plain text,
# so most of these are recognised from the body (see brouter.protocol).

from typing import Optional


class BrouterError(Exception):
    """Base class for every per-request routing/upload failure."""

    def __init__(self, message: str, code: str = "BROUTER_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidGpxError(BrouterError):
    """The response body could not be parsed as GPX. Keeps the raw text."""

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Invalid GPX: {body}", code="INVALID_GPX")


class HttpError(BrouterError):
    """Transport failure, or a non-2xx status the body did not explain."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(f"HTTP error: {message}", code="HTTP_ERROR")


class InvalidResponseError(HttpError):
    """The server answered, but not with the payload shape we expect."""
    pass


class MissingDataFileError(BrouterError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing data file: {name}", code="MISSING_DATA_FILE")


class NoRouteFoundError(BrouterError):
    # pass_number can be negative when the engine is in a degenerate state
    def __init__(self, pass_number: int):
        self.pass_number = pass_number
        super().__init__(f"No route found: {pass_number}", code="NO_ROUTE_FOUND")


class PassTimeoutError(BrouterError):
    """
    A search pass ran out of time.

    Both values are kept as the literal text the engine sent.
    """

    def __init__(self, pass_: str, timeout: str):
        self.pass_ = pass_
        self.timeout = timeout
        super().__init__(f"Pass {pass_} timeout after {timeout} seconds", code="PASS_TIMEOUT")


class UploadProfileError(BrouterError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Error uploading profile: {reason}", code="UPLOAD_PROFILE_ERROR")


class OtherError(BrouterError):
    """Catch-all; currently a bare 400 response."""

    def __init__(self, message: str):
        super().__init__(f"Error: {message}", code="OTHER_ERROR")
