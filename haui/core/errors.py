"""Error taxonomy shared by the codec, the backend client and the store.

DecodeError      malformed or schema-violating payload
RemoteError      non-2xx HTTP status (NotFound for 404)
TransportError   connection, DNS or timeout failure
ValidationError  local submission buffer rejected before any request
"""

from __future__ import annotations


class HaUiError(Exception):
    """Base class for every failure the store routes into ``last_error``."""


class DecodeError(HaUiError, ValueError):
    """Payload does not match the expected wire shape.

    Attributes:
        path: Dotted location of the offending field (e.g. ``devices[2].type``).
    """

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class RemoteError(HaUiError):
    """Backend answered with a non-2xx status.

    The response body is never decoded; only the status is kept.
    """

    def __init__(self, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        where = f" for {url}" if url else ""
        super().__init__(f"HTTP {status_code}{where}")


class NotFound(RemoteError):
    """Backend answered 404 (unknown simulation id or device name)."""

    def __init__(self, url: str = "") -> None:
        super().__init__(404, url)


class TransportError(HaUiError):
    """Request never produced a response (connect, DNS, timeout, ...)."""


class ValidationError(HaUiError):
    """Submission buffer failed to decode as a Simulation."""
