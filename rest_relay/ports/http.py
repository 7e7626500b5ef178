"""HTTP port definitions (DTO and payload type)."""

from dataclasses import dataclass, field

__all__ = ["HttpResponseDto", "Payload"]

# Opaque relay payload: text is sent as JSON, bytes as-is.
Payload = bytes | bytearray | memoryview | str


@dataclass(slots=True, frozen=True)
class HttpResponseDto:
    """Fully read HTTP response.

    The body is read before the connection goes back to the pool, so the
    core never touches a live aiohttp response.

    Attributes:
        status: HTTP status code.
        body: Raw response body.
        url: URL the request was sent to.
    """

    status: int
    body: bytes = b""
    url: str = field(default="", compare=False)

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (undecodable bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")
