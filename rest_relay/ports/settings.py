"""Settings port definition (DTO)."""

from dataclasses import dataclass, field

__all__ = ["SettingsPort"]


@dataclass(frozen=True)
class SettingsPort:
    """Validated runtime settings for the relay plugin.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        retry_attempts: Attempt budget for health probing and token fetching.
        max_sockets: Upper bound of pooled connections.
        auth_health_url: Readiness endpoint of the authentication service.
        auth_token_url: Endpoint that exchanges credentials for a bearer token.
        destination_transport_url: Endpoint receiving relayed payloads.
        auth_username: Principal name; also the token cache key.
        auth_password: Principal secret (hidden from repr).
    """

    retry_attempts: int
    max_sockets: int
    auth_health_url: str
    auth_token_url: str
    destination_transport_url: str
    auth_username: str
    auth_password: str = field(repr=False)
