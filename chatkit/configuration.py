"""Base client configuration shared by every request."""

from dataclasses import dataclass, field

import httpx

from .errors import InvalidURLGenerated

DEFAULT_BASE_URL = "https://api.openai.com"


@dataclass(frozen=True)
class Configuration:
    """Immutable settings applied to every request a client sends.

    Attributes:
        api_key: Bearer token. No Authorization header is sent when None.
        organization: Optional organization id header.
        base_url: Scheme and host (optionally a path prefix) of the API.
        extra_headers: Additional headers sent with every request.
    """

    api_key: str | None = None
    organization: str | None = None
    base_url: str = DEFAULT_BASE_URL
    extra_headers: dict[str, str] = field(default_factory=dict)

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        headers.update(self.extra_headers)
        return headers

    def url_for(self, path: str) -> str:
        """Join the base URL and a request path.

        Raises:
            InvalidURLGenerated: The result is not an absolute http(s) URL.
        """
        url = self.base_url.rstrip("/") + "/" + path.lstrip("/")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise InvalidURLGenerated(f"Invalid URL {url!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidURLGenerated(f"Invalid URL {url!r}: base URL must include scheme and host")
        return url
