"""High-level chat client.

Resolves configuration from arguments and environment variables and wires
the transport, request handler and endpoint providers together.
"""

import logging
import os

from dotenv import load_dotenv

from .chat import ChatProvider
from .configuration import DEFAULT_BASE_URL, Configuration
from .handler import RequestHandler
from .transport.base import Transport
from .transport.httpx_transport import HTTPXTransport

logger = logging.getLogger(__name__)


class ChatClient:
    """Entry point for the chat completion API.

    Configuration (env vars, used when the argument is not given):
    - OPENAI_API_KEY: Bearer token
    - OPENAI_ORGANIZATION: Organization header
    - OPENAI_BASE_URL: API base URL (default: https://api.openai.com)
    - CHATKIT_TIMEOUT_SECONDS: Request timeout (default: 60)

    Usage:
        async with ChatClient() as client:
            chat = await client.chat.create(
                model="gpt-4o",
                messages=[UserMessage(content="Hello")],
            )
            print(chat.content)
    """

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        api_key: str | None = None,
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: API key. Defaults to OPENAI_API_KEY env var.
            organization: Organization id. Defaults to OPENAI_ORGANIZATION env var.
            base_url: API base URL. Defaults to OPENAI_BASE_URL env var.
            timeout: Request timeout in seconds. Defaults to
                CHATKIT_TIMEOUT_SECONDS env var. Ignored when a transport is
                given.
            headers: Extra headers sent with every request.
            transport: Transport to use. Defaults to an HTTPXTransport owned
                by this client.
        """
        self._timeout = (
            timeout
            if timeout is not None
            else float(os.environ.get("CHATKIT_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT))
        )
        self._configuration = Configuration(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            organization=organization or os.environ.get("OPENAI_ORGANIZATION"),
            base_url=base_url or os.environ.get("OPENAI_BASE_URL", DEFAULT_BASE_URL),
            extra_headers=dict(headers or {}),
        )
        if not self._configuration.api_key:
            logger.debug("No API key configured; requests will be sent without authorization")

        self._owns_transport = transport is None
        self._transport = transport or HTTPXTransport(timeout=self._timeout)
        self._handler = RequestHandler(self._transport, self._configuration)
        self.chat = ChatProvider(self._handler)

    @classmethod
    def from_env(cls, dotenv_path: str | None = None, **kwargs) -> "ChatClient":
        """Create a client after loading variables from a .env file.

        Variables already set in the environment are not overridden.
        """
        load_dotenv(dotenv_path)
        return cls(**kwargs)

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
