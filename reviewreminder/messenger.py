"""
Delivery of rendered messages to a chat incoming webhook.
"""

import json
from typing import Any

import httpx

from reviewreminder.config import Config
from reviewreminder.exceptions import ConfigurationError
from reviewreminder.logging import get_logger
from reviewreminder.transport import AsyncHTTPTransport, RetryConfig

logger = get_logger("messenger")


class WebhookMessenger:
    """
    Posts message payloads to a Slack or Mattermost incoming webhook.

    Payloads are sent one at a time, in order, so the header message
    always arrives first.
    """

    def __init__(
        self,
        url: str,
        channel: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            url: Incoming webhook URL
            channel: Channel override added to every payload (optional)
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior (optional)
            http_transport: Custom httpx transport (optional, used by tests)
        """
        self.url = url
        self.channel = channel
        self._transport = AsyncHTTPTransport(
            timeout=timeout,
            retry_config=retry_config,
            http_transport=http_transport,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "WebhookMessenger":
        """
        Create a messenger from the ``messenger`` settings.

        Raises:
            ConfigurationError: If no webhook URL is configured
        """
        if not config.messenger.url:
            raise ConfigurationError("messenger.url is not set (or export MESSENGER_URL)")
        return cls(config.messenger.url, config.messenger.channel, **kwargs)

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "WebhookMessenger":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def send(self, message: dict[str, Any]) -> Any:
        payload = {**message, "channel": self.channel} if self.channel else message
        return await self._transport.post(self.url, payload)

    async def send_many(self, messages: list[dict[str, Any]]) -> list[Any]:
        """Send every message in order; the first failure stops delivery."""
        return [await self.send(message) for message in messages]


class DryRunMessenger:
    """Logs messages without sending."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "DryRunMessenger":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def send_many(self, messages: list[dict[str, Any]]) -> list[Any]:
        for message in messages:
            logger.info("Dry run, not sending: %s", json.dumps(message, ensure_ascii=False))
            self.sent.append(message)
        return ["dry-run"] * len(messages)
