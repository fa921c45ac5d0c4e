import logging

import httpx

from leave_core.errors import ConfigError, DeliveryError
from leave_core.model_schema import WebhookPayload

logger = logging.getLogger(__name__)


class WebhookOutbox:
    """
    Delivers embeds to a Discord-compatible incoming webhook.
    A failed post raises DeliveryError.
    """
    def __init__(
        self,
        url: str | None,
        timeout: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.url)

    async def post(self, payload: WebhookPayload) -> None:
        if not self.url:
            raise ConfigError("Discord webhook URL not configured")
        body = payload.model_dump(mode="json", exclude_none=True)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(self.url, json=body)
                r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"webhook rejected message ({e.response.status_code})",
                {"status_code": e.response.status_code, "body": e.response.text[:500]},
            ) from e
        except httpx.RequestError as e:
            raise DeliveryError(f"webhook unreachable: {e}") from e
        titles = ", ".join(embed.title for embed in payload.embeds)
        logger.info("posted %d embed(s) to webhook: %s", len(payload.embeds), titles)
