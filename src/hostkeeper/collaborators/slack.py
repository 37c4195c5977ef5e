"""Slack incoming-webhook notification sink."""

from __future__ import annotations

from typing import Any

import httpx

from hostkeeper.utils.errors import DeliveryError, retry
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.slack")


class SlackWebhookSink:
    """Delivers JSON payloads to a Slack incoming webhook.

    Transport errors are retried; HTTP error responses are not.

    Example:
        sink = SlackWebhookSink("https://hooks.slack.com/services/...")
        sink.deliver({"text": "hello"})
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            webhook_url: Incoming webhook URL
            timeout: Request timeout in seconds
            max_attempts: Attempts on transport errors
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self._url = webhook_url
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._transport = transport

    def deliver(self, payload: dict[str, Any]) -> None:
        """Post the payload.

        Raises:
            DeliveryError: On transport failure or a non-2xx response
        """

        @retry(max_attempts=self._max_attempts, delay=1.0, exceptions=(httpx.TransportError,))
        def _post() -> httpx.Response:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.post(self._url, json=payload)

        try:
            response = _post()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DeliveryError(f"Failed to reach webhook: {e}")

        if response.is_error:
            raise DeliveryError(
                f"Webhook rejected payload: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        logger.debug("Webhook accepted payload")
