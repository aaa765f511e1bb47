"""Delivery of one envelope to one subscription, with bounded retry.

A ``DeliveryWorker`` owns the attempt series for a single
(delivery id, subscription) pair:

- 2xx responses succeed
- 4xx (and any other non-5xx) responses fail immediately; the receiver
  rejected the request and an unchanged payload will not fare better
- 5xx responses, timeouts and transport errors are retried with exponential
  backoff (``base ** attempt`` seconds) until the attempt cap is reached

The body is serialized and signed once, so every attempt sends identical
bytes with the same delivery id and signature.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from taskhooks.config import Settings
from taskhooks.config import settings as default_settings
from taskhooks.exceptions import (
    ConfigurationError,
    DeliveryError,
    RejectedDeliveryError,
    TransientDeliveryError,
)
from taskhooks.logging import get_logger
from taskhooks.models import (
    DeliveryAttempt,
    DeliveryOutcome,
    WebhookDelivery,
    WebhookEnvelope,
    WebhookSubscription,
)

from .recorder import DeliveryRecorder
from .signing import compute_signature

logger = get_logger(__name__)

HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"
HEADER_SIGNATURE = "X-Task-Manager-Signature"
HEADER_EVENT = "X-Task-Manager-Event"
HEADER_DELIVERY = "X-Task-Manager-Delivery"

Sleep = Callable[[float], Awaitable[None]]


class DeliveryWorker:
    """Runs the retry state machine for one delivery.

    Example:
        ```python
        worker = DeliveryWorker(client, subscription, envelope, event_id=str(event.id))
        delivery = await worker.run()
        assert delivery.is_terminal
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        subscription: WebhookSubscription,
        envelope: WebhookEnvelope,
        event_id: str,
        *,
        settings: Settings | None = None,
        recorder: DeliveryRecorder | None = None,
        sleep: Sleep = asyncio.sleep,
        max_attempts: int | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            client: Shared HTTP client used for every attempt.
            subscription: Target endpoint.
            envelope: Finalized envelope; its delivery id identifies the series.
            event_id: Id of the domain event being delivered.
            settings: Delivery settings (timeout, backoff, user agent).
            recorder: Receives every attempt and the terminal delivery.
            sleep: Awaitable used for backoff delays; injectable for tests.
            max_attempts: Overrides ``settings.max_attempts``.
        """
        self._settings = settings or default_settings
        self._client = client
        self._subscription = subscription
        self._envelope = envelope
        self._recorder = recorder
        self._sleep = sleep
        self._max_attempts = (
            max_attempts if max_attempts is not None else self._settings.max_attempts
        )
        if self._max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self._max_attempts}")
        self._timeout = self._settings.request_timeout_seconds
        base = self._settings.backoff_base_seconds
        self._wait = wait_exponential(multiplier=base, exp_base=base)
        self._last_duration_ms = 0.0

        self.delivery = WebhookDelivery(
            id=envelope.delivery_id,
            subscription_id=subscription.id,
            event_id=event_id,
            event_type=envelope.event,
            url=str(subscription.url),
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def build_headers(self, body: bytes) -> dict[str, str]:
        """Request headers for a serialized body.

        The signature header is only present when the subscription has a
        secret key.
        """
        headers = {
            HEADER_CONTENT_TYPE: "application/json",
            HEADER_USER_AGENT: self._settings.user_agent,
            HEADER_EVENT: self._envelope.event,
            HEADER_DELIVERY: self._envelope.delivery_id,
        }
        if self._subscription.secret_key:
            headers[HEADER_SIGNATURE] = compute_signature(body, self._subscription.secret_key)
        return headers

    async def run(self) -> WebhookDelivery:
        """Deliver until success, rejection or attempt exhaustion.

        Never raises for delivery problems; the returned delivery is always
        in a terminal state.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(TransientDeliveryError),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            body = self._envelope.to_bytes()
            headers = self.build_headers(body)
            async for attempt in retrying:
                with attempt:
                    await self._send(body, headers)
                await self._record_attempt(attempt.retry_state)
        except TransientDeliveryError as e:
            self.delivery.mark_failed(
                error=f"Max attempts exceeded: {e.message}",
                http_status=e.status_code,
            )
            logger.warning(
                "webhook_attempts_exhausted",
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
                url=self.delivery.url,
                attempts=self.delivery.attempts,
                error=e.message,
            )
        except RejectedDeliveryError as e:
            self.delivery.mark_failed(error=e.message, http_status=e.status_code)
            logger.warning(
                "webhook_rejected",
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
                url=self.delivery.url,
                status=e.status_code,
            )
        except Exception as e:
            self.delivery.mark_failed(error=f"Unexpected error: {e}")
            logger.exception(
                "webhook_delivery_error",
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
            )
        else:
            logger.info(
                "webhook_delivered",
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
                url=self.delivery.url,
                status=self.delivery.http_status,
                attempts=self.delivery.attempts,
            )

        await self._report(self.delivery)
        return self.delivery

    async def _send(self, body: bytes, headers: dict[str, str]) -> None:
        """Make one HTTP attempt, raising a DeliveryError unless it is 2xx."""
        self.delivery.mark_sending()
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.post(
                    str(self._subscription.url),
                    content=body,
                    headers=headers,
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransientDeliveryError(f"Request timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise TransientDeliveryError(f"Transport error: {e}") from e
        finally:
            self._last_duration_ms = (time.perf_counter() - started) * 1000

        status = response.status_code
        if 200 <= status < 300:
            self.delivery.mark_success(
                http_status=status,
                response_body=self._truncate(response.text),
            )
            return
        if status >= 500:
            raise TransientDeliveryError(f"HTTP {status}", status_code=status)
        raise RejectedDeliveryError(
            f"HTTP {status}: {response.text[:200]}",
            status_code=status,
        )

    async def _record_attempt(self, retry_state: RetryCallState) -> None:
        """Classify the attempt that just finished and report it."""
        outcome = retry_state.outcome
        number = retry_state.attempt_number
        error = outcome.exception() if outcome is not None else None
        retry_in: float | None = None

        if error is None:
            result = DeliveryOutcome.SUCCESS
        elif isinstance(error, TransientDeliveryError) and number < self._max_attempts:
            result = DeliveryOutcome.RETRY_SCHEDULED
            retry_in = self._wait(retry_state)
            self.delivery.mark_retrying(error=error.message, http_status=error.status_code)
            logger.info(
                "webhook_retry_scheduled",
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
                attempt=number,
                retry_in=retry_in,
                error=error.message,
            )
        else:
            result = DeliveryOutcome.FAILED

        status = self.delivery.http_status
        if isinstance(error, DeliveryError):
            status = error.status_code

        await self._report(
            DeliveryAttempt(
                delivery_id=self.delivery.id,
                subscription_id=self._subscription.id,
                event_id=self.delivery.event_id,
                event_type=self.delivery.event_type,
                attempt_number=number,
                outcome=result,
                http_status=status,
                error=str(error) if error is not None else None,
                retry_in_seconds=retry_in,
                duration_ms=self._last_duration_ms,
            )
        )

    async def _report(self, record: DeliveryAttempt | WebhookDelivery) -> None:
        if self._recorder is None:
            return
        try:
            if isinstance(record, DeliveryAttempt):
                await self._recorder.record_attempt(record)
            else:
                await self._recorder.record_delivery(record)
        except Exception:
            logger.exception("delivery_recorder_failed", delivery_id=self.delivery.id)

    def _truncate(self, text: str | None) -> str | None:
        if not text:
            return None
        return text[: self._settings.max_response_body_chars]


__all__ = [
    "DeliveryWorker",
    "HEADER_DELIVERY",
    "HEADER_EVENT",
    "HEADER_SIGNATURE",
    "Sleep",
]
