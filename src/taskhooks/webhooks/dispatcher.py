"""Webhook dispatcher: event queue drain and per-event fan-out.

Producers call ``dispatch`` (or one of the typed wrappers) and return
immediately. A single drain task works through the queue in FIFO order. For
each event it resolves the matching subscriptions, starts one
``DeliveryWorker`` per subscription, and waits for all of them to settle
before moving to the next event. Delivery outcomes go to the recorder and
the log, never back to the producer.

Events live only in memory. Anything still queued or in flight when the
process exits is lost.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from taskhooks.config import Settings
from taskhooks.config import settings as default_settings
from taskhooks.exceptions import (
    DispatcherClosedError,
    ResolverError,
    RoutingError,
    ValidationError,
)
from taskhooks.logging import event_context, get_logger
from taskhooks.models import (
    COMMENT_ADDED,
    COMMENT_REPLIED,
    MEMBER_ADDED,
    MEMBER_ROLE_CHANGED,
    PROJECT_CREATED,
    PROJECT_UPDATED,
    TASK_ASSIGNED,
    TASK_COMPLETED,
    TASK_CREATED,
    TASK_STATUS_CHANGED,
    TASK_UPDATED,
    WEBHOOK_TEST_EVENT,
    DeliveryOutcome,
    DomainEvent,
    WebhookDelivery,
    WebhookEnvelope,
    WebhookSubscription,
)

from .delivery import DeliveryWorker, Sleep
from .payloads import PayloadBuilder, build_test_payload, detect_changes
from .queue import EventQueue
from .recorder import DeliveryRecorder, InMemoryDeliveryLog
from .routing import SubscriptionResolver, extract_project_id

logger = get_logger(__name__)


class WebhookDispatcher:
    """Turns domain events into webhook deliveries.

    Construct one per process at startup and pass it to the code that
    produces events.

    Example:
        ```python
        async with WebhookDispatcher(resolver) as dispatcher:
            dispatcher.task_created(task, user, project)
            await dispatcher.join()  # optional: wait for the queue to drain
        ```
    """

    def __init__(
        self,
        resolver: SubscriptionResolver,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        recorder: DeliveryRecorder | None = None,
        payload_builder: PayloadBuilder | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            resolver: Source of active subscriptions per project and event type.
            settings: Delivery settings; defaults to the environment settings.
            client: HTTP client to use. When omitted the dispatcher creates
                one and closes it in ``aclose``.
            recorder: Aggregation point for attempts and terminal deliveries.
                Defaults to a bounded in-memory log.
            payload_builder: Envelope shaping; defaults to the built-in templates.
            sleep: Backoff sleep passed to every worker.
        """
        self._settings = settings or default_settings
        self._resolver = resolver
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._settings.request_timeout_seconds,
        )
        self.recorder: DeliveryRecorder = recorder or InMemoryDeliveryLog(
            max_entries=self._settings.delivery_log_size,
        )
        self._payloads = payload_builder or PayloadBuilder()
        self._sleep = sleep

        self._queue = EventQueue()
        self._drain_task: asyncio.Task[None] | None = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    async def __aenter__(self) -> WebhookDispatcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def pending(self) -> int:
        """Number of events waiting in the queue (excluding the one in progress)."""
        return len(self._queue)

    @property
    def is_draining(self) -> bool:
        return self._queue.is_draining

    def dispatch(self, event_type: str, event_data: Mapping[str, Any]) -> DomainEvent:
        """Queue an event for delivery and return immediately.

        Must be called from code running on the event loop. Delivery
        outcomes are not reported here.

        Returns:
            The queued event, mainly for log correlation.

        Raises:
            DispatcherClosedError: If ``aclose`` has been called.
            ValidationError: If the event type is empty.
        """
        if self._closed:
            raise DispatcherClosedError(f"cannot dispatch {event_type}: dispatcher is closed")
        if not event_type or not event_type.strip():
            raise ValidationError("event_type", "must not be empty")

        loop = asyncio.get_running_loop()
        # Deep snapshot: the event is immutable once enqueued
        event = DomainEvent(type=event_type, data=copy.deepcopy(dict(event_data)))

        if self._queue.enqueue(event):
            self._idle.clear()
            self._drain_task = loop.create_task(self._drain(), name="taskhooks-drain")

        logger.debug(
            "webhook_event_enqueued",
            event_id=str(event.id),
            event_type=event_type,
            pending=len(self._queue),
        )
        return event

    async def join(self) -> None:
        """Wait until the queue is empty and no event is in progress."""
        await self._idle.wait()

    async def aclose(self) -> None:
        """Stop accepting events, let queued ones finish, close the HTTP client."""
        self._closed = True
        await self.join()
        if self._owns_client:
            await self._client.aclose()

    async def _drain(self) -> None:
        try:
            while (event := self._queue.pop()) is not None:
                try:
                    await self.process_event(event)
                except Exception:
                    logger.exception(
                        "webhook_event_failed",
                        event_id=str(event.id),
                        event_type=event.type,
                    )
        finally:
            self._queue.finish_drain()
            self._idle.set()

    async def process_event(self, event: DomainEvent) -> list[WebhookDelivery]:
        """Resolve subscriptions for one event and deliver to all of them.

        Returns once every delivery has reached a terminal outcome. Routing
        failures drop the event and return an empty list.
        """
        with event_context(event_id=str(event.id), event_type=event.type):
            try:
                subscriptions = await self._route(event)
            except (RoutingError, ResolverError) as e:
                logger.warning("webhook_event_dropped", reason=e.code, error=e.message)
                return []

            if not subscriptions:
                logger.debug("webhook_event_no_subscribers")
                return []

            return await self._fan_out(event, subscriptions)

    async def _route(self, event: DomainEvent) -> list[WebhookSubscription]:
        project_id = extract_project_id(event.data)
        if project_id is None:
            raise RoutingError(str(event.id))

        try:
            result = await self._resolver.resolve(project_id, event.type)
        except Exception as e:
            raise ResolverError(f"subscription lookup failed for project {project_id}: {e}") from e

        if result.error:
            raise ResolverError(
                f"subscription lookup failed for project {project_id}: {result.error}"
            )

        return [s for s in result.data if s.subscribes_to(event.type)]

    async def _fan_out(
        self,
        event: DomainEvent,
        subscriptions: list[WebhookSubscription],
    ) -> list[WebhookDelivery]:
        data = self._payloads.build(event.type, event.data)
        workers = [
            self._worker(
                subscription,
                self._payloads.envelope(event.type, data, timestamp=event.enqueued_at),
                event_id=str(event.id),
            )
            for subscription in subscriptions
        ]

        results = await asyncio.gather(
            *(worker.run() for worker in workers),
            return_exceptions=True,
        )

        deliveries: list[WebhookDelivery] = []
        for worker, result in zip(workers, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "webhook_worker_crashed",
                    delivery_id=worker.delivery.id,
                    error=repr(result),
                )
                if not worker.delivery.is_terminal:
                    worker.delivery.mark_failed(error=f"Worker crashed: {result!r}")
                await self._record_crashed(worker.delivery)
                deliveries.append(worker.delivery)
            else:
                deliveries.append(result)

        succeeded = sum(1 for d in deliveries if d.outcome is DeliveryOutcome.SUCCESS)
        logger.info(
            "webhook_event_settled",
            deliveries=len(deliveries),
            succeeded=succeeded,
            failed=len(deliveries) - succeeded,
        )
        return deliveries

    async def _record_crashed(self, delivery: WebhookDelivery) -> None:
        """Report a delivery whose worker died before reporting it itself."""
        try:
            await self.recorder.record_delivery(delivery)
        except Exception:
            logger.exception("delivery_recorder_failed", delivery_id=delivery.id)

    def _worker(
        self,
        subscription: WebhookSubscription,
        envelope: WebhookEnvelope,
        event_id: str,
        max_attempts: int | None = None,
    ) -> DeliveryWorker:
        return DeliveryWorker(
            self._client,
            subscription,
            envelope,
            event_id=event_id,
            settings=self._settings,
            recorder=self.recorder,
            sleep=self._sleep,
            max_attempts=max_attempts,
        )

    async def send_test(self, subscription: WebhookSubscription) -> WebhookDelivery:
        """Send a single ``webhook.test`` request and wait for its outcome.

        Bypasses the queue and makes exactly one attempt. Signed like any
        other delivery when the subscription has a secret key.
        """
        data = build_test_payload(subscription)
        event = DomainEvent(type=WEBHOOK_TEST_EVENT, data=data)
        envelope = self._payloads.envelope(WEBHOOK_TEST_EVENT, data, timestamp=event.enqueued_at)
        worker = self._worker(subscription, envelope, event_id=str(event.id), max_attempts=1)
        return await worker.run()

    # Typed wrappers. Each assembles the event data and calls dispatch.

    def task_created(self, task: Any, user: Any, project: Any) -> DomainEvent:
        return self.dispatch(TASK_CREATED, {"task": task, "user": user, "project": project})

    def task_updated(self, task: Any, previous: Any, user: Any, project: Any) -> DomainEvent:
        """Dispatch task.updated with a field diff against the previous version."""
        return self.dispatch(
            TASK_UPDATED,
            {
                "task": task,
                "changes": detect_changes(previous, task),
                "user": user,
                "project": project,
            },
        )

    def task_completed(self, task: Any, user: Any, project: Any) -> DomainEvent:
        return self.dispatch(TASK_COMPLETED, {"task": task, "user": user, "project": project})

    def task_assigned(
        self, task: Any, assigned_to: Any, assigned_by: Any, project: Any
    ) -> DomainEvent:
        return self.dispatch(
            TASK_ASSIGNED,
            {
                "task": task,
                "assigned_to": assigned_to,
                "assigned_by": assigned_by,
                "project": project,
            },
        )

    def task_status_changed(
        self,
        task: Any,
        old_status: str,
        new_status: str,
        user: Any,
        project: Any,
    ) -> DomainEvent:
        return self.dispatch(
            TASK_STATUS_CHANGED,
            {
                "task": task,
                "status": {"old_status": old_status, "new_status": new_status},
                "user": user,
                "project": project,
            },
        )

    def comment_added(self, comment: Any, task: Any, user: Any, project: Any) -> DomainEvent:
        return self.dispatch(
            COMMENT_ADDED,
            {"comment": comment, "task": task, "user": user, "project": project},
        )

    def comment_replied(
        self,
        comment: Any,
        parent_comment: Any,
        task: Any,
        user: Any,
        project: Any,
    ) -> DomainEvent:
        return self.dispatch(
            COMMENT_REPLIED,
            {
                "comment": comment,
                "parent_comment": parent_comment,
                "task": task,
                "user": user,
                "project": project,
            },
        )

    def project_created(self, project: Any, user: Any) -> DomainEvent:
        return self.dispatch(PROJECT_CREATED, {"project": project, "user": user})

    def project_updated(self, project: Any, previous: Any, user: Any) -> DomainEvent:
        """Dispatch project.updated with a field diff against the previous version."""
        return self.dispatch(
            PROJECT_UPDATED,
            {"project": project, "changes": detect_changes(previous, project), "user": user},
        )

    def member_added(self, project: Any, member: Any, added_by: Any) -> DomainEvent:
        return self.dispatch(
            MEMBER_ADDED,
            {"project": project, "member": member, "added_by": added_by},
        )

    def member_role_changed(
        self,
        project: Any,
        member: Any,
        old_role: str,
        new_role: str,
        changed_by: Any,
    ) -> DomainEvent:
        return self.dispatch(
            MEMBER_ROLE_CHANGED,
            {
                "project": project,
                "member": member,
                "role": {"old_role": old_role, "new_role": new_role},
                "changed_by": changed_by,
            },
        )


__all__ = ["WebhookDispatcher"]
