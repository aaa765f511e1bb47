"""Webhook dispatch engine.

Queues domain events, routes them to project subscriptions, and delivers
HMAC-signed envelopes with exponential backoff retry.

Example:
    ```python
    from taskhooks.webhooks import InMemorySubscriptionResolver, WebhookDispatcher

    resolver = InMemorySubscriptionResolver(subscriptions)
    async with WebhookDispatcher(resolver) as dispatcher:
        dispatcher.task_created(task, user, project)
    ```
"""

from .delivery import HEADER_DELIVERY, HEADER_EVENT, HEADER_SIGNATURE, DeliveryWorker
from .dispatcher import WebhookDispatcher
from .payloads import PAYLOAD_TEMPLATES, PayloadBuilder, build_test_payload, detect_changes
from .queue import EventQueue
from .recorder import DeliveryRecorder, InMemoryDeliveryLog
from .routing import (
    InMemorySubscriptionResolver,
    ResolveResult,
    SubscriptionResolver,
    extract_project_id,
)
from .signing import compute_signature, generate_secret_key, verify_signature

__all__ = [
    "DeliveryRecorder",
    "DeliveryWorker",
    "EventQueue",
    "HEADER_DELIVERY",
    "HEADER_EVENT",
    "HEADER_SIGNATURE",
    "InMemoryDeliveryLog",
    "InMemorySubscriptionResolver",
    "PAYLOAD_TEMPLATES",
    "PayloadBuilder",
    "ResolveResult",
    "SubscriptionResolver",
    "WebhookDispatcher",
    "build_test_payload",
    "compute_signature",
    "detect_changes",
    "extract_project_id",
    "generate_secret_key",
    "verify_signature",
]
