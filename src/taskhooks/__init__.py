"""taskhooks: webhook dispatch for the task manager.

Turns task, project, comment and member lifecycle events into signed HTTP
callbacks to third-party endpoints, with FIFO event ordering, per-endpoint
failure isolation and bounded exponential-backoff retry.

Quick Start:
    from taskhooks import InMemorySubscriptionResolver, WebhookDispatcher, WebhookSubscription

    resolver = InMemorySubscriptionResolver([
        WebhookSubscription(
            id="wh_1",
            project_id="proj_1",
            url="https://example.com/hooks",
            events=["task.created"],
            secret_key="s3cr3t-s3cr3t-s3cr3t",
        )
    ])

    async with WebhookDispatcher(resolver) as dispatcher:
        dispatcher.task_created(task, user, project)

Delivery is best effort and in-memory: outcomes are logged and recorded,
never returned to the producer, and queued events do not survive a restart.
"""

__version__ = "0.1.0"

# Configuration
from .config import Settings, settings

# Exceptions
from .exceptions import (
    ConfigurationError,
    DeliveryError,
    DispatcherClosedError,
    RejectedDeliveryError,
    ResolverError,
    RoutingError,
    TaskhooksError,
    TransientDeliveryError,
    ValidationError,
)

# Logging
from .logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    unbind_context,
)

# Models
from .models import (
    ALL_EVENT_TYPES,
    DeliveryAttempt,
    DeliveryOutcome,
    DomainEvent,
    WebhookDelivery,
    WebhookEnvelope,
    WebhookSubscription,
)

# Webhooks
from .webhooks import (
    InMemoryDeliveryLog,
    InMemorySubscriptionResolver,
    PayloadBuilder,
    ResolveResult,
    SubscriptionResolver,
    WebhookDispatcher,
    compute_signature,
    verify_signature,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "settings",
    # Exceptions
    "ConfigurationError",
    "DeliveryError",
    "DispatcherClosedError",
    "RejectedDeliveryError",
    "ResolverError",
    "RoutingError",
    "TaskhooksError",
    "TransientDeliveryError",
    "ValidationError",
    # Logging
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Models
    "ALL_EVENT_TYPES",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DomainEvent",
    "WebhookDelivery",
    "WebhookEnvelope",
    "WebhookSubscription",
    # Webhooks
    "InMemoryDeliveryLog",
    "InMemorySubscriptionResolver",
    "PayloadBuilder",
    "ResolveResult",
    "SubscriptionResolver",
    "WebhookDispatcher",
    "compute_signature",
    "verify_signature",
]
