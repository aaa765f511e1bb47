"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import httpx
import pytest

from taskhooks.config import Settings
from taskhooks.models import WebhookSubscription
from taskhooks.webhooks import InMemoryDeliveryLog, InMemorySubscriptionResolver


class RecordingSleep:
    """Stand-in for asyncio.sleep that records backoff delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class Endpoint:
    """Fake webhook receiver answering with a scripted sequence of statuses.

    Once the script runs out, the last status is repeated. Entries may also
    be exceptions, which are raised instead of returning a response.
    """

    def __init__(self, *script: int | Exception) -> None:
        self.script = list(script) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step, text=f"status {step}")

    @property
    def calls(self) -> int:
        return len(self.requests)


class Router:
    """MockTransport handler dispatching requests to endpoints by host."""

    def __init__(self, endpoints: dict[str, Endpoint]) -> None:
        self.endpoints = endpoints
        self.log: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.log.append(request.url.host)
        return self.endpoints[request.url.host](request)


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_subscription(
    id: str = "wh_1",
    project_id: str = "proj_1",
    url: str = "https://hooks.example.com/receive",
    events: Iterable[str] = ("task.created",),
    active: bool = True,
    secret_key: str | None = None,
) -> WebhookSubscription:
    return WebhookSubscription(
        id=id,
        project_id=project_id,
        name=f"Hook {id}",
        url=url,
        events=list(events),
        active=active,
        secret_key=secret_key,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the production delivery defaults and text logs."""
    return Settings(env="test", log_format="text")


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def delivery_log() -> InMemoryDeliveryLog:
    return InMemoryDeliveryLog()


@pytest.fixture
def subscription() -> WebhookSubscription:
    return make_subscription(secret_key="test_secret_16chars")


@pytest.fixture
def resolver(subscription: WebhookSubscription) -> InMemorySubscriptionResolver:
    return InMemorySubscriptionResolver([subscription])


@pytest.fixture
def task_payload() -> dict[str, object]:
    """Event data for a task.created event in project proj_1."""
    return {
        "task": {
            "id": "task_1",
            "name": "Write release notes",
            "description": "For 2.0",
            "status": "todo",
            "priority": "high",
            "project_id": "proj_1",
            "internal_score": 0.42,
        },
        "user": {"id": "user_1", "name": "Ana", "email": "ana@example.com", "password_hash": "x"},
        "project": {"id": "proj_1", "name": "Launch"},
    }
