"""Tests for the in-memory delivery log."""

import pytest

from taskhooks.models import DeliveryAttempt, DeliveryOutcome, WebhookDelivery
from taskhooks.webhooks import DeliveryRecorder, InMemoryDeliveryLog


def make_delivery(subscription_id: str = "wh_1", event_id: str = "evt_1") -> WebhookDelivery:
    return WebhookDelivery(
        subscription_id=subscription_id,
        event_id=event_id,
        event_type="task.created",
        url="https://hooks.example.com/receive",
    )


def make_attempt(delivery_id: str, number: int) -> DeliveryAttempt:
    return DeliveryAttempt(
        delivery_id=delivery_id,
        subscription_id="wh_1",
        event_id="evt_1",
        event_type="task.created",
        attempt_number=number,
        outcome=DeliveryOutcome.RETRY_SCHEDULED,
    )


class TestInMemoryDeliveryLog:
    """Tests for InMemoryDeliveryLog."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryDeliveryLog(), DeliveryRecorder)

    @pytest.mark.asyncio
    async def test_records_snapshot_of_delivery(self):
        log = InMemoryDeliveryLog()
        delivery = make_delivery().mark_sending().mark_success(200)

        await log.record_delivery(delivery)
        delivery.mark_failed("changed afterwards")

        assert log.deliveries[0].outcome == DeliveryOutcome.SUCCESS

    @pytest.mark.asyncio
    async def test_lookups(self):
        log = InMemoryDeliveryLog()
        ok = make_delivery("wh_1", "evt_1").mark_sending().mark_success(200)
        bad = make_delivery("wh_2", "evt_1").mark_sending().mark_failed("HTTP 404", 404)
        other = make_delivery("wh_1", "evt_2").mark_sending().mark_success(201)
        for delivery in (ok, bad, other):
            await log.record_delivery(delivery)
        await log.record_attempt(make_attempt(ok.id, 1))
        await log.record_attempt(make_attempt(bad.id, 1))
        await log.record_attempt(make_attempt(ok.id, 2))

        assert [a.attempt_number for a in log.attempts_for(ok.id)] == [1, 2]
        assert {d.id for d in log.deliveries_for_event("evt_1")} == {ok.id, bad.id}
        assert {d.id for d in log.deliveries_for_subscription("wh_1")} == {ok.id, other.id}
        assert log.count(DeliveryOutcome.SUCCESS) == 2
        assert log.count(DeliveryOutcome.FAILED) == 1

    @pytest.mark.asyncio
    async def test_bounded(self):
        log = InMemoryDeliveryLog(max_entries=2)
        deliveries = [make_delivery(event_id=f"evt_{i}") for i in range(3)]
        for delivery in deliveries:
            await log.record_delivery(delivery)

        assert [d.event_id for d in log.deliveries] == ["evt_1", "evt_2"]

    @pytest.mark.asyncio
    async def test_clear(self):
        log = InMemoryDeliveryLog()
        await log.record_delivery(make_delivery())

        log.clear()

        assert log.deliveries == []
        assert log.attempts == []
