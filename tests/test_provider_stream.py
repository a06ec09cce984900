"""
Tests for the provider stream channel
"""

import asyncio

import pytest

from rep_gateway.agents.orchestrator.streaming import ProviderStream
from rep_gateway.models.domain import StreamUnitKind
from rep_gateway.providers.base import StreamUnit


class CountingSource:
    """Endless async iterator of text units that records pulls and closure"""

    def __init__(self, limit=None, fail_after=None):
        self.limit = limit
        self.fail_after = fail_after
        self.pulled = 0
        self.closed = False

    async def units(self):
        try:
            while self.limit is None or self.pulled < self.limit:
                if self.fail_after is not None and self.pulled >= self.fail_after:
                    raise RuntimeError("upstream reset")
                self.pulled += 1
                yield StreamUnit.text(f"chunk-{self.pulled}")
        finally:
            self.closed = True


def test_lookahead_is_bounded_by_queue_depth():
    """Test that an unread stream pulls at most queue depth + 1 units"""
    source = CountingSource()

    async def scenario():
        stream = ProviderStream(source.units(), queue_depth=1)
        stream.start()
        await asyncio.sleep(0.05)
        pulled_while_idle = source.pulled
        stream.abandon()
        await asyncio.sleep(0.05)
        return pulled_while_idle

    assert asyncio.run(scenario()) <= 2
    assert source.closed


def test_units_arrive_in_order_then_end():
    source = CountingSource(limit=3)

    async def scenario():
        stream = ProviderStream(source.units(), queue_depth=1)
        stream.start()
        received = []
        while True:
            unit = await stream.receive(1.0)
            if unit is None:
                break
            received.append(unit.content)
        await asyncio.sleep(0.05)
        return received, stream.producer_done

    received, producer_done = asyncio.run(scenario())
    assert received == ["chunk-1", "chunk-2", "chunk-3"]
    assert producer_done
    assert source.closed


def test_receive_times_out_when_provider_is_silent():
    async def silent():
        await asyncio.sleep(10)
        yield StreamUnit.text("late")

    async def scenario():
        stream = ProviderStream(silent(), queue_depth=1)
        stream.start()
        try:
            with pytest.raises(asyncio.TimeoutError):
                await stream.receive(0.05)
        finally:
            stream.abandon()
        await asyncio.sleep(0.05)
        return stream.producer_done

    assert asyncio.run(scenario())


def test_abandon_interrupts_blocked_provider_and_closes_it():
    """Test that a provider stuck mid-await is cancelled and its cleanup runs"""
    state = {"closed": False}

    async def stuck():
        try:
            await asyncio.sleep(10)
            yield StreamUnit.text("never")
        finally:
            state["closed"] = True

    async def scenario():
        stream = ProviderStream(stuck(), queue_depth=1)
        stream.start()
        await asyncio.sleep(0.01)
        stream.abandon()
        await asyncio.sleep(0.05)
        return stream.producer_done

    assert asyncio.run(scenario())
    assert state["closed"]


def test_raising_provider_becomes_error_unit():
    source = CountingSource(fail_after=1)

    async def scenario():
        stream = ProviderStream(source.units(), queue_depth=1)
        stream.start()
        first = await stream.receive(1.0)
        second = await stream.receive(1.0)
        stream.abandon()
        return first, second

    first, second = asyncio.run(scenario())
    assert first.kind is StreamUnitKind.TEXT
    assert second.kind is StreamUnitKind.ERROR
    assert isinstance(second.error, RuntimeError)
    assert source.closed
