"""
Tests for the latest-value broadcast channel.
"""

import asyncio

from sat_predictor.publisher import ReplayChannel


class TestReplayChannel:
    """Tests for ReplayChannel."""

    def test_empty_channel(self) -> None:
        channel = ReplayChannel()

        assert channel.value is None
        assert not channel.has_value

    def test_publish_overwrites(self) -> None:
        channel = ReplayChannel()
        channel.publish([1])
        channel.publish([2, 3])

        assert channel.value == [2, 3]
        assert channel.has_value

    def test_empty_list_counts_as_published(self) -> None:
        channel = ReplayChannel()
        channel.publish([])

        assert channel.has_value
        assert channel.value == []

    def test_late_subscriber_sees_latest_value(self) -> None:
        async def scenario():
            channel = ReplayChannel()
            channel.publish("old")
            channel.publish("new")
            subscription = channel.subscribe()
            try:
                return await asyncio.wait_for(subscription.__anext__(), timeout=1)
            finally:
                await subscription.aclose()

        assert asyncio.run(scenario()) == "new"

    def test_subscriber_waits_for_first_publication(self) -> None:
        async def scenario():
            channel = ReplayChannel()
            subscription = channel.subscribe()
            pending = asyncio.ensure_future(subscription.__anext__())
            await asyncio.sleep(0)
            assert not pending.done()
            assert channel.subscriber_count == 1
            channel.publish("first")
            result = await asyncio.wait_for(pending, timeout=1)
            await subscription.aclose()
            return result

        assert asyncio.run(scenario()) == "first"

    def test_all_subscribers_notified(self) -> None:
        async def scenario():
            channel = ReplayChannel()
            subscriptions = [channel.subscribe() for _ in range(3)]
            pending = [asyncio.ensure_future(s.__anext__()) for s in subscriptions]
            await asyncio.sleep(0)
            channel.publish(42)
            results = await asyncio.wait_for(asyncio.gather(*pending), timeout=1)
            for subscription in subscriptions:
                await subscription.aclose()
            return results

        assert asyncio.run(scenario()) == [42, 42, 42]

    def test_slow_subscriber_skips_to_latest(self) -> None:
        async def scenario():
            channel = ReplayChannel()
            subscription = channel.subscribe()
            channel.publish(1)
            first = await subscription.__anext__()
            for value in range(2, 10):
                channel.publish(value)
            second = await asyncio.wait_for(subscription.__anext__(), timeout=1)
            await subscription.aclose()
            return first, second

        assert asyncio.run(scenario()) == (1, 9)

    def test_publish_without_subscribers_never_blocks(self) -> None:
        channel = ReplayChannel()
        for value in range(10_000):
            channel.publish(value)

        assert channel.value == 9_999
