from overlay_nav.models import PositionSample
from overlay_nav.position_feed import PositionFeed


def _fix(t, accuracy=5.0):
    return PositionSample(41.0, 29.0, accuracy=accuracy, timestamp=t)


class TestPositionFeed:

    def test_fan_out_to_all_subscribers(self):
        feed = PositionFeed()
        first, second = [], []
        feed.subscribe(first.append)
        feed.subscribe(second.append)
        assert feed.publish(_fix(1.0))
        assert len(first) == len(second) == 1

    def test_subscribe_twice_registers_once(self):
        feed = PositionFeed()
        seen = []
        assert feed.subscribe(seen.append)
        assert feed.subscribe(seen.append)
        assert feed.subscriber_count == 1

    def test_unsubscribe(self):
        feed = PositionFeed()
        seen = []
        feed.subscribe(seen.append)
        feed.unsubscribe(seen.append)
        feed.unsubscribe(seen.append)   # unknown callbacks are ignored
        feed.publish(_fix(1.0))
        assert seen == []

    def test_out_of_order_fix_is_dropped(self):
        feed = PositionFeed()
        seen = []
        feed.subscribe(seen.append)
        feed.publish(_fix(10.0))
        assert not feed.publish(_fix(9.0))
        assert feed.publish(_fix(10.0))
        assert [s.timestamp for s in seen] == [10.0, 10.0]

    def test_low_accuracy_fix_is_dropped(self):
        feed = PositionFeed(max_accuracy_m=20.0)
        seen = []
        feed.subscribe(seen.append)
        assert not feed.publish(_fix(1.0, accuracy=35.0))
        assert feed.publish(_fix(2.0, accuracy=20.0))
        assert len(seen) == 1

    def test_dropped_fix_does_not_move_the_clock(self):
        feed = PositionFeed(max_accuracy_m=20.0)
        feed.publish(_fix(5.0, accuracy=50.0))
        assert feed.publish(_fix(3.0))

    def test_failing_subscriber_does_not_block_others(self):
        feed = PositionFeed()
        seen = []

        def broken(sample):
            raise RuntimeError("display gone")

        feed.subscribe(broken)
        feed.subscribe(seen.append)
        assert feed.publish(_fix(1.0))
        assert len(seen) == 1

    def test_subscriber_may_unsubscribe_during_delivery(self):
        feed = PositionFeed()

        def once(sample):
            feed.unsubscribe(once)

        feed.subscribe(once)
        feed.publish(_fix(1.0))
        assert feed.subscriber_count == 0

    def test_far_older_fix_is_a_clock_reset(self):
        feed = PositionFeed()
        seen = []
        feed.subscribe(seen.append)
        feed.publish(_fix(1.7e12))      # milliseconds by mistake
        assert feed.publish(_fix(1.7e9))
        assert feed.publish(_fix(1.7e9 + 1))
        assert [s.timestamp for s in seen] == [1.7e12, 1.7e9, 1.7e9 + 1]

    def test_reorder_window(self):
        feed = PositionFeed(reorder_window_s=5.0)
        feed.publish(_fix(100.0))
        assert not feed.publish(_fix(95.0))
        assert feed.publish(_fix(94.0))

    def test_first_subscriber_restarts_the_clock(self):
        feed = PositionFeed()
        seen = []
        feed.subscribe(seen.append)
        feed.publish(_fix(20.0))
        feed.unsubscribe(seen.append)

        feed.subscribe(seen.append)
        assert feed.publish(_fix(5.0))

    def test_additional_subscriber_keeps_the_clock(self):
        feed = PositionFeed()
        feed.subscribe(lambda s: None)
        feed.publish(_fix(20.0))
        feed.subscribe(lambda s: None)
        assert not feed.publish(_fix(19.0))

    def test_reset(self):
        feed = PositionFeed()
        feed.publish(_fix(20.0))
        feed.reset()
        assert feed.publish(_fix(19.0))
