from block_fit.game import Ticker


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


def test_tick_reaches_subscriber():
    ticker = Ticker()
    counter = Counter()
    ticker.subscribe(counter)
    ticker.tick()
    ticker.tick()
    assert counter.calls == 2
    assert ticker.active


def test_subscribe_replaces_previous():
    ticker = Ticker()
    first, second = Counter(), Counter()
    ticker.subscribe(first)
    ticker.subscribe(second)
    ticker.tick()
    assert first.calls == 0
    assert second.calls == 1


def test_stale_unsubscribe_is_ignored():
    ticker = Ticker()
    first, second = Counter(), Counter()
    ticker.subscribe(first)
    ticker.subscribe(second)
    ticker.unsubscribe(first)
    ticker.tick()
    assert second.calls == 1
    ticker.unsubscribe(second)
    ticker.unsubscribe(second)
    ticker.tick()
    assert second.calls == 1
    assert not ticker.active


def test_advance_fires_once_per_second():
    ticker = Ticker()
    counter = Counter()
    ticker.subscribe(counter)
    assert ticker.advance(400) == 0
    assert ticker.advance(700) == 1
    assert ticker.advance(2000) == 2
    assert counter.calls == 3


def test_advance_without_subscriber_does_nothing():
    ticker = Ticker()
    assert ticker.advance(5000) == 0
