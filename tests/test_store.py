import threading

from tick_aggregator.models import Aggregate
from tick_aggregator.store import AggregationStore

from conftest import make_tick


def test_record_scenario(store, sample_ticks):
    for tick in sample_ticks:
        store.record(tick)

    assert store.snapshot_aggregate("AAPL") == Aggregate(total=300.0, count=2, average=150.0, latest=200.0)
    assert store.snapshot_aggregate("GOOGL") == Aggregate(total=50.0, count=1, average=50.0, latest=50.0)
    assert store.snapshot_aggregate("MSFT") is None


def test_history_preserves_arrival_order(store, sample_ticks):
    for tick in sample_ticks:
        store.record(tick)

    assert store.snapshot_raw("AAPL") == sample_ticks[:2]
    assert store.snapshot_raw("GOOGL") == sample_ticks[2:]
    assert store.snapshot_raw("MSFT") is None


def test_incremental_statistics(store):
    prices = [101.5, 99.25, 100.0, 250.75, 180.5]
    for price in prices:
        store.record(make_tick("NVDA", price))

    stats = store.snapshot_aggregate("NVDA")
    assert stats.count == len(prices)
    assert stats.total == sum(prices)
    assert stats.average == stats.total / stats.count
    assert stats.latest == prices[-1]


def test_symbols_are_isolated(store):
    store.record(make_tick("AAPL", 100.0))
    before = store.snapshot_aggregate("AAPL")
    history_before = store.snapshot_raw("AAPL")

    for i in range(10):
        store.record(make_tick("TSLA", 200.0 + i))

    assert store.snapshot_aggregate("AAPL") == before
    assert store.snapshot_raw("AAPL") == history_before
    assert store.symbols() == ["AAPL", "TSLA"]
    assert len(store) == 2


def test_snapshots_are_copies(store):
    store.record(make_tick("AAPL", 100.0))

    stats = store.snapshot_aggregate("AAPL")
    stats.total = -1.0
    history = store.snapshot_raw("AAPL")
    history.clear()
    store.snapshot_all_aggregates()["AAPL"].count = 99
    store.snapshot_all_raw()["AAPL"].append(make_tick("AAPL", 1.0))

    assert store.snapshot_aggregate("AAPL") == Aggregate(total=100.0, count=1, average=100.0, latest=100.0)
    assert len(store.snapshot_raw("AAPL")) == 1


def test_snapshot_does_not_follow_later_records(store):
    store.record(make_tick("AAPL", 100.0))
    aggregates = store.snapshot_all_aggregates()
    raw = store.snapshot_all_raw()

    store.record(make_tick("AAPL", 300.0))
    store.record(make_tick("AMZN", 178.5))

    assert aggregates["AAPL"].count == 1
    assert set(aggregates) == {"AAPL"}
    assert len(raw["AAPL"]) == 1


def test_empty_store():
    store = AggregationStore()
    assert store.snapshot_all_aggregates() == {}
    assert store.snapshot_all_raw() == {}
    assert store.symbols() == []


def test_concurrent_records_and_reads_stay_consistent(store):
    symbols = ["AAPL", "GOOGL", "MSFT", "AMZN"]
    per_writer = 2000
    torn = []
    done = threading.Event()

    def writer(symbol):
        for _ in range(per_writer):
            store.record(make_tick(symbol, 1.0))

    def reader():
        while not done.is_set():
            for symbol, stats in store.snapshot_all_aggregates().items():
                # Every price is 1.0, so a consistent aggregate has total == count
                if stats.count and (stats.total != stats.count or stats.average != 1.0):
                    torn.append((symbol, stats))
            for symbol in symbols:
                stats = store.snapshot_aggregate(symbol)
                history = store.snapshot_raw(symbol)
                if stats is not None and history is not None and len(history) < stats.count:
                    torn.append((symbol, stats, len(history)))

    writers = [threading.Thread(target=writer, args=(s,)) for s in symbols for _ in range(2)]
    readers = [threading.Thread(target=reader) for _ in range(3)]
    for t in readers + writers:
        t.start()
    for t in writers:
        t.join()
    done.set()
    for t in readers:
        t.join()

    assert torn == []
    for symbol in symbols:
        stats = store.snapshot_aggregate(symbol)
        assert stats.count == 2 * per_writer
        assert len(store.snapshot_raw(symbol)) == 2 * per_writer
