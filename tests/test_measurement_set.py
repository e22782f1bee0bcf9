import threading

from appoptics.aggregator import Aggregator
from appoptics.measurement_set import (
    MeasurementSet,
    MeasurementSetReport,
    TaggedMeasurementSet,
)
from appoptics.tags import metric_with_tags


def test_get_counter_and_aggregator_share_state_per_key():
    s = MeasurementSet()
    s.get_counter("k").add(2)
    s.get_counter("k").add(3)
    s.get_aggregator("g").update_value(1.0)
    s.get_aggregator("g").update_value(4.0)
    report = s.reset()
    assert report.counts == {"k": 5}
    assert report.aggregators["g"].count == 2
    assert report.aggregators["g"].sum == 5.0


def test_add_shows_in_report():
    s = MeasurementSet()
    s.add("k", 5)
    assert s.reset().counts == {"k": 5}


def test_zero_entries_omitted():
    s = MeasurementSet()
    s.get_counter("z")
    s.get_aggregator("a")
    report = s.reset()
    assert report == MeasurementSetReport()


def test_reset_clears_but_keeps_keys():
    s = MeasurementSet()
    s.incr("k")
    s.update_aggregator_value("g", 2.0)
    counter = s.get_counter("k")
    s.reset()
    assert s.reset() == MeasurementSetReport()
    counter.add(4)
    assert s.reset().counts == {"k": 4}


def test_aggregator_values_reported():
    s = MeasurementSet()
    expected = Aggregator()
    for v in (4.0, 1.5, 9.0):
        s.update_aggregator_value("lat", v)
        expected.update_value(v)
    assert s.reset().aggregators == {"lat": expected}


def test_update_aggregator_merges():
    s = MeasurementSet()
    other = Aggregator(count=2, sum=3, min=1, max=2, last=2)
    s.update_aggregator("x", other)
    assert s.reset().aggregators["x"] == other


def test_merge_then_reset_round_trip():
    report = MeasurementSetReport(
        counts={"a": 4, "b": 10},
        aggregators={"g": Aggregator(count=2, sum=5, min=2, max=3, last=3)},
    )
    s = MeasurementSet()
    s.merge(report)
    assert s.reset() == report


def test_tagged_set_uses_tagged_keys():
    base = MeasurementSet()
    tags = {"host": "web-1"}
    tagged = TaggedMeasurementSet(base, tags)
    tagged.add("req", 6)
    tagged.update_aggregator_value("lat", 2.5)
    report = base.reset()
    assert report.counts == {metric_with_tags("req", tags): 6}
    assert report.aggregators[metric_with_tags("lat", tags)].last == 2.5


def test_tagged_set_without_tags_uses_plain_key():
    base = MeasurementSet()
    tagged = TaggedMeasurementSet(base, None)
    tagged.incr("req")
    tagged.incr("req")
    assert base.reset().counts == {"req": 2}


def test_tagged_merge_applies_tags():
    base = MeasurementSet()
    tags = {"env": "prod"}
    tagged = TaggedMeasurementSet(base, tags)
    agg = Aggregator(count=1, sum=7, min=7, max=7, last=7)
    tagged.merge(MeasurementSetReport(counts={"c": 3}, aggregators={"g": agg}))
    report = tagged.reset()
    assert report.counts == {metric_with_tags("c", tags): 3}
    assert report.aggregators == {metric_with_tags("g", tags): agg}


def test_tags_can_be_changed():
    base = MeasurementSet()
    tagged = TaggedMeasurementSet(base, {"a": "x"})
    tagged.tags = {"a": "y"}
    tagged.incr("n")
    assert list(base.reset().counts) == [metric_with_tags("n", {"a": "y"})]


def test_concurrent_counting():
    s = MeasurementSet()
    threads_n, per_thread = 8, 500

    def work():
        for _ in range(per_thread):
            s.incr("hits")

    threads = [threading.Thread(target=work) for _ in range(threads_n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert s.reset().counts == {"hits": threads_n * per_thread}