from density_map.common.models import RawRecord
from density_map.pipeline.dedupe import build_fingerprints, deduplicate, is_duplicate


def _record(start="(12.97000,77.59000)", end="(12.98000,77.60000)", start_pin="560001", end_pin="560002", txn="t-1"):
    return RawRecord(
        transaction_id=txn,
        start_gps=start,
        end_gps=end,
        start_area_code=start_pin,
        end_area_code=end_pin,
    )


def _swapped(txn="t-2"):
    return _record(
        start="(12.98000,77.60000)",
        end="(12.97000,77.59000)",
        start_pin="560002",
        end_pin="560001",
        txn=txn,
    )


def test_fingerprints_are_reverses_of_each_other():
    forward, reverse = build_fingerprints(_record())
    assert forward == "12.97000,77.59000|12.98000,77.60000|560001|560002"
    assert reverse == "12.98000,77.60000|12.97000,77.59000|560002|560001"
    assert build_fingerprints(_swapped()) == (reverse, forward)


def test_fingerprint_normalises_precision_and_pin_whitespace():
    noisy = _record(start="( 12.97 , 77.59 )", start_pin=" 560001 ")
    assert build_fingerprints(noisy) == build_fingerprints(_record())


def test_swapped_record_is_discarded_and_first_wins():
    first = _record(txn="first")
    result = deduplicate([first, _swapped(txn="second")])

    assert [r.transaction_id for r in result.records] == ["first"]
    assert result.duplicates == 1


def test_input_order_decides_survivor():
    result = deduplicate([_swapped(txn="second"), _record(txn="first")])
    assert [r.transaction_id for r in result.records] == ["second"]


def test_distinct_trips_survive():
    other = _record(end="(12.99000,77.61000)", txn="t-3")
    result = deduplicate([_record(), other])
    assert len(result.records) == 2
    assert result.duplicates == 0


def test_same_coordinates_with_different_pins_are_distinct():
    other = _record(end_pin="560003", txn="t-3")
    assert len(deduplicate([_record(), other]).records) == 2


def test_seen_set_is_caller_owned():
    seen: set[str] = set()
    assert is_duplicate(_record(), seen) is False
    assert is_duplicate(_swapped(), seen) is True
    assert len(seen) == 1


def test_each_call_starts_fresh():
    assert len(deduplicate([_record()]).records) == 1
    assert len(deduplicate([_record()]).records) == 1


def test_unparseable_records_are_dropped():
    result = deduplicate([_record(start="(bad,1)")])
    assert result.records == []
    assert result.unfingerprinted == 1
