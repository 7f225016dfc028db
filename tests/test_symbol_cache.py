from datetime import datetime, timezone

import pytest

from app.services.errors import InvalidPayload
from app.services.symbol_cache import SymbolCache


def test_read_is_empty_until_first_write() -> None:
    cache = SymbolCache()
    assert cache.read() is None


def test_write_replaces_snapshot_and_defaults_fields() -> None:
    cache = SymbolCache()
    assert cache.write(["BTCUSD", "ETHUSD"], full_data=[{"symbol": "BTCUSD"}]) == 2

    snapshot = cache.read()
    assert snapshot is not None
    assert snapshot.symbols == ["BTCUSD", "ETHUSD"]
    assert snapshot.full_data == [{"symbol": "BTCUSD"}]
    assert snapshot.timestamp is not None
    assert snapshot.timestamp.tzinfo is not None

    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert cache.write(["SOLUSD"], timestamp=stamp) == 1
    snapshot = cache.read()
    assert snapshot.symbols == ["SOLUSD"]
    assert snapshot.full_data == []
    assert snapshot.timestamp == stamp


def test_writing_an_empty_list_reads_back_as_not_available() -> None:
    cache = SymbolCache()
    cache.write(["BTCUSD"])
    assert cache.write([]) == 0
    assert cache.read() is None


@pytest.mark.parametrize("symbols", [None, "BTCUSD", {"a": 1}, [1, 2]])
def test_write_rejects_non_sequences(symbols) -> None:
    cache = SymbolCache()
    cache.write(["KEEP"])
    with pytest.raises(InvalidPayload):
        cache.write(symbols)
    assert cache.read().symbols == ["KEEP"]


def test_unusable_optional_fields_fall_back_to_defaults() -> None:
    cache = SymbolCache()
    assert cache.write(["BTCUSD"], full_data="not-a-list", timestamp="yesterday-ish") == 1

    snapshot = cache.read()
    assert snapshot.symbols == ["BTCUSD"]
    assert snapshot.full_data == []
    assert snapshot.timestamp is not None
    assert snapshot.timestamp.tzinfo is not None
