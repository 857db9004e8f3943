"""
Bounded history log tests.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from mediphant_server.sessions.history import BoundedHistoryLog, HistoryItem


def make_item(n: int) -> HistoryItem:
    return HistoryItem(
        id=f"item-{n}",
        med_a=f"drug-{n}",
        med_b="placebo",
        is_risky=False,
        reason="No known interaction found",
    )


class TestBoundedHistoryLog:

    def test_caps_at_max_items_newest_first(self):
        log = BoundedHistoryLog(max_items=10)
        for n in range(1, 16):
            log.add(make_item(n))

        items = log.list()

        assert len(items) == 10
        assert items[0].id == "item-15"
        assert items[-1].id == "item-6"

    def test_clear(self):
        log = BoundedHistoryLog()
        for n in range(15):
            log.add(make_item(n))

        log.clear()

        assert log.list() == []
        assert len(log) == 0

    def test_clear_when_empty(self):
        log = BoundedHistoryLog()
        log.clear()
        assert len(log) == 0

    def test_list_returns_copy(self):
        log = BoundedHistoryLog()
        log.add(make_item(1))

        snapshot = log.list()
        snapshot.clear()
        snapshot.append(make_item(99))

        assert [i.id for i in log.list()] == ["item-1"]

    def test_items_are_immutable(self):
        item = make_item(1)
        with pytest.raises(Exception):
            item.reason = "changed"

    def test_record_builds_item(self):
        log = BoundedHistoryLog()

        item = log.record("warfarin", "ibuprofen", True, "increased bleeding risk")

        assert log.list() == [item]
        assert item.is_risky is True
        assert item.id
        assert item.timestamp.tzinfo is not None

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            BoundedHistoryLog(max_items=0)

    def test_concurrent_adds_keep_capacity(self):
        log = BoundedHistoryLog(max_items=10)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda n: log.add(make_item(n)), range(200)))

        items = log.list()
        assert len(items) == 10
        assert len({i.id for i in items}) == 10
