from __future__ import annotations

from datetime import date, datetime, time

from dayplan.services.gap_finder import Gap, find_gaps
from dayplan.services.structural_blocks import STRUCTURAL, Block

DAY = date(2026, 10, 19)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime.combine(DAY, time(hour, minute))


def _block(start: datetime, end: datetime) -> Block:
    return Block(start=start, end=end, kind=STRUCTURAL, label="fixed")


def test_no_blocks_yields_whole_day() -> None:
    assert find_gaps([], _at(8), _at(22)) == [Gap(start=_at(8), end=_at(22))]


def test_gaps_before_between_and_after() -> None:
    blocks = [_block(_at(10), _at(10, 30)), _block(_at(18), _at(18, 30))]

    gaps = find_gaps(blocks, _at(8), _at(22))

    assert gaps == [
        Gap(start=_at(8), end=_at(10)),
        Gap(start=_at(10, 30), end=_at(18)),
        Gap(start=_at(18, 30), end=_at(22)),
    ]
    assert [gap.minutes for gap in gaps] == [120, 450, 210]


def test_adjacent_and_edge_blocks_produce_no_empty_gaps() -> None:
    blocks = [
        _block(_at(8), _at(9)),
        _block(_at(9), _at(12)),
        _block(_at(20), _at(22)),
    ]

    assert find_gaps(blocks, _at(8), _at(22)) == [Gap(start=_at(12), end=_at(20))]


def test_overlapping_blocks_are_absorbed() -> None:
    blocks = [
        _block(_at(9), _at(17)),
        _block(_at(14), _at(15)),
        _block(_at(16), _at(18)),
    ]

    assert find_gaps(blocks, _at(8), _at(22)) == [
        Gap(start=_at(8), end=_at(9)),
        Gap(start=_at(18), end=_at(22)),
    ]


def test_fully_booked_day_has_no_gaps() -> None:
    assert find_gaps([_block(_at(7), _at(23))], _at(8), _at(22)) == []
