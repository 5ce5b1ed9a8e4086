"""Free intervals between structural blocks."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence

from dayplan.services.structural_blocks import Block


@dataclass(frozen=True)
class Gap:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def find_gaps(blocks: Sequence[Block], wake: datetime, sleep: datetime) -> List[Gap]:
    """
    Return the ordered free intervals inside [wake, sleep] around sorted blocks.

    Zero or negative length intervals are skipped. The running end is the
    maximum seen so far, so a block nested in a longer one opens no gap.
    """
    gaps: List[Gap] = []
    cursor = wake
    for block in blocks:
        if cursor >= sleep:
            break
        gap_end = min(block.start, sleep)
        if gap_end > cursor:
            gaps.append(Gap(start=cursor, end=gap_end))
        if block.end > cursor:
            cursor = block.end
    if cursor < sleep:
        gaps.append(Gap(start=cursor, end=sleep))
    return gaps
