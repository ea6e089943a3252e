"""Turning alignment gaps into subdivisions of a sub-path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from avmorph.alignment import AvAlignmentSlot
from avmorph.geom import GeomMath
from avmorph.path import AvPath, AvSplitOp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvSlotInfo:
    """Gap information of one alignment slot.

    Attributes:
        is_gap: the slot is empty
        is_next_gap: the following slot is empty as well
        next_cmd_idx: number of real elements up to and including this slot,
            for a gap this is the index of the next real element
    """

    is_gap: bool
    is_next_gap: bool
    next_cmd_idx: int


@dataclass(frozen=True)
class AvGapStreak:
    """A maximal run of consecutive gap slots."""

    slots: Tuple[AvSlotInfo, ...]

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def next_cmd_idx(self) -> int:
        """Index in the ungapped sequence in front of which the streak is filled."""
        return self.slots[-1].next_cmd_idx


class AvGapResolver:
    """Computes the splits which fill the gaps of one side of an alignment."""

    @staticmethod
    def tag_slots(slots: Sequence[AvAlignmentSlot]) -> List[AvSlotInfo]:
        """Determine for each slot whether it and its neighbor is a gap."""
        infos = []
        next_cmd_idx = 0
        for i, slot in enumerate(slots):
            is_next_gap = i + 1 < len(slots) and slots[i + 1].is_gap
            if not slot.is_gap:
                next_cmd_idx += 1
            infos.append(AvSlotInfo(slot.is_gap, is_next_gap, next_cmd_idx))
        return infos

    @staticmethod
    def gap_streaks(infos: Sequence[AvSlotInfo]) -> List[AvGapStreak]:
        """Group consecutive gap slots into streaks, in sequence order."""
        streaks = []
        current: List[AvSlotInfo] = []
        for info in infos:
            if info.is_gap:
                current.append(info)
                if not info.is_next_gap:
                    streaks.append(AvGapStreak(tuple(current)))
                    current = []
        return streaks

    @staticmethod
    def split_params(num_gaps: int) -> Tuple[float, ...]:
        """Evenly spaced split parameters, one per gap."""
        return tuple((gap_idx + 1) / (num_gaps + 1) for gap_idx in range(num_gaps))

    @classmethod
    def split_ops(cls, sub_idx: int, slots: Sequence[AvAlignmentSlot], num_commands: int) -> List[AvSplitOp]:
        """Return the split operations filling all gaps, highest command index first.

        The insertion index is clamped to [1, num_commands - 1] because the
        alignment may place gaps in front of the MoveTo or behind the last
        command, where nothing can be inserted. Streaks clamped onto the same
        command are merged, so there is at most one op per command and its new
        points are evenly spaced.
        """
        gaps_per_cmd: Dict[int, int] = {}
        for streak in cls.gap_streaks(cls.tag_slots(slots)):
            cmd_idx = GeomMath.clamp(streak.next_cmd_idx, 1, num_commands - 1)
            gaps_per_cmd[cmd_idx] = gaps_per_cmd.get(cmd_idx, 0) + len(streak)
        return [
            AvSplitOp(sub_idx, cmd_idx, cls.split_params(num_gaps))
            for cmd_idx, num_gaps in sorted(gaps_per_cmd.items(), reverse=True)
        ]

    @classmethod
    def fill_gaps(cls, path: AvPath, sub_idx: int, slots: Sequence[AvAlignmentSlot]) -> AvPath:
        """Insert one subdivision point into sub-path _sub_idx_ of _path_ per gap in _slots_."""
        ops = cls.split_ops(sub_idx, slots, len(path.sub_path(sub_idx)))
        if not ops:
            return path
        logger.debug("Filling gaps of sub-path %d with %d split op(s): %s", sub_idx, len(ops), ops)
        return path.split_batch(ops)
