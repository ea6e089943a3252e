"""Global sequence alignment (Needleman-Wunsch) over arbitrary element types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


@dataclass(frozen=True)
class AvAlignmentSlot(Generic[T]):
    """Either holds one element of an aligned sequence or is an empty gap slot.

    Attributes:
        obj: the aligned element, None for a gap
    """

    obj: Optional[T] = None

    @property
    def is_gap(self) -> bool:
        """Return True if this slot has no element."""
        return self.obj is None


@dataclass(frozen=True)
class AvAlignment(Generic[T]):
    """Result of aligning two sequences.

    Attributes:
        from_slots: slots of the first sequence, gaps where the second one has extra elements
        to_slots: slots of the second sequence, gaps where the first one has extra elements
        score: total alignment score
    """

    from_slots: Tuple[AvAlignmentSlot[T], ...]
    to_slots: Tuple[AvAlignmentSlot[T], ...]
    score: float

    def __post_init__(self):
        assert len(self.from_slots) == len(self.to_slots), "aligned sequences differ in length"
        assert not any(
            slot_a.is_gap and slot_b.is_gap for slot_a, slot_b in zip(self.from_slots, self.to_slots)
        ), "alignment contains a gap on both sides"

    def __len__(self) -> int:
        return len(self.from_slots)


class SequenceAligner:
    """Aligns two sequences using the Needleman-Wunsch algorithm.

    The aligner is generic: elements are only ever passed to the scoring
    function. Elements must not be None since None marks a gap.
    """

    INDEL: float = 0.0

    @classmethod
    def align(
        cls,
        seq_from: Sequence[T],
        seq_to: Sequence[T],
        scoring_fn: Callable[[T, T], float],
        indel: Optional[float] = None,
    ) -> AvAlignment[T]:
        """Align _seq_from_ with _seq_to_.

        Row 0 and column 0 of the scoring matrix are seeded with -i / -j.
        Each inner cell takes the best of a diagonal move (match or
        substitution, scored by _scoring_fn_) and an insertion or deletion
        costing _indel_. Backtracking prefers the diagonal move over a gap in
        _seq_to_ over a gap in _seq_from_, which makes the result
        deterministic.

        Args:
            seq_from: first sequence
            seq_to: second sequence
            scoring_fn: returns the score of aligning two elements
            indel: cost of an insertion or deletion, defaults to INDEL

        Returns:
            AvAlignment: both sequences padded with gaps to equal length, and the score
        """
        indel = cls.INDEL if indel is None else float(indel)
        len_a = len(seq_from)
        len_b = len(seq_to)

        # Every pair is scored once so that backtracking sees the same values.
        scores = np.empty((len_a, len_b), dtype=np.float64)
        for i, obj_a in enumerate(seq_from):
            for j, obj_b in enumerate(seq_to):
                scores[i, j] = scoring_fn(obj_a, obj_b)

        matrix = np.zeros((len_a + 1, len_b + 1), dtype=np.float64)
        matrix[0, :] = -np.arange(len_b + 1, dtype=np.float64)
        matrix[:, 0] = -np.arange(len_a + 1, dtype=np.float64)

        for i in range(1, len_a + 1):
            for j in range(1, len_b + 1):
                match = matrix[i - 1, j - 1] + scores[i - 1, j - 1]
                ins = matrix[i, j - 1] + indel
                dele = matrix[i - 1, j] + indel
                matrix[i, j] = max(match, ins, dele)

        # Backtracking.
        aligned_a = []
        aligned_b = []
        i = len_a
        j = len_b
        while i > 0 or j > 0:
            if i > 0 and j > 0 and matrix[i, j] == matrix[i - 1, j - 1] + scores[i - 1, j - 1]:
                aligned_a.append(AvAlignmentSlot(seq_from[i - 1]))
                aligned_b.append(AvAlignmentSlot(seq_to[j - 1]))
                i -= 1
                j -= 1
            elif i > 0 and (j == 0 or matrix[i, j] == matrix[i - 1, j] + indel):
                aligned_a.append(AvAlignmentSlot(seq_from[i - 1]))
                aligned_b.append(AvAlignmentSlot())
                i -= 1
            else:
                aligned_a.append(AvAlignmentSlot())
                aligned_b.append(AvAlignmentSlot(seq_to[j - 1]))
                j -= 1

        return AvAlignment(tuple(reversed(aligned_a)), tuple(reversed(aligned_b)), float(matrix[len_a, len_b]))
