"""Reconciling two paths so that one can be morphed into the other.

Two sub-paths can be interpolated only if they consist of the same number of
commands with matching kinds. AvPathMorpher gets there in three steps:

1. Candidate orderings of the "from" sub-path (all rotations, forward and
   reversed) are aligned with the "to" sub-path using Needleman-Wunsch and a
   score that rewards convertible commands with nearby end points.
2. The gaps of the best alignment are filled by splitting commands of the
   respective path, so both sub-paths end up with the same length.
3. Commands whose kinds differ are converted where possible
   (e.g. a line becomes a cubic curve).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from avmorph.alignment import AvAlignment, SequenceAligner
from avmorph.common import MorphStatus
from avmorph.geom import GeomMath
from avmorph.morph_config import DEFAULT_MORPH_CONFIG, AvMorphConfig
from avmorph.path import AvCommand, AvPath
from avmorph.path_gaps import AvGapResolver

logger = logging.getLogger(__name__)


###############################################################################
# Results and errors
###############################################################################


@dataclass(frozen=True)
class AvMorphCandidate:
    """A re-ordering of the "from" path tried during alignment.

    Attributes:
        index: position in generation order, used to break score ties
        path: the re-ordered path
        shift: offset passed to shift_back
        is_reversed: the sub-path was reversed before shifting
    """

    index: int
    path: AvPath
    shift: int
    is_reversed: bool


@dataclass(frozen=True)
class AvMorphResult:
    """Outcome of AvPathMorpher.auto_fix / auto_convert.

    Attributes:
        from_path: reconciled "from" path
        to_path: reconciled "to" path
        sub_idx: index of the reconciled sub-path
        status: COMPATIBLE or IRRECONCILABLE
        mismatches: command indices whose kinds still differ
        score: score of the winning alignment (None without alignment)
        candidate: the winning candidate (None without alignment)
    """

    from_path: AvPath
    to_path: AvPath
    sub_idx: int
    status: MorphStatus
    mismatches: Tuple[int, ...] = ()
    score: Optional[float] = None
    candidate: Optional[AvMorphCandidate] = None

    @property
    def is_compatible(self) -> bool:
        """Return True if the two sub-paths can be interpolated."""
        return self.status is MorphStatus.COMPATIBLE

    def __iter__(self):
        return iter((self.from_path, self.to_path))

    def to_dict(self) -> dict:
        """Convert the result to a dictionary."""
        return {
            "from": self.from_path.to_dict(),
            "to": self.to_path.to_dict(),
            "sub_idx": self.sub_idx,
            "status": self.status.value,
            "mismatches": list(self.mismatches),
            "score": self.score,
            "candidate": (
                None
                if self.candidate is None
                else {
                    "index": self.candidate.index,
                    "shift": self.candidate.shift,
                    "is_reversed": self.candidate.is_reversed,
                }
            ),
        }


class IrreconcilablePathsError(ValueError):
    """Raised in strict mode if commands remain that cannot be converted into each other."""

    def __init__(self, result: AvMorphResult):
        super().__init__(
            f"Sub-path {result.sub_idx} has incompatible command kinds at positions {list(result.mismatches)}"
        )
        self.result = result


###############################################################################
# AvCommandScorer
###############################################################################


class AvCommandScorer:
    """Scores how well two commands correspond to each other.

    Convertible commands are considered matches; the farther apart their end
    points are, the lower the score. Commands that cannot be converted into
    each other score config.mismatch.
    """

    def __init__(self, config: Optional[AvMorphConfig] = None):
        self.config = config or DEFAULT_MORPH_CONFIG

    def __call__(self, cmd_a: AvCommand, cmd_b: AvCommand) -> float:
        if cmd_a.kind != cmd_b.kind and not cmd_a.can_convert_to(cmd_b.kind) and not cmd_b.can_convert_to(cmd_a.kind):
            return self.config.mismatch
        distance = GeomMath.distance(cmd_a.end, cmd_b.end) / self.config.distance_unit
        return 1.0 / max(self.config.match, distance)


###############################################################################
# AvCandidateGenerator
###############################################################################


class AvCandidateGenerator:
    """Creates the re-orderings of a sub-path tried during alignment."""

    @staticmethod
    def generate(sub_idx: int, path: AvPath) -> List[AvMorphCandidate]:
        """Return all shifted versions of _path_ and of its reversal.

        For a sub-path of n commands the shifts 0 .. n-2 are generated, forward
        ones first. Open sub-paths cannot be rotated, so only the unshifted
        forward and reversed versions are returned for them.
        """
        candidates: List[AvMorphCandidate] = []
        for is_reversed, base in ((False, path), (True, path.reverse(sub_idx))):
            sub_path = base.sub_path(sub_idx)
            num_shifts = len(sub_path) - 1 if sub_path.is_closed else 1
            for shift in range(num_shifts):
                candidates.append(AvMorphCandidate(len(candidates), base.shift_back(sub_idx, shift), shift, is_reversed))
        return candidates


###############################################################################
# AvPathMorpher
###############################################################################


class AvPathMorpher:
    """Makes two paths compatible for morphing."""

    MIN_COMMANDS: int = 2

    @classmethod
    def align_candidates(
        cls, sub_idx: int, from_path: AvPath, to_path: AvPath, config: Optional[AvMorphConfig] = None
    ) -> List[Tuple[AvMorphCandidate, AvAlignment[AvCommand]]]:
        """Align every candidate ordering of _from_path_ with _to_path_, in generation order."""
        config = config or DEFAULT_MORPH_CONFIG
        scorer = AvCommandScorer(config)
        to_cmds = to_path.sub_path(sub_idx).commands
        return [
            (
                candidate,
                SequenceAligner.align(candidate.path.sub_path(sub_idx).commands, to_cmds, scorer, config.indel),
            )
            for candidate in AvCandidateGenerator.generate(sub_idx, from_path)
        ]

    @staticmethod
    def select_best(
        alignments: List[Tuple[AvMorphCandidate, AvAlignment[AvCommand]]],
    ) -> Tuple[AvMorphCandidate, AvAlignment[AvCommand]]:
        """Return the entry with the highest score; the first one wins ties."""
        best = alignments[0]
        for entry in alignments[1:]:
            if entry[1].score > best[1].score:
                best = entry
        return best

    @classmethod
    def auto_fix(
        cls, sub_idx: int, from_path: AvPath, to_path: AvPath, config: Optional[AvMorphConfig] = None
    ) -> AvMorphResult:
        """Make sub-path _sub_idx_ of two arbitrary paths compatible.

        The best alignment among all candidate orderings of _from_path_ is
        computed, its gaps are filled by subdividing commands of the
        respective path, and finally the command kinds are converted.

        Args:
            sub_idx: index of the sub-path to reconcile in both paths
            from_path: source path, may be re-ordered
            to_path: target path
            config: scoring constants and policies, defaults to DEFAULT_MORPH_CONFIG

        Returns:
            AvMorphResult: both paths with equal command counts in sub-path _sub_idx_

        Raises:
            ValueError: if a sub-path does not exist or has fewer than MIN_COMMANDS commands
            IrreconcilablePathsError: in strict mode, if incompatible kinds remain
        """
        config = config or DEFAULT_MORPH_CONFIG
        for name, path in (("from", from_path), ("to", to_path)):
            num_commands = len(path.sub_path(sub_idx))
            if num_commands < cls.MIN_COMMANDS:
                raise ValueError(
                    f"Sub-path {sub_idx} of the {name} path needs at least {cls.MIN_COMMANDS} commands, "
                    f"got {num_commands}"
                )

        alignments = cls.align_candidates(sub_idx, from_path, to_path, config)
        candidate, alignment = cls.select_best(alignments)
        logger.debug(
            "Selected candidate %d of %d (shift=%d, reversed=%s, score=%.6g)",
            candidate.index,
            len(alignments),
            candidate.shift,
            candidate.is_reversed,
            alignment.score,
        )

        from_result = AvGapResolver.fill_gaps(candidate.path, sub_idx, alignment.from_slots)
        to_result = AvGapResolver.fill_gaps(to_path, sub_idx, alignment.to_slots)
        assert len(from_result.sub_path(sub_idx)) == len(to_result.sub_path(sub_idx)), "gap filling left unequal lengths"

        result = cls._convert(sub_idx, from_result, to_result)
        result = AvMorphResult(
            result.from_path, result.to_path, sub_idx, result.status, result.mismatches, alignment.score, candidate
        )
        return cls._finish(result, config)

    @classmethod
    def auto_convert(
        cls, sub_idx: int, from_path: AvPath, to_path: AvPath, config: Optional[AvMorphConfig] = None
    ) -> AvMorphResult:
        """Make two sub-paths with an equal number of commands compatible by converting pairs.

        First every "to" command that can be converted to the kind of its
        "from" counterpart is converted, then every "from" command toward the
        (possibly converted) "to" kind. Pairs that are equal already or where
        neither side can be converted stay unchanged.

        Raises:
            ValueError: if the sub-paths differ in length
            IrreconcilablePathsError: in strict mode, if incompatible kinds remain
        """
        config = config or DEFAULT_MORPH_CONFIG
        len_from = len(from_path.sub_path(sub_idx))
        len_to = len(to_path.sub_path(sub_idx))
        if len_from != len_to:
            raise ValueError(f"Sub-path {sub_idx} differs in length ({len_from} vs {len_to} commands)")
        return cls._finish(cls._convert(sub_idx, from_path, to_path), config)

    @staticmethod
    def _convert_toward(sub_idx: int, path: AvPath, reference: AvPath) -> AvPath:
        ref_cmds = reference.sub_path(sub_idx).commands
        for cmd_idx, (cmd, ref_cmd) in enumerate(zip(path.sub_path(sub_idx).commands, ref_cmds)):
            if cmd.kind == ref_cmd.kind or not cmd.can_convert_to(ref_cmd.kind):
                continue
            logger.debug("Converting command %d of sub-path %d from '%s' to '%s'", cmd_idx, sub_idx, cmd.kind, ref_cmd.kind)
            path = path.convert(sub_idx, cmd_idx, ref_cmd.kind)
        return path

    @classmethod
    def _convert(cls, sub_idx: int, from_path: AvPath, to_path: AvPath) -> AvMorphResult:
        to_final = cls._convert_toward(sub_idx, to_path, from_path)
        from_final = cls._convert_toward(sub_idx, from_path, to_final)
        mismatches = tuple(
            cmd_idx
            for cmd_idx, (cmd_a, cmd_b) in enumerate(zip(from_final.sub_path(sub_idx), to_final.sub_path(sub_idx)))
            if cmd_a.kind != cmd_b.kind
        )
        status = MorphStatus.IRRECONCILABLE if mismatches else MorphStatus.COMPATIBLE
        return AvMorphResult(from_final, to_final, sub_idx, status, mismatches)

    @staticmethod
    def _finish(result: AvMorphResult, config: AvMorphConfig) -> AvMorphResult:
        if result.is_compatible:
            return result
        logger.warning(
            "Sub-path %d stays incompatible at positions %s", result.sub_idx, list(result.mismatches)
        )
        if config.strict:
            raise IrreconcilablePathsError(result)
        return result
