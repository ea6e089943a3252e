"""Tests for reconciling two paths for morphing (avmorph.path_morpher)"""

from __future__ import annotations

import logging

import pytest
from numpy.testing import assert_allclose

from avmorph.common import MorphStatus
from avmorph.morph_config import DEFAULT_MORPH_CONFIG, AvMorphConfig
from avmorph.path import AvCommand, AvPath
from avmorph.path_morpher import (
    AvCandidateGenerator,
    AvCommandScorer,
    AvPathMorpher,
    IrreconcilablePathsError,
)
from avmorph.path_support import COMMAND_INFO, PathCommandInfo
from avmorph.svgpath import AvSvgPath

SQUARE = "M 0 0 L 100 0 L 100 100 L 0 100 Z"
TRIANGLE = "M 0 0 L 100 0 L 100 100 Z"
TRIANGLE_ROTATED = "M 100 0 L 100 100 L 0 0 Z"
CURVED = "M 50 0 L 100 100 Q 50 120 0 100 Z"


def parse(path_string: str) -> AvPath:
    """Shortcut for AvSvgPath.from_path_string."""
    return AvSvgPath.from_path_string(path_string)


###############################################################################
# Scoring
###############################################################################


class TestAvCommandScorer:
    """Tests for the command scoring policy."""

    def setup_method(self):
        """Default scorer."""
        self.scorer = AvCommandScorer()

    def test_same_kind_decays_with_distance(self):
        """Test that compatible commands score 1 / distance."""
        assert self.scorer(AvCommand("L", (0.0, 0.0)), AvCommand("L", (3.0, 4.0))) == pytest.approx(0.2)

    def test_close_points_score_one(self):
        """Test that distances below 1 score the maximum."""
        assert self.scorer(AvCommand("L", (0.0, 0.0)), AvCommand("L", (0.5, 0.0))) == 1.0

    def test_convertible_kinds_match(self):
        """Test that convertible kinds are scored like equal kinds."""
        quad = AvCommand("Q", (3.0, 4.0), ((1.0, 1.0),))

        assert self.scorer(AvCommand("L", (0.0, 0.0)), quad) == pytest.approx(0.2)
        assert self.scorer(AvCommand("Z", (0.0, 0.0)), AvCommand("L", (0.0, 0.0))) == 1.0

    def test_incompatible_kinds(self):
        """Test that MoveTo against a drawing command scores the mismatch penalty."""
        assert self.scorer(AvCommand("M", (0.0, 0.0)), AvCommand("L", (0.0, 0.0))) == -1.0

    def test_symmetry(self):
        """Test that score(a, b) == score(b, a)."""
        commands = [
            AvCommand("M", (0.0, 0.0)),
            AvCommand("L", (10.0, 0.0)),
            AvCommand("Q", (5.0, 7.0), ((1.0, 2.0),)),
            AvCommand("C", (-3.0, 2.0), ((0.0, 1.0), (1.0, 0.0))),
            AvCommand("Z", (0.0, 0.0)),
        ]
        for cmd_a in commands:
            for cmd_b in commands:
                assert self.scorer(cmd_a, cmd_b) == self.scorer(cmd_b, cmd_a)

    def test_distance_unit(self):
        """Test that distances are measured in config.distance_unit."""
        scorer = AvCommandScorer(AvMorphConfig(distance_unit=10.0))

        assert scorer(AvCommand("L", (0.0, 0.0)), AvCommand("L", (0.0, 50.0))) == pytest.approx(0.2)

    def test_custom_mismatch(self):
        """Test that the mismatch penalty is configurable."""
        scorer = AvCommandScorer(AvMorphConfig(mismatch=-3.0))

        assert scorer(AvCommand("M", (0.0, 0.0)), AvCommand("C", (0.0, 0.0), ((0.0, 0.0), (0.0, 0.0)))) == -3.0


###############################################################################
# Candidates
###############################################################################


class TestAvCandidateGenerator:
    """Tests for the candidate orderings."""

    def test_closed_sub_path(self):
        """Test that all shifts of the path and of its reversal are generated."""
        path = parse(SQUARE)

        candidates = AvCandidateGenerator.generate(0, path)

        assert len(candidates) == 8
        assert [c.index for c in candidates] == list(range(8))
        assert [c.shift for c in candidates] == [0, 1, 2, 3, 0, 1, 2, 3]
        assert [c.is_reversed for c in candidates] == [False] * 4 + [True] * 4
        assert candidates[0].path == path
        assert candidates[1].path == path.shift_back(0, 1)
        assert candidates[4].path == path.reverse(0)
        assert candidates[7].path == path.reverse(0).shift_back(0, 3)

    def test_open_sub_path(self):
        """Test that open sub-paths are only tried forward and reversed."""
        path = parse("M 0 0 L 10 0 L 20 5")

        candidates = AvCandidateGenerator.generate(0, path)

        assert [(c.shift, c.is_reversed) for c in candidates] == [(0, False), (0, True)]


###############################################################################
# auto_fix
###############################################################################


class TestAutoFix:
    """Tests for AvPathMorpher.auto_fix."""

    def test_extra_line_is_matched_by_gap(self):
        """[M, L, L, Z] against [M, L, Z]: the "to" sub-path gets one new command."""
        from_path = parse(TRIANGLE)
        to_path = parse("M 0 0 L 100 0 Z")

        result = AvPathMorpher.auto_fix(0, from_path, to_path)

        assert result.status is MorphStatus.COMPATIBLE
        assert result.score == 3.0
        assert result.candidate.index == 0
        assert result.from_path == from_path
        assert result.to_path.commands == ["M", "L", "L", "Z"]
        assert [cmd.end for cmd in result.to_path.sub_path(0)] == [(0.0, 0.0), (100.0, 0.0), (50.0, 0.0), (0.0, 0.0)]

    def test_rotated_contour_is_found(self):
        """Two contours differing only in their start point align perfectly after rotation."""
        from_path = parse(TRIANGLE)
        to_path = parse(TRIANGLE_ROTATED)

        result = AvPathMorpher.auto_fix(0, from_path, to_path)
        alignments = AvPathMorpher.align_candidates(0, from_path, to_path)

        assert result.candidate.shift == 2
        assert not result.candidate.is_reversed
        assert result.score == 4.0
        assert result.score > alignments[0][1].score
        assert result.from_path == to_path
        assert result.to_path == to_path

    def test_equal_length_after_fix(self):
        """Test that the reconciled sub-paths have equal command counts and kinds."""
        result = AvPathMorpher.auto_fix(0, parse(SQUARE), parse(CURVED))

        from_sub = result.from_path.sub_path(0)
        to_sub = result.to_path.sub_path(0)
        assert len(from_sub) == len(to_sub) >= 5
        assert from_sub.kinds == to_sub.kinds
        assert result.is_compatible

    def test_reverse_direction_has_equal_lengths(self):
        """Test reconciling the longer path into the shorter one."""
        result = AvPathMorpher.auto_fix(0, parse(CURVED), parse(SQUARE))

        assert len(result.from_path.sub_path(0)) == len(result.to_path.sub_path(0))
        assert result.from_path.sub_path(0).kinds == result.to_path.sub_path(0).kinds

    def test_best_score_among_candidates(self):
        """Test that no candidate aligns better than the chosen one."""
        from_path = parse(SQUARE)
        to_path = parse(CURVED)

        result = AvPathMorpher.auto_fix(0, from_path, to_path)

        for _, alignment in AvPathMorpher.align_candidates(0, from_path, to_path):
            assert result.score >= alignment.score

    def test_ties_resolve_to_first_candidate(self):
        """Test that the first candidate wins if several candidates score the same."""
        from_path = parse(TRIANGLE)
        to_path = parse("M 0 0 L 100 0 Z")

        alignments = AvPathMorpher.align_candidates(0, from_path, to_path)
        best_score = max(alignment.score for _, alignment in alignments)
        first_best = next(candidate for candidate, alignment in alignments if alignment.score == best_score)

        assert AvPathMorpher.select_best(alignments)[0] == first_best

    def test_deterministic(self):
        """Test that the same input always yields the same output."""
        results = [AvPathMorpher.auto_fix(0, parse(SQUARE), parse(CURVED)) for _ in range(3)]

        assert results[0] == results[1] == results[2]

    def test_open_sub_paths(self):
        """Test that an open polyline gets its missing vertex inserted."""
        from_path = parse("M 0 0 L 10 0 L 20 0")
        to_path = parse("M 0 0 L 20 0")

        result = AvPathMorpher.auto_fix(0, from_path, to_path)

        assert result.from_path == from_path
        assert_allclose(result.to_path.points, from_path.points)

    def test_other_sub_paths_untouched(self):
        """Test that only the addressed sub-path is reconciled."""
        from_path = parse(f"{SQUARE} M 200 200 L 210 200 Z")
        to_path = parse(f"{TRIANGLE} M 300 300 L 310 300 L 310 310 Z")

        result = AvPathMorpher.auto_fix(0, from_path, to_path)

        assert result.from_path.sub_path(1) == from_path.sub_path(1)
        assert result.to_path.sub_path(1) == to_path.sub_path(1)
        assert len(result.from_path.sub_path(0)) == len(result.to_path.sub_path(0))

    def test_reconciles_second_sub_path(self):
        """Test reconciling a sub-path other than the first one."""
        from_path = parse(f"{SQUARE} {SQUARE}")
        to_path = parse(f"{SQUARE} {TRIANGLE}")

        result = AvPathMorpher.auto_fix(1, from_path, to_path)

        assert result.sub_idx == 1
        assert len(result.from_path.sub_path(1)) == len(result.to_path.sub_path(1)) == 5

    def test_degenerate_sub_path_rejected(self):
        """Test that a sub-path with a single command is rejected."""
        with pytest.raises(ValueError, match="needs at least 2 commands"):
            AvPathMorpher.auto_fix(0, parse("M 0 0"), parse(TRIANGLE))

    def test_missing_sub_path_rejected(self):
        """Test that a missing sub-path is rejected."""
        with pytest.raises(ValueError, match="sub-path index 1 out of range"):
            AvPathMorpher.auto_fix(1, parse(SQUARE), parse(TRIANGLE))

    def test_result_unpacking_and_dict(self):
        """Test the convenience interface of AvMorphResult."""
        result = AvPathMorpher.auto_fix(0, parse(TRIANGLE), parse(TRIANGLE_ROTATED))

        from_path, to_path = result
        data = result.to_dict()
        assert from_path == result.from_path
        assert to_path == result.to_path
        assert data["status"] == "compatible"
        assert data["mismatches"] == []
        assert data["candidate"] == {"index": 2, "shift": 2, "is_reversed": False}


###############################################################################
# auto_convert
###############################################################################


class TestAutoConvert:
    """Tests for AvPathMorpher.auto_convert."""

    def test_same_kinds_unchanged(self):
        """Test that paths with equal kinds and different end points are returned unchanged."""
        from_path = parse(SQUARE)
        to_path = parse("M 5 5 L 90 0 L 120 100 L 0 80 Z")

        result = AvPathMorpher.auto_convert(0, from_path, to_path)

        assert result.from_path == from_path
        assert result.to_path == to_path
        assert result.is_compatible
        assert result.score is None

    def test_line_converted_to_curve(self):
        """Test that a line is converted into the curve kind of its counterpart."""
        from_path = parse("M 0 0 L 10 0 Q 10 10 0 10 Z")
        to_path = parse("M 0 0 L 10 0 L 0 10 Z")

        result = AvPathMorpher.auto_convert(0, from_path, to_path)

        assert result.from_path == from_path
        assert result.to_path.commands == ["M", "L", "Q", "Z"]
        assert result.to_path.sub_path(0)[2].end == (0.0, 10.0)
        assert_allclose(result.to_path.sub_path(0)[2].controls, [(5.0, 5.0)])

    def test_both_directions(self):
        """Test that "to" is converted first, then "from" toward the converted "to"."""
        from_path = parse("M 0 0 L 10 0 C 10 5 5 10 0 10 Z")
        to_path = parse("M 0 0 Q 5 -5 10 0 L 0 10 L 0 0")

        result = AvPathMorpher.auto_convert(0, from_path, to_path)

        assert result.from_path.commands == ["M", "Q", "C", "L"]
        assert result.to_path.commands == ["M", "Q", "C", "L"]
        assert result.is_compatible

    def test_unequal_lengths_rejected(self):
        """Test that auto_convert needs equal command counts."""
        with pytest.raises(ValueError, match="differs in length"):
            AvPathMorpher.auto_convert(0, parse(SQUARE), parse(TRIANGLE))


class TestIrreconcilable:
    """Tests for kinds that cannot be converted into each other."""

    @pytest.fixture(autouse=True)
    def rigid_close(self, monkeypatch):
        """Make ClosePath non-convertible, so Z and L cannot be reconciled."""
        monkeypatch.setitem(COMMAND_INFO, "Z", PathCommandInfo(0, 1))

    def test_result_reports_mismatches(self, caplog):
        """Test that a residual mismatch is reported in the result and logged."""
        from_path = parse("M 0 0 L 10 0 L 10 10 Z")
        to_path = parse("M 0 0 L 10 0 L 10 10 L 0 0")

        with caplog.at_level(logging.WARNING, logger="avmorph.path_morpher"):
            result = AvPathMorpher.auto_convert(0, from_path, to_path)

        assert result.status is MorphStatus.IRRECONCILABLE
        assert not result.is_compatible
        assert result.mismatches == (3,)
        assert "stays incompatible" in caplog.text

    def test_strict_mode_raises(self):
        """Test that strict mode raises IrreconcilablePathsError."""
        from_path = parse("M 0 0 L 10 0 L 10 10 Z")
        to_path = parse("M 0 0 L 10 0 L 10 10 L 0 0")

        with pytest.raises(IrreconcilablePathsError, match=r"positions \[3\]") as exc_info:
            AvPathMorpher.auto_convert(0, from_path, to_path, AvMorphConfig(strict=True))

        assert exc_info.value.result.mismatches == (3,)


###############################################################################
# AvMorphConfig
###############################################################################


class TestAvMorphConfig:
    """Tests for the reconciliation configuration."""

    def test_defaults(self):
        """Test the default scoring constants."""
        assert DEFAULT_MORPH_CONFIG.match == 1.0
        assert DEFAULT_MORPH_CONFIG.mismatch == -1.0
        assert DEFAULT_MORPH_CONFIG.indel == 0.0
        assert DEFAULT_MORPH_CONFIG.distance_unit == 1.0
        assert not DEFAULT_MORPH_CONFIG.strict

    def test_for_viewport(self):
        """Test that the distance unit follows the viewport diagonal."""
        config = AvMorphConfig.for_viewport(300.0, 400.0, fraction=0.1)

        assert config.distance_unit == pytest.approx(50.0)

    def test_dict_round_trip(self):
        """Test serialization to and from a dictionary."""
        config = AvMorphConfig(mismatch=-2.0, distance_unit=4.0, strict=True)

        assert AvMorphConfig.from_dict(config.to_dict()) == config

    def test_invalid_distance_unit(self):
        """Test that a non-positive distance unit is rejected."""
        with pytest.raises(ValueError, match="distance_unit must be positive"):
            AvMorphConfig(distance_unit=0.0)

    def test_viewport_config_changes_scores(self):
        """Test that auto_fix accepts a viewport based config."""
        config = AvMorphConfig.for_viewport(1000.0, 1000.0)

        result = AvPathMorpher.auto_fix(0, parse(SQUARE), parse(CURVED), config)

        assert len(result.from_path.sub_path(0)) == len(result.to_path.sub_path(0))
