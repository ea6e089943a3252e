"""Configuration of the path reconciliation."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class AvMorphConfig:
    """Scoring constants and policies used when reconciling two paths.

    Attributes:
        match: lower bound of the distance divisor, i.e. the best score of a compatible pair is 1 / match
        mismatch: score of two commands whose kinds cannot be converted into each other
        indel: cost of inserting a gap into one of the aligned sequences
        distance_unit: end point distances are divided by this value before scoring
        strict: if True, raise IrreconcilablePathsError instead of returning an irreconcilable result
    """

    match: float = 1.0
    mismatch: float = -1.0
    indel: float = 0.0
    distance_unit: float = 1.0
    strict: bool = False

    def __post_init__(self):
        if self.match <= 0:
            raise ValueError(f"match must be positive, got {self.match}")
        if self.distance_unit <= 0:
            raise ValueError(f"distance_unit must be positive, got {self.distance_unit}")

    @classmethod
    def for_viewport(cls, width: float, height: float, fraction: float = 0.01, **kwargs) -> AvMorphConfig:
        """Create a config whose distance unit is _fraction_ of the viewport diagonal.

        This makes scores comparable between shapes drawn on differently sized canvases.
        """
        return cls(distance_unit=math.hypot(width, height) * fraction, **kwargs)

    def to_dict(self) -> dict:
        """Convert config to a dictionary for serialization."""
        return {
            "match": self.match,
            "mismatch": self.mismatch,
            "indel": self.indel,
            "distance_unit": self.distance_unit,
            "strict": self.strict,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AvMorphConfig:
        """Create AvMorphConfig from a dictionary."""
        return cls(
            match=data.get("match", 1.0),
            mismatch=data.get("mismatch", -1.0),
            indel=data.get("indel", 0.0),
            distance_unit=data.get("distance_unit", 1.0),
            strict=data.get("strict", False),
        )


DEFAULT_MORPH_CONFIG = AvMorphConfig()
