"""Central module containing constants and definitions for path morphing."""

from __future__ import annotations

from enum import Enum
from typing import Literal

###############################################################################
# Types
###############################################################################


AvPathCmds = Literal[  # Type-Definition for SvgPath-Commands used in AvPath
    # MoveTo (2) - start a new subpath and move the current point to (x,y)
    "M",
    # LineTo (2) - draw a straight line from the current point to (x,y)
    "L",
    # Quadratic Bezier To (4) - draw a quadratic Bezier curve with one control point and an endpoint (x,y)
    "Q",
    # Cubic Bezier To (6) - draw a cubic Bezier curve with two control points and an endpoint (x,y)
    "C",
    # ClosePath (0) - close subpath by drawing a line from the current point to start point
    "Z",
]


###############################################################################
# Enums and Consts
###############################################################################


class MorphStatus(Enum):
    """Outcome of a path reconciliation.

    COMPATIBLE: both sub-paths have equal length and equal kinds at every position.
    IRRECONCILABLE: lengths are equal but at least one position keeps two kinds
        where neither command can be converted into the other.
    """

    COMPATIBLE = "compatible"
    IRRECONCILABLE = "irreconcilable"
