"""Supporting utilities for AvPath.

This module contains command metadata, validation helpers, and utility
functions that are used by the core path implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

import numpy as np
from numpy.typing import NDArray

from avmorph.common import AvPathCmds

###############################################################################
# PathCommandInfo
###############################################################################


@dataclass(frozen=True)
class PathCommandInfo:
    """Metadata for SVG path commands.

    Attributes:
        consumes_points: Number of points this command consumes
        degree: Bezier degree of the drawn segment (0 for MoveTo)
        converts_to: Kinds this command can be reinterpreted as without changing its geometry
    """

    consumes_points: int
    degree: int
    converts_to: FrozenSet[str] = frozenset()


# Command registry with metadata
COMMAND_INFO = {
    "M": PathCommandInfo(1, 0),  # MoveTo - not drawing
    "L": PathCommandInfo(1, 1, frozenset("QC")),  # LineTo
    "Q": PathCommandInfo(2, 2, frozenset("C")),  # Quadratic
    "C": PathCommandInfo(3, 3),  # Cubic
    "Z": PathCommandInfo(0, 1, frozenset("LQC")),  # ClosePath - no points
}


###############################################################################
# PathCommandProcessor
###############################################################################


class PathCommandProcessor:
    """Handles command/point processing operations."""

    @staticmethod
    def get_info(cmd: str) -> PathCommandInfo:
        """Return the metadata of a command, raising ValueError for unknown commands."""
        try:
            return COMMAND_INFO[cmd]
        except KeyError:
            raise ValueError(f"Unknown command '{cmd}'") from None

    @staticmethod
    def get_point_consumption(cmd: str) -> int:
        """Return number of points consumed by command."""
        return PathCommandProcessor.get_info(cmd).consumes_points

    @staticmethod
    def get_degree(cmd: str) -> int:
        """Return the Bezier degree of the segment drawn by command."""
        return PathCommandProcessor.get_info(cmd).degree

    @staticmethod
    def can_convert(cmd: str, target: str) -> bool:
        """Return True if a _cmd_ segment can be losslessly redrawn as a _target_ segment."""
        return target in PathCommandProcessor.get_info(cmd).converts_to

    @staticmethod
    def validate_command_sequence(commands: List[AvPathCmds], points: NDArray) -> None:
        """Validate that commands match available points."""
        point_idx = 0
        for cmd in commands:
            consumed = PathCommandProcessor.get_point_consumption(cmd)
            if point_idx + consumed > len(points):
                raise ValueError(f"Not enough points for {cmd} command at index {point_idx}")
            point_idx += consumed
        if point_idx != len(points):
            raise ValueError(f"Number of points ({len(points)}) does not match commands (requires {point_idx} points)")


###############################################################################
# PathValidator
###############################################################################


class PathValidator:
    """Validates the structure of flat command lists."""

    @staticmethod
    def validate(commands: List[AvPathCmds], points: NDArray[np.float64]) -> None:
        """Validate a flat command list and its points.

        Args:
            commands: List of path commands.
            points: Array of path points of shape (n_points, 2).

        Raises:
            ValueError: If the path structure is invalid.
        """
        if not commands:
            if points.shape[0] != 0:
                raise ValueError("Empty command list must have zero points")
            return

        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {points.shape}")

        PathCommandProcessor.validate_command_sequence(commands, points)

        idx = 0
        for seg_idx, (seg_cmds, _) in enumerate(PathSplitter.split_commands_into_segments(commands)):
            if seg_cmds[0] != "M":
                raise ValueError(f"Each segment must start with 'M' command (segment {seg_idx} starts with '{seg_cmds[0]}')")
            for cmd_idx, cmd in enumerate(seg_cmds):
                if cmd == "Z" and cmd_idx < len(seg_cmds) - 1:
                    raise ValueError(
                        f"'Z' must terminate a segment "
                        f"(found 'Z' at position {idx + cmd_idx} followed by '{seg_cmds[cmd_idx + 1]}')"
                    )
            idx += len(seg_cmds)


###############################################################################
# PathSplitter
###############################################################################


class PathSplitter:
    """Utility class for splitting flat command lists into sub-paths."""

    @staticmethod
    def split_commands_into_segments(commands: List[AvPathCmds]) -> List[Tuple[List[AvPathCmds], int]]:
        """Split commands into segments, returning list of (commands, point_count) tuples."""
        if not commands:
            return []

        segments: List[Tuple[List[AvPathCmds], int]] = []
        current_cmds: List[AvPathCmds] = []
        current_point_count = 0

        for cmd in commands:
            consumed = PathCommandProcessor.get_point_consumption(cmd)
            if cmd == "M" and current_cmds:
                segments.append((current_cmds, current_point_count))
                current_cmds = []
                current_point_count = 0
            current_cmds.append(cmd)
            current_point_count += consumed

        if current_cmds:
            segments.append((current_cmds, current_point_count))

        return segments
