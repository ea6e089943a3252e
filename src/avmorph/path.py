"""Immutable SVG path model used for reconciling and morphing outlines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avmorph.bezier import BezierCurve
from avmorph.common import AvPathCmds
from avmorph.geom import GeomMath
from avmorph.path_support import PathCommandProcessor, PathSplitter, PathValidator

Point = Tuple[float, float]
PointLike = Union[Sequence[float], NDArray[np.float64]]


def _to_point(point: PointLike) -> Point:
    """Normalize a point-like object into a tuple of two python floats."""
    if len(point) != 2:
        raise ValueError(f"points must have 2 coordinates, got {len(point)}")
    return (float(point[0]), float(point[1]))


###############################################################################
# AvCommand
###############################################################################


@dataclass(frozen=True)
class AvCommand:
    """A single drawing command of a sub-path.

    The start point of a command is the end point of its predecessor, hence
    only the control points and the end point are stored. A "Z" command ends
    at the MoveTo point of its sub-path.

    Attributes:
        kind: the SVG command character ("M", "L", "Q", "C" or "Z")
        end: end point of the command
        controls: control points (1 for "Q", 2 for "C", none otherwise)
    """

    kind: AvPathCmds
    end: Point
    controls: Tuple[Point, ...] = ()

    def __post_init__(self):
        info = PathCommandProcessor.get_info(self.kind)
        controls = tuple(_to_point(pt) for pt in self.controls)
        expected = max(info.consumes_points - 1, 0)
        if len(controls) != expected:
            raise ValueError(f"'{self.kind}' command needs {expected} control points, got {len(controls)}")
        object.__setattr__(self, "end", _to_point(self.end))
        object.__setattr__(self, "controls", controls)

    def can_convert_to(self, kind: str) -> bool:
        """Return True if this command can be redrawn as _kind_ without changing its geometry."""
        return PathCommandProcessor.can_convert(self.kind, kind)

    def flat_points(self) -> List[Point]:
        """Points of this command in SVG order (controls first, then end; none for "Z")."""
        if self.kind == "Z":
            return []
        return [*self.controls, self.end]

    def to_dict(self) -> dict:
        """Convert the command to a dictionary."""
        return {"kind": self.kind, "end": list(self.end), "controls": [list(pt) for pt in self.controls]}

    @classmethod
    def from_dict(cls, data: dict) -> AvCommand:
        """Create an AvCommand from a dictionary."""
        return cls(data["kind"], tuple(data["end"]), tuple(tuple(pt) for pt in data.get("controls", [])))


###############################################################################
# AvSubPath
###############################################################################


@dataclass(frozen=True)
class AvSubPath:
    """One contiguous contour: a MoveTo followed by drawing commands.

    A sub-path starts with exactly one "M". A "Z" may only appear as the last
    command. All operations return new instances.
    """

    commands: Tuple[AvCommand, ...]

    def __post_init__(self):
        commands = tuple(self.commands)
        object.__setattr__(self, "commands", commands)
        if not commands:
            raise ValueError("A sub-path needs at least a 'M' command")
        if commands[0].kind != "M":
            raise ValueError(f"A sub-path must start with 'M' command (starts with '{commands[0].kind}')")
        for idx, cmd in enumerate(commands[1:], start=1):
            if cmd.kind == "M":
                raise ValueError(f"'M' is only allowed at the start of a sub-path (found at position {idx})")
            if cmd.kind == "Z":
                if idx < len(commands) - 1:
                    raise ValueError(f"'Z' must terminate a sub-path (found 'Z' at position {idx})")
                if cmd.end != commands[0].end:
                    raise ValueError(f"'Z' must end at the sub-path start {commands[0].end}, got {cmd.end}")

    def __len__(self) -> int:
        return len(self.commands)

    def __getitem__(self, idx: int) -> AvCommand:
        return self.commands[idx]

    def __iter__(self):
        return iter(self.commands)

    @property
    def kinds(self) -> List[AvPathCmds]:
        """The command characters of this sub-path."""
        return [cmd.kind for cmd in self.commands]

    @property
    def start_point(self) -> Point:
        """The MoveTo point of this sub-path."""
        return self.commands[0].end

    @property
    def has_close_command(self) -> bool:
        """Return True if this sub-path ends with "Z"."""
        return self.commands[-1].kind == "Z"

    @property
    def is_closed(self) -> bool:
        """Return True if this sub-path ends where it started (with or without "Z")."""
        return len(self.commands) > 1 and (self.has_close_command or self.commands[-1].end == self.start_point)

    def segment_points(self, cmd_idx: int) -> NDArray[np.float64]:
        """Return the full control polygon (start, controls, end) of a drawing command."""
        self._check_drawing_index(cmd_idx)
        cmd = self.commands[cmd_idx]
        start = self.commands[cmd_idx - 1].end
        return np.array([start, *cmd.controls, cmd.end], dtype=np.float64)

    def _check_drawing_index(self, cmd_idx: int) -> None:
        if not 1 <= cmd_idx < len(self.commands):
            raise ValueError(f"command index {cmd_idx} does not address a drawing command (1..{len(self.commands) - 1})")

    def _segments(self) -> List[Tuple[AvPathCmds, Tuple[Point, ...]]]:
        """Return the drawing commands as (kind, (start, *controls, end)) tuples."""
        segments = []
        prev = self.start_point
        for cmd in self.commands[1:]:
            segments.append((cmd.kind, (prev, *cmd.controls, cmd.end)))
            prev = cmd.end
        return segments

    @classmethod
    def _from_segments(
        cls, start: Point, segments: Sequence[Tuple[AvPathCmds, Tuple[Point, ...]]], close: bool
    ) -> AvSubPath:
        """Build a sub-path from segments, placing "Z" only on a final straight segment."""
        commands = [AvCommand("M", start)]
        last_idx = len(segments) - 1
        for idx, (kind, pts) in enumerate(segments):
            if kind == "Z":
                kind = "L"
            if close and idx == last_idx and kind == "L" and pts[-1] == start:
                kind = "Z"
            commands.append(AvCommand(kind, pts[-1], pts[1:-1]))
        return cls(tuple(commands))

    def reverse(self) -> AvSubPath:
        """Return this sub-path drawn in the opposite direction.

        Closed sub-paths keep their start point, open ones start at their
        former last point. Curve control points are reordered so that the
        geometry is unchanged.
        """
        segments = self._segments()
        if not segments:
            return self
        reversed_segments = [(kind, tuple(reversed(pts))) for kind, pts in reversed(segments)]
        start = self.start_point if self.is_closed else segments[-1][1][-1]
        return self._from_segments(start, reversed_segments, self.has_close_command)

    def shift_back(self, offset: int) -> AvSubPath:
        """Return this closed sub-path starting _offset_ segments earlier.

        Args:
            offset: number of segments to rotate, taken modulo the segment count

        Raises:
            ValueError: if the sub-path is open and the effective offset is not 0
        """
        segments = self._segments()
        if not segments:
            return self
        offset %= len(segments)
        if offset == 0:
            return self
        if not self.is_closed:
            raise ValueError("Only closed sub-paths can be shifted")
        rotated = segments[-offset:] + segments[:-offset]
        return self._from_segments(rotated[0][1][0], rotated, self.has_close_command)

    def split(self, cmd_idx: int, ts: Sequence[float]) -> AvSubPath:
        """Split command _cmd_idx_ at the parameters _ts_ of its segment.

        The command is replaced by len(ts) + 1 commands of the same kind which
        together draw the original segment. A split "Z" yields "L" commands
        followed by the closing "Z".
        """
        self._check_drawing_index(cmd_idx)
        ts = [float(t) for t in ts]
        if not ts:
            return self
        cmd = self.commands[cmd_idx]
        pieces = BezierCurve.split_at_params(self.segment_points(cmd_idx), ts)
        piece_kind = "L" if cmd.kind == "Z" else cmd.kind
        new_commands = [AvCommand(piece_kind, tuple(piece[-1]), tuple(map(tuple, piece[1:-1]))) for piece in pieces[:-1]]
        new_commands.append(AvCommand(cmd.kind, cmd.end, tuple(map(tuple, pieces[-1][1:-1]))))
        return AvSubPath(self.commands[:cmd_idx] + tuple(new_commands) + self.commands[cmd_idx + 1 :])

    def convert(self, cmd_idx: int, kind: AvPathCmds) -> AvSubPath:
        """Return a sub-path with command _cmd_idx_ redrawn as _kind_ (same geometry, same end point)."""
        self._check_drawing_index(cmd_idx)
        cmd = self.commands[cmd_idx]
        if not cmd.can_convert_to(kind):
            raise ValueError(f"'{cmd.kind}' command at position {cmd_idx} cannot be converted to '{kind}'")
        target_degree = PathCommandProcessor.get_degree(kind)
        elevated = BezierCurve.elevate_degree(self.segment_points(cmd_idx), target_degree)
        converted = AvCommand(kind, cmd.end, tuple(map(tuple, elevated[1:-1])))
        return AvSubPath(self.commands[:cmd_idx] + (converted,) + self.commands[cmd_idx + 1 :])

    def interpolate(self, other: AvSubPath, fraction: float) -> AvSubPath:
        """Return the sub-path lying _fraction_ of the way from this sub-path to _other_."""
        if self.kinds != other.kinds:
            raise ValueError(f"Sub-paths are not compatible for interpolation: {self.kinds} vs {other.kinds}")
        commands = []
        for cmd_a, cmd_b in zip(self.commands, other.commands):
            controls = tuple(GeomMath.lerp_point(pa, pb, fraction) for pa, pb in zip(cmd_a.controls, cmd_b.controls))
            commands.append(AvCommand(cmd_a.kind, GeomMath.lerp_point(cmd_a.end, cmd_b.end, fraction), controls))
        return AvSubPath(tuple(commands))


###############################################################################
# AvSplitOp
###############################################################################


@dataclass(frozen=True)
class AvSplitOp:
    """Split request for AvPath.split_batch.

    Attributes:
        sub_idx: index of the sub-path
        cmd_idx: index of the command to split; new commands are inserted before it
        ts: strictly increasing split parameters within (0, 1)
    """

    sub_idx: int
    cmd_idx: int
    ts: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "ts", tuple(float(t) for t in self.ts))


###############################################################################
# AvPath
###############################################################################


@dataclass(frozen=True)
class AvPath:
    """SVG path represented by its sub-paths.

    A path contains 0..n sub-paths. Instances are immutable values: reverse,
    shift_back, split, split_batch and convert return new paths and two paths
    are equal if their commands are equal.
    """

    sub_paths: Tuple[AvSubPath, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "sub_paths", tuple(self.sub_paths))

    def __len__(self) -> int:
        return len(self.sub_paths)

    def sub_path(self, sub_idx: int) -> AvSubPath:
        """Return the sub-path with index _sub_idx_."""
        if not 0 <= sub_idx < len(self.sub_paths):
            raise ValueError(f"sub-path index {sub_idx} out of range (path has {len(self.sub_paths)} sub-paths)")
        return self.sub_paths[sub_idx]

    def _with_sub_path(self, sub_idx: int, sub_path: AvSubPath) -> AvPath:
        sub_paths = list(self.sub_paths)
        sub_paths[sub_idx] = sub_path
        return AvPath(tuple(sub_paths))

    @property
    def commands(self) -> List[AvPathCmds]:
        """The commands of this path as a flat list of SVG path commands."""
        return [kind for sub_path in self.sub_paths for kind in sub_path.kinds]

    @property
    def points(self) -> NDArray[np.float64]:
        """
        The points of this path as a read-only numpy array of shape (n_points, 2).
        """
        flat = [pt for sub_path in self.sub_paths for cmd in sub_path for pt in cmd.flat_points()]
        arr = np.array(flat, dtype=np.float64) if flat else np.empty((0, 2), dtype=np.float64)
        arr.flags.writeable = False
        return arr

    @classmethod
    def from_points_and_commands(
        cls,
        points: Optional[Union[Sequence[Tuple[float, float]], NDArray[np.float64]]],
        commands: Optional[Sequence[AvPathCmds]],
    ) -> AvPath:
        """Create an AvPath from flat SVG points and commands.

        Args:
            points: a sequence of (x, y); "M" and "L" consume 1 point,
                "Q" 2, "C" 3 and "Z" none.
            commands: List of drawing commands corresponding to the points.
        """
        arr = np.empty((0, 2), dtype=np.float64) if points is None else np.asarray(points, dtype=np.float64)
        if arr.size == 0:
            arr = arr.reshape((0, 2))
        commands_list = [] if commands is None else list(commands)
        PathValidator.validate(commands_list, arr)

        sub_paths = []
        point_idx = 0
        for seg_cmds, _ in PathSplitter.split_commands_into_segments(commands_list):
            sub_commands = []
            for cmd in seg_cmds:
                consumed = PathCommandProcessor.get_point_consumption(cmd)
                if cmd == "Z":
                    sub_commands.append(AvCommand("Z", sub_commands[0].end))
                    continue
                cmd_points = arr[point_idx : point_idx + consumed]
                sub_commands.append(AvCommand(cmd, tuple(cmd_points[-1]), tuple(map(tuple, cmd_points[:-1]))))
                point_idx += consumed
            sub_paths.append(AvSubPath(tuple(sub_commands)))
        return cls(tuple(sub_paths))

    def reverse(self, sub_idx: int) -> AvPath:
        """Return a new AvPath with sub-path _sub_idx_ drawn in reverse direction."""
        return self._with_sub_path(sub_idx, self.sub_path(sub_idx).reverse())

    def shift_back(self, sub_idx: int, offset: int) -> AvPath:
        """Return a new AvPath whose closed sub-path _sub_idx_ starts _offset_ segments earlier."""
        return self._with_sub_path(sub_idx, self.sub_path(sub_idx).shift_back(offset))

    def split(self, sub_idx: int, cmd_idx: int, ts: Sequence[float]) -> AvPath:
        """Return a new AvPath with one command split at the parameters _ts_."""
        return self.split_batch([AvSplitOp(sub_idx, cmd_idx, tuple(ts))])

    def split_batch(self, ops: Sequence[AvSplitOp]) -> AvPath:
        """Apply several splits at once.

        For every sub-path the operations are applied from the highest command
        index to the lowest, so every op addresses the commands of the
        original path. Operations on the same command are applied in the given
        order, each one splitting the command currently at that index.
        """
        result = self
        by_sub_path: Dict[int, List[AvSplitOp]] = {}
        for op in ops:
            self.sub_path(op.sub_idx)
            by_sub_path.setdefault(op.sub_idx, []).append(op)
        for sub_idx, sub_ops in by_sub_path.items():
            sub_path = result.sub_path(sub_idx)
            for op in sorted(sub_ops, key=lambda op: op.cmd_idx, reverse=True):
                sub_path = sub_path.split(op.cmd_idx, op.ts)
            result = result._with_sub_path(sub_idx, sub_path)
        return result

    def convert(self, sub_idx: int, cmd_idx: int, kind: AvPathCmds) -> AvPath:
        """Return a new AvPath with command (_sub_idx_, _cmd_idx_) redrawn as _kind_."""
        return self._with_sub_path(sub_idx, self.sub_path(sub_idx).convert(cmd_idx, kind))

    def interpolate(self, other: AvPath, fraction: float) -> AvPath:
        """Return the path lying _fraction_ of the way from this path to _other_.

        Both paths must be morph-compatible: same number of sub-paths and, per
        sub-path, the same command kinds.
        """
        if len(self.sub_paths) != len(other.sub_paths):
            raise ValueError(
                f"Paths are not compatible for interpolation: {len(self.sub_paths)} vs {len(other.sub_paths)} sub-paths"
            )
        return AvPath(tuple(a.interpolate(b, fraction) for a, b in zip(self.sub_paths, other.sub_paths)))

    @classmethod
    def from_dict(cls, data: dict) -> AvPath:
        """Create an AvPath instance from a dictionary."""
        return cls.from_points_and_commands(data.get("points") or None, data.get("commands", []))

    def to_dict(self) -> dict:
        """Convert the AvPath instance to a dictionary."""
        return {
            "points": self.points.tolist(),
            "commands": self.commands,
        }
