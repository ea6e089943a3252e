"""Handling Paths for SVG"""

from __future__ import annotations

import re
from typing import ClassVar, List, Tuple

from avmorph.path import AvPath


class AvSvgPath:
    """
    Conversion between SVG path strings and AvPath instances.
    Supported commands (command : number of values : command-character):
        MoveTo:           2: Mm
        LineTo:           2: Ll
        CubicBezier:      6: Cc
        QuadraticBezier:  4: Qq
        ClosePath:        0: Zz
    Uppercase commands use absolute, lowercase relative coordinates.
    """

    # Command letters:
    SVG_CMDS: ClassVar[str] = "MmLlCcQqZz"
    # Definition of a number:
    SVG_ARGS: ClassVar[str] = r"[-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?"
    # Number of values per command
    BATCH_SIZES: ClassVar[dict] = {"M": 2, "L": 2, "Q": 4, "C": 6, "Z": 0}

    @staticmethod
    def from_path_string(path_string: str) -> AvPath:
        """
        Create an AvPath from the given SVG _path_string_.

        Additional coordinate pairs after a MoveTo are implicit LineTo commands.

        Args:
            path_string (str): a SVG path string

        Returns:
            AvPath: the path described by _path_string_

        Raises:
            ValueError: if the string contains unsupported commands or wrong argument counts
        """
        unsupported = re.sub(f"[{AvSvgPath.SVG_CMDS}]|{AvSvgPath.SVG_ARGS}|[\\s,]", "", path_string)
        if unsupported:
            raise ValueError(f"Unsupported content in path string: '{unsupported}'")
        stripped = path_string.strip()
        if stripped and stripped[0] not in AvSvgPath.SVG_CMDS:
            raise ValueError(f"Path string must start with a command, got '{stripped[0]}'")

        commands: List[str] = []
        points: List[Tuple[float, float]] = []
        current = (0.0, 0.0)
        start = (0.0, 0.0)

        for command in re.findall(f"[{AvSvgPath.SVG_CMDS}][^{AvSvgPath.SVG_CMDS}]*", path_string):
            letter = command[0]
            upper = letter.upper()
            relative = letter != upper
            args = [float(arg) for arg in re.findall(AvSvgPath.SVG_ARGS, command[1:])]
            batch_size = AvSvgPath.BATCH_SIZES[upper]

            if batch_size == 0:
                if args:
                    raise ValueError(f"'{letter}' command takes no arguments, got {len(args)}")
                commands.append("Z")
                current = start
                continue
            if not args or len(args) % batch_size:
                raise ValueError(f"'{letter}' command needs a multiple of {batch_size} arguments, got {len(args)}")

            for batch_idx in range(0, len(args), batch_size):
                batch = args[batch_idx : batch_idx + batch_size]
                cmd = upper if not (upper == "M" and batch_idx > 0) else "L"
                origin = current if relative else (0.0, 0.0)
                batch_points = [(origin[0] + batch[i], origin[1] + batch[i + 1]) for i in range(0, len(batch), 2)]
                commands.append(cmd)
                points.extend(batch_points)
                current = batch_points[-1]
                if cmd == "M":
                    start = current

        return AvPath.from_points_and_commands(points, commands)

    @staticmethod
    def to_path_string(path: AvPath) -> str:
        """
        Return the absolute SVG path string of _path_, e.g. "M10 20 L30 40 Z".
        """
        ret_commands = []
        for sub_path in path.sub_paths:
            for cmd in sub_path:
                values = " ".join(f"{coord:g}" for pt in cmd.flat_points() for coord in pt)
                ret_commands.append(f"{cmd.kind}{values}")
        return " ".join(ret_commands)
