"""Handling geometries"""

from __future__ import annotations

import math
from typing import Sequence, Tuple, Union

Number = Union[int, float]


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def distance(point_a: Sequence[Number], point_b: Sequence[Number]) -> float:
        """
        Return the euclidean distance between two 2D points.

        Args:
            point_a (Tuple/List[float]): 2D point - (x, y)
            point_b (Tuple/List[float]): 2D point - (x, y)

        Returns:
            float: the distance between _point_a_ and _point_b_
        """
        return math.hypot(float(point_b[0]) - float(point_a[0]), float(point_b[1]) - float(point_a[1]))

    @staticmethod
    def clamp(value: Number, lower: Number, upper: Number) -> Number:
        """
        Clamp _value_ into the closed interval [lower, upper].

        If _lower_ is greater than _upper_ the lower bound wins,
        i.e. the result is never smaller than _lower_.
        """
        return max(lower, min(value, upper))

    @staticmethod
    def lerp_point(point_a: Sequence[Number], point_b: Sequence[Number], fraction: float) -> Tuple[float, float]:
        """
        Linear interpolation between two 2D points.

        Args:
            point_a (Tuple/List[float]): start point, returned for _fraction_ == 0
            point_b (Tuple/List[float]): end point, returned for _fraction_ == 1
            fraction (float): interpolation parameter

        Returns:
            Tuple[float, float]: the interpolated point
        """
        x_new = float(point_a[0]) + (float(point_b[0]) - float(point_a[0])) * fraction
        y_new = float(point_a[1]) + (float(point_b[1]) - float(point_a[1])) * fraction
        return (x_new, y_new)
