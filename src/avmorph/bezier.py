"""Bezier curve handling utilities for subdividing and converting path segments."""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

ControlPoints = Union[Sequence[Tuple[float, float]], NDArray[np.float64]]


class BezierCurve:
    """Class to handle linear, quadratic and cubic Bezier curve operations.

    A curve is given by its control points including both end points,
    i.e. 2 points for a line, 3 for a quadratic and 4 for a cubic curve.
    """

    @staticmethod
    def _as_array(points: ControlPoints) -> NDArray[np.float64]:
        arr = np.asarray(points, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 2 or arr.shape[0] < 2:
            raise ValueError(f"control points must have shape (n, 2) with n >= 2, got {arr.shape}")
        return arr

    @classmethod
    def evaluate(cls, points: ControlPoints, t: float) -> Tuple[float, float]:
        """
        Evaluate the curve at parameter _t_ using de Casteljau's algorithm.

        Args:
            points: Control points as Sequence[Tuple[float, float]] or NDArray[np.float64]
            t: curve parameter, usually in [0, 1]

        Returns:
            Tuple[float, float]: the point on the curve
        """
        work = cls._as_array(points).copy()
        while work.shape[0] > 1:
            work = (1.0 - t) * work[:-1] + t * work[1:]
        return (float(work[0, 0]), float(work[0, 1]))

    @classmethod
    def split(cls, points: ControlPoints, t: float) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Split the curve at parameter _t_ into two curves of the same degree.

        The left curve covers [0, t], the right curve covers [t, 1] of the original.
        """
        work = cls._as_array(points)
        left = [work[0]]
        right = [work[-1]]
        while work.shape[0] > 1:
            work = (1.0 - t) * work[:-1] + t * work[1:]
            left.append(work[0])
            right.append(work[-1])
        return np.array(left, dtype=np.float64), np.array(right[::-1], dtype=np.float64)

    @classmethod
    def split_at_params(cls, points: ControlPoints, params: Sequence[float]) -> List[NDArray[np.float64]]:
        """
        Split the curve at several parameters of the original curve.

        Args:
            points: Control points of the curve to split
            params: strictly increasing parameters in the open interval (0, 1)

        Returns:
            List of len(params) + 1 control point arrays, ordered along the curve.
            Adjacent pieces share their joint point exactly.
        """
        remaining = cls._as_array(points)
        pieces: List[NDArray[np.float64]] = []
        prev_t = 0.0
        for t in params:
            if not prev_t < t < 1.0:
                raise ValueError(f"split parameters must be strictly increasing within (0, 1), got {list(params)}")
            # re-map the parameter onto the remaining part of the curve
            local_t = (t - prev_t) / (1.0 - prev_t)
            left, remaining = cls.split(remaining, local_t)
            pieces.append(left)
            prev_t = t
        pieces.append(remaining)
        return pieces

    @classmethod
    def elevate_degree(cls, points: ControlPoints, target_degree: int) -> NDArray[np.float64]:
        """
        Return control points describing the same curve with a higher degree.

        Degree elevation is exact: a line (degree 1) becomes a quadratic (2)
        or cubic (3) curve, a quadratic becomes a cubic curve.

        Args:
            points: Control points of the curve
            target_degree: degree of the result, must not be lower than the current degree

        Returns:
            NDArray[np.float64] of shape (target_degree + 1, 2)
        """
        arr = cls._as_array(points)
        degree = arr.shape[0] - 1
        if target_degree < degree:
            raise ValueError(f"cannot lower curve degree from {degree} to {target_degree}")
        while degree < target_degree:
            # Q_i = i/(n+1) * P_(i-1) + (1 - i/(n+1)) * P_i
            n_new = degree + 1
            elevated = np.empty((n_new + 1, 2), dtype=np.float64)
            elevated[0] = arr[0]
            elevated[-1] = arr[-1]
            for i in range(1, n_new):
                alpha = i / n_new
                elevated[i] = alpha * arr[i - 1] + (1.0 - alpha) * arr[i]
            arr = elevated
            degree = n_new
        return arr
