from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.interpolate import CubicSpline
from scipy.spatial import cKDTree


class Track:
    """
    Track centerline built from waypoints (cubic spline parameterized by arc length).
    The CTE is positive when the vehicle is on the left of the driving direction.
    """

    def __init__(self, waypoints, closed: bool = True, resolution: float = 0.25):
        pts = np.array(waypoints, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2 or len(pts) < 3:
            raise ValueError("Waypoints invalides: au moins 3 points (x, y) attendus.")

        if closed and not np.allclose(pts[0], pts[-1]):
            pts = np.vstack([pts, pts[:1]])
        elif closed:
            pts[-1] = pts[0]

        seg = np.hypot(*np.diff(pts, axis=0).T)
        if np.any(seg <= 0):
            raise ValueError("Waypoints invalides: deux points consécutifs identiques.")
        s = np.concatenate([[0.0], np.cumsum(seg)])

        self.closed = closed
        self.length = float(s[-1])
        self._spline = CubicSpline(s, pts, bc_type="periodic" if closed else "not-a-knot")

        # Échantillonnage dense pour la recherche du point le plus proche
        n = max(int(self.length / resolution), 16)
        self._s = np.linspace(0.0, self.length, n, endpoint=not closed)
        self._xy = self._spline(self._s)
        self._tree = cKDTree(self._xy)

    @classmethod
    def straight(cls, length: float) -> "Track":
        return cls([(0.0, 0.0), (length / 2.0, 0.0), (length, 0.0)], closed=False)

    @classmethod
    def circle(cls, radius: float, n_points: int = 64) -> "Track":
        # Sens anti-horaire, départ en (radius, 0)
        a = np.linspace(0.0, 2.0 * np.pi, n_points, endpoint=False)
        return cls(np.column_stack([radius * np.cos(a), radius * np.sin(a)]), closed=True)

    def start_pose(self) -> Tuple[float, float, float]:
        x, y = self._spline(0.0)
        dx, dy = self._spline(0.0, 1)
        return float(x), float(y), float(np.arctan2(dy, dx))

    def cte(self, x: float, y: float) -> float:
        _, idx = self._tree.query([x, y])
        s = self._s[idx]
        px, py = self._spline(s)
        tx, ty = self._spline(s, 1)
        norm = np.hypot(tx, ty)
        # Produit vectoriel tangente x (position - centre)
        return float((tx * (y - py) - ty * (x - px)) / norm)

    def centerline(self, n: int = 500) -> np.ndarray:
        return self._spline(np.linspace(0.0, self.length, n))
