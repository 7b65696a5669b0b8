# rep_client/pose_utils.py

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Tuple, Union, Any

import numpy as np

from .errors import DegenerateGeometryError, MissingJointError

JOINT_NAMES: Tuple[str, ...] = ("shoulder", "elbow", "wrist", "hip", "knee", "ankle")

# Side lengths below this are treated as coincident points
MIN_SIDE_LENGTH = 1e-9


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Point2D needs finite coordinates, got ({self.x}, {self.y})")

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


class JointFrame(Mapping):
    """
    One snapshot of the six named joints.
    Read-only once built; the tracking core assumes every name is present.
    """

    def __init__(self, points: Mapping[str, Point2D]):
        missing = [name for name in JOINT_NAMES if name not in points]
        if missing:
            raise MissingJointError(missing)
        self._points = MappingProxyType({name: points[name] for name in JOINT_NAMES})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "JointFrame":
        """
        Build a frame from {name: (x, y)} or {name: {"x": .., "y": ..}}.
        Unknown names are ignored; absent names raise MissingJointError.
        """
        missing = [name for name in JOINT_NAMES if name not in raw]
        if missing:
            raise MissingJointError(missing)

        points = {}
        for name in JOINT_NAMES:
            value = raw[name]
            if isinstance(value, Point2D):
                points[name] = value
            elif isinstance(value, Mapping):
                points[name] = Point2D(float(value["x"]), float(value["y"]))
            else:
                x, y = value
                points[name] = Point2D(float(x), float(y))
        return cls(points)

    def __getitem__(self, name: str) -> Point2D:
        return self._points[name]

    def __iter__(self):
        return iter(self._points)

    def __len__(self):
        return len(self._points)

    def __repr__(self):
        inner = ", ".join(f"{k}=({p.x:.1f}, {p.y:.1f})" for k, p in self._points.items())
        return f"JointFrame({inner})"


PointLike = Union[Point2D, Tuple[float, float]]


def _as_array(p: PointLike) -> np.ndarray:
    if isinstance(p, Point2D):
        return p.as_array()
    return np.array(p, dtype=float)


def angle_between(a: PointLike, vertex: PointLike, b: PointLike) -> float:
    """
    Returns the interior angle (in degrees) at `vertex` formed by a-vertex-b,
    using the law of cosines on the triangle's three sides.

    Raises DegenerateGeometryError when any two points coincide.
    """
    a = _as_array(a)
    v = _as_array(vertex)
    b = _as_array(b)

    # Work in units of the largest coordinate so squared sides can't overflow
    scale = float(np.max(np.abs(np.concatenate([a, v, b]))))
    if scale == 0.0:
        raise DegenerateGeometryError("coincident points: all three at the origin")
    a, v, b = a / scale, v / scale, b / scale

    p = float(np.linalg.norm(v - b))
    q = float(np.linalg.norm(a - v))
    c = float(np.linalg.norm(a - b))

    if min(p, q, c) * scale < MIN_SIDE_LENGTH:
        raise DegenerateGeometryError(
            f"coincident points: |vertex-b|={p * scale:.3g}, "
            f"|a-vertex|={q * scale:.3g}, |a-b|={c * scale:.3g}"
        )

    cosang = (p * p + q * q - c * c) / (2.0 * p * q)
    if not math.isfinite(cosang):
        raise DegenerateGeometryError(f"no angle for sides {p:.3g}, {q:.3g}, {c:.3g} (scale {scale:.3g})")
    cosang = np.clip(cosang, -1.0, 1.0)
    return float(np.degrees(np.arccos(cosang)))


DEFAULT_CHAIN: Tuple[str, str, str] = ("shoulder", "elbow", "wrist")


def chain_angle(frame: JointFrame, chain: Tuple[str, str, str] = DEFAULT_CHAIN) -> float:
    """Angle at the middle joint of a named three-joint chain."""
    first, middle, last = chain
    return angle_between(frame[first], frame[middle], frame[last])


class SyntheticJointSource:
    """
    Deterministic sine-wave stand-in for a pose estimator.
    Joints oscillate around the canvas centre; handy for demos without a camera.
    """

    def __init__(self, width: int = 640, height: int = 480):
        self.width = width
        self.height = height

    def frame_at(self, t: float) -> JointFrame:
        cx = self.width / 2
        cy = self.height / 2

        points: Dict[str, Point2D] = {
            "shoulder": Point2D(cx, cy - 80 + math.sin(t) * 10),
            "elbow": Point2D(cx + 60, cy - 40 + math.sin(t * 1.5) * 20),
            "wrist": Point2D(cx + 100, cy + math.sin(t * 2) * 30),
            "hip": Point2D(cx, cy + 50),
            "knee": Point2D(cx + 30, cy + 120 + math.sin(t) * 10),
            "ankle": Point2D(cx + 60, cy + 180),
        }
        return JointFrame(points)
