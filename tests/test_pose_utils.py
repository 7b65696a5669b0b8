"""Unit tests for the joint-angle helpers and joint frames."""

import math

import pytest

from rep_client.errors import DegenerateGeometryError, MissingJointError
from rep_client.pose_utils import (
    JOINT_NAMES,
    JointFrame,
    Point2D,
    SyntheticJointSource,
    angle_between,
    chain_angle,
)


def _raw_frame(**overrides):
    raw = {name: (float(i * 10), float(i * 7)) for i, name in enumerate(JOINT_NAMES)}
    raw.update(overrides)
    return raw


def test_right_angle():
    assert angle_between((1, 0), (0, 0), (0, 1)) == pytest.approx(90.0, abs=1e-6)


def test_straight_and_folded_lines_are_valid_angles():
    assert angle_between((-1, 0), (0, 0), (1, 0)) == pytest.approx(180.0, abs=1e-6)
    assert angle_between((2, 0), (0, 0), (1, 0)) == pytest.approx(0.0, abs=1e-6)


def test_known_angles():
    assert angle_between((1, 0), (0, 0), (1, 1)) == pytest.approx(45.0, abs=1e-6)
    assert angle_between((1, 0), (0, 0), (-1, math.sqrt(3))) == pytest.approx(120.0, abs=1e-6)


@pytest.mark.parametrize(
    "a, v, b",
    [
        ((3.0, 4.0), (0.0, 0.0), (5.0, -2.0)),
        ((320.0, 160.0), (380.0, 200.0), (420.0, 240.0)),
        ((-1.5, 2.25), (0.5, 0.5), (10.0, 0.1)),
    ],
)
def test_angle_is_symmetric(a, v, b):
    assert angle_between(a, v, b) == pytest.approx(angle_between(b, v, a), abs=1e-9)


def test_accepts_point2d():
    assert angle_between(Point2D(1, 0), Point2D(0, 0), Point2D(0, 1)) == pytest.approx(90.0)


@pytest.mark.parametrize(
    "a, v, b",
    [
        ((1.0, 1.0), (1.0, 1.0), (4.0, 5.0)),   # vertex == a
        ((1.0, 1.0), (4.0, 5.0), (1.0, 1.0)),   # a == b
        ((4.0, 5.0), (1.0, 1.0), (1.0, 1.0)),   # vertex == b
        ((0.0, 0.0), (0.0, 0.0), (0.0, 0.0)),   # estimator dropped everything to origin
    ],
)
def test_coincident_points_raise(a, v, b):
    with pytest.raises(DegenerateGeometryError):
        angle_between(a, v, b)


def test_point_rejects_non_finite():
    with pytest.raises(ValueError):
        Point2D(float("nan"), 0.0)
    with pytest.raises(ValueError):
        Point2D(0.0, float("inf"))


def test_frame_from_mapping_accepts_tuples_and_dicts():
    raw = _raw_frame(elbow={"x": 1.0, "y": 2.0}, nose=(0, 0))
    frame = JointFrame.from_mapping(raw)

    assert set(frame) == set(JOINT_NAMES)
    assert frame["elbow"] == Point2D(1.0, 2.0)
    assert "nose" not in frame


def test_frame_missing_joint_lists_names():
    raw = _raw_frame()
    del raw["wrist"]
    del raw["ankle"]

    with pytest.raises(MissingJointError) as excinfo:
        JointFrame.from_mapping(raw)

    assert excinfo.value.missing == ("ankle", "wrist")
    assert "wrist" in str(excinfo.value)


def test_frame_is_read_only():
    frame = JointFrame.from_mapping(_raw_frame())
    with pytest.raises(TypeError):
        frame["elbow"] = Point2D(0, 0)


def test_chain_angle_uses_named_joints():
    frame = JointFrame.from_mapping(
        _raw_frame(shoulder=(0, 1), elbow=(0, 0), wrist=(1, 0))
    )
    assert chain_angle(frame) == pytest.approx(90.0)


def test_synthetic_source_is_deterministic():
    source = SyntheticJointSource(640, 480)
    first = source.frame_at(1.25)
    again = source.frame_at(1.25)

    assert dict(first) == dict(again)
    assert first["hip"] == Point2D(320.0, 290.0)
    assert first["ankle"] == Point2D(380.0, 420.0)
    assert 0.0 <= chain_angle(first) <= 180.0


def test_huge_coordinates_still_give_an_angle():
    assert angle_between((1e200, 0), (0, 0), (0, 1e200)) == pytest.approx(90.0, abs=1e-6)
    assert angle_between((-1e300, 0), (0, 0), (1e300, 0)) == pytest.approx(180.0, abs=1e-6)


def test_tiny_distinct_points_still_coincide():
    with pytest.raises(DegenerateGeometryError):
        angle_between((1e-12, 0), (0, 0), (0, 1e-12))
