import numpy as np
import pytest

from nptrack import Curve, Segment, SegmentArray, generate_segments
from nptrack.constants import ARC, EXTRAPOLATE, LOOP
from nptrack.maths import forward_vector, euler_to_matrix

def turning_track(overrun, seam_offset=0.001):
    curves = [
        Curve(ARC, length=10, angles=(0, 45, 10)),
        Curve(ARC, length=5, angles=(-10, -20, 0)),
    ]
    for i, curve in enumerate(curves):
        curve.index = i
    return curves, generate_segments(curves, 0.5, overrun=overrun, seam_offset=seam_offset)

# ====================================================================================================
# In range and negative indices
# ====================================================================================================

def test_stored_segments():
    curves, segs = turning_track(EXTRAPOLATE)

    assert len(segs) == 31
    seg = segs.get(7)
    np.testing.assert_array_equal(seg.position, segs.positions[7])
    np.testing.assert_array_equal(seg.direction, segs.directions[7])
    assert seg.curve is curves[0]
    assert seg.length == 0.5

    assert segs.get(25).curve is curves[1]
    assert segs[30].curve is curves[1]

def test_negative_index():
    _, segs = turning_track(EXTRAPOLATE)
    for i in (-1, -10, -1000):
        seg = segs.get(i)
        np.testing.assert_array_equal(seg.position, segs.positions[0])
        np.testing.assert_array_equal(seg.direction, segs.directions[0])

# ====================================================================================================
# Overrun
# ====================================================================================================

def test_extrapolate():
    curves, segs = turning_track(EXTRAPOLATE)
    last = len(segs) - 1
    fwd = forward_vector(segs.directions[last])

    prev = segs.get(last).position
    for k in range(1, 20):
        seg = segs.get(last + k)
        np.testing.assert_array_equal(seg.direction, segs.directions[last])
        np.testing.assert_array_equal(seg.direction_delta, 0)
        np.testing.assert_allclose(seg.position, segs.positions[last] + fwd*0.5*k, atol=1e-12)
        np.testing.assert_allclose(seg.position - prev, fwd*0.5, atol=1e-12)
        assert seg.curve is curves[-1]
        prev = seg.position

def test_loop_periodicity():
    curves, segs = turning_track(LOOP, seam_offset=0.01)
    n = segs.path_count

    for i in (1, 3, 17, 29):
        a = segs.get(i)
        for k in (1, 2, 5):
            b = segs.get(i + k*n)
            np.testing.assert_array_equal(b.direction, a.direction)
            np.testing.assert_array_equal(b.position[[0, 2]], a.position[[0, 2]])
            assert b.position[1] == pytest.approx(a.position[1] - 0.01)
            assert b.curve is curves[-1]

def test_gather_vectorized():
    _, segs = turning_track(LOOP)
    idx = np.array([[-3, 0, 5], [30, 31, 70]])
    pos, dirs, deltas, owner = segs.gather(idx)

    assert pos.shape == (2, 3, 3)
    assert dirs.shape == (2, 3, 3)
    assert deltas.shape == (2, 3, 3)
    assert owner.shape == (2, 3)
    np.testing.assert_array_equal(owner, [[0, 0, 0], [1, 1, 1]])
    np.testing.assert_array_equal(dirs[1, 2], segs.directions[70 % 30])

def test_invalid_overrun():
    with pytest.raises(ValueError):
        SegmentArray(np.zeros((1, 3)), np.zeros((1, 3)), np.zeros((1, 3)), [0], [], 1.0, overrun='CLAMP')

def test_no_curve():
    segs = generate_segments([], 0.25)
    assert len(segs) == 1
    assert segs.path_count == 0

    seg = segs.get(4)
    assert seg.curve is None
    np.testing.assert_allclose(seg.position, (0, 0, 1))

# ====================================================================================================
# Distances and matrices
# ====================================================================================================

def test_locate():
    _, segs = turning_track(EXTRAPOLATE)
    idx, seg_z = segs.locate([0, 1.3, 15.0, -0.2])

    np.testing.assert_array_equal(idx, [0, 2, 30, -1])
    np.testing.assert_allclose(seg_z, [0, 0.3, 0, 0.3], atol=1e-12)

def test_segment_matrix_bank():
    seg = Segment((1, 2, 3), (0, 0, 0), (0, 0, 10), 1.0, None)

    m = seg.matrix(0.5)
    np.testing.assert_allclose(m.position, (1, 2, 3))
    np.testing.assert_allclose(m.basis, euler_to_matrix((0, 0, 5)), atol=1e-12)

    np.testing.assert_allclose(seg.matrix().basis, np.eye(3), atol=1e-12)

def test_matrices_follow_path():
    _, segs = turning_track(EXTRAPOLATE)
    z = np.arange(31)*0.5

    m = segs.matrices(z)
    assert m.shape == (31,)
    np.testing.assert_allclose(m.position, segs.positions, atol=1e-12)

def test_curve_segments():
    curves, segs = turning_track(EXTRAPOLATE)

    assert segs.curve_range(0) == slice(0, 20)
    assert segs.curve_range(1) == slice(20, 30)
    assert len(segs.curve_segments(1)) == 10
    assert all(seg.curve is curves[1] for seg in segs.curve_segments(1))
