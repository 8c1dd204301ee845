import numpy as np
import pytest

from nptrack import Curve, Mesh, Transformation, generate_segments, warp_mesh
from nptrack.constants import ARC

def track_segments(*curves, seg_length=0.25):
    for i, curve in enumerate(curves):
        curve.index = i
    return generate_segments(list(curves), seg_length)

IDENTITY = Transformation.identity()

# ====================================================================================================
# Straight track
# ====================================================================================================

def test_warp_straight():
    segs = track_segments(Curve(ARC, length=20))
    mesh = Mesh.grid(size_x=2, size_z=10, vertices_x=3, vertices_z=11)
    source = mesh.vertices.copy()

    length = warp_mesh(mesh, 5.0, IDENTITY, IDENTITY, segs, IDENTITY)

    assert length == pytest.approx(10)
    np.testing.assert_allclose(mesh.vertices, source + (0, 0, 5), atol=1e-12)
    np.testing.assert_allclose(mesh.normals, np.broadcast_to((0, 1, 0), (33, 3)), atol=1e-12)
    np.testing.assert_allclose(mesh.bounds[0], (-1, 0, 5), atol=1e-12)
    np.testing.assert_allclose(mesh.bounds[1], (1, 0, 15), atol=1e-12)
    assert mesh.tangents.shape == (33, 4)

def test_warp_min_z():
    # The mesh starts at its own min z, wherever it is in template space
    segs = track_segments(Curve(ARC, length=20))
    mesh = Mesh.grid(size_x=2, size_z=4)
    template_from_mesh = Transformation.from_components(translation=(0, 0, -7))

    length = warp_mesh(mesh, 1.0, template_from_mesh, IDENTITY, segs, IDENTITY)

    assert length == pytest.approx(4)
    assert mesh.bounds[0][2] == pytest.approx(1)
    assert mesh.bounds[1][2] == pytest.approx(5)

def test_warp_spaces():
    segs = track_segments(Curve(ARC, length=20))
    mesh = Mesh.grid(size_x=2, size_z=4)
    source = mesh.vertices.copy()

    world_from_track = Transformation.from_components(translation=(100, 0, 0))
    mesh_from_world = Transformation.from_components(translation=(-100, 0, -3))

    warp_mesh(mesh, 0.0, IDENTITY, mesh_from_world, segs, world_from_track)
    np.testing.assert_allclose(mesh.vertices, source + (0, 0, -3), atol=1e-12)

def test_warp_template_scale():
    segs = track_segments(Curve(ARC, length=20))
    mesh = Mesh.grid(size_x=2, size_z=4)
    template_from_mesh = Transformation.from_components(scale=(3, 1, 2))

    length = warp_mesh(mesh, 0.0, template_from_mesh, IDENTITY, segs, IDENTITY)

    assert length == pytest.approx(8)
    np.testing.assert_allclose(mesh.bounds[0], (-3, 0, 0), atol=1e-12)
    np.testing.assert_allclose(mesh.bounds[1], (3, 0, 8), atol=1e-12)

# ====================================================================================================
# Curved track
# ====================================================================================================

def test_warp_follows_curve():
    segs = track_segments(Curve(ARC, length=10, angles=(0, 90, 30)))
    mesh = Mesh.grid(size_x=2, size_z=10, vertices_x=3, vertices_z=41)

    warp_mesh(mesh, 0.0, IDENTITY, IDENTITY, segs, IDENTITY)

    # Center line vertices lie on the segments starts
    center = mesh.vertices[1::3]
    np.testing.assert_allclose(center, segs.positions, atol=1e-9)

    # Side vertices are one unit away from the center line
    d = np.linalg.norm(mesh.vertices[0::3] - center, axis=-1)
    np.testing.assert_allclose(d, 1, atol=1e-9)

    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=-1), 1, atol=1e-12)
    assert mesh.normals[-1, 1] < 1

def test_warp_past_the_end():
    segs = track_segments(Curve(ARC, length=5))
    mesh = Mesh.grid(size_x=2, size_z=10)

    # Extrapolated straight ahead
    warp_mesh(mesh, 0.0, IDENTITY, IDENTITY, segs, IDENTITY)
    assert mesh.bounds[1][2] == pytest.approx(10)

def test_warp_empty():
    segs = track_segments(Curve(ARC, length=5))
    assert warp_mesh(Mesh(), 0.0, IDENTITY, IDENTITY, segs, IDENTITY) == 0.0
