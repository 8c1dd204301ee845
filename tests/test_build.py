import logging

import numpy as np
import pytest

from nptrack import (Track, TrackSettings, Mesh, Template, ContinuousPart, MeshItem, SpacedPart,
                     SpacingGroup, MeshBuilder, BuildState, RecordingHostServices, Transformation)
from nptrack.constants import ARC, BEZIER
from nptrack.scene import TEMPLATE_COPY, MESH, SPACED

# ====================================================================================================
# Helpers
# ====================================================================================================

def road_template(name="Road", length=5.0, spacing=3.0, scale=(1, 1, 1)):
    posts = SpacingGroup(0, spacing=spacing)
    return Template(name,
        continuous = [ContinuousPart([
            MeshItem(Mesh.grid(size_x=4, size_z=length, vertices_x=3, vertices_z=6, name="Surface")),
            MeshItem(Mesh.grid(size_x=4, size_z=length, name="Collider"), is_collider=True),
        ])],
        spaced = [SpacedPart("Post", posts, matrix=Transformation.from_components(translation=(2.5, 0, 0)),
                             mesh=Mesh.box((0.2, 1, 0.2)))],
        scale = scale)

def build_track(host=None):
    road = road_template()
    track = Track(TrackSettings(segment_length=0.25), host=host)
    track.add_curve(length=20, template=road)
    track.add_curve(length=20, angles=(0, 45, 10))
    track.add_curve(curve_type=BEZIER, angles=(0, -45, 0), end_position=(30, 2, 60))
    track.add_curve(length=15, angles=(-5, 0, -10))
    track.add_curve(length=20, angles=(0, 30, 0))
    track.rebuild_all()
    return track, road

def geometry(track, index):
    node = track.curves[index].node
    meshes = [n.mesh.vertices.copy() for n in node.walk(MESH)]
    normals = [n.mesh.normals.copy() for n in node.walk(MESH)]
    spaced = [np.asarray(n.matrix).copy() for n in node.walk(SPACED)]
    return meshes, normals, spaced

def assert_same_geometry(a, b):
    for la, lb in zip(a, b):
        assert len(la) == len(lb)
        for x, y in zip(la, lb):
            assert np.array_equal(x, y)

# ====================================================================================================
# Walk
# ====================================================================================================

def test_full_build():
    track, road = build_track()

    copies = [n for n in track.node.walk(TEMPLATE_COPY)]
    assert copies
    assert all(copy.info['template'] is road for copy in copies)

    # Templates are inherited by the following curves
    for curve in track.curves:
        assert curve.node.descendants(TEMPLATE_COPY)

    # Every curve has a build state
    assert all(isinstance(state, BuildState) for state in track.build_states)
    zs = [state.mesh_z_offset for state in track.build_states]
    assert zs == sorted(zs)

def test_copies_are_contiguous():
    track, road = build_track()

    surfaces = [n for n in track.node.walk(MESH) if n.info.get('is_surface')]
    assert len(surfaces) == len(list(track.node.walk(TEMPLATE_COPY)))
    assert surfaces[0].info['start_curve_index'] == 0
    assert surfaces[-1].info['end_curve_index'] == len(track.curves) - 1

    # Colliders are warped but are not surfaces
    colliders = [n for n in track.node.walk(MESH) if n.info['is_collider']]
    assert len(colliders) == len(surfaces)
    assert not any(n.info.get('is_surface') for n in colliders)

def test_spaced_phase():
    track, _ = build_track()

    zs = np.array([n.info['z'] for n in track.node.walk(SPACED)])
    assert len(zs) > 10
    # One phase along the whole track
    np.testing.assert_allclose(np.diff(zs), 3.0, atol=1e-9)
    assert zs[0] == 0.0

# ====================================================================================================
# Incremental build
# ====================================================================================================

def test_partial_equals_full():
    track, _ = build_track()
    n = len(track.curves)

    before = [geometry(track, i) for i in range(n)]
    states = list(track.build_states)
    untouched = [track.curves[i].node.children[:] for i in (0, 1, 4)]

    track.rebuild_range(2, 4)

    for i in range(n):
        assert_same_geometry(before[i], geometry(track, i))

    assert track.build_states == states

    # Other curves are left alone
    assert [track.curves[i].node.children for i in (0, 1, 4)] == untouched

def test_partial_from_unknown_state():
    track, _ = build_track()
    n = len(track.curves)
    before = geometry(track, 3)

    track.delete_meshes(3, 4)
    assert not track.curves[3].node.children

    states = [None]*n
    builder = MeshBuilder(track.segments, track.curves, track.node)
    copies = builder.build(states, 3, 4)

    assert copies
    assert all(copy.parent is track.curves[3].node for copy in copies)
    assert_same_geometry(before, geometry(track, 3))

    # States of the curves walked through are computed
    assert states[:3] == track.build_states[:3]

def test_jump_curve():
    road = road_template()
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=20, template=road)
    track.add_curve(length=10, is_jump=True)
    track.add_curve(length=20, is_jump=False)
    track.rebuild_all()

    assert not track.curves[1].node.descendants(TEMPLATE_COPY)
    assert track.curves[2].node.descendants(TEMPLATE_COPY)

def test_no_template():
    track = Track()
    track.add_curve(length=10)
    assert track.rebuild_all() == []
    assert track.build_states[0] is not None

def test_zero_length_template():
    # Without continuous part, copies are one segment apart
    empty = Template("Empty", spaced=[SpacedPart("Post", SpacingGroup(0, spacing=1))])
    track = Track(TrackSettings(segment_length=0.5))
    track.add_curve(length=10, template=empty)

    copies = track.rebuild_all()
    assert len(copies) == 20
    assert not list(track.node.walk(SPACED))

def test_template_scale():
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=40, template=road_template(scale=(1, 1, 2)))
    copies = track.rebuild_all()

    # 5 long grids scaled to 10
    assert len(copies) == 4

# ====================================================================================================
# Diagnostics and host
# ====================================================================================================

def test_invalid_spacing_group_logged(caplog):
    caplog.set_level(logging.ERROR)

    template = Template("Road",
        continuous = [ContinuousPart([MeshItem(Mesh.grid(size_x=4, size_z=5))])],
        spaced = [
            SpacedPart("Orphan", None),
            SpacedPart("Far", SpacingGroup(20, spacing=5)),
            SpacedPart("Dense", SpacingGroup(1, spacing=0.1)),
            SpacedPart("Post", SpacingGroup(2, spacing=5)),
        ])
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=10, template=template)
    caplog.clear()

    copies = track.rebuild_all()

    assert len(copies) == 2
    assert len(list(track.node.walk(SPACED))) == 2
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 6

def test_host_notifications():
    host = RecordingHostServices()
    track, _ = build_track(host=host)

    created = host.actions('created')
    copies = list(track.node.walk(TEMPLATE_COPY))
    assert all(copy in created for copy in copies)

    reparented = [entry for entry in host.journal if entry[0] == 'reparent']
    assert all(entry[1].parent is entry[2] for entry in reparented if entry[1].parent is not None)

    host.clear()
    track.delete_meshes()
    assert set(map(id, host.actions('destroyed'))) == set(map(id, copies))
    assert not list(track.node.walk(TEMPLATE_COPY))

def test_build_state_count():
    track, _ = build_track()
    builder = MeshBuilder(track.segments, track.curves, track.node)
    with pytest.raises(ValueError):
        builder.build([None], 0, 1)
