import numpy as np
import pytest

from nptrack import (Track, TrackError, TrackSettings, Curve, Mesh, Template, ContinuousPart,
                     MeshItem, HostServices, NullHostServices, RecordingHostServices,
                     CurveRuntimeInfo, next_curve_index, respawn_curve_index, Transformation,
                     warp_mesh)
from nptrack.constants import BEZIER, EXTRAPOLATE, LOOP
from nptrack.scene import TEMPLATE_COPY

def road():
    return Template("Road", continuous=[ContinuousPart([MeshItem(Mesh.grid(size_x=4, size_z=5))])])

def straight_track(count, length=10, **kwargs):
    track = Track(TrackSettings(segment_length=0.25), **kwargs)
    for _ in range(count):
        track.add_curve(length=length)
    return track

# ====================================================================================================
# Curves
# ====================================================================================================

def test_add_curve_copies_previous():
    track = Track()
    first = track.add_curve(length=30, angles=(0, 20, 5), can_respawn=False)
    second = track.add_curve()

    assert second.index == 1
    assert second.length == 30
    np.testing.assert_array_equal(second.angles, (0, 20, 5))
    assert not second.can_respawn
    assert track.curves == (first, second)
    assert second.node.parent is track.node

def test_insert_and_remove():
    host = RecordingHostServices()
    track = straight_track(3, host=host)
    a, b, c = track.curves

    d = track.insert_curve(1, length=5, name="Inserted")
    assert track.curves == (a, d, b, c)
    assert [curve.index for curve in track.curves] == [0, 1, 2, 3]
    assert len(track.build_states) == 4
    assert track.segments.path_count == 140

    host.clear()
    track.remove_curve(d)
    assert track.curves == (a, b, c)
    assert [curve.index for curve in track.curves] == [0, 1, 2]
    assert d.node is None
    assert len(track.build_states) == 3
    assert 'destroyed' in [entry[0] for entry in host.journal]

    with pytest.raises(IndexError):
        track.insert_curve(10)

def test_foreign_curve():
    track = straight_track(2)
    with pytest.raises(TrackError):
        track.remove_curve(Curve())
    with pytest.raises(TrackError):
        track.schedule_rebuild(Curve())

def test_remove_last_curve():
    track = straight_track(1)
    track.remove_curve(track.curves[0])
    assert track.curves == ()
    assert track.curve_infos == []

def test_update_curve():
    host = RecordingHostServices()
    track = straight_track(4, host=host)
    curve = track.curves[2]

    host.clear()
    track.update_curve(curve, length=20, name="Long")

    assert host.journal[0] == ('changing', curve.node)
    assert curve.node.name == "Long"
    assert track.segments.path_count == 200
    assert track.pending_range == (1, 4)

    with pytest.raises(ValueError):
        track.update_curve(curve, colour="red")

# ====================================================================================================
# Segments
# ====================================================================================================

def test_dirty_segments():
    track = straight_track(2)
    assert not track.is_dirty
    assert len(track.segments) == 81

    track.invalidate()
    assert track.is_dirty
    with pytest.raises(TrackError):
        track.segments

    track.update_segments()
    assert track.get_segment(5).curve is track.curves[0]

def test_curve_segments():
    track = straight_track(3)
    segs = track.curve_segments(track.curves[1])
    assert len(segs) == 40
    assert all(seg.curve is track.curves[1] for seg in segs)

def test_curve_positions():
    matrix = np.eye(4)
    matrix[:3, 3] = (5, 0, 0)
    track = Track(TrackSettings(segment_length=0.25), matrix=matrix)
    track.add_curve(length=10, angles=(0, 90, 0))
    track.add_curve(length=10, angles=(0, 0, 0))

    node = track.curves[1].node
    np.testing.assert_allclose(node.world_matrix.position, track.segments.positions[40] + (5, 0, 0), atol=1e-9)
    # Facing +X after the turn
    np.testing.assert_allclose(node.world_matrix.basis[:, 2], (1, 0, 0), atol=1e-9)

def test_curve_start_rounded_up():
    # 7.3 long arcs are made of 30 segments
    track = straight_track(10, length=7.3)
    segs = track.segments

    for curve, info in zip(track.curves, track.curve_infos):
        start = segs.curve_range(curve.index).start
        assert start == 30*curve.index
        assert info.z_offset == pytest.approx(start*0.25)
        np.testing.assert_allclose(curve.node.world_matrix.position, segs.positions[start], atol=1e-9)

    assert track.curve_infos[9].z_offset == pytest.approx(67.5)

# ====================================================================================================
# Circuit
# ====================================================================================================

def test_circuit_without_curve():
    host = RecordingHostServices()
    track = Track(host=host)
    with pytest.raises(TrackError):
        track.create_circuit()

    assert track.curves == ()
    assert host.journal == []
    assert track.settings.overrun == EXTRAPOLATE

def test_create_circuit():
    track = Track(TrackSettings(segment_length=0.25))
    for _ in range(3):
        track.add_curve(length=20, angles=(0, 90, 0), template=road())

    closing = track.create_circuit()

    assert closing.curve_type == BEZIER
    assert len(track.curves) == 4
    assert track.settings.overrun == LOOP
    np.testing.assert_allclose(track.segments.positions[-1], (0, 0, 0), atol=1e-9)
    assert track.segments.directions[-1, 1] == pytest.approx(360)
    assert closing.node.descendants(TEMPLATE_COPY)

def test_circuit_seam():
    track = Track(TrackSettings(segment_length=0.25))
    for _ in range(3):
        track.add_curve(length=20, angles=(0, 90, 0))
    track.create_circuit()
    segs = track.segments

    # The next lap starts with the first segments
    k = 3
    np.testing.assert_allclose(segs.get(segs.path_count + k).position, segs.positions[k] - (0, 0.001, 0), atol=1e-12)

    # Going on along the path past the end always moves forward
    z = segs.path_length + np.array([0.125, 0.225, 0.275, 0.375, 1.0, 2.0])
    assert np.all(np.diff(segs.matrices(z).position[:, 2]) > 0)

    # A mesh across the seam isn't folded back
    identity = Transformation.identity()
    mesh = Mesh.grid(size_x=2, size_z=2, vertices_x=3, vertices_z=17)
    warp_mesh(mesh, segs.path_length - 1, identity, identity, segs, identity)
    assert np.all(np.diff(mesh.vertices[1::3, 2]) > 0)

def test_circuit_already_closed():
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=20, angles=(0, 180, 0))
    track.add_curve(length=10, angles=(0, 0, 0))
    track.add_curve(length=20, angles=(0, 180, 0))
    track.add_curve(length=10, angles=(0, 0, 0))

    closing = track.create_circuit()
    assert closing.length == 0
    assert track.segments.curve_segments(closing.index) == []

# ====================================================================================================
# Rebuild scheduling
# ====================================================================================================

def test_schedule_coalescing():
    track = straight_track(8)
    curves = track.curves

    track.schedule_rebuild(curves[3], single_curve_only=True)
    assert track.pending_range == (2, 6)

    track.schedule_rebuild(curves[1], single_curve_only=True)
    assert track.pending_range == (0, 6)

    track.schedule_rebuild(curves[5])
    assert track.pending_range == (0, 8)

    copies = track.apply_scheduled_rebuild()
    assert track.pending_range is None
    assert copies == []
    assert track.apply_scheduled_rebuild() == []

def test_scheduled_rebuild_builds():
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=20, template=road())
    track.add_curve(length=20)

    track.delete_meshes()
    track.schedule_rebuild(track.curves[1], single_curve_only=True)
    copies = track.apply_scheduled_rebuild()

    assert len(copies) == 8
    assert track.curves[0].node.descendants(TEMPLATE_COPY)

def test_pending_cleared_on_failure(monkeypatch):
    track = straight_track(3)
    track.schedule_rebuild(track.curves[1])

    def fail(start, end):
        raise RuntimeError("boom")

    monkeypatch.setattr(track, 'rebuild_range', fail)
    with pytest.raises(RuntimeError):
        track.apply_scheduled_rebuild()
    assert track.pending_range is None

def test_invalid_curve_during_rebuild():
    track = Track(TrackSettings(segment_length=0.25))
    track.add_curve(length=20, template=road())
    track.add_curve(length=20)

    copies = track.node.descendants(TEMPLATE_COPY)
    assert len(copies) == 8
    end_position = track.curves[0].end_position.copy()

    track.schedule_rebuild(track.curves[0])
    track.curves[0].length = 40
    track.curves[1].length = 0

    with pytest.raises(ValueError):
        track.apply_scheduled_rebuild()
    assert track.pending_range is None

    # Geometry and derived values are left untouched
    assert track.node.descendants(TEMPLATE_COPY) == copies
    np.testing.assert_array_equal(track.curves[0].end_position, end_position)
    assert track.segments.path_count == 160

    # The track is usable again
    track.curves[1].length = 10
    assert len(track.rebuild_all()) == 10
    np.testing.assert_allclose(track.curves[0].end_position, (0, 0, 40), atol=1e-9)

class ReentrantHost(NullHostServices):

    def __init__(self):
        self.track = None

    def object_created(self, obj):
        if self.track is not None:
            self.track.rebuild_all()

def test_reentrant_rebuild():
    host = ReentrantHost()
    track = Track(TrackSettings(segment_length=0.25), host=host)
    track.add_curve(length=20, template=road())

    host.track = track
    with pytest.raises(TrackError):
        track.rebuild_all()

    host.track = None
    assert track.rebuild_all()

def test_host_interface():
    host = HostServices()
    with pytest.raises(NotImplementedError):
        host.object_created(None)
    with pytest.raises(NotImplementedError):
        host.reparent(None, None)

# ====================================================================================================
# Templates
# ====================================================================================================

def test_remove_templates():
    host = RecordingHostServices()
    track = Track(TrackSettings(segment_length=0.25), host=host)
    track.add_curve(length=20, template=road())
    track.add_curve(length=20)
    assert list(track.node.walk(TEMPLATE_COPY))

    track.remove_templates()
    assert not list(track.node.walk(TEMPLATE_COPY))
    assert all(curve.template is None for curve in track.curves)
    assert track.rebuild_all() == []

# ====================================================================================================
# Runtime infos
# ====================================================================================================

def test_curve_infos():
    track = straight_track(2, length=20)
    infos = track.curve_infos

    assert len(infos) == 2
    assert isinstance(infos[0], CurveRuntimeInfo)
    np.testing.assert_allclose(infos[0].normal, (0, 1, 0), atol=1e-12)
    np.testing.assert_allclose(infos[0].respawn_position, (0, 0.75, 2), atol=1e-12)
    np.testing.assert_allclose(infos[0].respawn_rotation, (0, 0, 0, 1), atol=1e-12)
    assert infos[1].z_offset == 20
    np.testing.assert_allclose(infos[1].respawn_position, (0, 0.75, 22), atol=1e-12)

def test_short_curve_respawn():
    # Respawn point limited to the middle of the curve
    track = straight_track(1, length=2)
    np.testing.assert_allclose(track.curve_infos[0].respawn_position, (0, 0.75, 1), atol=1e-12)

def test_banked_normal():
    track = Track(TrackSettings(segment_length=0.25, bank_mode='LINEAR'))
    track.add_curve(length=20, angles=(0, 0, 30))
    track.add_curve(length=20, angles=(0, 0, 30))

    normal = track.curve_infos[1].normal
    assert normal[1] == pytest.approx(np.cos(np.radians(30)))

def info(is_jump=False, can_respawn=True):
    return CurveRuntimeInfo(np.zeros(3), np.zeros(3), np.array((0, 0, 0, 1.)), is_jump, can_respawn, 0.0)

def test_progress_helpers():
    infos = [info(), info(is_jump=True), info(), info(is_jump=True)]
    assert next_curve_index(infos, 0) == 2
    assert next_curve_index(infos, 2) == 0
    assert next_curve_index([info(), info(is_jump=True)], 0) == 0

    infos = [info(can_respawn=False), info(), info(can_respawn=False), info(can_respawn=False)]
    assert respawn_curve_index(infos, 3) == 1
    assert respawn_curve_index(infos, 1) == 1
    assert respawn_curve_index(infos, 0) == 0

# ====================================================================================================
# Serialization
# ====================================================================================================

def test_to_dict():
    template = road()
    track = Track(TrackSettings(segment_length=0.5), name="Circuit")
    track.add_curve(length=20, template=template)
    track.add_curve(curve_type=BEZIER, angles=(0, 30, 0), end_position=(10, 0, 40))

    d = track.to_dict()
    other = Track.from_dict(d, templates={"Road": template})

    assert other.name == "Circuit"
    assert other.settings == track.settings
    assert [c.to_dict() for c in other.curves] == d['curves']
    assert other.curves[0].template is template
    np.testing.assert_allclose(other.segments.positions, track.segments.positions)
    assert not list(other.node.walk(TEMPLATE_COPY))

    with pytest.raises(KeyError):
        Track.from_dict(d)
