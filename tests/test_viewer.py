import math
import sys

import pytest

from meshcalc.obj_model import ObjFileError
from meshcalc.viewer import (
    EdgeLineType,
    ProjectionType,
    VertexShape,
    ViewerState,
    ViewSettings,
    default_settings_path,
)

CUBE_LINES = [
    "v 1.745441 1.745441 -1.745441",
    "v 1.745441 -1.745441 -1.745441",
    "v 1.745441 1.745441 1.745441",
    "v 1.745441 -1.745441 1.745441",
    "v -1.745441 1.745441 -1.745441",
    "v -1.745441 -1.745441 -1.745441",
    "v -1.745441 1.745441 1.745441",
    "v -1.745441 -1.745441 1.745441",
    "f 5 3 1",
    "f 3 8 4",
    "f 7 6 8",
    "f 2 8 6",
]


@pytest.fixture
def cube_path(tmp_path):
    path = tmp_path / "Cube.obj"
    path.write_text("\n".join(CUBE_LINES) + "\n")
    return path


@pytest.fixture
def state(cube_path):
    viewer = ViewerState()
    viewer.load_file(cube_path)
    return viewer


def test_default_settings_path_uses_xdg(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_settings_path() == tmp_path / "Settings.ini"


def test_settings_round_trip(tmp_path):
    settings = ViewSettings(
        projection=ProjectionType.ORTHOGRAPHIC,
        line_width=2.5,
        edge_color="#FF0000",
        point_size=4.0,
        vertex_color="#00ff00",
        background_color="#0000FF",
        edge_line_type=EdgeLineType.DASHED,
        vertex_shape=VertexShape.SQUARE,
    )
    path = tmp_path / "conf" / "Settings.ini"
    settings.save(path)
    assert ViewSettings.load(path) == settings


def test_saved_file_uses_settings_keys(tmp_path):
    path = tmp_path / "Settings.ini"
    ViewSettings(projection=ProjectionType.ORTHOGRAPHIC).save(path)
    text = path.read_text()
    assert "[General]" in text
    assert "TypeProjection=1" in text
    assert "ColorEdge=#000000" in text


def test_missing_settings_give_defaults(tmp_path):
    loaded = ViewSettings.load(tmp_path / "absent.ini")
    assert loaded == ViewSettings()
    assert loaded.projection is ProjectionType.PERSPECTIVE
    assert loaded.line_width == 1.0


def test_unreadable_values_fall_back(tmp_path):
    path = tmp_path / "Settings.ini"
    path.write_text(
        "[General]\nTypeProjection=abc\nThicknessOfEdge=wide\n"
        "ColorEdge=nocolor\nEdgeLineType=7\n"
    )
    loaded = ViewSettings.load(path)
    assert loaded.projection is ProjectionType.PERSPECTIVE
    assert loaded.line_width == 0.0
    assert loaded.edge_color == "#000000"
    assert loaded.edge_line_type is EdgeLineType.SOLID


def test_colours_and_enums_are_normalised():
    assert ViewSettings(edge_color="#FFF").edge_color == ViewSettings(edge_color="#ffffff").edge_color
    assert ViewSettings(projection=1).projection is ProjectionType.ORTHOGRAPHIC


def test_load_file_sets_state(state, cube_path):
    assert state.model.vertex_count == 8
    assert state.file_name == cube_path.name
    assert state.is_projected
    assert state.normalize == pytest.approx(1.745441)
    assert state.scale == 500


def test_load_missing_file_raises(tmp_path):
    viewer = ViewerState()
    with pytest.raises(ObjFileError):
        viewer.load_file(tmp_path / "FAKE.obj")
    assert viewer.model is None


def test_controls_without_model():
    viewer = ViewerState()
    viewer.set_move_x(5.0)
    viewer.set_normalize()
    assert viewer.move_x == 5.0
    assert viewer.normalize == 0.0


def test_move_and_back(state):
    before = list(state.model.vertices)
    state.set_move_x(100.0)
    assert state.model.vertices[0] > before[0]
    assert state.model.vertices[1::3] == before[1::3]
    state.set_move_x(0.0)
    assert state.model.vertices == pytest.approx(before)


def test_scale_and_back(state):
    before = list(state.model.vertices)
    state.set_scale(1000.0)
    ratios = {round(new / old, 9) for new, old in zip(state.model.vertices, before)}
    assert len(ratios) == 1
    state.set_scale(500.0)
    assert state.model.vertices == pytest.approx(before)


def test_rotation_keeps_distances_and_returns(state):
    before = list(state.model.vertices)
    state.set_rotate_z(157.0)
    norms_before = [math.dist((0, 0, 0), before[i:i + 3]) for i in range(0, 24, 3)]
    norms_after = [math.dist((0, 0, 0), state.model.vertices[i:i + 3]) for i in range(0, 24, 3)]
    assert norms_after == pytest.approx(norms_before)
    state.set_rotate_z(0.0)
    assert state.model.vertices == pytest.approx(before, abs=1e-6)


def test_reset_transformation_restores_model(state):
    before = list(state.model.vertices)
    state.set_move_y(40.0)
    state.set_rotate_x(30.0)
    state.set_scale(750.0)
    state.settings.point_size = 3.0
    state.reset_transformation()
    assert state.model.vertices == pytest.approx(before, abs=1e-6)
    assert (state.move_y, state.rotate_x, state.scale) == (0.0, 0.0, 500)
    assert state.settings.point_size == 1.0


def test_orthographic_projection(state):
    state.settings.projection = ProjectionType.ORTHOGRAPHIC
    left, right, bottom, top, near, far, shift = state.projection(800, 400)
    assert left == -right
    assert bottom == -top
    assert top == state.normalize
    assert right / top == pytest.approx(800 / 400)
    assert near == -far
    assert shift == 0.0


def test_perspective_projection(state):
    state.settings.projection = ProjectionType.PERSPECTIVE
    left, right, bottom, top, near, far, shift = state.projection(300, 300)
    assert near == state.normalize
    assert far == pytest.approx(1000 * near)
    assert shift == pytest.approx(-2 * near)
    assert right == pytest.approx(top)


def test_projection_rejects_zero_height(state):
    with pytest.raises(ValueError):
        state.projection(100, 0)