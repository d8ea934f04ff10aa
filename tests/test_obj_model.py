import math

import pytest

from meshcalc.obj_model import (
    ObjError,
    ObjFileError,
    ObjFormatError,
    ObjModel,
    load_obj,
    parse_obj,
)

EPS = 1e-6

CUBE = """# Blender export
o Cube
v 1.745441 1.745441 -1.745441
v 1.745441 -1.745441 -1.745441
v 1.745441 1.745441 1.745441
v 1.745441 -1.745441 1.745441
v -1.745441 1.745441 -1.745441
v -1.745441 -1.745441 -1.745441
v -1.745441 1.745441 1.745441
v -1.745441 -1.745441 1.745441
vt 0.625 0.5
vt 0.875 0.5
vt 0.875 0.75
vn 0.0 1.0 0.0
s off
f 5/1/1 3/2/1 1/3/1
f 3/1/1 8/2/1 4/3/1
f 7/1/1 6/2/1 8/3/1
f 2/1/1 8/2/1 6/3/1
f 1/1/1 4/2/1 2/3/1
f 5/1/1 2/2/1 6/3/1
f 5/1/1 7/2/1 3/3/1
f 3/1/1 7/2/1 8/3/1
f 7/1/1 5/2/1 6/3/1
f 2/1/1 4/2/1 8/3/1
f 1/1/1 3/2/1 4/3/1
f 5/1/1 1/2/1 2/3/1
"""


@pytest.fixture
def cube_path(tmp_path):
    path = tmp_path / "Cube.obj"
    path.write_text(CUBE)
    return path


@pytest.fixture
def cube(cube_path):
    return load_obj(cube_path)


def test_open_missing_file(tmp_path):
    with pytest.raises(ObjFileError):
        load_obj(tmp_path / "FAKE.obj")


def test_missing_file_error_is_obj_error(tmp_path):
    with pytest.raises(ObjError):
        load_obj(str(tmp_path / "FAKE.obj"))


def test_parse_obj(cube):
    assert cube.vertex_count == 8
    assert cube.vertices[0] == pytest.approx(1.745441, abs=EPS)
    assert cube.edge_count == 12
    assert cube.edges[1] == 2


def test_motion(cube):
    cube.move_x(-2.0)
    cube.move_y(-3.0)
    cube.move_z(4.0)
    assert cube.vertices[0] == pytest.approx(-0.254559, abs=EPS)
    assert cube.vertices[1] == pytest.approx(-1.254559, abs=EPS)
    assert cube.vertices[2] == pytest.approx(2.254559, abs=EPS)


def test_rotation(cube):
    cube.rotate_x(-2.0)
    cube.rotate_y(-3.0)
    cube.rotate_z(4.0)
    assert cube.vertices[0] == pytest.approx(-0.700771, abs=EPS)
    assert cube.vertices[1] == pytest.approx(2.7279991, abs=EPS)
    assert cube.vertices[2] == pytest.approx(1.0984681, abs=EPS)


def test_scaling(cube):
    cube.scale(2.0)
    assert cube.vertices[0] == pytest.approx(3.490882, abs=EPS)
    assert cube.vertices[1] == pytest.approx(3.490882, abs=EPS)
    assert cube.vertices[2] == pytest.approx(-3.490882, abs=EPS)


def test_scale_ignores_non_positive_ratio(cube):
    before = list(cube.vertices)
    cube.scale(0.0)
    cube.scale(-2.0)
    assert cube.vertices == before


def test_rotation_keeps_distance_from_origin(cube):
    before = [math.dist((0, 0, 0), cube.vertices[i:i + 3]) for i in range(0, 24, 3)]
    cube.rotate_y(0.7)
    after = [math.dist((0, 0, 0), cube.vertices[i:i + 3]) for i in range(0, 24, 3)]
    assert after == pytest.approx(before)


def test_move_touches_only_its_axis(cube):
    ys = cube.vertices[1::3]
    zs = cube.vertices[2::3]
    cube.move_x(5.0)
    assert cube.vertices[1::3] == ys
    assert cube.vertices[2::3] == zs


def test_face_becomes_six_indices():
    model = parse_obj(["v 0 0 0\n", "v 1 0 0\n", "v 0 1 0\n", "f 1 2 3\n"])
    assert model.edges == [0, 1, 2, 0, 1, 2]


def test_negative_face_indices_count_from_end():
    model = parse_obj(["v 0 0 0\n", "v 1 0 0\n", "v 0 1 0\n", "f -1 -2 -3\n"])
    assert model.edges == [2, 1, 0, 2, 1, 0]


def test_face_with_texture_and_normal_references():
    model = parse_obj(["v 0 0 0\n", "v 1 0 0\n", "v 0 1 0\n", "f 1/1/1 2/2/2 3/3/3\n"])
    assert model.edges == [0, 1, 2, 0, 1, 2]


def test_only_first_three_face_vertices_are_used():
    lines = ["v 0 0 0\n"] * 4 + ["f 1 2 3 4\n"]
    assert parse_obj(lines).edges == [0, 1, 2, 0, 1, 2]


def test_missing_coordinates_are_zero():
    model = parse_obj(["v 1.5\n"])
    assert model.vertices == [1.5, 0.0, 0.0]


def test_unreadable_coordinate_is_zero():
    model = parse_obj(["v abc 2 3\n"])
    assert model.vertices == [0.0, 0.0, 0.0]


def test_short_face_is_rejected():
    with pytest.raises(ObjFormatError):
        parse_obj(["v 0 0 0\n", "v 1 0 0\n", "f 1 2\n"])


def test_other_records_are_ignored():
    model = parse_obj(["# comment\n", "vn 0 0 1\n", "vt 0 1\n", "o thing\n", "v 1 2 3\n"])
    assert model.vertex_count == 1
    assert model.edge_count == 0
    assert model.vertices == [1.0, 2.0, 3.0]


def test_empty_input_gives_empty_model():
    model = parse_obj([])
    assert model == ObjModel()
    assert model.vertex_count == 0