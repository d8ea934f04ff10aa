"""Wavefront OBJ meshes: loading vertices and faces, and affine transforms.

Vertices are kept as one flat list of coordinates ``x0, y0, z0, x1, ...``.
Every face contributes six zero-based vertex indices ``a, b, c, a, b, c``.
Read in pairs, they are the three edges of the face's first triangle.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field
from os import PathLike
from typing import Iterable, Union

_C_SPACE = "[ \t\n\r\f\v]*"
_FLOAT = re.compile(
    _C_SPACE
    + r"([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT = re.compile(_C_SPACE + r"([+-]?\d+)")


class ObjError(Exception):
    """Base class for OBJ loading failures."""


class ObjFileError(ObjError):
    """The OBJ file could not be opened."""


class ObjFormatError(ObjError, ValueError):
    """A record in the OBJ data is malformed."""


def _single(value: float) -> float:
    """Round a number to single precision."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_vertex(text: str) -> list[float]:
    """Read up to three coordinates; missing or unreadable ones are zero."""
    values: list[float] = []
    pos = 0
    while len(values) < 3:
        match = _FLOAT.match(text, pos)
        if match:
            values.append(float(match.group(1)))
            pos = match.end()
        else:
            values.append(0.0)
        while pos < len(text) and text[pos] in " \t":
            pos += 1
        if pos >= len(text):
            break
    return values + [0.0] * (3 - len(values))


def _parse_face(line: str, vertex_total: int, line_number: int) -> list[int]:
    """Read the first three vertex references of a face record."""
    indices: list[int] = []
    pos = 0
    while len(indices) < 3:
        space = line.find(" ", pos)
        if space < 0:
            raise ObjFormatError(
                f"line {line_number}: face needs at least three vertices"
            )
        match = _INT.match(line, space)
        if match:
            index = int(match.group(1))
            pos = match.end()
        else:
            index = 0
            pos = space
        indices.append(vertex_total + index if index < 0 else index - 1)
    return indices + indices


@dataclass
class ObjModel:
    """A mesh: flat vertex coordinates and flat edge index lists."""

    vertices: list[float] = field(default_factory=list)
    edges: list[int] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        """Number of vertices."""
        return len(self.vertices) // 3

    @property
    def edge_count(self) -> int:
        """Number of faces read; each one holds six edge indices."""
        return len(self.edges) // 6

    def _shift(self, axis: int, value: float) -> None:
        value = _single(value)
        self.vertices[axis::3] = [coord + value for coord in self.vertices[axis::3]]

    def move_x(self, value: float) -> None:
        """Translate every vertex along the x axis."""
        self._shift(0, value)

    def move_y(self, value: float) -> None:
        """Translate every vertex along the y axis."""
        self._shift(1, value)

    def move_z(self, value: float) -> None:
        """Translate every vertex along the z axis."""
        self._shift(2, value)

    def rotate_x(self, angle: float) -> None:
        """Rotate every vertex about the x axis by ``angle`` radians."""
        angle = _single(angle)
        cos, sin = math.cos(angle), math.sin(angle)
        ys, zs = self.vertices[1::3], self.vertices[2::3]
        self.vertices[1::3] = [y * cos - z * sin for y, z in zip(ys, zs)]
        self.vertices[2::3] = [y * sin + z * cos for y, z in zip(ys, zs)]

    def rotate_y(self, angle: float) -> None:
        """Rotate every vertex about the y axis by ``angle`` radians."""
        angle = _single(angle)
        cos, sin = math.cos(angle), math.sin(angle)
        xs, zs = self.vertices[0::3], self.vertices[2::3]
        self.vertices[0::3] = [cos * x + sin * z for x, z in zip(xs, zs)]
        self.vertices[2::3] = [cos * z - sin * x for x, z in zip(xs, zs)]

    def rotate_z(self, angle: float) -> None:
        """Rotate every vertex about the z axis by ``angle`` radians."""
        angle = _single(angle)
        cos, sin = math.cos(angle), math.sin(angle)
        xs, ys = self.vertices[0::3], self.vertices[1::3]
        self.vertices[0::3] = [cos * x - sin * y for x, y in zip(xs, ys)]
        self.vertices[1::3] = [cos * y + sin * x for x, y in zip(xs, ys)]

    def scale(self, ratio: float) -> None:
        """Multiply every coordinate by ``ratio``; non-positive ratios are ignored."""
        ratio = _single(ratio)
        if ratio > 0:
            self.vertices[:] = [coord * ratio for coord in self.vertices]


def parse_obj(lines: Iterable[str]) -> ObjModel:
    """Build a model from the ``v`` and ``f`` records of OBJ text lines."""
    lines = list(lines)
    vertex_total = sum(1 for line in lines if line.startswith("v "))
    model = ObjModel()
    for number, line in enumerate(lines, start=1):
        if line.startswith("v "):
            model.vertices.extend(_parse_vertex(line[2:]))
        elif line.startswith("f "):
            model.edges.extend(_parse_face(line, vertex_total, number))
    return model


def load_obj(path: Union[str, PathLike]) -> ObjModel:
    """Read a model from an OBJ file."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except OSError as exc:
        raise ObjFileError(f"cannot open {path}: {exc}") from exc
    return parse_obj(lines)