"""Viewer state: display settings, transformation controls and projection."""

from __future__ import annotations

import configparser
import os
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from os import PathLike
from pathlib import Path
from typing import Optional, Union

from PIL import ImageColor

from meshcalc.obj_model import ObjModel, load_obj

SETTINGS_FILE_NAME = "Settings.ini"
DEFAULT_SCALE = 500.0
_SECTION = "General"
_INVALID_COLOR = "#000000"


class ProjectionType(IntEnum):
    """How the scene is projected onto the screen."""

    PERSPECTIVE = 0
    ORTHOGRAPHIC = 1


class EdgeLineType(IntEnum):
    """How edges are stroked."""

    SOLID = 0
    DASHED = 1


class VertexShape(IntEnum):
    """How vertices are drawn."""

    NONE = 0
    CIRCLE = 1
    SQUARE = 2


def default_settings_path() -> Path:
    """Where the settings file lives on this platform."""
    if sys.platform.startswith("linux"):
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(base) / SETTINGS_FILE_NAME
    program = sys.argv[0] if sys.argv and sys.argv[0] else ""
    base_dir = Path(program).resolve().parent if program else Path.cwd()
    return base_dir / SETTINGS_FILE_NAME


def _color(value) -> str:
    """Normalise a colour to ``#rrggbb``; unreadable colours become black."""
    try:
        red, green, blue = ImageColor.getrgb(str(value).strip())[:3]
    except ValueError:
        return _INVALID_COLOR
    return f"#{red:02x}{green:02x}{blue:02x}"


def _to_int(text: Optional[str], default: int) -> int:
    if text is None:
        return default
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _to_float(text: Optional[str], default: float) -> float:
    if text is None:
        return default
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _member(kind, value):
    try:
        return kind(int(value))
    except ValueError:
        return kind(0)


@dataclass
class ViewSettings:
    """Display settings kept between sessions."""

    projection: ProjectionType = ProjectionType.PERSPECTIVE
    line_width: float = 1.0
    edge_color: str = "#000000"
    point_size: float = 1.0
    vertex_color: str = "#000000"
    background_color: str = "#FFFFFF"
    edge_line_type: EdgeLineType = EdgeLineType.SOLID
    vertex_shape: VertexShape = VertexShape.NONE

    def __post_init__(self) -> None:
        self.projection = _member(ProjectionType, self.projection)
        self.edge_line_type = _member(EdgeLineType, self.edge_line_type)
        self.vertex_shape = _member(VertexShape, self.vertex_shape)
        self.edge_color = _color(self.edge_color)
        self.vertex_color = _color(self.vertex_color)
        self.background_color = _color(self.background_color)

    @classmethod
    def load(cls, path: Union[str, PathLike]) -> ViewSettings:
        """Read settings from an INI file; missing entries take defaults."""
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        try:
            parser.read(path, encoding="utf-8")
        except (configparser.Error, UnicodeDecodeError):
            return cls()
        section = parser[_SECTION] if parser.has_section(_SECTION) else {}
        defaults = cls()
        return cls(
            projection=_member(
                ProjectionType,
                _to_int(section.get("TypeProjection"), int(defaults.projection)),
            ),
            line_width=_to_float(section.get("ThicknessOfEdge"), defaults.line_width),
            edge_color=section.get("ColorEdge", defaults.edge_color),
            point_size=_to_float(section.get("SizeVertices"), defaults.point_size),
            vertex_color=section.get("ColorVertices", defaults.vertex_color),
            background_color=section.get("ColorBackground", defaults.background_color),
            edge_line_type=_member(
                EdgeLineType,
                _to_int(section.get("EdgeLineType"), int(defaults.edge_line_type)),
            ),
            vertex_shape=_member(
                VertexShape,
                _to_int(section.get("VertexShapeType"), int(defaults.vertex_shape)),
            ),
        )

    def save(self, path: Union[str, PathLike]) -> None:
        """Write the settings to an INI file, creating its directory."""
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        parser[_SECTION] = {
            "TypeProjection": str(int(self.projection)),
            "ThicknessOfEdge": repr(float(self.line_width)),
            "ColorEdge": self.edge_color,
            "SizeVertices": repr(float(self.point_size)),
            "ColorVertices": self.vertex_color,
            "ColorBackground": self.background_color,
            "EdgeLineType": str(int(self.edge_line_type)),
            "VertexShapeType": str(int(self.vertex_shape)),
        }
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            parser.write(handle, space_around_delimiters=False)


@dataclass
class ViewerState:
    """The loaded model together with the viewer's controls.

    The move and rotate controls are absolute positions; changing one applies
    the difference, divided by 100, to the model.  The scale control applies
    the ratio between its new and previous value.
    """

    settings: ViewSettings = field(default_factory=ViewSettings)
    model: Optional[ObjModel] = None
    file_name: str = ""
    is_projected: bool = False
    normalize: float = 0.0
    move_x: float = 0.0
    move_y: float = 0.0
    move_z: float = 0.0
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    rotate_z: float = 0.0
    scale: float = DEFAULT_SCALE

    def load_file(self, path: Union[str, PathLike]) -> ObjModel:
        """Load an OBJ file, fit the view to it and reset the controls."""
        model = load_obj(path)
        self.model = model
        self.file_name = Path(path).name
        self.is_projected = True
        self.set_normalize()
        self.reset_transformation()
        return model

    def set_normalize(self) -> None:
        """Set the view extent to the largest absolute coordinate."""
        vertices = self.model.vertices if self.model is not None else []
        self.normalize = max((abs(coord) for coord in vertices), default=0.0)

    def reset_transformation(self) -> None:
        """Return every control to its default, applying the change to the model."""
        self.set_move_x(0.0)
        self.set_move_y(0.0)
        self.set_move_z(0.0)
        self.set_rotate_x(0.0)
        self.set_rotate_y(0.0)
        self.set_rotate_z(0.0)
        self.set_scale(DEFAULT_SCALE)
        self.settings.point_size = 1.0
        self.settings.line_width = 1.0

    def _step(self, previous: float, value: float, transform) -> float:
        if self.model is not None:
            transform(self.model, (value - previous) / 100.0)
        return value

    def set_scale(self, value: float) -> None:
        """Set the scale control, scaling the model by new / previous."""
        ratio = value / self.scale if self.scale != 0 else value
        if self.model is not None:
            self.model.scale(ratio)
        self.scale = value

    def set_move_x(self, value: float) -> None:
        """Set the x translation control."""
        self.move_x = self._step(self.move_x, value, ObjModel.move_x)

    def set_move_y(self, value: float) -> None:
        """Set the y translation control."""
        self.move_y = self._step(self.move_y, value, ObjModel.move_y)

    def set_move_z(self, value: float) -> None:
        """Set the z translation control."""
        self.move_z = self._step(self.move_z, value, ObjModel.move_z)

    def set_rotate_x(self, value: float) -> None:
        """Set the x rotation control."""
        self.rotate_x = self._step(self.rotate_x, value, ObjModel.rotate_x)

    def set_rotate_y(self, value: float) -> None:
        """Set the y rotation control."""
        self.rotate_y = self._step(self.rotate_y, value, ObjModel.rotate_y)

    def set_rotate_z(self, value: float) -> None:
        """Set the z rotation control."""
        self.rotate_z = self._step(self.rotate_z, value, ObjModel.rotate_z)

    def projection(self, width: float, height: float) -> tuple[float, ...]:
        """The view volume for a viewport of the given size.

        Returns ``(left, right, bottom, top, near, far, translate_z)``; the last
        item is the shift along z applied after a perspective frustum.
        """
        if height == 0:
            raise ValueError("viewport height must not be zero")
        aspect = width / height
        extent = self.normalize
        if self.settings.projection == ProjectionType.PERSPECTIVE:
            return (
                -aspect * extent,
                aspect * extent,
                -extent,
                extent,
                extent,
                1000 * extent,
                -2 * extent,
            )
        return (
            -extent * aspect,
            extent * aspect,
            -extent,
            extent,
            -1000 * extent,
            1000 * extent,
            0.0,
        )