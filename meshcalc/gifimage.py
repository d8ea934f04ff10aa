"""An animated GIF held in memory: canvas, colour tables and a list of frames.

Colour tables are lists of ``0xAARRGGBB`` integers.  Single colours are
``(red, green, blue)`` tuples, or ``None`` where no colour is set.  Frames are
Pillow images; indexed (``"P"``) images carry their own colour table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from PIL import Image, ImageColor

Color = tuple[int, int, int]
ColorLike = Union[None, int, str, Sequence[int]]

DEFAULT_DELAY = 1000
_OPAQUE = 0xFF << 24
_RGB_MASK = 0xFFFFFF


def _rgb(color: ColorLike) -> Optional[Color]:
    """Turn a colour given as tuple, name, ``#rrggbb`` or packed int into RGB."""
    if color is None:
        return None
    if isinstance(color, int):
        return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)
    if isinstance(color, str):
        red, green, blue = ImageColor.getrgb(color)[:3]
        return (red, green, blue)
    red, green, blue = (int(channel) for channel in tuple(color)[:3])
    return (red, green, blue)


def _pack(color: Color) -> int:
    red, green, blue = color
    return blue | (green << 8) | (red << 16)


def color_table_from_palette(
    colors: Iterable[Sequence[int]], transparent_index: int = -1
) -> list[int]:
    """Build a colour table from RGB triples.

    Every entry is opaque except the one at ``transparent_index``, whose alpha
    stays zero.
    """
    table = []
    for index, (red, green, blue) in enumerate(colors):
        entry = _pack((red, green, blue))
        if index != transparent_index:
            entry |= _OPAQUE
        table.append(entry)
    return table


@dataclass
class GifFrame:
    """One frame: its image, place on the canvas, delay and transparency."""

    image: Optional[Image.Image] = None
    offset: tuple[int, int] = (0, 0)
    delay: int = -1
    interlace: bool = False
    transparent_color: Optional[Color] = None

    @property
    def color_table(self) -> list[int]:
        """The frame's own colour table; empty unless the image is indexed."""
        if self.image is None or self.image.mode != "P":
            return []
        palette = self.image.getpalette() or []
        triples = [tuple(palette[i : i + 3]) for i in range(0, len(palette) - 2, 3)]
        transparency = self.image.info.get("transparency")
        index = transparency if isinstance(transparency, int) else -1
        return color_table_from_palette(triples, index)


class GifImage:
    """A GIF animation under construction or freshly read."""

    def __init__(self, size: Optional[tuple[int, int]] = None) -> None:
        self.size: Optional[tuple[int, int]] = tuple(size) if size is not None else None
        self.loop_count = 0
        self.default_delay = DEFAULT_DELAY
        self.default_transparent_color: Optional[Color] = None
        self.global_color_table: list[int] = []
        self.background_color: Optional[Color] = None
        self.frames: list[GifFrame] = []

    def set_global_color_table(
        self, colors: Iterable[int], background: ColorLike = None
    ) -> None:
        """Set the global colour table and the background colour.

        The background should be one of the colours in the table.
        """
        self.global_color_table = [int(color) for color in colors]
        self.background_color = _rgb(background)

    @staticmethod
    def _make_frame(
        frame: Image.Image, offset: Optional[Sequence[int]], delay: int
    ) -> GifFrame:
        if offset is None:
            offset = frame.info.get("offset", (0, 0))
        x, y = offset
        return GifFrame(image=frame, offset=(int(x), int(y)), delay=delay)

    def add_frame(
        self,
        frame: Image.Image,
        offset: Optional[Sequence[int]] = None,
        delay: int = -1,
    ) -> None:
        """Append a frame; a delay of -1 means the default delay."""
        self.frames.append(self._make_frame(frame, offset, delay))

    def insert_frame(
        self,
        index: int,
        frame: Image.Image,
        offset: Optional[Sequence[int]] = None,
        delay: int = -1,
    ) -> None:
        """Insert a frame before position ``index``."""
        if not 0 <= index <= len(self.frames):
            raise IndexError(f"frame index {index} out of range")
        self.frames.insert(index, self._make_frame(frame, offset, delay))

    def _frame_at(self, index: int) -> Optional[GifFrame]:
        if 0 <= index < len(self.frames):
            return self.frames[index]
        return None

    def frame_count(self) -> int:
        """Number of frames."""
        return len(self.frames)

    def frame(self, index: int) -> Optional[Image.Image]:
        """The image of frame ``index``, or None when there is no such frame."""
        info = self._frame_at(index)
        return info.image if info is not None else None

    def frame_offset(self, index: int) -> tuple[int, int]:
        """The canvas offset of frame ``index``; (0, 0) when there is none."""
        info = self._frame_at(index)
        return info.offset if info is not None else (0, 0)

    def set_frame_offset(self, index: int, offset: Sequence[int]) -> None:
        """Move frame ``index``; unknown indices are ignored."""
        info = self._frame_at(index)
        if info is not None:
            x, y = offset
            info.offset = (int(x), int(y))

    def frame_delay(self, index: int) -> int:
        """The delay of frame ``index`` in milliseconds; -1 when unset or absent."""
        info = self._frame_at(index)
        return info.delay if info is not None else -1

    def set_frame_delay(self, index: int, delay: int) -> None:
        """Set the delay of frame ``index``; unknown indices are ignored."""
        info = self._frame_at(index)
        if info is not None:
            info.delay = delay

    def frame_transparent_color(self, index: int) -> Optional[Color]:
        """The transparent colour of frame ``index``, or None."""
        info = self._frame_at(index)
        return info.transparent_color if info is not None else None

    def set_frame_transparent_color(self, index: int, color: ColorLike) -> None:
        """Set the colour drawn transparent in frame ``index``."""
        info = self._frame_at(index)
        if info is not None:
            info.transparent_color = _rgb(color)

    def canvas_size(self) -> tuple[int, int]:
        """The canvas size: the one given, else the extent of all frames.

        With no size given and no frames this is (-1, -1).
        """
        if self.size is not None and self.size[0] >= 0 and self.size[1] >= 0:
            return self.size
        width = height = -1
        for info in self.frames:
            if info.image is None:
                continue
            width = max(width, info.image.width + info.offset[0])
            height = max(height, info.image.height + info.offset[1])
        return (width, height)

    def transparent_index_of(self, info: GifFrame) -> int:
        """Palette index of the frame's transparent colour, or -1."""
        color = info.transparent_color
        if color is None:
            color = self.default_transparent_color
        if color is None:
            return -1
        table = info.color_table or self.global_color_table
        wanted = _pack(color)
        for position, entry in enumerate(table):
            if entry & _RGB_MASK == wanted:
                return position
        return -1

    def frame_transparent_index(self, index: int) -> int:
        """Palette index of the transparent colour of frame ``index``, or -1."""
        info = self._frame_at(index)
        return self.transparent_index_of(info) if info is not None else -1