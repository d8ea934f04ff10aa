"""Reading and writing GIF files for :class:`~meshcalc.gifimage.GifImage`.

The variable-length LZW coding used by GIF image data is implemented here,
together with the block structure of the file: header, colour tables,
graphics control and application extensions, and image descriptors.
"""

from __future__ import annotations

import struct
from os import PathLike
from typing import BinaryIO, Iterable, Iterator, Optional, Union

from PIL import Image

from meshcalc.gifimage import GifFrame, GifImage, color_table_from_palette

MAX_CODE_BITS = 12
MAX_CODES = 1 << MAX_CODE_BITS
_INTERLACE_PASSES = ((0, 8), (4, 8), (2, 4), (1, 2))
_NETSCAPE = b"NETSCAPE2.0"
_SIGNATURES = (b"GIF87a", b"GIF89a")
_COLOR_RESOLUTION_BITS = 0x70  # colour resolution of 8 bits
_OPAQUE = 0xFF000000

Rgb = tuple[int, int, int]
Source = Union[str, PathLike, bytes, bytearray, memoryview, BinaryIO]
Target = Union[str, PathLike, BinaryIO]


class GifFormatError(ValueError):
    """The data is not a well-formed GIF file."""


class _BitWriter:
    """Packs variable-width codes least significant bit first."""

    def __init__(self) -> None:
        self._out = bytearray()
        self._acc = 0
        self._bits = 0

    def write(self, code: int, size: int) -> None:
        self._acc |= code << self._bits
        self._bits += size
        while self._bits >= 8:
            self._out.append(self._acc & 0xFF)
            self._acc >>= 8
            self._bits -= 8

    def finish(self) -> bytes:
        if self._bits:
            self._out.append(self._acc & 0xFF)
        return bytes(self._out)


def lzw_encode(indices: Iterable[int], min_code_size: int) -> bytes:
    """Compress colour indices into a GIF LZW code stream (without sub-blocks).

    The stream starts with a clear code and ends with an end-of-information
    code; the code table is cleared whenever it fills up.
    """
    if not 2 <= min_code_size <= 8:
        raise ValueError(f"minimum code size must be within 2..8, got {min_code_size}")
    clear = 1 << min_code_size
    end = clear + 1
    writer = _BitWriter()
    size = min_code_size + 1
    next_code = end + 1
    table: dict[tuple[int, int], int] = {}
    writer.write(clear, size)
    prefix: Optional[int] = None
    for index in indices:
        if not 0 <= index < clear:
            raise ValueError(f"index {index} does not fit {min_code_size} bits")
        if prefix is None:
            prefix = index
            continue
        key = (prefix, index)
        code = table.get(key)
        if code is not None:
            prefix = code
            continue
        writer.write(prefix, size)
        table[key] = next_code
        next_code += 1
        if next_code > (1 << size) and size < MAX_CODE_BITS:
            size += 1
        if next_code == MAX_CODES:
            writer.write(clear, size)
            table.clear()
            size = min_code_size + 1
            next_code = end + 1
        prefix = index
    if prefix is not None:
        writer.write(prefix, size)
        # The decoder adds one more entry on reading this code.
        if next_code + 1 > (1 << size) and size < MAX_CODE_BITS:
            size += 1
    writer.write(end, size)
    return writer.finish()


def lzw_decode(data: bytes, min_code_size: int) -> bytes:
    """Expand a GIF LZW code stream into colour indices.

    Decoding stops at the end-of-information code or when the data runs out.
    """
    if not 2 <= min_code_size <= 11:
        raise GifFormatError(f"invalid LZW minimum code size {min_code_size}")
    clear = 1 << min_code_size
    end = clear + 1
    base: list[bytes] = [bytes([i & 0xFF]) for i in range(clear)] + [b"", b""]
    table = list(base)
    size = min_code_size + 1
    out = bytearray()
    previous: Optional[bytes] = None
    acc = bits = pos = 0
    length = len(data)
    while True:
        while bits < size and pos < length:
            acc |= data[pos] << bits
            bits += 8
            pos += 1
        if bits < size:
            break
        code = acc & ((1 << size) - 1)
        acc >>= size
        bits -= size
        if code == clear:
            table = list(base)
            size = min_code_size + 1
            previous = None
            continue
        if code == end:
            break
        if previous is None:
            if code >= clear:
                raise GifFormatError(f"invalid first code {code}")
            entry = table[code]
        else:
            if code < len(table):
                entry = table[code]
                added = previous + entry[:1]
            elif code == len(table) and len(table) < MAX_CODES:
                entry = added = previous + previous[:1]
            else:
                raise GifFormatError(f"invalid LZW code {code}")
            if len(table) < MAX_CODES:
                table.append(added)
                if len(table) == (1 << size) and size < MAX_CODE_BITS:
                    size += 1
        out += entry
        previous = entry
    return bytes(out)


def _interlaced_rows(height: int) -> list[int]:
    """Row numbers in the order an interlaced image stores them."""
    return [row for start, step in _INTERLACE_PASSES for row in range(start, height, step)]


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self, count: int) -> bytes:
        chunk = self._data[self._pos : self._pos + count]
        if len(chunk) < count:
            raise GifFormatError("unexpected end of GIF data")
        self._pos += count
        return chunk

    def byte(self) -> int:
        return self.read(1)[0]

    def sub_blocks(self) -> Iterator[bytes]:
        while True:
            count = self.byte()
            if count == 0:
                return
            yield self.read(count)

    def color_table(self, packed: int) -> list[Rgb]:
        count = 2 << (packed & 0x07)
        raw = self.read(3 * count)
        return [(raw[i], raw[i + 1], raw[i + 2]) for i in range(0, 3 * count, 3)]


def _read_source(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if hasattr(source, "read"):
        return source.read()
    with open(source, "rb") as handle:
        return handle.read()


def _read_frame(
    reader: _Reader,
    global_rgb: list[Rgb],
    background: int,
    delay_cs: int,
    transparent: int,
) -> GifFrame:
    left, top, width, height, packed = struct.unpack("<HHHHB", reader.read(9))
    local_rgb = reader.color_table(packed) if packed & 0x80 else None
    interlace = bool(packed & 0x40)
    min_code_size = reader.byte()
    raster = lzw_decode(b"".join(reader.sub_blocks()), min_code_size)

    palette = local_rgb if local_rgb is not None else global_rgb
    transparent_color = (
        palette[transparent] if 0 <= transparent < len(palette) else None
    )
    if transparent != -1:
        fill = transparent
    elif global_rgb:
        fill = background
    else:
        fill = 0

    size = width * height
    raster = raster[:size] + bytes([fill & 0xFF]) * max(0, size - len(raster))
    if interlace:
        pixels = bytearray(size)
        for line, row in enumerate(_interlaced_rows(height)):
            pixels[row * width : (row + 1) * width] = raster[line * width : (line + 1) * width]
        raster = bytes(pixels)

    if size:
        image = Image.frombytes("P", (width, height), raster)
    else:
        image = Image.new("P", (width, height))
    if palette:
        image.putpalette([channel for rgb in palette for channel in rgb])
    image.info["offset"] = (left, top)
    if transparent != -1:
        image.info["transparency"] = transparent
    return GifFrame(
        image=image,
        offset=(left, top),
        delay=delay_cs * 10,
        interlace=interlace,
        transparent_color=transparent_color,
    )


def load_gif(source: Source) -> GifImage:
    """Read a GIF from a path, a binary file or raw bytes."""
    reader = _Reader(_read_source(source))
    if reader.read(6) not in _SIGNATURES:
        raise GifFormatError("not a GIF file")
    width, height, packed, background, _aspect = struct.unpack("<HHBBB", reader.read(7))
    global_rgb = reader.color_table(packed) if packed & 0x80 else []

    gif = GifImage((width, height))
    if global_rgb:
        gif.global_color_table = color_table_from_palette(global_rgb)
        if background < len(global_rgb):
            gif.background_color = global_rgb[background]

    delay_cs, transparent = 0, -1
    while True:
        marker = reader.byte()
        if marker == 0x3B:
            break
        if marker == 0x21:
            label = reader.byte()
            blocks = list(reader.sub_blocks())
            if label == 0xF9 and blocks and len(blocks[0]) >= 4:
                flags, delay_cs, index = struct.unpack("<BHB", blocks[0][:4])
                transparent = index if flags & 0x01 else -1
            elif (
                label == 0xFF
                and not gif.frames
                and len(blocks) >= 2
                and blocks[0] == _NETSCAPE
                and len(blocks[1]) == 3
                and blocks[1][0] == 1
            ):
                gif.loop_count = blocks[1][1] | (blocks[1][2] << 8)
            continue
        if marker == 0x2C:
            gif.frames.append(
                _read_frame(reader, global_rgb, background, delay_cs, transparent)
            )
            delay_cs, transparent = 0, -1
            continue
        raise GifFormatError(f"unknown block type 0x{marker:02x}")
    return gif


def _bit_size(count: int) -> int:
    bits = 1
    while (1 << bits) < count:
        bits += 1
    return bits


def _unpack(entry: int) -> Rgb:
    return ((entry >> 16) & 0xFF, (entry >> 8) & 0xFF, entry & 0xFF)


def _table_bytes(table: list[Rgb], bits: int) -> bytes:
    padded = list(table) + [(0, 0, 0)] * ((1 << bits) - len(table))
    return bytes(channel for rgb in padded for channel in rgb)


def _u16(value: int, what: str) -> int:
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{what} {value} does not fit a GIF file")
    return value


def _nearest(color: Rgb, table: list[Rgb]) -> int:
    return min(
        range(len(table)),
        key=lambda i: sum((a - b) ** 2 for a, b in zip(color, table[i])),
    )


def _to_indexed(image: Image.Image, global_rgb: list[Rgb]) -> tuple[bytes, list[Rgb]]:
    """Colour indices of an image and the colour table they refer to."""
    if image.mode == "P":
        indices = image.tobytes()
        palette = image.getpalette() or []
        table: list[Rgb] = [
            (palette[i], palette[i + 1], palette[i + 2])
            for i in range(0, len(palette) - 2, 3)
        ][:256]
        highest = max(indices, default=0)
        if len(table) <= highest:
            table += [(0, 0, 0)] * (highest + 1 - len(table))
        return indices, table
    rgb = image.convert("RGB")
    raw = rgb.tobytes()
    pixels = list(zip(raw[0::3], raw[1::3], raw[2::3]))
    if global_rgb:
        lookup = {color: _nearest(color, global_rgb) for color in set(pixels)}
        return bytes(lookup[pixel] for pixel in pixels), list(global_rgb)
    unique = list(dict.fromkeys(pixels))
    if len(unique) <= 256:
        lookup = {color: index for index, color in enumerate(unique)}
        return bytes(lookup[pixel] for pixel in pixels), unique
    return _to_indexed(rgb.quantize(colors=256, dither=0), global_rgb)


def _encode_frame(
    gif: GifImage, info: GifFrame, position: int, global_rgb: list[Rgb]
) -> bytes:
    if info.image is None:
        raise ValueError(f"frame {position} has no image")
    indices, table = _to_indexed(info.image, global_rgb)
    width, height = info.image.size
    local = table if table and table != global_rgb else None

    block = bytearray()
    if position == 0:
        loop = gif.loop_count
        block += b"\x21\xff\x0b" + _NETSCAPE
        block += bytes([3, 1, loop & 0xFF, (loop >> 8) & 0xFF, 0])

    transparent = gif.transparent_index_of(info)
    delay = info.delay if info.delay != -1 else gif.default_delay
    delay_cs = min(max(delay // 10, 0), 0xFFFF)
    block += struct.pack(
        "<BBBBHBB",
        0x21,
        0xF9,
        4,
        1 if transparent != -1 else 0,
        delay_cs,
        transparent & 0xFF if transparent != -1 else 0,
        0,
    )

    left, top = info.offset
    packed = 0x40 if info.interlace else 0
    if local is not None:
        bits = _bit_size(len(local))
        packed |= 0x80 | (bits - 1)
    else:
        bits = _bit_size(len(global_rgb))
    block += struct.pack(
        "<BHHHHB",
        0x2C,
        _u16(left, "offset"),
        _u16(top, "offset"),
        _u16(width, "width"),
        _u16(height, "height"),
        packed,
    )
    if local is not None:
        block += _table_bytes(local, bits)

    if info.interlace:
        indices = b"".join(
            indices[row * width : (row + 1) * width] for row in _interlaced_rows(height)
        )
    min_code_size = max(2, bits)
    compressed = lzw_encode(indices, min_code_size)
    block.append(min_code_size)
    for start in range(0, len(compressed), 255):
        chunk = compressed[start : start + 255]
        block.append(len(chunk))
        block += chunk
    block.append(0)
    return bytes(block)


def _encode_gif(gif: GifImage) -> bytes:
    width, height = gif.canvas_size()
    if width < 0 or height < 0:
        raise ValueError("canvas size is unknown: no size was given and there are no frames")
    global_rgb = [_unpack(entry) for entry in gif.global_color_table][:256]

    out = bytearray(_SIGNATURES[1])
    packed = _COLOR_RESOLUTION_BITS
    background = 0
    bits = 0
    if global_rgb:
        bits = _bit_size(len(global_rgb))
        packed |= 0x80 | (bits - 1)
        if gif.background_color is not None:
            red, green, blue = gif.background_color
            wanted = _OPAQUE | (red << 16) | (green << 8) | blue
            for index, entry in enumerate(gif.global_color_table[:256]):
                if entry & 0xFFFFFFFF == wanted:
                    background = index
                    break
    out += struct.pack(
        "<HHBBB", _u16(width, "width"), _u16(height, "height"), packed, background, 0
    )
    if global_rgb:
        out += _table_bytes(global_rgb, bits)
    for position, info in enumerate(gif.frames):
        out += _encode_frame(gif, info, position, global_rgb)
    out.append(0x3B)
    return bytes(out)


def save_gif(gif: GifImage, target: Target) -> None:
    """Write ``gif`` to a path or a binary file."""
    data = _encode_gif(gif)
    if hasattr(target, "write"):
        target.write(data)
        return
    with open(target, "wb") as handle:
        handle.write(data)