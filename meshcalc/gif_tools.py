"""Command-line tools: write a demo animation and split a GIF into PNG frames."""

from __future__ import annotations

import argparse
import sys
from os import PathLike
from pathlib import Path
from typing import Optional, Sequence, Union

from PIL import Image, ImageDraw

from meshcalc.gif_codec import GifFormatError, load_gif, save_gif
from meshcalc.gifimage import GifImage

DEMO_COLORS = [
    0xFFFFFFFF,
    0xFF000000,
    0xFFFF0000,
    0xFF00FF00,
    0xFF0000FF,
    0xFFFFFF00,
    0xFF00FFFF,
    0xFFFF00FF,
]


def create_demo(path: Union[str, PathLike]) -> GifImage:
    """Write a ten-frame demo animation to ``path`` and return it."""
    gif = GifImage((300, 300))
    gif.set_global_color_table(DEMO_COLORS, (0, 0, 0))
    gif.default_transparent_color = (0, 0, 0)
    gif.default_delay = 100

    image = Image.new("RGB", (100, 100), (0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.text((15, 4), "Qt", fill=(255, 0, 0))
    draw.rectangle((20, 20, 80, 80), outline=(255, 0, 0))

    for step in range(10):
        gif.add_frame(image, (step * 20, step * 20))
    save_gif(gif, path)
    return gif


def extract_frames(
    path: Union[str, PathLike], out_dir: Optional[Union[str, PathLike]] = None
) -> list[str]:
    """Save every frame of a GIF as ``<name>_<n>.png`` and describe each one."""
    source = Path(path)
    target = Path(out_dir) if out_dir is not None else source.parent
    target.mkdir(parents=True, exist_ok=True)
    gif = load_gif(source)
    lines = []
    for index in range(gif.frame_count()):
        image = gif.frame(index)
        x, y = gif.frame_offset(index)
        lines.append(
            f"Frame {index}: size {image.width}X{image.height} at ({x}, {y})"
        )
        image.save(target / f"{source.stem}_{index}.png")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``create`` or ``extract`` command."""
    parser = argparse.ArgumentParser(prog="meshcalc-gif", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)
    create = commands.add_parser("create", help="write the demo animation")
    create.add_argument("output", type=Path)
    extract = commands.add_parser("extract", help="save the frames of a GIF as PNG")
    extract.add_argument("input", type=Path)
    extract.add_argument("-o", "--out-dir", type=Path, default=None)
    args = parser.parse_args(argv)

    try:
        if args.command == "create":
            gif = create_demo(args.output)
            print(f"Wrote {gif.frame_count()} frames to {args.output}")
        else:
            for line in extract_frames(args.input, args.out_dir):
                print(line)
    except (OSError, GifFormatError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())