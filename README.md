# meshcalc

Two independent parts:

* **Wavefront OBJ meshes** – loading of vertices (`v`) and faces (`f`),
  in-place moves, rotations and scaling, and the state of a model viewer:
  transform controls, projection bounds, colours and a settings file.
* **GIF images** – an in-memory animated GIF with per-frame offsets,
  delays and transparent colours, a pure-Python reader and writer for it,
  and a small command-line tool.

Pillow is the only runtime dependency. The `test` extra installs pytest
for the test suite.

## OBJ meshes

```python
from meshcalc.obj_model import load_obj, ObjFileError

try:
    model = load_obj("cube.obj")
except ObjFileError:
    raise SystemExit("cannot open the file")

print(model.vertex_count, model.edge_count)
model.move_x(-2.0)
model.rotate_y(0.5)     # radians
model.scale(2.0)        # ratios of zero or less are ignored
```

`ObjModel.vertices` is one flat list of coordinates `x0, y0, z0, x1, ...`.
Each face adds six zero-based vertex indices `a, b, c, a, b, c` to
`ObjModel.edges`; `edge_count` is the number of faces read. Only the first
three vertices of a face are used, and negative indices count back from
the last vertex. Missing vertex coordinates are read as zero.

`parse_obj(lines)` builds a model from an iterable of text lines instead
of a path. A face with fewer than three vertices raises `ObjFormatError`;
a file that cannot be opened raises `ObjFileError`. Both derive from
`ObjError`.

### Viewer state

`meshcalc.viewer.ViewerState` holds a loaded model and the viewer's
controls:

```python
from meshcalc.viewer import ViewerState, ProjectionType

state = ViewerState()
state.load_file("cube.obj")      # loads, fits the view, resets the controls
state.set_rotate_x(50)           # applies (50 - previous) / 100 radians
state.set_move_y(-20)            # applies (-20 - previous) / 100
state.set_scale(1000)            # scales the model by 1000 / 500

state.settings.projection = ProjectionType.ORTHOGRAPHIC
left, right, bottom, top, near, far, shift_z = state.projection(800, 600)
```

`set_normalize()` sets `normalize` to the largest absolute coordinate of
the model, and `projection(width, height)` returns a perspective frustum
(with the z shift applied after it) or orthographic bounds scaled by that
extent and the viewport's aspect ratio. A zero height raises `ValueError`.

`ViewSettings` carries the projection (`ProjectionType`), edge style
(`EdgeLineType`), vertex shape (`VertexShape`), line width, point size and
the edge, vertex and background colours as `#rrggbb`. It is stored in the
`[General]` section of an INI file:

```python
from meshcalc.viewer import ViewSettings, default_settings_path

path = default_settings_path()   # $XDG_CONFIG_HOME or ~/.config on Linux,
                                 # next to the running program elsewhere
settings = ViewSettings.load(path)   # missing entries take defaults
settings.save(path)
```

## GIF images

```python
from PIL import Image
from meshcalc.gifimage import GifImage
from meshcalc.gif_codec import load_gif, save_gif

gif = GifImage()
frame = Image.new("RGB", (100, 100), "red")
gif.add_frame(frame, (0, 0), 100)          # offset, delay in milliseconds
save_gif(gif, "out.gif")

loaded = load_gif("out.gif")
print(loaded.frame_count(), loaded.canvas_size(), loaded.frame_delay(0))
```

`GifImage` keeps a global colour table (`0xAARRGGBB` integers), a
background colour, a loop count (0 loops forever), a default delay of
1000 ms and a default transparent colour. Frames are Pillow images;
`add_frame` and `insert_frame` take an optional offset (otherwise the
image's `info["offset"]`, or `(0, 0)`) and a delay, where -1 means the
default delay. The per-frame accessors (`frame`, `frame_offset`,
`frame_delay`, `frame_transparent_color` and their setters) ignore or
return empty values for unknown indices. Without an explicit size the
canvas is the extent of all frames.

`load_gif` reads from a path, a binary file or bytes; `save_gif` writes to
a path or a binary file. Non-indexed frames are mapped to the global
colour table when one is set, and otherwise get a local table of their
own colours (quantized to 256 when there are more). Malformed input
raises `GifFormatError`. `lzw_encode` and `lzw_decode` expose GIF's LZW
coding on its own.

### Command line

```
meshcalc-gif create demo.gif
meshcalc-gif extract demo.gif -o frames/
```

`create` writes a ten-frame, 300×300 demonstration animation with an
eight-colour table. `extract` saves every frame as `<name>_<n>.png`
(next to the input unless `--out-dir` is given) and prints each frame's
size and offset. The same functions are available as `create_demo` and
`extract_frames` in `meshcalc.gif_tools`.

## What is not included

The viewer part keeps state and computes projection bounds only: there
is no window, no drawing of the mesh and no screenshot or recording of
it. Rendering is left to whatever graphics toolkit the caller uses.