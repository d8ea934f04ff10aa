"""OBJ mesh loading and transforms, viewer state, and GIF image handling."""

__version__ = "0.1.0"

__all__ = [
    "obj_model",
    "viewer",
    "gifimage",
    "gif_codec",
    "gif_tools",
]