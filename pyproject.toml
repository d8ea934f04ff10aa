[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshcalc"
version = "0.1.0"
description = "Wavefront OBJ mesh loading and affine transforms, viewer state, and a pure-Python animated GIF reader/writer"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = [
    "obj",
    "wavefront",
    "mesh",
    "affine",
    "projection",
    "gif",
    "animation",
    "lzw",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
meshcalc-gif = "meshcalc.gif_tools:main"

[tool.hatch.build.targets.wheel]
packages = ["meshcalc"]

[tool.hatch.build.targets.sdist]
include = [
    "meshcalc",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
