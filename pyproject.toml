[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vectrace"
version = "0.1.0"
description = "Read black-and-white bitmaps, decompose them into nested boundary paths, and write curves as SVG, EPS, PostScript, PDF, DXF, GeoJSON or XFig."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bitmap",
    "pbm",
    "bmp",
    "outline",
    "bezier",
    "svg",
    "eps",
    "pdf",
    "dxf",
    "geojson",
    "xfig",
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
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vectrace-checkbin = "vectrace.checkbin:main"

[tool.hatch.build.targets.wheel]
packages = ["vectrace"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
