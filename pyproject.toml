[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rasterload"
version = "0.1.0"
description = "Decoders for PNM, TGA, QOI, XCF, TIFF and WebP images into simple in-memory pixel surfaces"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = [
    "image",
    "decoder",
    "pnm",
    "tga",
    "qoi",
    "xcf",
    "tiff",
    "webp",
    "svg",
    "surface",
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pillow",
]

[tool.hatch.build.targets.wheel]
packages = ["rasterload"]

[tool.hatch.build.targets.sdist]
include = [
    "rasterload",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
