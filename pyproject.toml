[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tilecomp"
version = "0.1.0"
description = "Display-independent core of a scrollable-tiling compositor: configuration, animations, frame timing, cursors and IPC types"
requires-python = ">=3.10"
dependencies = []
keywords = ["compositor", "tiling", "window-manager", "kdl", "configuration", "xcursor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tilecomp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
