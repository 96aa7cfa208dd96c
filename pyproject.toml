[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bitduels"
version = "0.1.0"
description = "Rules, wire protocol, match server and client state for a two-player turn-based card duel on a 5x9 board"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "card game", "turn-based", "strategy", "multiplayer", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Turn Based Strategy",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bitduels-server = "bitduels.server:main"

[tool.hatch.build.targets.wheel]
packages = ["bitduels"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
