[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghostlooper"
version = "0.1.0"
description = "A two-bar, one-button MIDI drum looper with generated ghost notes and fills"
requires-python = ">=3.10"
keywords = ["midi", "looper", "step-sequencer", "drum-machine", "ghost-notes", "tap-tempo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]
dependencies = [
    "mido",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ghostlooper = "ghostlooper.app:main"

[tool.hatch.build.targets.wheel]
packages = ["ghostlooper"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
