[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oculo"
version = "0.9.2"
description = "Core of a minimalistic image viewer: shortcuts, settings, thumbnails, painting, view geometry and tiled textures"
requires-python = ">=3.10"
keywords = ["graphics", "image", "viewer", "thumbnails", "shortcuts", "textures"]
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
    "Topic :: Multimedia :: Graphics :: Viewers",
]
dependencies = [
    "pillow",
    "numpy",
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oculo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
