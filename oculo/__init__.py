"""Core of a minimalistic image viewer: shortcuts, settings, thumbnails, painting, view geometry and tiled textures."""

__version__ = "0.9.2"