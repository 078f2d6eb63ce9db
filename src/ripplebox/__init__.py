"""RippleBox: an interactive 2D wave-equation toy with refraction rendering."""

__version__ = "1.0.0"
