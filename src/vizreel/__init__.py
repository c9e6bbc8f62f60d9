"""Vizreel: prompt-to-video rendering of generated 3D visualizations."""

__version__ = "0.1.0"
