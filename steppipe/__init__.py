"""Sensor measurement pipeline: typed headers, filter chains, processor nodes, a sample pool and a processing manager."""

__version__ = "0.1.0"