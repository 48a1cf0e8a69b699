"""
Export modules for 3D printing formats.

Supported formats:
- STL (.stl), binary or ASCII - Understood by every slicer
"""

from .stl_exporter import STLExporter

__all__ = ["STLExporter"]
