"""
Core module for lmp2trr.

This module provides the frame data structures, column discovery and unit
conversion.
"""

from .frame import BoxBounds, FrameRecord, ConvertedFrame, FrameBuffer, FIELDS
from .schema import ColumnSchema
from .converter import convert_frame, get_unit_system, UnitSystem, UNIT_SYSTEMS

__all__ = [
    'BoxBounds',
    'FrameRecord',
    'ConvertedFrame',
    'FrameBuffer',
    'FIELDS',
    'ColumnSchema',
    'convert_frame',
    'get_unit_system',
    'UnitSystem',
    'UNIT_SYSTEMS',
]
