"""
lmp2trr: convert LAMMPS dump trajectories to GROMACS TRR files.
"""

__version__ = "0.1.0"

from .core.frame import BoxBounds, FrameRecord, ConvertedFrame, FrameBuffer, FIELDS
from .core.schema import ColumnSchema
from .core.converter import convert_frame, UnitSystem, UNIT_SYSTEMS
from .core.errors import (
    ConversionError,
    OpenError,
    InputOpenError,
    OutputOpenError,
    SchemaIncompleteError,
    MissingColumnError,
    AmbiguousColumnError,
    MalformedSectionError,
    UnsupportedBoxError,
    AtomCountChangedError,
    SinkWriteError,
)
from .io.parser import DumpParser, discover, open_dump
from .io.writer import TRRSink
from .pipeline import DumpConverter, ConversionSummary

__all__ = [
    # Core
    'BoxBounds',
    'FrameRecord',
    'ConvertedFrame',
    'FrameBuffer',
    'FIELDS',
    'ColumnSchema',
    'convert_frame',
    'UnitSystem',
    'UNIT_SYSTEMS',
    # Errors
    'ConversionError',
    'OpenError',
    'InputOpenError',
    'OutputOpenError',
    'SchemaIncompleteError',
    'MissingColumnError',
    'AmbiguousColumnError',
    'MalformedSectionError',
    'UnsupportedBoxError',
    'AtomCountChangedError',
    'SinkWriteError',
    # IO
    'DumpParser',
    'discover',
    'open_dump',
    'TRRSink',
    # Pipeline
    'DumpConverter',
    'ConversionSummary',
]
