"""
Input/Output module for lmp2trr.

This module provides the LAMMPS dump parser and the TRR trajectory sink.
"""

from .parser import DumpParser, discover, open_dump
from .writer import TRRSink

__all__ = ['DumpParser', 'discover', 'open_dump', 'TRRSink']
