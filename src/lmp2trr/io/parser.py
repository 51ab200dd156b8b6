"""
Streaming parser for LAMMPS text dumps.

A dump is a sequence of ``ITEM:`` marker lines, each followed by a body of a
known number of lines. The parser is a small state machine fed one line at a
time: it waits for a marker, reads that marker's body, and emits a
FrameRecord whenever an ATOMS body completes an intact frame.
"""
import gzip
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Union

import numpy as np

from ..core.errors import (InputOpenError, MalformedSectionError,
                           SchemaIncompleteError, UnsupportedBoxError)
from ..core.frame import BoxBounds, FrameRecord, FIELDS
from ..core.schema import ColumnSchema

logger = logging.getLogger(__name__)

ITEM_PREFIX = 'ITEM:'
ATOM_COUNT = 'ITEM: NUMBER OF ATOMS'
TIMESTEP = 'ITEM: TIMESTEP'
BOX_BOUNDS = 'ITEM: BOX BOUNDS'
ATOMS = 'ITEM: ATOMS'
# Single-line sections written by some LAMMPS versions; read and ignored.
IGNORED_ITEMS = ('ITEM: TIME', 'ITEM: UNITS')

# Body kinds
COUNT, STEP, BOX, ATOM_DATA, IGNORED, DISCARD = 'count', 'step', 'box', 'atoms', 'ignored', 'discard'


def open_dump(path: Union[str, Path]) -> TextIO:
    """Open a plain or gzip-compressed dump file for reading text."""
    path = Path(path)
    try:
        if path.suffix.lower() == '.gz':
            return gzip.open(path, 'rt')
        return open(path, 'r')
    except OSError as e:
        raise InputOpenError(f"Cannot open LAMMPS dump '{path}': {e}", path=str(path)) from e


@dataclass
class DiscoveryResult:
    schema: ColumnSchema
    n_atoms: int
    buffered_lines: List[str] = field(default_factory=list)


def discover(lines: Iterator[str], policy: str = 'exact') -> DiscoveryResult:
    """
    Read the start of a dump until the atom count and ATOMS header are known.

    Consumed lines are kept in ``buffered_lines`` so the streaming stage can
    replay them ahead of the rest of ``lines``.

    Raises:
        SchemaIncompleteError: If the input ends before both were seen
        MissingColumnError: If the header lacks a required column
    """
    buffered = []
    n_atoms = None
    schema = None
    expect_count = False

    for line in lines:
        buffered.append(line)
        text = line.strip()
        if expect_count:
            expect_count = False
            try:
                n_atoms = int(text)
            except ValueError:
                logger.warning(f"Unreadable atom count at line {len(buffered)}: '{text}'")
        elif text.startswith(ATOM_COUNT):
            expect_count = True
        elif text.startswith(ATOMS) and schema is None:
            schema = ColumnSchema.from_header(text.split(), leading=2, policy=policy)

        if n_atoms is not None and schema is not None:
            logger.debug(f"Discovery finished after {len(buffered)} lines: {n_atoms} atoms.")
            return DiscoveryResult(schema, n_atoms, buffered)

    missing = []
    if n_atoms is None:
        missing.append(f"'{ATOM_COUNT}'")
    if schema is None:
        missing.append(f"'{ATOMS}' header")
    raise SchemaIncompleteError(f"Input ended before {' and '.join(missing)} was found")


class DumpParser:
    """Line-fed state machine turning dump text into FrameRecords."""

    def __init__(self, schema: ColumnSchema):
        self.schema = schema
        self._columns = schema.columns
        self._min_tokens = schema.min_tokens

        self.line_number = 0
        self.frames_emitted = 0
        self.skipped_frames = 0
        self.stray_lines = 0

        self.n_atoms: Optional[int] = None
        self._kind: Optional[str] = None
        self._remaining = 0
        self._reset_frame()

    def _reset_frame(self) -> None:
        self._step: Optional[int] = None
        self._box: Optional[List[List[float]]] = None
        self._rows: List[List[float]] = []
        self._corrupt: Optional[MalformedSectionError] = None

    def feed(self, line: str) -> Optional[FrameRecord]:
        """Consume one line; return a FrameRecord when it completes a frame."""
        self.line_number += 1
        text = line.strip()

        if self._kind is None:
            return self._dispatch_marker(text)

        if text.startswith(ITEM_PREFIX):
            self._interrupt()
            return self._dispatch_marker(text)

        if self._kind == DISCARD:
            return None
        return self._read_body(text)

    def finish(self) -> None:
        """Signal end of input; reports a truncated trailing frame."""
        if self._kind == ATOM_DATA:
            self._mark_corrupt(f"input ended after {len(self._rows)} of {self.n_atoms} atom lines")
            self._kind = None
            self._complete_frame()
        elif self._step is not None or self._box is not None:
            self.skipped_frames += 1
            logger.warning(f"Input ended inside a frame (step {self._step}); the partial frame was skipped.")
            self._reset_frame()
        self._kind = None

    def _begin(self, kind: str, n_lines: Optional[int]) -> None:
        self._kind = kind
        self._remaining = n_lines

    def _mark_corrupt(self, reason: str) -> None:
        if self._corrupt is None:
            self._corrupt = MalformedSectionError(reason, self.line_number)
            logger.debug(f"Malformed dump data: {self._corrupt.message}")

    def _interrupt(self) -> None:
        if self._kind == ATOM_DATA:
            self._mark_corrupt(f"ATOMS section ended after {len(self._rows)} of {self.n_atoms} lines")
            self._kind = None
            self._complete_frame()
        elif self._kind in (COUNT, STEP, BOX):
            self._mark_corrupt(f"section body ended early ({self._remaining} line(s) missing)")
        self._kind = None

    def _dispatch_marker(self, text: str) -> Optional[FrameRecord]:
        if not text:
            return None

        if text.startswith(ATOM_COUNT):
            self._begin(COUNT, 1)
        elif text.startswith(TIMESTEP):
            self._begin(STEP, 1)
        elif text.startswith(BOX_BOUNDS):
            flags = text[len(BOX_BOUNDS):].split()
            if len(flags) not in (0, 3):
                raise UnsupportedBoxError(f"line {self.line_number}: only orthorhombic boxes are supported, got '{text}'")
            self._box = []
            self._begin(BOX, 3)
        elif text.startswith(ATOMS):
            if self.n_atoms is None:
                self._mark_corrupt("ATOMS section without a preceding atom count")
                self._kind = None
                self._complete_frame()
                self._begin(DISCARD, None)
                return None
            if tuple(text.split()[2:]) != self.schema.header:
                self._mark_corrupt(f"ATOMS header differs from the first frame: '{text}'")
            self._rows = []
            self._begin(ATOM_DATA, self.n_atoms)
            if self.n_atoms == 0:
                self._kind = None
                return self._complete_frame()
        elif text in IGNORED_ITEMS:
            self._begin(IGNORED, 1)
        elif text.startswith(ITEM_PREFIX):
            logger.warning(f"Unknown section '{text}' at line {self.line_number}; its body is ignored.")
            self._begin(DISCARD, None)
        else:
            self.stray_lines += 1
            logger.warning(f"Unexpected data at line {self.line_number} outside any section: '{text}'")
        return None

    def _read_body(self, text: str) -> Optional[FrameRecord]:
        kind = self._kind
        try:
            if kind == COUNT:
                self.n_atoms = self._parse_int(text, 'atom count')
            elif kind == STEP:
                self._step = self._parse_int(text, 'timestep')
            elif kind == BOX:
                self._box.append(self._parse_box_row(text))
            elif kind == ATOM_DATA:
                self._rows.append(self._parse_atom_row(text))
        except MalformedSectionError as e:
            self._mark_corrupt(e.reason)
            if kind == COUNT:
                self.n_atoms = None

        self._remaining -= 1
        if self._remaining > 0:
            return None
        self._kind = None
        if kind == ATOM_DATA:
            return self._complete_frame()
        return None

    def _parse_int(self, text: str, what: str) -> int:
        try:
            return int(text)
        except ValueError:
            raise MalformedSectionError(f"invalid {what} '{text}'", self.line_number) from None

    def _parse_box_row(self, text: str) -> List[float]:
        tokens = text.split()
        if len(tokens) != 2:
            raise MalformedSectionError(f"box bounds line needs 'lo hi', got '{text}'", self.line_number)
        try:
            return [float(tokens[0]), float(tokens[1])]
        except ValueError:
            raise MalformedSectionError(f"non-numeric box bounds '{text}'", self.line_number) from None

    def _parse_atom_row(self, text: str) -> List[float]:
        tokens = text.split()
        if len(tokens) < self._min_tokens:
            raise MalformedSectionError(
                f"atom line has {len(tokens)} columns, at least {self._min_tokens} needed", self.line_number)
        try:
            return [float(tokens[i]) for i in self._columns]
        except ValueError:
            raise MalformedSectionError(f"non-numeric atom data '{text}'", self.line_number) from None

    def _complete_frame(self) -> Optional[FrameRecord]:
        if self._corrupt is None and self._step is None:
            self._mark_corrupt("frame has no TIMESTEP section")
        if self._corrupt is None and (self._box is None or len(self._box) != 3):
            self._mark_corrupt("frame has no complete BOX BOUNDS section")

        record = None
        if self._corrupt is not None:
            self.skipped_frames += 1
            logger.warning(f"Skipping frame (step {self._step}): {self._corrupt.message}")
        else:
            box = np.asarray(self._box, dtype=np.float64)
            raw = np.asarray(self._rows, dtype=np.float64).reshape(len(self._rows), len(FIELDS))
            record = FrameRecord(step=self._step, box=BoxBounds(lo=box[:, 0], hi=box[:, 1]), raw=raw)
            self.frames_emitted += 1
        self._reset_frame()
        return record

    def iter_frames(self, lines: Iterable[str]) -> Iterator[FrameRecord]:
        for line in lines:
            record = self.feed(line)
            if record is not None:
                yield record
        self.finish()
