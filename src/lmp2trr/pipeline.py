"""
Dump-to-TRR conversion driver.
"""
import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from tqdm import tqdm

from .core.converter import convert_frame, get_unit_system
from .core.errors import SinkWriteError
from .core.frame import FrameBuffer
from .core.schema import ColumnSchema, POLICIES
from .io.parser import DumpParser, discover, open_dump
from .io.writer import TRRSink

logger = logging.getLogger(__name__)


@dataclass
class ConversionSummary:
    frames_written: int
    frames_skipped: int
    stray_lines: int
    n_atoms: Optional[int]
    schema: ColumnSchema


class DumpConverter:
    """
    Convert a LAMMPS dump with unwrapped positions and velocities to TRR.

    The first frame is read once to discover the atom count and the column
    layout. Those lines are then replayed, followed by the rest of the file,
    through the frame parser; each frame is converted and written in order.
    """

    def __init__(self, input_path: Union[str, Path], output_path: Union[str, Path],
                 timestep: float = 0.001, units: str = 'real', column_policy: str = 'exact',
                 progress: bool = False, sink_factory: Callable = TRRSink):
        if timestep <= 0:
            raise ValueError("timestep must be positive.")
        if column_policy not in POLICIES:
            raise ValueError(f"Unknown column matching policy '{column_policy}'. Must be one of: {list(POLICIES)}")
        self.input_path = Path(input_path)
        self.output_path = Path(output_path)
        self.timestep = timestep
        self.unit_system = get_unit_system(units)
        self.column_policy = column_policy
        self.progress = progress
        self.sink_factory = sink_factory
        self.buffer = FrameBuffer()

    def run(self) -> ConversionSummary:
        logger.info(f"Opening LAMMPS dump {self.input_path}")
        stream = open_dump(self.input_path)
        sink = None
        try:
            lines = iter(stream)
            found = discover(lines, policy=self.column_policy)
            logger.info(f"First frame: {found.n_atoms} atoms, columns "
                        + ", ".join(f"{n}={i}" for n, i in found.schema.indices))

            logger.info(f"Writing TRR trajectory {self.output_path}")
            sink = self.sink_factory(self.output_path)

            parser = DumpParser(found.schema)
            frames = parser.iter_frames(itertools.chain(found.buffered_lines, lines))
            written = 0
            for record in tqdm(frames, desc=f"Converting {self.input_path.name}", unit="fr",
                               disable=not self.progress):
                converted = convert_frame(record, self.timestep, self.unit_system, out=self.buffer)
                try:
                    sink.write_frame(converted)
                except SinkWriteError as e:
                    if e.frame_index is None:
                        raise SinkWriteError(e.message, frame_index=written) from e
                    raise
                written += 1
                logger.debug(f"Frame {written - 1}: step {converted.step}, time {converted.time:g}")
        finally:
            stream.close()
            if sink is not None:
                sink.close()

        if parser.skipped_frames:
            logger.warning(f"{parser.skipped_frames} malformed frame(s) were skipped.")
        logger.info(f"Wrote {written} frames to {self.output_path}")
        return ConversionSummary(frames_written=written,
                                 frames_skipped=parser.skipped_frames,
                                 stray_lines=parser.stray_lines,
                                 n_atoms=self.buffer.n_atoms,
                                 schema=found.schema)
