"""
TRR trajectory sink.

Frames are written with the XDR TRR writer shipped by MDAnalysis. The sink
adds nothing but error translation and lifecycle handling; values are written
as given, in GROMACS units (nm, ps, nm/ps).
"""
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from MDAnalysis.lib.formats.libmdaxdr import TRRFile

from ..core.errors import OutputOpenError, SinkWriteError
from ..core.frame import ConvertedFrame
from ..utils.helpers import ensure_directory

logger = logging.getLogger(__name__)


class TRRSink:
    """Write ConvertedFrames to a GROMACS .trr file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.frames_written = 0
        self._file: Optional[TRRFile] = None
        try:
            ensure_directory(self.path.parent)
            self._file = TRRFile(str(self.path), 'w')
        except OSError as e:
            raise OutputOpenError(f"Cannot open TRR file '{self.path}' for writing: {e}", path=str(self.path)) from e
        logger.debug(f"Opened TRR output {self.path}")

    def write_frame(self, frame: ConvertedFrame) -> None:
        if self._file is None:
            raise SinkWriteError(f"TRR file '{self.path}' is closed", frame_index=self.frames_written)
        try:
            self._file.write(np.ascontiguousarray(frame.positions, dtype=np.float32),
                             np.ascontiguousarray(frame.velocities, dtype=np.float32),
                             None,
                             np.ascontiguousarray(frame.box, dtype=np.float32),
                             int(frame.step),
                             float(frame.time),
                             float(frame.lambda_value),
                             frame.n_atoms)
        except (OSError, ValueError) as e:
            raise SinkWriteError(str(e), frame_index=self.frames_written) from e
        self.frames_written += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug(f"Closed TRR output {self.path} after {self.frames_written} frames")

    def __enter__(self) -> 'TRRSink':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
