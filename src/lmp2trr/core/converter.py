"""
Unit and origin conversion from LAMMPS dump frames to TRR frames.

LAMMPS boxes span [lo, hi] on each axis; GROMACS boxes start at the origin.
Positions are therefore shifted by the box's lower corner before rescaling.
Velocities are only rescaled.
"""
from dataclasses import dataclass
import numpy as np
import logging
from typing import Optional, Union

from .frame import FrameRecord, ConvertedFrame, FrameBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitSystem:
    name: str
    length_divisor: float   # source length / target length
    velocity_factor: float  # target velocity per source velocity


UNIT_SYSTEMS = {
    # Angstrom -> nm, Angstrom/fs -> nm/ps
    'real': UnitSystem('real', 10.0, 100.0),
    # Angstrom -> nm, Angstrom/ps -> nm/ps
    'metal': UnitSystem('metal', 10.0, 0.1),
}


def get_unit_system(units: Union[str, UnitSystem]) -> UnitSystem:
    if isinstance(units, UnitSystem):
        return units
    try:
        return UNIT_SYSTEMS[units]
    except KeyError:
        raise ValueError(f"Unsupported LAMMPS units '{units}'. Must be one of: {list(UNIT_SYSTEMS)}") from None


def convert_frame(record: FrameRecord, timestep: float, units: Union[str, UnitSystem] = 'real',
                  out: Optional[FrameBuffer] = None) -> ConvertedFrame:
    """
    Convert a raw dump frame to target units and a box-local origin.

    Args:
        record: Decoded dump frame
        timestep: Simulated time per step, in target time units
        units: LAMMPS unit style of the dump
        out: Optional buffer whose arrays receive the result

    Returns:
        ConvertedFrame; its arrays alias ``out`` when a buffer is given
    """
    unit_sys = get_unit_system(units)

    if out is None:
        out = FrameBuffer()
    out.reset_or_grow(record.n_atoms)

    np.fill_diagonal(out.box, record.box.lengths / unit_sys.length_divisor)
    np.subtract(record.positions, record.box.lo[None, :], out=out.positions)
    np.divide(out.positions, unit_sys.length_divisor, out=out.positions)
    np.multiply(record.velocities, unit_sys.velocity_factor, out=out.velocities)

    return ConvertedFrame(step=record.step,
                          time=record.step * timestep,
                          box=out.box,
                          positions=out.positions,
                          velocities=out.velocities)
