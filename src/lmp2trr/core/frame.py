"""
Per-frame data structures for dump-to-TRR conversion.
"""
from dataclasses import dataclass, field
import numpy as np
from typing import Optional

from .errors import AtomCountChangedError

FIELDS = ("pos_x", "pos_y", "pos_z", "vel_x", "vel_y", "vel_z")
POSITION_SLICE = slice(0, 3)
VELOCITY_SLICE = slice(3, 6)


@dataclass
class BoxBounds:
    lo: np.ndarray
    hi: np.ndarray

    def __post_init__(self):
        self.lo = np.asarray(self.lo, dtype=np.float64)
        self.hi = np.asarray(self.hi, dtype=np.float64)
        if self.lo.shape != (3,) or self.hi.shape != (3,):
            raise ValueError(f"Box bounds must be 3-element arrays, got {self.lo.shape} and {self.hi.shape}")

    @property
    def lengths(self) -> np.ndarray:
        return self.hi - self.lo


@dataclass
class FrameRecord:
    step: int
    box: BoxBounds
    raw: np.ndarray  # (n_atoms, 6), columns ordered as FIELDS

    def __post_init__(self):
        if self.raw.ndim != 2 or self.raw.shape[1] != len(FIELDS):
            raise ValueError(f"Raw atom data must be (atoms, {len(FIELDS)}), got {self.raw.shape}")

    @property
    def n_atoms(self) -> int:
        return self.raw.shape[0]

    @property
    def positions(self) -> np.ndarray:
        return self.raw[:, POSITION_SLICE]

    @property
    def velocities(self) -> np.ndarray:
        return self.raw[:, VELOCITY_SLICE]


@dataclass
class ConvertedFrame:
    step: int
    time: float
    box: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray
    lambda_value: float = 0.0

    def __post_init__(self):
        if self.box.shape != (3, 3):
            raise ValueError(f"Box matrix must be 3x3, got {self.box.shape}")
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError("Positions must be 2D (atoms, xyz) and last dimension must be 3.")
        if self.velocities.shape != self.positions.shape:
            raise ValueError("Atom count mismatch: positions, velocities.")

    @property
    def n_atoms(self) -> int:
        return self.positions.shape[0]


@dataclass
class FrameBuffer:
    """
    Reusable per-frame output arrays.

    The arrays are allocated for the first atom count seen and reused for
    every following frame. A different atom count afterwards is an error.
    """
    n_atoms: Optional[int] = None
    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    velocities: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    box: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))

    def reset_or_grow(self, n_atoms: int) -> None:
        if n_atoms < 0:
            raise ValueError(f"Atom count must be non-negative, got {n_atoms}")
        if self.n_atoms is None:
            self.n_atoms = n_atoms
            self.positions = np.zeros((n_atoms, 3), dtype=np.float64)
            self.velocities = np.zeros((n_atoms, 3), dtype=np.float64)
        elif n_atoms != self.n_atoms:
            raise AtomCountChangedError(self.n_atoms, n_atoms)
        self.box.fill(0.0)
