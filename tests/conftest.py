"""Shared fixtures and dump text builders for lmp2trr unit tests."""

import pytest

HEADER = "ITEM: ATOMS id type xu yu zu vx vy vz"

TWO_ATOM_LINES = [
    "1 1 1.0 2.0 3.0 0.1 0.2 0.3",
    "2 1 9.0 8.0 7.0 -0.1 -0.2 -0.3",
]


def make_frame(step, atom_lines, bounds=((0.0, 10.0), (0.0, 10.0), (0.0, 10.0)),
               header=HEADER, n_atoms=None):
    """Text of one dump frame in the order LAMMPS writes it."""
    if n_atoms is None:
        n_atoms = len(atom_lines)
    lines = ["ITEM: TIMESTEP", str(step),
             "ITEM: NUMBER OF ATOMS", str(n_atoms),
             "ITEM: BOX BOUNDS pp pp pp"]
    lines += [f"{lo} {hi}" for lo, hi in bounds]
    lines.append(header)
    lines += list(atom_lines)
    return "\n".join(lines) + "\n"


@pytest.fixture
def two_atom_dump():
    """Single frame from the reference two-atom scenario."""
    return make_frame(100, TWO_ATOM_LINES)


@pytest.fixture
def three_frame_dump():
    return "".join([
        make_frame(0, TWO_ATOM_LINES),
        make_frame(10, ["1 1 1.5 2.5 3.5 0.0 0.0 0.0", "2 1 2.0 2.0 2.0 1.0 1.0 1.0"],
                   bounds=((-5.0, 5.0), (0.0, 20.0), (1.0, 3.0))),
        make_frame(20, TWO_ATOM_LINES),
    ])


class MemorySink:
    """Trajectory sink keeping copies of every written frame."""

    instances = []

    def __init__(self, path):
        self.path = path
        self.frames = []
        self.closed = False
        MemorySink.instances.append(self)

    def write_frame(self, frame):
        self.frames.append({
            'step': frame.step,
            'time': frame.time,
            'box': frame.box.copy(),
            'positions': frame.positions.copy(),
            'velocities': frame.velocities.copy(),
            'lambda': frame.lambda_value,
        })

    def close(self):
        self.closed = True


@pytest.fixture
def memory_sink():
    MemorySink.instances.clear()
    yield MemorySink
    MemorySink.instances.clear()
