#!/usr/bin/env python3
"""
Dump Conversion Example

This script converts a LAMMPS dump written with
``dump 1 all custom 100 traj.dump id type xu yu zu vx vy vz``
into a GROMACS trr file, then inspects the first converted frame.
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lmp2trr import DumpConverter, DumpParser, convert_frame, discover, open_dump

def main():
    dump_path = Path("traj.dump")
    trr_path = Path("trr_output") / "traj.trr"

    # Look at the column layout and first frame before converting
    print("Reading first frame...")
    with open_dump(dump_path) as f:
        lines = iter(f)
        found = discover(lines)
        print(f"{found.n_atoms} atoms, columns: {found.schema.as_dict()}")
        parser = DumpParser(found.schema)
        for line in found.buffered_lines + [next(lines) for _ in range(found.n_atoms)]:
            record = parser.feed(line)
        frame = convert_frame(record, timestep=0.001, units="real")
        print(f"step {frame.step}, t = {frame.time} ps, box (nm): {frame.box.diagonal()}")

    # Convert the whole trajectory
    print("Converting...")
    summary = DumpConverter(dump_path, trr_path, timestep=0.001, units="real", progress=True).run()
    print(f"Wrote {summary.frames_written} frames ({summary.frames_skipped} skipped) to {trr_path}")

if __name__ == "__main__":
    main()
