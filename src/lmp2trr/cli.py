import argparse
import logging

from lmp2trr import __version__
from lmp2trr.core.errors import ConversionError
from lmp2trr.pipeline import DumpConverter
from lmp2trr.utils.config_manager import ConfigManager

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Convert a LAMMPS dump with columns xu yu zu vx vy vz to a GROMACS trr file.

Assumes an orthorhombic box. Positions are shifted so the box starts at the
origin. With 'real' units, Angstrom and Angstrom/fs become nm and nm/ps; the
trr time of each frame is step * dt."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='lmp2trr', description=DESCRIPTION,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('-v', '--verbose', action='store_true', default=None, help='Produce verbose output.')
    parser.add_argument('-f', '--lammpstrj', dest='input_path', metavar='FILE',
                        help='Input LAMMPS dump, plain or .gz (default: traj.dump).')
    parser.add_argument('-o', '--trr', dest='output_path', metavar='FILE',
                        help='Output trr trajectory (default: traj.trr).')
    parser.add_argument('-d', '--dt', dest='timestep', type=float,
                        help='Time per LAMMPS step written to the trr file (default: 0.001 ps).')
    parser.add_argument('--units', help="LAMMPS unit style of the dump: 'real' or 'metal' (default: real).")
    parser.add_argument('--column-policy', dest='column_policy',
                        help="Column matching: 'exact' names or legacy two-letter 'prefix' (default: exact).")
    parser.add_argument('--progress', action='store_true', default=None, help='Show a progress bar.')
    parser.add_argument('--config', type=str, help='Path to YAML configuration file.')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        cfg_mgr = ConfigManager(args.config)
        cfg_mgr.update_config({k: v for k, v in vars(args).items() if k != 'config'})
    except (FileNotFoundError, ValueError, OSError) as e:
        logger.error(f"Configuration error: {e}")
        raise SystemExit(1)
    config = cfg_mgr.to_dict()

    if config['verbose']:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug(f"Configuration: {cfg_mgr.to_json()}")

    try:
        converter = DumpConverter(config['input_path'], config['output_path'],
                                  timestep=config['timestep'], units=config['units'],
                                  column_policy=config['column_policy'], progress=config['progress'])
        summary = converter.run()
    except ConversionError as e:
        logger.error(f"{type(e).__name__}: {e}")
        raise SystemExit(1)

    logger.info(f"Converted {summary.frames_written} frames of {summary.n_atoms} atoms "
                f"({summary.frames_skipped} skipped).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
