from setuptools import setup, find_packages

setup(
    name="lmp2trr",
    version="0.1.0",
    description="Convert LAMMPS dump trajectories with velocities to GROMACS trr files",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy",
        "pyyaml",
        "tqdm",
        "MDAnalysis"
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'lmp2trr=lmp2trr.cli:main',
        ],
    },
    python_requires=">=3.8",
)
