from setuptools import setup, find_packages

setup(
    name="molsolvent",
    version="0.1.0",
    description="Distance, gyration, PBC unwrapping, g(r) and solute volume from LAMMPS dump trajectories",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy",
        "matplotlib",
        "pyyaml",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'molsolvent=molsolvent.cli:main',
        ],
    },
    python_requires=">=3.8",
)
