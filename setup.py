"""Minimal setup.py for mining_outlook package."""

import os
from pathlib import Path

from setuptools import find_packages, setup

# Read the version from _version.py
__version__ = ""
exec(open(os.path.join("mining_outlook", "_version.py")).read())

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="mining_outlook",
    version=__version__,
    description="Monte Carlo cash-flow and foreclosure outlook for a mining operation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mining_outlook", "mining_outlook.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.26",
        "pandas>=2.1",
        "pydantic>=2.5",
        "pyyaml>=6.0.1",
        "scipy>=1.11",
        "tqdm>=4.66",
        "psutil>=5.9",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0",
            "pytest-cov>=4.1",
            "pytest-xdist>=3.5",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
