# File: haplorefine/setup.py
# Location: haplorefine/haplorefine/setup.py
"""
Setup script for haplorefine.

This file configures how the package is built, installed, and what
dependencies are required.
"""

import os
from setuptools import setup, find_packages

# Load version from version.py without importing the module
version = {}
with open(os.path.join("haplorefine", "version.py")) as f:
    exec(f.read(), version)

# Read the README for the long description
this_dir = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_dir, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="haplorefine",
    version=version["__version__"],
    description="Checkpointed two-round haplotype-resolved variant calling pipeline.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={"console_scripts": ["haplorefine=haplorefine.cli:main"]},
    include_package_data=True,
    package_data={"haplorefine": ["config.json"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
)
