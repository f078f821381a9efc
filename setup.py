#!/usr/bin/env python3
"""
StockSim - Virtual Stock Market Simulator
Setup script for the package.
"""

from pathlib import Path

from setuptools import setup, find_packages

# Package metadata
__version__ = "0.1.0"
__author__ = "StockSim Team"
__email__ = "team@stocksim.dev"

# Read long description from README
long_description = ""
readme_path = Path("README.md")
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as fh:
        long_description = fh.read()

# Setup configuration
setup(
    name="stocksim",
    version=__version__,
    author=__author__,
    author_email=__email__,
    description="Virtual stock market simulator with stochastic prices and resting limit/stop orders",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["stocksim", "stocksim.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Games/Entertainment :: Simulation",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "pyarrow>=13.0.0",
        "pyyaml>=6.0",
        "click>=8.1.7",
    ],
    extras_require={
        "dev": ["pytest>=7.4.0", "black>=23.10.0", "mypy>=1.7.0"],
    },
    entry_points={
        "console_scripts": [
            "stocksim=stocksim.cli:main",
        ],
    },
    zip_safe=False,
)
