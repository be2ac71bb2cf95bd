#!/usr/bin/env python3
"""
Setup script for the exhibitnet package.

This setup.py provides a traditional installation method for the
artist co-occurrence network analysis library.
"""

from setuptools import setup, find_packages

# Read the README file
def read_readme():
    """Read README.md for long description."""
    try:
        with open("README.md", "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return "Artist co-occurrence network analysis of exhibition histories"

# Read version from the package __init__.py
def get_version():
    """Extract version from src/exhibitnet/__init__.py."""
    version = {}
    try:
        with open("src/exhibitnet/__init__.py", "r") as f:
            exec(f.read(), version)
        return version.get("__version__", "0.1.0")
    except FileNotFoundError:
        return "0.1.0"

setup(
    name="exhibitnet",
    version=get_version(),
    description="Artist co-occurrence networks, decade metrics and communities from exhibition records",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Sociology",
    ],
    python_requires=">=3.9",
    install_requires=[
        "networkit>=11.0",
        "polars>=1.0.0",
        "numpy>=1.24.0",
        "scipy>=1.10.0",
        "scikit-learn>=1.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.1.0",
            "black>=23.0",
            "mypy>=1.0",
        ],
        "test": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
