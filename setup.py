#!/usr/bin/env python3
"""
Setup script for layerconf package.
"""

from setuptools import setup, find_packages

setup(
    name="layerconf",
    version="0.1.0",
    description="Layered properties configuration with includes, substitution and profiles",
    author="layerconf Team",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "python-dotenv>=1.0",
        "rich>=13.0",
        "typer>=0.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "layerconf=layerconf.cli.main:app",
        ],
    },
)
