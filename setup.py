#!/usr/bin/env python3
"""Setup script for ZXplorer."""

from setuptools import setup, find_packages

setup(
    name="zxplorer",
    version="0.3.0",
    description="An interactive editor for ZX-diagrams",
    author="ZXplorer Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "PyGObject>=3.46.0",
        "pycairo>=1.25.0",
        "pyzx>=0.9,<0.10",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zxplorer=zxplorer.launcher:main",
        ],
        "gui_scripts": [
            "zxplorer-gui=zxplorer.launcher:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: GTK",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Physics",
    ],
)
