"""
Setup script for scimath-core

This setup.py is primarily for compatibility. The main configuration is in
pyproject.toml. It supplies the version (read from the package) and the long
description so both stay in one place.
"""

from pathlib import Path
from setuptools import setup


# Read version from src/scimath/__init__.py
def get_version():
    version_file = Path("src/scimath/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    version=get_version(),
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    zip_safe=False,
)
