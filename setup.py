"""Setup script for backwards compatibility.

Modern installations should use pyproject.toml with pip install.
This file is provided for compatibility with older build systems.
"""

from setuptools import setup

if __name__ == "__main__":
    setup()
