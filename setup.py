"""
setup.py for the fieldviz package.

The package lives under plugins/ without an __init__.py, so it is
listed explicitly instead of discovered.
"""

from setuptools import setup


setup(
    name="fieldviz",
    version="0.1.0",
    description="Animated scientific field renderer: iso-contours, flow particles, colormaps",
    package_dir={"": "plugins"},
    packages=["fieldviz"],
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pygame",
        "scipy",
        "Pillow",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
