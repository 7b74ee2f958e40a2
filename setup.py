"""Setup script for execsave Python package."""

from setuptools import setup, find_packages

setup(
    name="execsave",
    version="0.1.0",
    description="Make shebang scripts executable on save - Python Core",
    packages=find_packages(include=["execsave", "execsave.*"]),
    python_requires=">=3.8",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": ["pytest", "black", "mypy"],
        "test": ["pytest"],
    },
)
