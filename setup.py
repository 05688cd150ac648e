"""setuptools setup for GoodLift.

Install for development:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages

setup(
    name="goodlift",
    version="0.1.0",
    description="Interval timer core (HIIT, yoga flow, cardio) for GoodLift",
    packages=find_packages(include=["goodlift", "goodlift.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "numpy>=1.24",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
