"""
Setup script for PitchMechanics package.

PitchMechanics: ingestion of baseball pitching motion capture exports into a
synchronised, frame-indexed dataset with derived pitching biomechanics.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pitchmechanics",
    version="0.1.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Motion capture ingestion and biomechanics for baseball pitching",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/PitchMechanics",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",
        "matplotlib>=3.3.0",
        "torch>=1.12.0",
        "torch-geometric>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "black>=21.0",
            "flake8>=3.9",
            "mypy>=0.910",
        ],
    },
)
