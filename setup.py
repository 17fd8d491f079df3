"""Setup script for faceverify package."""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="faceverify",
    version="0.1.0",
    description="Live webcam face verification against a single reference image",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="faceverify developers",
    packages=find_namespace_packages(include=["faceverify", "faceverify.*", "scripts"]),
    python_requires=">=3.9",
    install_requires=[
        "opencv-python>=4.9.0,<5",
        "numpy>=1.26.0",
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "faceverify-live=scripts.verify_live:main",
            "faceverify-crop=scripts.crop_face:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
