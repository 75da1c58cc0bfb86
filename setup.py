#!/usr/bin/env python3
"""
Setup configuration for spot-transfer
Copy or reverse-copy Spotify playlists into new or existing playlists
"""

from setuptools import setup, find_packages

# Core requirements (always installed)
core_requirements = [
    "spotipy>=2.23.0",
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "pyyaml>=6.0.1",
    "requests>=2.31.0",
    "tqdm>=4.66.1",
    "python-dotenv>=1.0.0",
]

setup(
    name="spot-transfer",
    version="0.1.0",
    author="spot-transfer Team",
    description="Copy Spotify playlists, optionally in reverse order, skipping duplicates and local files",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "spot-transfer=spot_transfer.cli:main",
        ],
    },
    keywords="spotify playlist copy reverse cli",
)
