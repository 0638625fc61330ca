#!/usr/bin/env python3
"""
packet-headers v1.0.0 - Setup Configuration
===========================================

IPv4/ICMPv4 header marshaling with inline Internet checksums.

Installation:
    python setup.py install

    OR (development mode):
    pip install -e .

    Creates 'pkthdr' console script alias globally.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Core dependencies
REQUIRED_PACKAGES = [
    "scapy>=2.4.5,<2.6",       # PCAP input and packet dissection in the CLI
    "jsonschema>=4.0.0",    # Config file validation
    "colorama>=0.4.4",      # Cross-platform colored output
]

# Optional development dependencies
EXTRAS_REQUIRE = {
    "dev": [
        "pytest>=7.0.0",    # Testing
        "pytest-cov>=4.0.0", # Coverage reporting
        "black>=22.0.0",    # Code formatting
        "pylint>=2.14.0",   # Linting
        "mypy>=0.950",      # Type checking
    ],
    "test": [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
    ],
}

setup(
    # Package Information
    name="packet-headers",
    version="1.0.0",
    description="IPv4/ICMPv4 header marshaling with inline Internet checksums",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Classification
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet",
        "Topic :: System :: Networking",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],

    # Keywords for searching
    keywords=[
        "network",
        "ipv4",
        "icmp",
        "checksum",
        "nat",
        "packet-crafting",
        "tcp-ip",
    ],

    # Package Configuration
    packages=find_packages(exclude=["tests", "tests.*", "docs", "examples"]),

    # Python Version Requirement
    python_requires=">=3.8",

    # Dependencies
    install_requires=REQUIRED_PACKAGES,
    extras_require=EXTRAS_REQUIRE,

    # Entry Points (Console Scripts)
    entry_points={
        "console_scripts": [
            "pkthdr=packet_headers.cli:main",
        ],
    },

    zip_safe=True,
)
