#!/usr/bin/env python3
"""
KV-LRU Setup Script
===================
Allows installation of the kv-lru package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="kv-lru",
    version="1.0.0",
    packages=find_packages(include=["kvlru", "kvlru.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "kv-lru=kvlru.server:main",
        ],
    },
)
