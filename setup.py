#!/usr/bin/env python3
"""
Setup script for PressBridge.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="pressbridge",
    version="0.1.0",
    description="Expose MVC controller routes to a CMS router with cached, specificity-ordered matching",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="PressBridge Contributors",
    packages=find_packages(include=["pressbridge", "pressbridge.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "redis": [
            "redis>=5.0.1",
        ],
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Content Management System",
        "Topic :: Software Development :: Libraries :: Application Frameworks",
    ],
    keywords="cms routing mvc controllers bridge async",
)
