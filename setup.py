#!/usr/bin/env python

from setuptools import setup, find_packages
import re

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = [
        line.strip() for line in f.read().splitlines() if line.strip() and not line.startswith("#")
    ]

# Read version from __init__.py
with open("src/openapi_mcp/__init__.py", "r", encoding="utf-8") as f:
    version_match = re.search(r'__version__ = "(.*?)"', f.read())
    version = version_match.group(1) if version_match else "0.1.0"

setup(
    name="openapi-mcp",
    version=version,
    description="Serve REST APIs described by OpenAPI documents as MCP tools",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "openapi-mcp=openapi_mcp.main:main",
            "twilio-mcp=openapi_mcp.twilio.main:main",
        ],
    },
)
