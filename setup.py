#!/usr/bin/env python3
# =============================================================================
#  callgraph-info: setup.py
#
#  Install requirements live in requirements.txt; the version lives in
#  callgraph_info/__init__.py.
#
#      pip install -e ".[dev]"
#      python -m pytest
# =============================================================================

from __future__ import annotations

import re
from pathlib import Path

from setuptools import setup, find_packages

_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract ``__version__`` from the package."""
    init = _HERE / "callgraph_info" / "__init__.py"
    text = init.read_text(encoding="utf-8")
    match = re.search(r'^__version__\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _read_long_description() -> str:
    """The package docstring doubles as the project description."""
    init = (_HERE / "callgraph_info" / "__init__.py").read_text(encoding="utf-8")
    match = re.match(r'\s*"""(.*?)"""', init, re.DOTALL)
    return match.group(1).strip() if match else ""


def _read_requirements(name: str = "requirements.txt") -> list[str]:
    """Requirement specifiers from *name*, comments and blanks dropped."""
    specs = []
    for line in (_HERE / name).read_text(encoding="utf-8").splitlines():
        spec = line.split("#", 1)[0].strip()
        if spec:
            specs.append(spec)
    return specs


setup(
    name="callgraph-info",
    version=_read_version(),
    description=(
        "Parser and indexed call-graph store for GCC -fcallgraph-info "
        "dumps, for worst-case stack-depth analysis."
    ),
    long_description=_read_long_description(),
    long_description_content_type="text/x-rst",
    license="MIT",
    author="callgraph-info contributors",
    python_requires=">=3.10",
    packages=find_packages(
        include=[
            "callgraph_info",
            "callgraph_info.*",
        ],
        exclude=[
            "tests",
            "tests.*",
        ],
    ),
    install_requires=_read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.4",
            "mypy>=1.10",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Compilers",
        "Topic :: Software Development :: Embedded Systems",
    ],
    keywords=[
        "gcc",
        "callgraph-info",
        "call-graph",
        "stack-usage",
        "static-analysis",
    ],
    zip_safe=False,
)
