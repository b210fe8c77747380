#!/usr/bin/env python3
# =============================================================================
#  constprop — setup.py  (legacy compatibility shim)
#
#  All authoritative metadata lives in pyproject.toml.
#  This file exists so that `pip install -e .` works on older pip /
#  setuptools that pre-date PEP 660 editable installs.
#
#  For new tooling, prefer:
#      pip install -e ".[dev]"
#      python -m build
#      python -m pytest
# =============================================================================

from __future__ import annotations

import re
from pathlib import Path

from setuptools import setup

_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract the version string from pyproject.toml."""
    pyproject = _HERE / "pyproject.toml"
    text = pyproject.read_text(encoding="utf-8")
    match = re.search(r'^version\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _read_requirements() -> list[str]:
    """Read requirements.txt if it exists."""
    req_file = _HERE / "requirements.txt"
    if req_file.exists():
        lines = req_file.read_text(encoding="utf-8").splitlines()
        return [
            ln.strip()
            for ln in lines
            if ln.strip() and not ln.strip().startswith("#")
        ]
    return []


setup(
    name="constprop",
    version=_read_version(),
    packages=["constprop"],
    python_requires=">=3.10",
    install_requires=_read_requirements(),
    extras_require={
        "test": ["pytest>=7.0", "hypothesis>=6.0"],
    },
    entry_points={
        "console_scripts": [
            "constprop=constprop.main:main",
        ],
    },
    zip_safe=False,
)
