"""Project metadata shared by the runtime and build backend."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Author:
    name: str
    email: Optional[str] = None


PROJECT_METADATA: Mapping[str, object] = {
    "name": "kwise-sketch",
    "version": "0.3.0",
    "summary": "k-wise independent polynomial hashing and Fast-AGMS sketches (deterministic, zero deps)",
    "readme": {
        "path": _PROJECT_ROOT / "README.md",
        "content_type": "text/markdown",
    },
    "requires_python": ">=3.9",
    "license": {
        "text": "Apache-2.0",
        "files": ["LICENSE"],
    },
    "authors": [
        Author(name="kwise-sketch contributors"),
    ],
    "keywords": [
        "sketch",
        "streaming",
        "agms",
        "count-sketch",
        "k-wise-independence",
        "dyadic",
    ],
    "classifiers": [
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    "urls": {},
    "optional-dependencies": {
        "bench": [
            "numpy>=1.22",
            "pandas>=2.0",
            "pytest-benchmark>=4.0",
        ],
        "test": [
            "pytest>=7.4",
            "hypothesis>=6.88",
            "pytest-cov>=4.1",
        ],
    },
}

SUPPORTED_PYTHON_VERSIONS: List[str] = ["3.9", "3.10", "3.11", "3.12"]

__version__ = PROJECT_METADATA["version"]  # type: ignore[index]
