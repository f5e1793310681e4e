"""Vercel serverless entrypoint.

Vercel imports this file from ``api/`` and serves the module-level ``app``;
the repository root has to be importable for ``tuvung`` to resolve.
"""

import sys
from pathlib import Path

_repo_root = str(Path(__file__).resolve().parent.parent)
if _repo_root not in sys.path:
    sys.path.insert(0, _repo_root)

from tuvung.main import app  # noqa: E402,F401
