from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    """
    Allow running `pytest inkbridge/tests` without installing the package.

    pytest may change the working directory during collection, so the
    repository root is not always on sys.path and `import inkbridge` fails.
    """

    repo_root = Path(__file__).resolve().parents[2]
    sys.path.insert(0, str(repo_root))
