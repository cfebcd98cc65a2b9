from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import List

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent

# `tests.support` and the src layout both importable without an install
for path in (ROOT_DIR, ROOT_DIR / "src"):
    if str(path) not in sys.path:
        sys.path.append(str(path))


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Scenario ids must be unique; a repeated id silently hides a case."""
    del session, config

    counts = Counter(item.nodeid for item in items)
    duplicates = sorted(nodeid for nodeid, n in counts.items() if n > 1)

    if duplicates:
        listing = "\n".join(f"- {nodeid}" for nodeid in duplicates)
        raise pytest.UsageError(f"Duplicate test ids:\n{listing}")
