from __future__ import annotations

import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from barsim.core.types import Bar  # noqa: E402
from tests.unit._bars import make_bars  # noqa: E402


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def bars12() -> list[Bar]:
    """12 bars → 10 tradable steps."""

    return make_bars([10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21])
