import sys
from pathlib import Path

import pytest

# Make src/family_graph importable without installing the project
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(autouse=True)
def _isolated_config():
    """Config overrides made by one test never leak into the next."""
    from family_graph.config import reset_config

    yield
    reset_config()
