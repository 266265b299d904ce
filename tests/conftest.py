from __future__ import annotations

import pytest


@pytest.fixture
def site(tmp_path):
    """A scratch html root, canonicalised so it compares equal to realpath()."""
    return tmp_path.resolve()
