from __future__ import annotations

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru():
    """Point loguru back at the real stderr after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.__stderr__, level="INFO")
