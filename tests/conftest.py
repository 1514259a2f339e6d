"""
Shared fixtures for the RTL Converter tests.
"""

import os
import sys
from typing import List

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rtl_converter.backoff import Sleeper
from rtl_converter.channel import RecordingChannel


class RecordingSleeper(Sleeper):
    """Records requested delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def channel():
    return RecordingChannel()
