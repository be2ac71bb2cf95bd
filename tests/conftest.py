"""
Shared fixtures for the exhibitnet test suite.
"""

from datetime import date

import pytest

from exhibitnet.records.store import RecordStore


@pytest.fixture
def thirties_store():
    """E1 = {A, B, C} and E2 = {B, C, D}, both in 1935."""
    return RecordStore.from_exhibitions({
        "E1": [
            ("A", "German", "Male", date(1935, 3, 1)),
            ("B", "French", "Female", date(1935, 3, 1)),
            ("C", "German", "Female", date(1935, 3, 1)),
        ],
        "E2": [
            ("B", "French", "Female", date(1935, 9, 1)),
            ("C", "German", "Female", date(1935, 9, 1)),
            ("D", "Swiss", None, date(1935, 9, 1)),
        ],
    })


@pytest.fixture
def two_cliques_store():
    """Two four-artist exhibitions joined by one shared two-artist show."""
    day = date(1962, 4, 1)
    return RecordStore.from_exhibitions({
        "left": [(name, "American", "Male", day) for name in ["A", "B", "C", "D"]],
        "right": [(name, "Japanese", "Female", day) for name in ["E", "F", "G", "H"]],
        "bridge": [("D", "American", "Male", day), ("E", "Japanese", "Female", day)],
    })


@pytest.fixture
def multi_decade_store():
    """Records spread over the 1920s, 1930s and 1950s (no 1940s)."""
    return RecordStore.from_exhibitions({
        "E20a": [
            ("A", "German", "Male", date(1925, 1, 1)),
            ("B", "German", "Female", date(1925, 1, 1)),
        ],
        "E30a": [
            ("A", "German", "Male", date(1931, 1, 1)),
            ("B", "German", "Female", date(1931, 1, 1)),
            ("C", "French", "Male", date(1931, 1, 1)),
        ],
        "E30b": [
            ("C", "French", "Male", date(1938, 1, 1)),
            ("D", "Dutch", "Female", date(1938, 1, 1)),
        ],
        "E50a": [
            ("E", "American", "Male", date(1955, 1, 1)),
        ],
    })
