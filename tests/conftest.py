"""Shared fixtures for ProjectBoard tests."""

from datetime import datetime, timezone

import pytest

from projectboard import AppStore, BoardController, Settings

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """A clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def store(clock):
    """Store loaded with the demo board, Alice (admin) logged in."""
    return AppStore.from_seed(Settings(), clock=clock)


@pytest.fixture
def empty_store(clock):
    """Store with no data and nobody logged in."""
    return AppStore(clock=clock)


@pytest.fixture
def controller(store):
    return BoardController(store)


@pytest.fixture
def member_controller(store):
    """Controller with Bob (member) logged in."""
    assert store.login("bob@company.com", "secret")
    return BoardController(store)
