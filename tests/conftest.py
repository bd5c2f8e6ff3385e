"""Pytest configuration and shared fixtures."""

import uuid

import pytest

from cperlib.record_id import RecordIdGenerator


@pytest.fixture
def fixed_clock():
    """A clock frozen at a known second."""
    return lambda: 1_700_000_000.75


@pytest.fixture
def id_generator(fixed_clock):
    """A fresh record ID generator seeded from the fixed clock."""
    return RecordIdGenerator(clock=fixed_clock)


@pytest.fixture
def fru_id():
    return uuid.UUID("12345678-9abc-def0-1122-334455667788")
