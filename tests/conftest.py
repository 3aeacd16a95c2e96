"""Pytest configuration and fixtures."""

import pytest

from src.persistence.storage import MemoryKeyValueStore, StorageService
from tests.factories import CountingStorage


@pytest.fixture
def storage() -> CountingStorage:
    """In-memory storage that records how many saves happened."""
    return CountingStorage()


@pytest.fixture
def memory_storage() -> StorageService:
    return StorageService(MemoryKeyValueStore())
