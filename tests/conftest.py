# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and shared fixtures for MemAlchemy tests.
"""

from __future__ import annotations

import pytest

from memalchemy import DataGenerator, MemDb, Relations, ValueCreator

SEED = 20250101


@pytest.fixture
def relations() -> Relations:
    """Fresh key relation registry."""
    return Relations()


@pytest.fixture
def generator(relations: Relations) -> DataGenerator:
    """Seeded generator sharing the ``relations`` fixture."""
    return DataGenerator(seed=SEED, relations=relations)


@pytest.fixture
def value_creator() -> ValueCreator:
    return ValueCreator(seed=SEED)


@pytest.fixture
def db(relations: Relations) -> MemDb:
    """Empty store sharing the ``relations`` fixture."""
    return MemDb(relations)
