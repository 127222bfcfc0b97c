# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for random scalar value creators.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import numpy as np
import pytest
from pydantic import AwareDatetime

from memalchemy import ValueCreator, ValueCreatorConstants

from .models import Color, Parent

INTEGER_TYPES = [np.int8, np.uint8, np.int16, np.uint16, np.int32, np.uint32, np.int64, np.uint64]


class TestValueCreator:
    """Creators per scalar type."""

    def setup_method(self):
        self.creator = ValueCreator(seed=42)

    def test_seeded_runs_are_reproducible(self):
        """Two creators with the same seed draw the same values."""
        first = ValueCreator(seed=7)
        second = ValueCreator(seed=7)
        assert [first.get(int)("x") for _ in range(5)] == [second.get(int)("x") for _ in range(5)]
        assert first.get(str)("s") == second.get(str)("s")

    def test_string_prefix_and_length(self):
        """The hint is kept verbatim and followed by a fixed-length suffix."""
        value = self.creator.get(str)("Name")
        assert value.startswith("Name")
        assert len(value) == len("Name") + ValueCreatorConstants.STRING_SUFFIX_LENGTH
        assert self.creator.get(str)("Name") != value

    def test_int_range(self):
        for _ in range(50):
            value = self.creator.get(int)("x")
            assert type(value) is int
            assert ValueCreatorConstants.INT_MIN <= value <= ValueCreatorConstants.INT_MAX

    @pytest.mark.parametrize("dtype", INTEGER_TYPES)
    def test_fixed_width_integers(self, dtype):
        """Every numpy width yields a value of exactly that type within its range."""
        info = np.iinfo(dtype)
        for _ in range(20):
            value = self.creator.get(dtype)("x")
            assert type(value) is dtype
            assert int(info.min) <= int(value) <= int(info.max)

    def test_floats(self):
        value = self.creator.get(float)("x")
        assert type(value) is float
        assert abs(value) <= ValueCreatorConstants.FLOAT_SPAN / 2
        assert type(self.creator.get(np.float32)("x")) is np.float32

    def test_decimal_has_two_fraction_digits(self):
        for _ in range(20):
            value = self.creator.get(Decimal)("x")
            assert isinstance(value, Decimal)
            assert value == value.quantize(Decimal("0.01"))
            assert abs(value) <= Decimal(ValueCreatorConstants.DECIMAL_SPAN) / 2

    def test_bool_takes_both_values(self):
        values = {self.creator.get(bool)("x") for _ in range(100)}
        assert values == {True, False}

    def test_uuid_and_bytes(self):
        assert isinstance(self.creator.get(uuid.UUID)("x"), uuid.UUID)
        value = self.creator.get(bytes)("x")
        assert isinstance(value, bytes)
        assert len(value) == ValueCreatorConstants.BYTES_LENGTH

    def test_enum_members(self):
        values = {self.creator.get(Color)("x") for _ in range(100)}
        assert values == set(Color)

    def test_datetime_window(self):
        """Naive datetimes stay within the offset window around now."""
        window = timedelta(milliseconds=ValueCreatorConstants.DATETIME_WINDOW_MS / 2) + timedelta(minutes=1)
        value = self.creator.get(datetime)("x")
        assert value.tzinfo is None
        assert abs(value - datetime.now()) <= window

    def test_aware_datetime_and_date(self):
        assert self.creator.get(AwareDatetime)("x").tzinfo is not None
        assert isinstance(self.creator.get(date)("x"), date)

    def test_optional_gates_with_coin_flip(self):
        """Optional values are sometimes None and otherwise of the inner type."""
        create = self.creator.get(Optional[int])
        values = [create("x") for _ in range(200)]
        assert any(v is None for v in values)
        assert any(isinstance(v, int) for v in values)

    @pytest.mark.parametrize("annotation", [dict, Dict[str, int], List[int], Any, Parent])
    def test_unsupported(self, annotation):
        """Composite and entity types have no creator."""
        assert self.creator.get(annotation) is None

    def test_flip(self):
        assert isinstance(self.creator.flip(), bool)
