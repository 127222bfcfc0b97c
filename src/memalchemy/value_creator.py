# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Random scalar value creators.

``ValueCreator.get(annotation)`` returns a callable taking a name hint and
producing a random value of that type, or ``None`` when the type is not a
supported scalar. All randomness comes from one numpy ``Generator`` owned by
the instance.

:module: value_creator
:synopsis: Random values for scalar, enum and Optional annotations
"""

from __future__ import annotations

import base64
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional

import numpy as np
from pydantic import AwareDatetime

from .constants import ValueCreatorConstants
from .type_analysis import unwrap_optional

logger = logging.getLogger(__name__)

Creator = Callable[[str], Any]


class ValueCreator:
    """
    Factory of random value creators.

    :param rng: numpy random generator to draw from
    :param seed: seed for a new generator when ``rng`` is not given
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def get(self, annotation: Any) -> Optional[Creator]:
        """
        Creator for ``annotation``.

        ``Optional[X]`` produces ``None`` with a fixed probability on every
        call and otherwise delegates to the creator of ``X``.

        :param annotation: Field annotation
        :returns: ``hint -> value`` callable, or ``None`` if unsupported
        """
        inner, optional = unwrap_optional(annotation)
        creator = self._creator_for(inner)
        if creator is None or not optional:
            return creator
        return self._nullable(creator)

    def flip(self) -> bool:
        """Fair coin."""
        return bool(self.rng.integers(0, 2))

    def create_string(self, prefix: str = "") -> str:
        """``prefix`` followed by a fixed-length random suffix."""
        raw = base64.urlsafe_b64encode(self.rng.bytes(ValueCreatorConstants.STRING_RANDOM_BYTES))
        return prefix + raw.decode("ascii")[:ValueCreatorConstants.STRING_SUFFIX_LENGTH]

    # -------------------------------------------------------------------------
    # Creators per type
    # -------------------------------------------------------------------------

    def _creator_for(self, t: Any) -> Optional[Creator]:
        # @@ STEP 1: builtins and stdlib value types, matched exactly
        if t is bool:
            return lambda hint: self.flip()
        if t is int:
            return lambda hint: int(self.rng.integers(
                ValueCreatorConstants.INT_MIN, ValueCreatorConstants.INT_MAX, endpoint=True
            ))
        if t is float:
            return lambda hint: float(self._centered() * ValueCreatorConstants.FLOAT_SPAN)
        if t is Decimal:
            return lambda hint: self._decimal()
        if t is str:
            return self.create_string
        if t is bytes:
            return lambda hint: self.rng.bytes(ValueCreatorConstants.BYTES_LENGTH)
        if t is uuid.UUID:
            return lambda hint: uuid.UUID(bytes=self.rng.bytes(ValueCreatorConstants.UUID_BYTES))
        if t is AwareDatetime:
            return lambda hint: datetime.now(timezone.utc) + self._time_offset()
        if t is datetime:
            return lambda hint: datetime.now() + self._time_offset()
        if t is date:
            return lambda hint: date.today() + timedelta(days=int(self.rng.integers(
                -ValueCreatorConstants.DATE_WINDOW_DAYS, ValueCreatorConstants.DATE_WINDOW_DAYS, endpoint=True
            )))

        if not isinstance(t, type):
            return None

        # @@ STEP 2: enumerations
        if issubclass(t, Enum):
            members = list(t)
            if not members:
                return None
            return lambda hint: members[int(self.rng.integers(0, len(members)))]

        # @@ STEP 3: numpy fixed-width scalars
        if issubclass(t, np.bool_):
            return lambda hint: np.bool_(self.flip())
        if issubclass(t, np.integer):
            info = np.iinfo(t)
            return lambda hint: t(self.rng.integers(info.min, info.max, endpoint=True, dtype=t))
        if issubclass(t, np.floating):
            return lambda hint: t(self._centered() * ValueCreatorConstants.FLOAT_SPAN)

        return None

    def _nullable(self, creator: Creator) -> Creator:
        def create(hint: str) -> Any:
            if self.rng.random() < ValueCreatorConstants.NULL_PROBABILITY:
                return None
            return creator(hint)
        return create

    def _centered(self) -> float:
        return float(self.rng.random()) - 0.5

    def _decimal(self) -> Decimal:
        scale = ValueCreatorConstants.DECIMAL_SCALE
        cents = round(ValueCreatorConstants.DECIMAL_SPAN * self._centered() * scale)
        return Decimal(cents) / Decimal(scale)

    def _time_offset(self) -> timedelta:
        return timedelta(milliseconds=self._centered() * ValueCreatorConstants.DATETIME_WINDOW_MS)


__all__ = ["ValueCreator", "Creator"]
