# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Composite key tuples.

:module: keys
:synopsis: Ordered, hashable primary and foreign key values
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Tuple


@dataclass(frozen=True)
class Keys:
    """
    Ordered fixed-length sequence of key values.

    Two key tuples are equal when their values are pairwise equal. The empty
    tuple is a valid key and equals every other empty tuple.

    :class: Keys
    :synopsis: Composite primary or foreign key value
    """

    values: Tuple[Any, ...] = ()

    @classmethod
    def of(cls, *values: Any) -> "Keys":
        """Build a key from positional values."""
        return cls(tuple(values))

    @classmethod
    def coerce(cls, key: Any) -> "Keys":
        """
        Normalize a user supplied key.

        :param key: A ``Keys`` instance, a tuple of values or a single value
        :returns: The key as ``Keys``
        :rtype: Keys
        """
        if isinstance(key, Keys):
            return key
        if isinstance(key, tuple):
            return cls(key)
        return cls((key,))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> Any:
        return self.values[index]

    def __repr__(self) -> str:
        return f"Keys{self.values!r}"


__all__ = ["Keys"]
