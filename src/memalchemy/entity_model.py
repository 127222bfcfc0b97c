# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Pydantic base class for entities handled by MemAlchemy.

Any pydantic model, dataclass or annotated class can be synthesized and
stored. ``EntityModel`` only adds what object graphs with back-references
need: identity based equality and hashing, and a repr that does not walk
into related entities.
"""

from __future__ import annotations

from typing import Any, Iterator, Tuple

from pydantic import BaseModel, ConfigDict


class EntityModel(BaseModel):
    """Base model for synthesized and stored entities."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=False,
        use_enum_values=False,
        revalidate_instances="never",
    )

    def __hash__(self) -> int:
        """Hash by object identity; keys change while a graph is being wired."""
        return id(self)

    def __eq__(self, other: object) -> bool:
        """Two entities are equal only when they are the same object."""
        return self is other

    def __repr_args__(self) -> Iterator[Tuple[str, Any]]:
        # Related entities are left out so cyclic graphs print finitely
        for name, value in super().__repr_args__():
            if isinstance(value, BaseModel):
                continue
            if isinstance(value, (list, set, frozenset, tuple)) and any(
                isinstance(item, BaseModel) for item in value
            ):
                continue
            yield name, value


__all__ = ["EntityModel"]
