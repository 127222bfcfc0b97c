# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Per-type and per-field customization store.

The synthesizer only reads from a ``Customization`` through its lookup
methods. A customization may inherit from an ancestor; lookups resolve a
field override first, then an override on the field's related type, then the
ancestor, then the caller supplied default.

:module: customization
:synopsis: Layered override store consumed by the graph synthesizer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Type

from .entity_descriptor import FieldDescriptor

if TYPE_CHECKING:
    from .data_generator import DataGenerator

Constructor = Callable[["DataGenerator", str], Any]
ValueFactory = Callable[["DataGenerator"], Any]
PostCreateHook = Callable[[Any], None]

_UNSET = object()


@dataclass
class TypeCustomization:
    """Overrides registered for one entity type."""

    singleton: Optional[bool] = None
    instance: Any = _UNSET
    skip: Optional[bool] = None
    lookback: Optional[int] = None
    constructor: Optional[Constructor] = None
    post_create: List[PostCreateHook] = field(default_factory=list)

    @property
    def has_instance(self) -> bool:
        return self.instance is not _UNSET


@dataclass
class FieldCustomization:
    """Overrides registered for one field of one entity type."""

    include_count: Optional[int] = None
    skip: Optional[bool] = None
    lookback: Optional[int] = None
    custom_value: Optional[ValueFactory] = None
    post_create: List[PostCreateHook] = field(default_factory=list)


class Customization:
    """
    Layered override store.

    :param ancestor: Customization consulted when this one has no override
    """

    def __init__(self, ancestor: Optional["Customization"] = None) -> None:
        self.ancestor = ancestor
        self._types: Dict[type, TypeCustomization] = {}
        self._fields: Dict[Tuple[type, str], FieldCustomization] = {}

    def fork(self) -> "Customization":
        """A child customization inheriting every override of this one."""
        return Customization(self)

    # -------------------------------------------------------------------------
    # Mutation, used by ForTypeContext
    # -------------------------------------------------------------------------

    def for_type(self, entity_type: Type[Any]) -> TypeCustomization:
        options = self._types.get(entity_type)
        if options is None:
            options = self._types[entity_type] = TypeCustomization()
        return options

    def for_field(self, entity_type: Type[Any], field_name: str) -> FieldCustomization:
        key = (entity_type, field_name)
        options = self._fields.get(key)
        if options is None:
            options = self._fields[key] = FieldCustomization()
        return options

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def should_skip(self, owner: Type[Any], descriptor: FieldDescriptor) -> bool:
        """Whether ``descriptor`` must be left untouched on ``owner``."""
        return bool(self._field_or_type(owner, descriptor, "skip", False))

    def get_lookback(self, owner: Type[Any], descriptor: FieldDescriptor, default: int) -> int:
        """How many ancestors are searched for a reusable related object."""
        return self._field_or_type(owner, descriptor, "lookback", default)

    def get_include_count(self, owner: Type[Any], descriptor: FieldDescriptor, default: int) -> int:
        return self._field_value(owner, descriptor.name, "include_count", default)

    def get_custom_value(self, owner: Type[Any], field_name: str) -> Optional[ValueFactory]:
        return self._field_value(owner, field_name, "custom_value", None)

    def get_custom_constructor(self, entity_type: Type[Any]) -> Optional[Constructor]:
        return self._type_value(entity_type, "constructor", None)

    def get_post_create(self, entity_type: Type[Any]) -> List[PostCreateHook]:
        level: Optional[Customization] = self
        while level is not None:
            options = level._types.get(entity_type)
            if options is not None and options.post_create:
                return options.post_create
            level = level.ancestor
        return []

    def get_field_post_create(self, owner: Type[Any], field_name: str) -> List[PostCreateHook]:
        level: Optional[Customization] = self
        while level is not None:
            options = level._fields.get((owner, field_name))
            if options is not None and options.post_create:
                return options.post_create
            level = level.ancestor
        return []

    def is_singleton(self, entity_type: Type[Any]) -> bool:
        return bool(self._type_value(entity_type, "singleton", False))

    def get_singleton_instance(self, entity_type: Type[Any]) -> Any:
        """Instance registered with ``ForTypeContext.use``, or ``None``."""
        level: Optional[Customization] = self
        while level is not None:
            options = level._types.get(entity_type)
            if options is not None and options.has_instance:
                return options.instance
            level = level.ancestor
        return None

    def _field_value(self, owner: type, field_name: str, attr: str, default: Any) -> Any:
        level: Optional[Customization] = self
        while level is not None:
            options = level._fields.get((owner, field_name))
            if options is not None and getattr(options, attr) is not None:
                return getattr(options, attr)
            level = level.ancestor
        return default

    def _type_value(self, entity_type: type, attr: str, default: Any) -> Any:
        level: Optional[Customization] = self
        while level is not None:
            options = level._types.get(entity_type)
            if options is not None and getattr(options, attr) is not None:
                return getattr(options, attr)
            level = level.ancestor
        return default

    def _field_or_type(self, owner: type, descriptor: FieldDescriptor, attr: str, default: Any) -> Any:
        # @@ STEP: field override, then related type override, per level
        level: Optional[Customization] = self
        while level is not None:
            options = level._fields.get((owner, descriptor.name))
            if options is not None and getattr(options, attr) is not None:
                return getattr(options, attr)
            if descriptor.related_type is not None:
                type_options = level._types.get(descriptor.related_type)
                if type_options is not None and getattr(type_options, attr) is not None:
                    return getattr(type_options, attr)
            level = level.ancestor
        return default


__all__ = [
    "Customization",
    "TypeCustomization",
    "FieldCustomization",
    "Constructor",
    "ValueFactory",
    "PostCreateHook",
]
