# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Key relation registry.

Maps an entity type to its ordered primary-key fields and a (source, target)
type pair to the ordered foreign-key fields on the source. Unregistered keys
fall back to naming conventions; every resolution is validated once and then
memoized for the lifetime of the registry.

:module: relations
:synopsis: Primary and foreign key resolution with type validation
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Sequence, Set, Tuple, Type

from .constants import ErrorMessages, KeyConventionConstants, LoggingConstants
from .entity_descriptor import EntityReflection, FieldDescriptor
from .exceptions import (
    ConfigurationError,
    InvalidRelationError,
    KeyResolutionError,
    RelationMismatchError,
)
from .keys import Keys

logger = logging.getLogger(__name__)

KeyFields = Tuple[FieldDescriptor, ...]
PrimaryKeyConvention = Callable[[Type[Any]], Optional[Sequence[str]]]
ForeignKeyConvention = Callable[[Type[Any], Type[Any]], Optional[Sequence[str]]]


class Relations:
    """
    Registry of primary and foreign keys.

    ``default_primary_key`` and ``default_foreign_key`` are the conventions
    used for unregistered types; both may be replaced with callables that
    return field names, or ``None`` when the key cannot be determined.

    :class: Relations
    :synopsis: Key relation registry with convention defaults
    """

    def __init__(self, reflection: Optional[EntityReflection] = None) -> None:
        self.reflection = reflection if reflection is not None else EntityReflection()
        self.default_primary_key: PrimaryKeyConvention = self.convention_primary_key
        self.default_foreign_key: ForeignKeyConvention = self.convention_foreign_key

        self._primary_keys: Dict[type, KeyFields] = {}
        self._foreign_keys: Dict[Tuple[type, type], KeyFields] = {}
        self._registered_primary: Set[type] = set()
        self._registered_foreign: Set[Tuple[type, type]] = set()

    # -------------------------------------------------------------------------
    # Conventions
    # -------------------------------------------------------------------------

    def convention_primary_key(self, entity_type: Type[Any]) -> Optional[Sequence[str]]:
        """A field literally named ``Id`` or ``id``."""
        descriptor = self.reflection.describe(entity_type)
        for name in KeyConventionConstants.PRIMARY_KEY_NAMES:
            if descriptor.has_field(name):
                return (name,)
        return None

    def convention_foreign_key(
        self, source_type: Type[Any], target_type: Type[Any]
    ) -> Optional[Sequence[str]]:
        """
        The field named after the single reference to ``target_type``.

        ``parent: Parent`` pairs with ``parent_id`` and ``Parent: Parent``
        pairs with ``ParentId``.
        """
        descriptor = self.reflection.describe(source_type)
        references = [
            f for f in descriptor.fields
            if f.is_reference and f.related_type is target_type
        ]
        if len(references) != 1:
            return None
        for suffix in KeyConventionConstants.FOREIGN_KEY_SUFFIXES:
            candidate = f"{references[0].name}{suffix}"
            if descriptor.has_field(candidate):
                return (candidate,)
        return None

    def without_relations(self) -> "Relations":
        """Make every unregistered relation navigation-only and every unregistered key empty."""
        self.default_primary_key = lambda entity_type: ()
        self.default_foreign_key = lambda source_type, target_type: ()
        self._primary_keys = {t: f for t, f in self._primary_keys.items() if t in self._registered_primary}
        self._foreign_keys = {p: f for p, f in self._foreign_keys.items() if p in self._registered_foreign}
        return self

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_primary_key(self, entity_type: Type[Any], *field_names: str) -> "Relations":
        """
        Register the primary key of ``entity_type``.

        :param entity_type: Entity type
        :param field_names: Ordered key field names
        :raises KeyResolutionError: If a field does not exist or none is given
        :raises ConfigurationError: If a key is already registered for the type
        """
        if entity_type in self._registered_primary:
            raise ConfigurationError(
                ErrorMessages.KEY_ALREADY_REGISTERED.format(entity_type.__name__)
            )
        if not field_names:
            raise KeyResolutionError(ErrorMessages.EMPTY_KEY_FIELDS.format(entity_type.__name__))

        self._primary_keys[entity_type] = self._resolve_fields(entity_type, field_names)
        self._registered_primary.add(entity_type)
        # @@ STEP: foreign keys validated against a convention key are stale now
        for pair in [p for p in self._foreign_keys if p[1] is entity_type]:
            if pair not in self._registered_foreign:
                del self._foreign_keys[pair]
        return self

    def register_foreign_keys(
        self, source_type: Type[Any], target_type: Type[Any], *field_names: str
    ) -> "Relations":
        """
        Register the foreign key from ``source_type`` to ``target_type``.

        :raises KeyResolutionError: If a field does not exist or none is given
        :raises RelationMismatchError: If the field types differ from the target's primary key
        :raises ConfigurationError: If the relation is already registered
        """
        if not field_names:
            raise KeyResolutionError(
                ErrorMessages.EMPTY_KEY_FIELDS.format(f"{source_type.__name__} -> {target_type.__name__}")
            )
        fields = self._resolve_fields(source_type, field_names)
        self._validate(source_type, target_type, fields)
        self._store_foreign_keys(source_type, target_type, fields)
        return self

    def register_null_foreign_keys(self, source_type: Type[Any], target_type: Type[Any]) -> "Relations":
        """Register a navigation-only relation that carries no key fields."""
        self._store_foreign_keys(source_type, target_type, ())
        return self

    def register_one_to_one(
        self,
        this_type: Type[Any],
        foreign_type: Type[Any],
        this_fields: Sequence[str],
        foreign_fields: Sequence[str],
    ) -> "Relations":
        """Register both directions of a one-to-one relation."""
        self.register_foreign_keys(this_type, foreign_type, *this_fields)
        self.register_foreign_keys(foreign_type, this_type, *foreign_fields)
        return self

    def _store_foreign_keys(self, source_type: type, target_type: type, fields: KeyFields) -> None:
        pair = (source_type, target_type)
        if pair in self._registered_foreign:
            raise ConfigurationError(
                ErrorMessages.KEY_ALREADY_REGISTERED.format(
                    f"{source_type.__name__} -> {target_type.__name__}"
                )
            )
        self._foreign_keys[pair] = fields
        self._registered_foreign.add(pair)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def primary_key_fields(self, entity_type: Type[Any]) -> KeyFields:
        """
        Ordered primary-key fields of ``entity_type``.

        :raises KeyResolutionError: If no key is registered and the convention finds none
        """
        fields = self._primary_keys.get(entity_type)
        if fields is None:
            names = self.default_primary_key(entity_type)
            if names is None:
                raise KeyResolutionError(
                    ErrorMessages.PRIMARY_KEY_NOT_FOUND.format(entity_type.__name__)
                )
            fields = self._resolve_fields(entity_type, names)
            self._primary_keys[entity_type] = fields
            logger.debug(LoggingConstants.PRIMARY_KEY_RESOLVED.format(
                entity_type.__name__, [f.name for f in fields]
            ))
        return fields

    def foreign_key_fields(self, source_type: Type[Any], target_type: Type[Any]) -> KeyFields:
        """
        Ordered foreign-key fields on ``source_type`` pointing at ``target_type``.

        :raises KeyResolutionError: If no key is registered and the convention finds none
        :raises RelationMismatchError: If the convention key does not match the target's primary key
        """
        pair = (source_type, target_type)
        fields = self._foreign_keys.get(pair)
        if fields is None:
            names = self.default_foreign_key(source_type, target_type)
            if names is None:
                raise KeyResolutionError(ErrorMessages.FOREIGN_KEY_NOT_FOUND.format(
                    source_type.__name__, target_type.__name__
                ))
            fields = self._resolve_fields(source_type, names)
            self._validate(source_type, target_type, fields)
            self._foreign_keys[pair] = fields
            logger.debug(LoggingConstants.RELATION_RESOLVED.format(
                source_type.__name__, target_type.__name__, [f.name for f in fields]
            ))
        return fields

    def is_identity_relation(self, source_type: Type[Any], target_type: Type[Any]) -> bool:
        """Whether the foreign key to ``target_type`` is the source's own primary key."""
        foreign = self.foreign_key_fields(source_type, target_type)
        if not foreign:
            return False
        primary = self.primary_key_fields(source_type)
        return [f.name for f in foreign] == [f.name for f in primary]

    def _resolve_fields(self, entity_type: Type[Any], names: Sequence[str]) -> KeyFields:
        descriptor = self.reflection.describe(entity_type)
        return tuple(descriptor.field(name) for name in names)

    def _validate(self, source_type: type, target_type: type, foreign: KeyFields) -> None:
        if not foreign:
            return
        primary = self.primary_key_fields(target_type)

        # @@ STEP 1: an all-Optional foreign key is compared on its unwrapped types
        if all(f.optional for f in foreign):
            foreign_types = [f.info.inner for f in foreign]
        else:
            foreign_types = [f.annotation for f in foreign]

        # @@ STEP 2: primary keys are always compared unwrapped
        primary_types = [f.info.inner for f in primary]

        if foreign_types != primary_types:
            raise RelationMismatchError(ErrorMessages.KEY_TYPE_MISMATCH.format(
                [f.name for f in foreign], source_type.__name__, foreign_types,
                [f.name for f in primary], target_type.__name__, primary_types,
            ))

    # -------------------------------------------------------------------------
    # Key access
    # -------------------------------------------------------------------------

    def get_primary_key(self, obj: Any) -> Keys:
        return Keys(tuple(f.get(obj) for f in self.primary_key_fields(type(obj))))

    def get_foreign_key(self, obj: Any, target_type: Type[Any]) -> Keys:
        return Keys(tuple(f.get(obj) for f in self.foreign_key_fields(type(obj), target_type)))

    def set_primary_key(self, obj: Any, keys: Keys) -> None:
        self._assign(obj, self.primary_key_fields(type(obj)), keys)

    def set_foreign_key(self, obj: Any, target_type: Type[Any], keys: Keys) -> None:
        self._assign(obj, self.foreign_key_fields(type(obj), target_type), keys)

    def clear_foreign_key(self, obj: Any, target_type: Type[Any]) -> None:
        """
        Set every foreign-key field to ``None``.

        :raises InvalidRelationError: If one of the fields is not ``Optional``
        """
        fields = self.foreign_key_fields(type(obj), target_type)
        for f in fields:
            if not f.optional:
                raise InvalidRelationError(ErrorMessages.NOT_NULLABLE_FOREIGN_KEY.format(
                    [x.name for x in fields], type(obj).__name__, f.name
                ))
        for f in fields:
            f.set(obj, None)

    def _assign(self, obj: Any, fields: KeyFields, keys: Keys) -> None:
        if len(fields) != len(keys):
            raise ConfigurationError(ErrorMessages.KEY_LENGTH_MISMATCH.format(
                keys, len(keys), type(obj).__name__, len(fields)
            ))
        for f, value in zip(fields, keys):
            f.set(obj, value)


__all__ = ["Relations"]
