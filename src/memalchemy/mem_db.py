# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
In-memory relational object store.

``MemDb`` mimics a relational persistence layer without a database. Objects
are staged with ``add`` and merged by ``commit``, which discovers everything
reachable from the staged objects, assigns auto-increment keys and then
rebinds every foreign key and navigation field across the whole held set.
Collections are derived: after a commit they contain exactly the objects
whose single reference points back at their owner.
"""

from __future__ import annotations

import logging
from itertools import chain as iter_chain
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Type, TypeVar

from .constants import ErrorMessages, LoggingConstants
from .entity_descriptor import EntityReflection, FieldDescriptor
from .exceptions import ConfigurationError, DuplicateKeyError
from .keys import Keys
from .relations import Relations

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (target type, owner type) -> id(target) -> owners
_IncomingIndex = Dict[Tuple[type, type], Dict[int, List[Any]]]


class MemDb:
    """
    Relation-consistent in-memory store.

    Args:
        relations: Key relation registry, a new one by default
    """

    def __init__(self, relations: Optional[Relations] = None) -> None:
        self.relations = relations if relations is not None else Relations()

        self._held: List[Any] = []
        self._held_ids: Set[int] = set()
        self._pending: List[Any] = []

        self._auto_increment: Dict[type, List[FieldDescriptor]] = {}
        self._counters: Dict[Tuple[type, str], int] = {}
        self._orphans: List[Tuple[Any, str]] = []

    @property
    def reflection(self) -> EntityReflection:
        return self.relations.reflection

    @property
    def orphaned_relations(self) -> List[Tuple[Any, str]]:
        """(owner, field name) pairs the last commit could not clear."""
        return list(self._orphans)

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------

    def register_auto_increment(self, entity_type: Type[Any], *field_names: str) -> "MemDb":
        """
        Number ``field_names`` of newly committed ``entity_type`` objects 1, 2, 3...

        :raises ConfigurationError: If a field is already registered
        """
        descriptor = self.reflection.describe(entity_type)
        fields = self._auto_increment.setdefault(entity_type, [])
        for name in field_names:
            if (entity_type, name) in self._counters:
                raise ConfigurationError(ErrorMessages.AUTO_INCREMENT_ALREADY_REGISTERED.format(
                    name, entity_type.__name__
                ))
            fields.append(descriptor.field(name))
            self._counters[(entity_type, name)] = 0
        return self

    def add(self, obj: Any) -> None:
        """Stage ``obj`` for the next commit."""
        self._pending.append(obj)

    def add_many(self, objs: Iterable[Any]) -> None:
        for obj in objs:
            self.add(obj)

    def insert(self, obj: Any) -> None:
        """
        Stage ``obj`` after checking its primary key is not taken.

        Keys containing ``None`` are not checked; they are expected to be
        assigned by auto-increment during commit.

        :raises DuplicateKeyError: If a held or staged object of the same type has the same key
        """
        entity_type = type(obj)
        key = self.relations.get_primary_key(obj)
        if None not in key.values:
            for existing in iter_chain(self._held, self._pending):
                if existing is obj or type(existing) is not entity_type:
                    continue
                if self.relations.get_primary_key(existing) == key:
                    raise DuplicateKeyError(ErrorMessages.DUPLICATE_KEY.format(entity_type.__name__, key))
        self._pending.append(obj)

    def rollback(self) -> None:
        """Drop every staged object."""
        self._pending.clear()

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    def remove(self, entity_type: Type[Any], key: Any) -> bool:
        """
        Remove every held or staged ``entity_type`` object whose primary key equals ``key``.

        :param key: ``Keys``, a tuple of key values or a single value
        :returns: Whether anything was removed
        """
        key = Keys.coerce(key)
        removed = False
        for container in (self._held, self._pending):
            for index in range(len(container) - 1, -1, -1):
                obj = container[index]
                if type(obj) is not entity_type or self.relations.get_primary_key(obj) != key:
                    continue
                del container[index]
                if container is self._held:
                    self._held_ids.discard(id(obj))
                removed = True
        return removed

    def discard(self, obj: Any) -> bool:
        """Remove the objects sharing the type and primary key of ``obj``."""
        return self.remove(type(obj), self.relations.get_primary_key(obj))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, entity_type: Type[T], key: Any) -> Optional[T]:
        """First held ``entity_type`` object with primary key ``key``, else ``None``."""
        key = Keys.coerce(key)
        for obj in self._held:
            if type(obj) is entity_type and self.relations.get_primary_key(obj) == key:
                return obj
        return None

    def count(self, entity_type: Optional[type] = None) -> int:
        """Number of held objects, optionally only those of exactly ``entity_type``."""
        if entity_type is None:
            return len(self._held)
        return sum(1 for obj in self._held if type(obj) is entity_type)

    def objects(self, entity_type: Type[T]) -> Iterator[T]:
        """Read-only iteration over held objects of exactly ``entity_type``."""
        return iter([obj for obj in self._held if type(obj) is entity_type])

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def commit(self) -> None:
        """
        Merge staged objects and rebind every relation.

        Staged objects stay staged when rebinding raises; objects discovered
        before the failure remain held and are not discovered again.

        :raises KeyResolutionError: If a relation between held types has no key
        :raises RelationMismatchError: If a foreign key does not match its target's primary key
        """
        # @@ STEP 1: discovery
        discovered = self._discover()
        logger.debug(LoggingConstants.COMMIT_DISCOVERED.format(len(discovered), len(self._held)))

        # @@ STEP 2: rebinding
        new_ids = {id(obj) for obj in discovered}
        self._copy_identity_keys(new_ids)
        incoming = self._bind_references(new_ids)
        self._bind_collections(incoming)

        self._pending.clear()

    def __enter__(self) -> "MemDb":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Commit on success, drop staged objects on error."""
        _ = exc_val, exc_tb
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def __repr__(self) -> str:
        return f"MemDb(held={len(self._held)}, pending={len(self._pending)})"

    def _discover(self) -> List[Any]:
        """Depth-first walk from the staged objects; returns the newly held objects in visit order."""
        discovered: List[Any] = []
        stack: List[Any] = list(reversed(self._pending))
        while stack:
            obj = stack.pop()
            if obj is None or id(obj) in self._held_ids:
                continue
            self._held_ids.add(id(obj))
            self._held.append(obj)
            discovered.append(obj)
            self._assign_auto_increment(obj)

            children: List[Any] = []
            for field in self.reflection.describe(type(obj)).fields:
                if field.is_reference:
                    children.append(field.get(obj))
                elif field.is_collection:
                    children.extend(field.items(obj))
            stack.extend(reversed(children))
        return discovered

    def _assign_auto_increment(self, obj: Any) -> None:
        entity_type = type(obj)
        for field in self._auto_increment.get(entity_type, ()):
            counter_key = (entity_type, field.name)
            self._counters[counter_key] += 1
            value = self._counters[counter_key]
            converter = field.info.inner
            field.set(obj, converter(value) if isinstance(converter, type) else value)

    def _reference_fields(self, entity_type: type) -> Tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.reflection.describe(entity_type).fields if f.is_reference)

    def _is_authoritative(self, owner: Any, linked: Any, has_keys: bool, new_ids: Set[int]) -> bool:
        # The navigation field wins when either end is new or there is no key to follow
        if linked is None or id(linked) not in self._held_ids:
            return False
        return not has_keys or id(linked) in new_ids or id(owner) in new_ids

    def _copy_identity_keys(self, new_ids: Set[int]) -> None:
        """Propagate primary keys along 1:1 identity relations until stable."""
        changed = True
        rounds = 0
        while changed and rounds <= len(self._held):
            changed = False
            rounds += 1
            for obj in self._held:
                owner_type = type(obj)
                for field in self._reference_fields(owner_type):
                    target_type = field.related_type
                    if not self.relations.is_identity_relation(owner_type, target_type):
                        continue
                    linked = field.get(obj)
                    if not self._is_authoritative(obj, linked, True, new_ids):
                        continue
                    key = self.relations.get_primary_key(linked)
                    if self.relations.get_foreign_key(obj, target_type) != key:
                        self.relations.set_foreign_key(obj, target_type, key)
                        changed = True

    def _bind_references(self, new_ids: Set[int]) -> _IncomingIndex:
        """Align every single reference with its foreign key; return who points at whom."""
        primary_index: Dict[type, Dict[Keys, Any]] = {}
        incoming: _IncomingIndex = {}
        self._orphans = []

        def lookup(target_type: type, key: Keys) -> Optional[Any]:
            index = primary_index.get(target_type)
            if index is None:
                index = primary_index[target_type] = {}
                for candidate in self._held:
                    if type(candidate) is target_type:
                        index.setdefault(self.relations.get_primary_key(candidate), candidate)
            return index.get(key)

        for obj in self._held:
            owner_type = type(obj)
            for field in self._reference_fields(owner_type):
                target_type = field.related_type
                foreign_keys = self.relations.foreign_key_fields(owner_type, target_type)
                linked = field.get(obj)

                if self._is_authoritative(obj, linked, bool(foreign_keys), new_ids):
                    if foreign_keys:
                        self.relations.set_foreign_key(obj, target_type, self.relations.get_primary_key(linked))
                elif foreign_keys:
                    key = self.relations.get_foreign_key(obj, target_type)
                    linked = lookup(target_type, key)
                    if linked is not None:
                        field.set(obj, linked)
                    else:
                        self._clear_reference(obj, field, foreign_keys, key)
                else:
                    linked = None
                    field.set(obj, None)

                owners = incoming.setdefault((target_type, owner_type), {})
                if linked is not None:
                    bucket = owners.setdefault(id(linked), [])
                    if not any(existing is obj for existing in bucket):
                        bucket.append(obj)
        return incoming

    def _clear_reference(
        self, obj: Any, field: FieldDescriptor, foreign_keys: Tuple[FieldDescriptor, ...], key: Keys
    ) -> None:
        owner_type = type(obj)
        target_type = field.related_type
        field.set(obj, None)
        if self.relations.is_identity_relation(owner_type, target_type):
            return
        if all(k.optional for k in foreign_keys):
            self.relations.clear_foreign_key(obj, target_type)
            return
        logger.warning(LoggingConstants.COMMIT_ORPHAN.format(
            owner_type.__name__, field.name, target_type.__name__, key
        ))
        self._orphans.append((obj, field.name))

    def _bind_collections(self, incoming: _IncomingIndex) -> None:
        """Rebuild each collection from the references pointing at its owner."""
        for obj in self._held:
            owner_type = type(obj)
            for field in self.reflection.describe(owner_type).fields:
                if not field.is_collection:
                    continue
                owners = incoming.get((owner_type, field.related_type))
                if owners is None:
                    continue
                field.replace(obj, owners.get(id(obj), []))


__all__ = ["MemDb"]
