# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Entity type descriptors.

An ``EntityDescriptor`` is the per-type field table used by the synthesizer
and the store: ordered fields with their kind, nullability and related entity
type, plus get/set accessors. Descriptors are built once per type and cached
by an ``EntityReflection`` instance.

:module: entity_descriptor
:synopsis: Field tables and accessors for entity types
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple, Type, get_origin

from pydantic import BaseModel

from .constants import CollectionShape, ErrorMessages, FieldKind, LoggingConstants
from .exceptions import KeyResolutionError, UnsupportedTypeError
from .type_analysis import AnnotationInfo, analyze_annotation, is_entity_type

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Field and parameter descriptors
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldDescriptor:
    """
    One readable/writable field of an entity type.

    :class: FieldDescriptor
    :synopsis: Name, analyzed annotation and accessors of an entity field
    """

    name: str
    owner: type
    info: AnnotationInfo

    @property
    def annotation(self) -> Any:
        return self.info.annotation

    @property
    def kind(self) -> FieldKind:
        return self.info.kind

    @property
    def related_type(self) -> Optional[type]:
        return self.info.related_type

    @property
    def optional(self) -> bool:
        return self.info.optional

    @property
    def is_reference(self) -> bool:
        return self.info.kind is FieldKind.REFERENCE

    @property
    def is_collection(self) -> bool:
        return self.info.kind is FieldKind.COLLECTION

    def get(self, obj: Any) -> Any:
        """Current value, ``None`` when the field was never assigned."""
        return getattr(obj, self.name, None)

    def set(self, obj: Any, value: Any) -> None:
        setattr(obj, self.name, value)

    def items(self, obj: Any) -> List[Any]:
        """Members of a collection field as a list; empty when unset."""
        current = self.get(obj)
        if current is None:
            return []
        return list(current)

    def add(self, obj: Any, item: Any) -> None:
        """
        Add ``item`` to a collection field, creating the container if needed.

        An item already present (by identity) is not added twice.
        """
        current = self.get(obj)
        if current is None:
            current = self._new_container()
            self.set(obj, current)
        if any(existing is item for existing in current):
            return
        if isinstance(current, (set, frozenset)):
            current.add(item)
        else:
            current.append(item)

    def replace(self, obj: Any, items: Iterable[Any]) -> None:
        """Replace the contents of a collection field in place."""
        current = self.get(obj)
        if current is None:
            current = self._new_container()
            self.set(obj, current)
        current.clear()
        if isinstance(current, set):
            current.update(items)
        else:
            current.extend(items)

    def ensure_container(self, obj: Any) -> None:
        """Give an unset collection field an empty container."""
        if self.get(obj) is None:
            self.set(obj, self._new_container())

    def _new_container(self) -> Any:
        shape = self.info.collection_shape or CollectionShape.LIST
        return shape.value()


@dataclass(frozen=True)
class ConstructorParameter:
    """A constructor parameter of a non-pydantic entity type."""

    name: str
    info: AnnotationInfo
    has_default: bool


# -----------------------------------------------------------------------------
# Entity descriptor
# -----------------------------------------------------------------------------

class EntityDescriptor:
    """
    Ordered field table of an entity type.

    Pydantic models expose their ``model_fields``; dataclasses and plain
    classes expose their resolved type hints in declaration order. Field
    order is stable for the lifetime of the descriptor.

    :class: EntityDescriptor
    :synopsis: Per-type field table with allocation support
    """

    def __init__(self, entity_type: Type[Any]) -> None:
        self.entity_type = entity_type
        self.is_pydantic = issubclass(entity_type, BaseModel)
        self.fields: Tuple[FieldDescriptor, ...] = tuple(
            FieldDescriptor(name, entity_type, analyze_annotation(annotation))
            for name, annotation in self._collect_annotations()
        )
        self._by_name: Dict[str, FieldDescriptor] = {f.name: f for f in self.fields}
        self.parameters: Tuple[ConstructorParameter, ...] = (
            () if self.is_pydantic else self._collect_parameters()
        )

    def __repr__(self) -> str:
        return f"EntityDescriptor({self.entity_type.__name__}, fields={[f.name for f in self.fields]})"

    def has_field(self, name: str) -> bool:
        return name in self._by_name

    def field(self, name: str) -> FieldDescriptor:
        """
        Look up a field by name.

        :raises KeyResolutionError: If the type has no such field
        """
        try:
            return self._by_name[name]
        except KeyError as e:
            raise KeyResolutionError(
                ErrorMessages.UNKNOWN_FIELD.format(self.entity_type.__name__, name)
            ) from e

    def allocate(self, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Create a bare instance.

        Pydantic models are built with ``model_construct()`` so that no
        validation runs on a half-populated object; other types are called
        with ``arguments`` as keyword arguments. ``Optional`` pydantic fields
        without a default start out as ``None``.
        """
        if not self.is_pydantic:
            return self.entity_type(**(arguments or {}))
        obj = self.entity_type.model_construct()
        for f in self.fields:
            if f.optional and f.name not in obj.__dict__:
                f.set(obj, None)
        return obj

    def _collect_annotations(self) -> List[Tuple[str, Any]]:
        cls = self.entity_type
        if self.is_pydantic:
            if not getattr(cls, "__pydantic_complete__", True):
                cls.model_rebuild()
            return [(name, info.annotation) for name, info in cls.model_fields.items()]

        hints = typing.get_type_hints(cls)
        if dataclasses.is_dataclass(cls):
            return [(f.name, hints[f.name]) for f in dataclasses.fields(cls) if f.name in hints]
        return [
            (name, annotation)
            for name, annotation in hints.items()
            if not name.startswith("_") and get_origin(annotation) is not ClassVar
        ]

    def _collect_parameters(self) -> Tuple[ConstructorParameter, ...]:
        init = self.entity_type.__init__
        if init is object.__init__:
            return ()
        if dataclasses.is_dataclass(self.entity_type):
            hints = {f.name: f.annotation for f in self.fields}
        else:
            hints = typing.get_type_hints(init)
        parameters: List[ConstructorParameter] = []
        for name, param in inspect.signature(self.entity_type).parameters.items():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            parameters.append(ConstructorParameter(
                name=name,
                info=analyze_annotation(hints.get(name, Any)),
                has_default=param.default is not inspect.Parameter.empty,
            ))
        return tuple(parameters)


class EntityReflection:
    """
    Cache of entity descriptors.

    Each synthesizer and store owns one instance; descriptors are never
    shared across instances.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[type, EntityDescriptor] = {}

    def describe(self, entity_type: Type[Any]) -> EntityDescriptor:
        """
        Descriptor of ``entity_type``, built on first use.

        :raises UnsupportedTypeError: If ``entity_type`` is not an entity class
        """
        descriptor = self._descriptors.get(entity_type)
        if descriptor is None:
            if not is_entity_type(entity_type):
                raise UnsupportedTypeError(
                    ErrorMessages.UNSUPPORTED_ENTITY_TYPE.format(entity_type)
                )
            descriptor = EntityDescriptor(entity_type)
            self._descriptors[entity_type] = descriptor
            logger.debug(LoggingConstants.ENTITY_DESCRIBED.format(
                entity_type.__name__, [f.name for f in descriptor.fields]
            ))
        return descriptor


__all__ = [
    "FieldDescriptor",
    "ConstructorParameter",
    "EntityDescriptor",
    "EntityReflection",
]
