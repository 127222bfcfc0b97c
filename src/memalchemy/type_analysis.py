# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Annotation analysis helpers.

Classifies field annotations into scalar values, single entity references and
collections of entities, unwrapping ``Optional`` along the way.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import types
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple, Union, get_args, get_origin

import numpy as np
from pydantic import AwareDatetime, BaseModel

from .constants import CollectionShape, FieldKind

_NONE_TYPE = type(None)

_SCALAR_TYPES = (
    bool,
    int,
    float,
    str,
    bytes,
    Decimal,
    uuid.UUID,
    datetime,
    date,
    AwareDatetime,
)

_LIST_ORIGINS = frozenset({
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
})

_SET_ORIGINS = frozenset({
    set,
    collections.abc.Set,
    collections.abc.MutableSet,
})


@dataclass(frozen=True)
class AnnotationInfo:
    """
    Result of analyzing one field annotation.

    :class: AnnotationInfo
    :synopsis: Kind, nullability and related entity type of an annotation
    """

    annotation: Any
    inner: Any
    optional: bool
    kind: FieldKind
    related_type: Optional[type] = None
    collection_shape: Optional[CollectionShape] = None


def unwrap_optional(ann: Any) -> Tuple[Any, bool]:
    """
    Strip ``None`` from a union annotation.

    :param ann: Annotation to inspect
    :returns: ``(inner, is_optional)``; ``inner`` is ``ann`` itself when not optional
    """
    origin = get_origin(ann)
    if origin is Union or origin is types.UnionType:
        args = get_args(ann)
        remaining = tuple(a for a in args if a is not _NONE_TYPE)
        if len(remaining) != len(args):
            if len(remaining) == 1:
                return remaining[0], True
            return Union[remaining], True
    return ann, False


def is_scalar_type(ann: Any) -> bool:
    """Whether ``ann`` is a value type the value creator may know about."""
    if any(ann is scalar for scalar in _SCALAR_TYPES):
        return True
    return isinstance(ann, type) and issubclass(ann, (Enum, np.generic))


def is_entity_type(ann: Any) -> bool:
    """
    Whether ``ann`` is a class whose fields can be described.

    Pydantic models, dataclasses and plain classes carrying annotations count
    as entities; builtins and scalar types never do.
    """
    if not isinstance(ann, type) or is_scalar_type(ann):
        return False
    if issubclass(ann, BaseModel):
        return ann is not BaseModel
    if dataclasses.is_dataclass(ann):
        return True
    if ann.__module__ == "builtins":
        return False
    return any(inspect.get_annotations(klass) for klass in ann.__mro__[:-1])


def collection_element(ann: Any) -> Optional[Tuple[type, CollectionShape]]:
    """
    Element type and container shape of a collection-of-entities annotation.

    :returns: ``None`` when ``ann`` is not a list or set of a single entity type
    """
    origin = get_origin(ann)
    if origin in _LIST_ORIGINS:
        shape = CollectionShape.LIST
    elif origin in _SET_ORIGINS:
        shape = CollectionShape.SET
    else:
        return None
    args = get_args(ann)
    if len(args) == 1 and is_entity_type(args[0]):
        return args[0], shape
    return None


def analyze_annotation(ann: Any) -> AnnotationInfo:
    """
    Classify an annotation.

    Anything that is not a reference or a collection of entities is reported
    as ``SCALAR``; whether a value can actually be produced for it is decided
    by the value creator.

    :param ann: Field annotation, possibly ``Optional``
    :returns: Analysis result
    :rtype: AnnotationInfo
    """
    inner, optional = unwrap_optional(ann)
    if is_entity_type(inner):
        return AnnotationInfo(ann, inner, optional, FieldKind.REFERENCE, related_type=inner)
    element = collection_element(inner)
    if element is not None:
        element_type, shape = element
        return AnnotationInfo(
            ann, inner, optional, FieldKind.COLLECTION,
            related_type=element_type, collection_shape=shape,
        )
    return AnnotationInfo(ann, inner, optional, FieldKind.SCALAR)


__all__ = [
    "AnnotationInfo",
    "unwrap_optional",
    "is_scalar_type",
    "is_entity_type",
    "collection_element",
    "analyze_annotation",
]
