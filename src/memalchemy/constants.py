# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Constants module for MemAlchemy.

This module centralizes the tunable defaults, naming conventions, message
templates and literal strings used throughout the MemAlchemy codebase.

:module: constants
:synopsis: Centralized constants and configuration for MemAlchemy
:author: MemAlchemy Contributors
"""

from __future__ import annotations

from enum import Enum, StrEnum
from typing import Final, Tuple


# ============================================================================
# FIELD CLASSIFICATION
# ============================================================================

class FieldKind(StrEnum):
    """
    Shape of an entity field as seen by the synthesizer and the store.

    :class: FieldKind
    :synopsis: Enumeration of field shapes
    """

    SCALAR = "scalar"          # Value produced by a value creator
    REFERENCE = "reference"    # Single related entity (navigation field)
    COLLECTION = "collection"  # List or set of related entities


class CollectionShape(Enum):
    """Container type used to hold a collection field."""

    LIST = list
    SET = set


# ============================================================================
# GENERATOR DEFAULTS
# ============================================================================

class GeneratorDefaults:
    """Default ceilings and counts for the graph synthesizer."""

    OBJECT_LIMIT: Final[int] = 1000
    RECURSION_LIMIT: Final[int] = 100
    ROOT_COLLECTION_MEMBERS: Final[int] = 3
    LEAF_COLLECTION_MEMBERS: Final[int] = 0
    DEFAULT_LOOKBACK: Final[int] = 1
    INCLUDE_COUNT: Final[int] = 3
    REQUIRE_COUNT: Final[int] = 1
    CREATE_MANY_COUNT: Final[int] = 3


# ============================================================================
# VALUE CREATOR CONSTANTS
# ============================================================================

class ValueCreatorConstants:
    """Shape constants of the random value creators."""

    NULL_PROBABILITY: Final[float] = 0.5
    STRING_SUFFIX_LENGTH: Final[int] = 24
    STRING_RANDOM_BYTES: Final[int] = 18
    BYTES_LENGTH: Final[int] = 16
    UUID_BYTES: Final[int] = 16
    INT_MIN: Final[int] = -(2 ** 31)
    INT_MAX: Final[int] = 2 ** 31 - 1
    FLOAT_SPAN: Final[float] = 2.0e6
    DECIMAL_SCALE: Final[int] = 100
    DECIMAL_SPAN: Final[int] = 100
    DATETIME_WINDOW_MS: Final[float] = 62e9
    DATE_WINDOW_DAYS: Final[int] = 720


# ============================================================================
# KEY CONVENTIONS
# ============================================================================

class KeyConventionConstants:
    """Naming conventions used when no key is registered."""

    PRIMARY_KEY_NAMES: Final[Tuple[str, ...]] = ("Id", "id")
    FOREIGN_KEY_SUFFIXES: Final[Tuple[str, ...]] = ("Id", "_id")


# ============================================================================
# ERROR MESSAGES
# ============================================================================

class ErrorMessages:
    """Error message templates."""

    # Key relation registry
    PRIMARY_KEY_NOT_FOUND: Final[str] = "Cannot determine primary key of {}"
    FOREIGN_KEY_NOT_FOUND: Final[str] = "Cannot determine foreign key from {} to {}"
    UNKNOWN_FIELD: Final[str] = "Type {} has no field named '{}'"
    EMPTY_KEY_FIELDS: Final[str] = "At least one key field is required for {}"
    KEY_TYPE_MISMATCH: Final[str] = (
        "Foreign key {} of {} has types {} which do not match primary key {} of {} with types {}"
    )
    KEY_ALREADY_REGISTERED: Final[str] = "A key for {} is already registered"
    KEY_LENGTH_MISMATCH: Final[str] = "Key {} has {} values but {} expects {}"
    NOT_NULLABLE_FOREIGN_KEY: Final[str] = (
        "Foreign key {} of {} cannot be cleared: field '{}' is not Optional"
    )

    # Synthesis
    RECURSION_LIMIT_EXCEEDED: Final[str] = (
        "Recursion limit of {} exceeded while creating {}; configure a lookback or skip the cyclic field"
    )
    OBJECT_LIMIT_EXCEEDED: Final[str] = "Object limit of {} exceeded while creating {}"
    AMBIGUOUS_SINGLETON: Final[str] = (
        "Singleton {} is already bound to another {} through field '{}'"
    )
    UNSUPPORTED_FIELD_TYPE: Final[str] = "Field '{}' of {} has unsupported type {}"
    UNSUPPORTED_ENTITY_TYPE: Final[str] = "{} is not an entity type"
    UNSUPPORTED_PARAMETER_TYPE: Final[str] = (
        "Constructor parameter '{}' of {} has unsupported type {}"
    )
    NOT_A_COLLECTION: Final[str] = "Field '{}' of {} is not a collection of entities"
    NOT_A_REFERENCE: Final[str] = "Field '{}' of {} is not a reference to an entity"
    NO_OBJECT_CREATED: Final[str] = "No object of type {} at index {} has been created"

    # Store
    DUPLICATE_KEY: Final[str] = "An object of type {} with key {} already exists"
    AUTO_INCREMENT_ALREADY_REGISTERED: Final[str] = (
        "Auto-increment field '{}' of {} is already registered"
    )


# ============================================================================
# LOGGING
# ============================================================================

class LoggingConstants:
    """Log message templates."""

    PLAN_COMPILED: Final[str] = (
        "Compiled construction plan for {}: {} scalar, {} identity, {} reference, {} collection fields"
    )
    RELATION_RESOLVED: Final[str] = "Resolved relation {} -> {} on fields {}"
    PRIMARY_KEY_RESOLVED: Final[str] = "Resolved primary key of {} on fields {}"
    ENTITY_DESCRIBED: Final[str] = "Described {} with fields {}"
    CREATION_CHAIN_HEADER: Final[str] = "Creation chain for {}:"
    CREATION_CHAIN_ENTRY: Final[str] = "{}{}"
    CREATION_CHAIN_INDENT: Final[str] = "  "
    COMMIT_DISCOVERED: Final[str] = "Commit discovered {} new objects, {} held in total"
    COMMIT_ORPHAN: Final[str] = (
        "Orphaned relation {}.{}: no {} with key {}; foreign key is not Optional and was left unchanged"
    )


__all__ = [
    "FieldKind",
    "CollectionShape",
    "GeneratorDefaults",
    "ValueCreatorConstants",
    "KeyConventionConstants",
    "ErrorMessages",
    "LoggingConstants",
]
