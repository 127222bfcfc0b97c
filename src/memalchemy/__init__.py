# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
MemAlchemy: relational test data synthesis and an in-memory relational store.

:synopsis: Object graph generator and relation-consistent in-memory store
"""

from __future__ import annotations

from .constants import FieldKind, GeneratorDefaults, ValueCreatorConstants
from .customization import Customization
from .data_generator import DataGenerator
from .entity_descriptor import EntityDescriptor, EntityReflection, FieldDescriptor
from .entity_model import EntityModel
from .exceptions import (
    AmbiguousSingletonBindingError,
    ConfigurationError,
    DuplicateKeyError,
    InvalidRelationError,
    KeyResolutionError,
    MemAlchemyError,
    ObjectLimitExceeded,
    RecursionLimitExceeded,
    RelationMismatchError,
    SynthesisLimitError,
    UnsupportedTypeError,
)
from .for_type_context import ForTypeContext
from .keys import Keys
from .mem_db import MemDb
from .relations import Relations
from .value_creator import ValueCreator

__version__ = "0.1.0"

__all__ = [
    "DataGenerator",
    "ForTypeContext",
    "Customization",
    "MemDb",
    "Relations",
    "ValueCreator",
    "Keys",
    "EntityModel",
    "EntityDescriptor",
    "EntityReflection",
    "FieldDescriptor",
    "FieldKind",
    "GeneratorDefaults",
    "ValueCreatorConstants",
    "MemAlchemyError",
    "ConfigurationError",
    "KeyResolutionError",
    "RelationMismatchError",
    "AmbiguousSingletonBindingError",
    "UnsupportedTypeError",
    "InvalidRelationError",
    "SynthesisLimitError",
    "RecursionLimitExceeded",
    "ObjectLimitExceeded",
    "DuplicateKeyError",
]
