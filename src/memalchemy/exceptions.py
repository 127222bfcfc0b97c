# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for MemAlchemy.

Configuration errors are programmer errors and subclass ``ValueError``;
synthesis ceilings subclass ``RuntimeError``. None of them are retried or
swallowed internally.
"""

from __future__ import annotations


class MemAlchemyError(Exception):
    """Base class of every error raised by MemAlchemy."""


class ConfigurationError(MemAlchemyError, ValueError):
    """Invalid key, relation, customization or schema configuration."""


class KeyResolutionError(ConfigurationError):
    """Primary or foreign key of a type cannot be determined."""


class RelationMismatchError(ConfigurationError):
    """Foreign-key value types do not match the target's primary-key value types."""


class AmbiguousSingletonBindingError(ConfigurationError):
    """A singleton is already linked to a different object for the same relation."""


class UnsupportedTypeError(ConfigurationError):
    """A field is neither a scalar, a single reference nor a collection of entities."""


class InvalidRelationError(ConfigurationError):
    """A relation cannot be cleared because its foreign key is not Optional."""


class SynthesisLimitError(MemAlchemyError, RuntimeError):
    """A safety ceiling was hit during synthesis."""


class RecursionLimitExceeded(SynthesisLimitError):
    """The ancestry chain grew past the configured recursion limit."""


class ObjectLimitExceeded(SynthesisLimitError):
    """More objects were created in one pass than the configured object limit."""


class DuplicateKeyError(MemAlchemyError, KeyError):
    """A direct insertion collides with an existing primary key."""

    def __str__(self) -> str:
        # KeyError quotes its argument
        return str(self.args[0]) if self.args else ""


__all__ = [
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
