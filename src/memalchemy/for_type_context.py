# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Fluent configuration of a data generator for one entity type.

Fields are selected by name and resolved against the type's field table when
the override is registered, so a typo fails immediately rather than at
synthesis time.

Example::

    gen = DataGenerator()
    parent = (
        gen.for_type(Parent)
        .include("children", count=5)
        .with_value("name", "root")
        .create()
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generic, Iterator, Optional, Type, TypeVar

from .constants import ErrorMessages, GeneratorDefaults
from .customization import FieldCustomization, PostCreateHook, TypeCustomization
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .data_generator import DataGenerator

T = TypeVar("T")
U = TypeVar("U")


class ForTypeContext(Generic[T]):
    """
    Override registration for ``entity_type`` on a generator.

    Every method returns the context so calls can be chained.
    """

    def __init__(self, generator: "DataGenerator", entity_type: Type[T]) -> None:
        self._generator = generator
        self._entity_type = entity_type
        self._descriptor = generator.reflection.describe(entity_type)

    @property
    def entity_type(self) -> Type[T]:
        return self._entity_type

    @property
    def generator(self) -> "DataGenerator":
        return self._generator

    # -------------------------------------------------------------------------
    # Type level
    # -------------------------------------------------------------------------

    def use(self, instance: T) -> "ForTypeContext[T]":
        """Use ``instance`` as the singleton of this type."""
        options = self._type_options()
        options.instance = instance
        options.singleton = True
        return self

    def with_constructor(self, factory: Callable[["DataGenerator", str], T]) -> "ForTypeContext[T]":
        """
        Build instances of this type with ``factory(generator, hint)``.

        Ancestors of this type are no longer reused, so every reference to it
        calls the factory.
        """
        options = self._type_options()
        options.constructor = factory
        options.lookback = 0
        return self

    def register_singleton(self) -> "ForTypeContext[T]":
        """Build this type once and share the instance across all references."""
        self._type_options().singleton = True
        return self

    # -------------------------------------------------------------------------
    # Field level
    # -------------------------------------------------------------------------

    def include(self, *field_names: str, count: int = GeneratorDefaults.INCLUDE_COUNT) -> "ForTypeContext[T]":
        """
        Create ``count`` elements in each named collection field.

        :raises ConfigurationError: If a field is not a collection of entities
        """
        for name in field_names:
            descriptor = self._descriptor.field(name)
            if not descriptor.is_collection:
                raise ConfigurationError(
                    ErrorMessages.NOT_A_COLLECTION.format(name, self._entity_type.__name__)
                )
            self._field_options(name).include_count = count
        return self

    def require(self, *field_names: str) -> "ForTypeContext[T]":
        """
        Always populate each named reference, even behind an Optional foreign key.

        :raises ConfigurationError: If a field is not a reference or collection
        """
        for name in field_names:
            descriptor = self._descriptor.field(name)
            if not (descriptor.is_reference or descriptor.is_collection):
                raise ConfigurationError(
                    ErrorMessages.NOT_A_REFERENCE.format(name, self._entity_type.__name__)
                )
            self._field_options(name).include_count = GeneratorDefaults.REQUIRE_COUNT
        return self

    def with_value(self, field_name: str, value: Any) -> "ForTypeContext[T]":
        """Assign ``value`` to the field of every created instance."""
        return self.with_factory(field_name, lambda generator: value)

    def with_factory(
        self, field_name: str, factory: Callable[["DataGenerator"], Any]
    ) -> "ForTypeContext[T]":
        """Assign ``factory(generator)`` to the field of every created instance."""
        self._descriptor.field(field_name)
        options = self._field_options(field_name)
        options.custom_value = factory
        options.lookback = 0
        return self

    def without(self, *field_names: str) -> "ForTypeContext[T]":
        """
        Leave the named fields untouched.

        Without field names, every field referencing this type is left
        untouched instead.
        """
        if not field_names:
            self._type_options().skip = True
            return self
        for name in field_names:
            self._descriptor.field(name)
            self._field_options(name).skip = True
        return self

    def post_create(self, hook: PostCreateHook, field_name: Optional[str] = None) -> "ForTypeContext[T]":
        """
        Call ``hook(instance)`` once an instance is built, or once ``field_name`` is set.
        """
        if field_name is None:
            self._type_options().post_create.append(hook)
        else:
            self._descriptor.field(field_name)
            self._field_options(field_name).post_create.append(hook)
        return self

    def set_lookback(self, count: int, *field_names: str) -> "ForTypeContext[T]":
        """
        Number of ancestors searched for a reusable object.

        Without field names the lookback applies to every field referencing
        this type; ``0`` disables reuse.
        """
        if not field_names:
            self._type_options().lookback = count
            return self
        for name in field_names:
            self._descriptor.field(name)
            self._field_options(name).lookback = count
        return self

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create(self) -> T:
        return self._generator.create(self._entity_type)

    def create_many(self, count: int = GeneratorDefaults.CREATE_MANY_COUNT) -> Iterator[T]:
        return self._generator.create_many(self._entity_type, count)

    def for_type(self, entity_type: Type[U]) -> "ForTypeContext[U]":
        """Continue configuring another type on the same generator."""
        return ForTypeContext(self._generator, entity_type)

    def _type_options(self) -> TypeCustomization:
        self._generator.invalidate_plans()
        return self._generator.customization.for_type(self._entity_type)

    def _field_options(self, field_name: str) -> FieldCustomization:
        self._generator.invalidate_plans()
        return self._generator.customization.for_field(self._entity_type, field_name)


__all__ = ["ForTypeContext"]
