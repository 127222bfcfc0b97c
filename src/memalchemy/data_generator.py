# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Relational graph synthesizer.

``DataGenerator.create(SomeType)`` builds an instance with random scalar
values and, recursively, the related objects it references. Related objects
already on the current construction path are reused instead of created
again, which keeps cyclic schemas finite and wires back-references: a child
created for a parent's collection finds that parent one level up and links
to it. Foreign keys always mirror the primary key of the object they point at.

:module: data_generator
:synopsis: Recursive, cycle-aware construction of consistent object graphs
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple, Type, TypeVar

from .constants import ErrorMessages, FieldKind, GeneratorDefaults, LoggingConstants
from .customization import Customization, PostCreateHook
from .entity_descriptor import EntityReflection, FieldDescriptor
from .exceptions import (
    AmbiguousSingletonBindingError,
    ObjectLimitExceeded,
    RecursionLimitExceeded,
    UnsupportedTypeError,
)
from .for_type_context import ForTypeContext
from .relations import Relations
from .value_creator import Creator, ValueCreator

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Construction plans
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class _ReferenceStep:
    """A single-reference field with its resolved relation."""

    field: FieldDescriptor
    foreign_keys: Tuple[FieldDescriptor, ...]
    identity: bool
    nullable: bool


@dataclass(frozen=True)
class _ConstructionPlan:
    """
    Compiled field assignment steps of one entity type.

    Identity references come first in ``references`` so that the owner's
    primary key is final before any child copies it.
    """

    entity_type: type
    scalars: Tuple[Tuple[FieldDescriptor, Creator], ...]
    references: Tuple[_ReferenceStep, ...]
    collections: Tuple[FieldDescriptor, ...]
    constructed: FrozenSet[str] = frozenset()

    @property
    def identities(self) -> Tuple[_ReferenceStep, ...]:
        return tuple(step for step in self.references if step.identity)


def _find_ancestor(chain: List[Any], entity_type: type, lookback: int) -> Optional[Any]:
    """Most recent object of exactly ``entity_type`` among the last ``lookback`` ancestors."""
    if lookback <= 0:
        return None
    for candidate in reversed(chain[-lookback:]):
        if type(candidate) is entity_type:
            return candidate
    return None


# -----------------------------------------------------------------------------
# Generator
# -----------------------------------------------------------------------------

class DataGenerator:
    """
    Builds object graphs for tests.

    Args:
        object_limit: Maximum number of objects built over the generator's lifetime
        recursion_limit: Maximum depth of the construction path
        root_collection_members: Elements created in collections of the root object
        leaf_collection_members: Elements created in collections of other objects
        default_lookback: Ancestors searched for a reusable related object
        seed: Seed of the random source, for reproducible graphs
        log_creation: Log the tree of created objects after each ``create``
        relations: Key relation registry, a new one by default
        value_creator: Random scalar source, a new one seeded with ``seed`` by default
        customization: Override store, a new one by default
    """

    def __init__(
        self,
        *,
        object_limit: int = GeneratorDefaults.OBJECT_LIMIT,
        recursion_limit: int = GeneratorDefaults.RECURSION_LIMIT,
        root_collection_members: int = GeneratorDefaults.ROOT_COLLECTION_MEMBERS,
        leaf_collection_members: int = GeneratorDefaults.LEAF_COLLECTION_MEMBERS,
        default_lookback: int = GeneratorDefaults.DEFAULT_LOOKBACK,
        seed: Optional[int] = None,
        log_creation: bool = False,
        relations: Optional[Relations] = None,
        value_creator: Optional[ValueCreator] = None,
        customization: Optional[Customization] = None,
    ) -> None:
        self.object_limit = object_limit
        self.recursion_limit = recursion_limit
        self.root_collection_members = root_collection_members
        self.leaf_collection_members = leaf_collection_members
        self.default_lookback = default_lookback
        self.log_creation = log_creation

        self.relations = relations if relations is not None else Relations()
        self.value_creator = value_creator if value_creator is not None else ValueCreator(seed=seed)
        self.customization = customization if customization is not None else Customization()

        self._plans: Dict[type, _ConstructionPlan] = {}
        self._singletons: Dict[type, Any] = {}
        self._created: List[Any] = []
        self._in_pass = False
        self._creation_log: Optional[List[Tuple[int, Any]]] = None
        self.object_count = 0

    @property
    def reflection(self) -> EntityReflection:
        return self.relations.reflection

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def for_type(self, entity_type: Type[T]) -> ForTypeContext[T]:
        """Configure overrides for ``entity_type`` on this generator."""
        return ForTypeContext(self, entity_type)

    def build(self, entity_type: Type[T]) -> ForTypeContext[T]:
        """
        Configure ``entity_type`` on a forked generator.

        The fork inherits this generator's overrides, relations and random
        source; overrides registered on it do not affect this generator.
        """
        fork = DataGenerator(
            object_limit=self.object_limit,
            recursion_limit=self.recursion_limit,
            root_collection_members=self.root_collection_members,
            leaf_collection_members=self.leaf_collection_members,
            default_lookback=self.default_lookback,
            log_creation=self.log_creation,
            relations=self.relations,
            value_creator=self.value_creator,
            customization=self.customization.fork(),
        )
        return fork.for_type(entity_type)

    def without_relations(self) -> "DataGenerator":
        """Treat every unregistered relation as navigation-only."""
        self.relations.without_relations()
        self.invalidate_plans()
        return self

    def invalidate_plans(self) -> None:
        """Drop compiled construction plans after an override changed."""
        self._plans.clear()

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create(self, entity_type: Type[T]) -> T:
        """
        Build one instance of ``entity_type`` and its related objects.

        :raises RecursionLimitExceeded: If the construction path gets too deep
        :raises ObjectLimitExceeded: If too many objects have been built
        """
        if self._in_pass:
            return self._create(entity_type, [], entity_type.__name__)

        # @@ STEP 1: a top-level call starts the creation log
        self._in_pass = True
        self._creation_log = [] if self.log_creation else None
        try:
            result = self._create(entity_type, [], entity_type.__name__)
        finally:
            self._in_pass = False

        # @@ STEP 2: optional creation chain
        if self._creation_log is not None:
            self._log_creation_chain(entity_type, self._creation_log)
            self._creation_log = None
        return result

    def create_many(self, entity_type: Type[T], count: int = GeneratorDefaults.CREATE_MANY_COUNT) -> Iterator[T]:
        """Lazily build ``count`` instances, one top-level ``create`` each."""
        for _ in range(count):
            yield self.create(entity_type)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def get_objects(self, entity_type: Optional[type] = None) -> List[Any]:
        """Every object built so far, optionally only those of exactly ``entity_type``."""
        if entity_type is None:
            return list(self._created)
        return [obj for obj in self._created if type(obj) is entity_type]

    def get_object(self, entity_type: Type[T], index: int = 0) -> T:
        objects = self.get_objects(entity_type)
        if not -len(objects) <= index < len(objects):
            raise IndexError(ErrorMessages.NO_OBJECT_CREATED.format(entity_type.__name__, index))
        return objects[index]

    def get_singleton(self, entity_type: Type[T]) -> Optional[T]:
        """The singleton instance of ``entity_type``, ``None`` if none exists yet."""
        instance = self._singletons.get(entity_type)
        if instance is None:
            instance = self.customization.get_singleton_instance(entity_type)
        return instance

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _create(self, entity_type: type, chain: List[Any], hint: str) -> Any:
        # @@ STEP 1: custom constructor
        constructor = self.customization.get_custom_constructor(entity_type)
        if constructor is not None:
            result = constructor(self, hint)
            self._run_hooks(self.customization.get_post_create(entity_type), result)
            return result

        plan = self._plan(entity_type)

        # @@ STEP 2: singleton reuse binds back-references only
        singleton = self.get_singleton(entity_type)
        if singleton is not None:
            self._bind_references(plan, singleton, chain, reuse=True)
            self._bind_collections(plan, singleton, chain, reuse=True)
            return singleton

        # @@ STEP 3: safety ceilings
        if len(chain) >= self.recursion_limit:
            raise RecursionLimitExceeded(
                ErrorMessages.RECURSION_LIMIT_EXCEEDED.format(self.recursion_limit, entity_type.__name__)
            )
        if self.object_count >= self.object_limit:
            raise ObjectLimitExceeded(
                ErrorMessages.OBJECT_LIMIT_EXCEEDED.format(self.object_limit, entity_type.__name__)
            )
        self.object_count += 1

        # @@ STEP 4: allocate and populate
        result = self._allocate(entity_type, chain)
        self._created.append(result)
        if self._creation_log is not None:
            self._creation_log.append((len(chain), result))

        for field, creator in plan.scalars:
            field.set(result, creator(field.name))
            self._run_hooks(self.customization.get_field_post_create(entity_type, field.name), result)
        self._copy_identity_keys(plan, result, chain)
        self._bind_references(plan, result, chain, reuse=False)
        self._bind_collections(plan, result, chain, reuse=False)
        self._run_hooks(self.customization.get_post_create(entity_type), result)

        # @@ STEP 5: remember singletons
        if self.customization.is_singleton(entity_type):
            self._singletons[entity_type] = result
        return result

    def _copy_identity_keys(self, plan: _ConstructionPlan, obj: Any, chain: List[Any]) -> None:
        """Take the primary key of a 1:1 parent found among the ancestors."""
        for step in plan.identities:
            target = step.field.related_type
            lookback = self.customization.get_lookback(plan.entity_type, step.field, self.default_lookback)
            ancestor = _find_ancestor(chain, target, lookback)
            if ancestor is not None:
                self.relations.set_primary_key(obj, self.relations.get_primary_key(ancestor))

    def _bind_references(self, plan: _ConstructionPlan, obj: Any, chain: List[Any], reuse: bool) -> None:
        owner_type = plan.entity_type
        for step in plan.references:
            field = step.field
            target_type = field.related_type
            lookback = self.customization.get_lookback(owner_type, field, self.default_lookback)
            linked = _find_ancestor(chain, target_type, lookback)

            if linked is None and field.name in plan.constructed:
                linked = field.get(obj)

            if linked is None:
                if reuse:
                    continue
                factory = self.customization.get_custom_value(owner_type, field.name)
                if factory is not None:
                    linked = factory(self)
                elif self._should_populate(owner_type, step):
                    chain.append(obj)
                    try:
                        linked = self._create(target_type, chain, field.name)
                    finally:
                        chain.pop()

            if reuse:
                existing = field.get(obj)
                if existing is not None and existing is not linked:
                    raise AmbiguousSingletonBindingError(ErrorMessages.AMBIGUOUS_SINGLETON.format(
                        owner_type.__name__, target_type.__name__, field.name
                    ))

            if linked is not None:
                if step.foreign_keys and not (reuse and step.identity):
                    self.relations.set_foreign_key(obj, target_type, self.relations.get_primary_key(linked))
                field.set(obj, linked)
            elif not reuse:
                # Absent reference: navigation and unset key fields read as None
                field.set(obj, None)
                for key_field in step.foreign_keys:
                    if key_field.get(obj) is None:
                        key_field.set(obj, None)
            if not reuse:
                self._run_hooks(self.customization.get_field_post_create(owner_type, field.name), obj)

    def _bind_collections(self, plan: _ConstructionPlan, obj: Any, chain: List[Any], reuse: bool) -> None:
        owner_type = plan.entity_type
        for field in plan.collections:
            element_type = field.related_type
            lookback = self.customization.get_lookback(owner_type, field, self.default_lookback)
            ancestor = _find_ancestor(chain, element_type, lookback)

            if ancestor is not None:
                field.add(obj, ancestor)
            elif reuse:
                continue
            else:
                field.ensure_container(obj)
                default = self.root_collection_members if not chain else self.leaf_collection_members
                count = self.customization.get_include_count(owner_type, field, default)
                chain.append(obj)
                try:
                    for _ in range(count):
                        field.add(obj, self._create(element_type, chain, field.name))
                finally:
                    chain.pop()
            if not reuse:
                self._run_hooks(self.customization.get_field_post_create(owner_type, field.name), obj)

    def _should_populate(self, owner_type: type, step: _ReferenceStep) -> bool:
        # Optional foreign keys are filled at random unless an include count asks for them
        if not step.nullable:
            return True
        if self.customization.get_include_count(owner_type, step.field, 0) > 0:
            return True
        return self.value_creator.flip()

    def _allocate(self, entity_type: type, chain: List[Any]) -> Any:
        """Instantiate ``entity_type``, resolving required constructor parameters."""
        descriptor = self.reflection.describe(entity_type)
        arguments: Dict[str, Any] = {}
        for param in descriptor.parameters:
            if param.has_default:
                continue
            info = param.info
            if info.kind is FieldKind.REFERENCE:
                related = _find_ancestor(chain, info.related_type, self.default_lookback)
                if related is None:
                    related = self._create(info.related_type, chain, param.name)
                arguments[param.name] = related
            elif info.kind is FieldKind.COLLECTION:
                arguments[param.name] = info.collection_shape.value()
            else:
                creator = self._scalar_creator(entity_type, param.name, info.annotation)
                if creator is None:
                    raise UnsupportedTypeError(ErrorMessages.UNSUPPORTED_PARAMETER_TYPE.format(
                        param.name, entity_type.__name__, info.annotation
                    ))
                arguments[param.name] = creator(param.name)
        return descriptor.allocate(arguments)

    # -------------------------------------------------------------------------
    # Plan compilation
    # -------------------------------------------------------------------------

    def _plan(self, entity_type: type) -> _ConstructionPlan:
        plan = self._plans.get(entity_type)
        if plan is None:
            plan = self._compile(entity_type)
            self._plans[entity_type] = plan
        return plan

    def _compile(self, entity_type: type) -> _ConstructionPlan:
        descriptor = self.reflection.describe(entity_type)
        fields = [f for f in descriptor.fields if not self.customization.should_skip(entity_type, f)]

        # @@ STEP 1: relations of single references, identity ones first
        references: List[_ReferenceStep] = []
        for f in fields:
            if not f.is_reference:
                continue
            foreign_keys = self.relations.foreign_key_fields(entity_type, f.related_type)
            references.append(_ReferenceStep(
                field=f,
                foreign_keys=foreign_keys,
                identity=self.relations.is_identity_relation(entity_type, f.related_type),
                nullable=bool(foreign_keys) and all(k.optional for k in foreign_keys),
            ))
        references.sort(key=lambda step: not step.identity)

        # @@ STEP 2: foreign keys are copied, never generated; primary keys always are
        foreign_names = {k.name for step in references for k in step.foreign_keys}
        primary_names = (
            {k.name for k in self.relations.primary_key_fields(entity_type)} if foreign_names else set()
        )

        # @@ STEP 3: scalar creators, custom values first
        scalars: List[Tuple[FieldDescriptor, Creator]] = []
        for f in fields:
            if f.kind is not FieldKind.SCALAR:
                continue
            if f.name in foreign_names and f.name not in primary_names:
                continue
            creator = self._scalar_creator(entity_type, f.name, f.annotation)
            if creator is None:
                raise UnsupportedTypeError(ErrorMessages.UNSUPPORTED_FIELD_TYPE.format(
                    f.name, entity_type.__name__, f.annotation
                ))
            scalars.append((f, creator))

        plan = _ConstructionPlan(
            entity_type=entity_type,
            scalars=tuple(scalars),
            references=tuple(references),
            collections=tuple(f for f in fields if f.is_collection),
            constructed=frozenset(p.name for p in descriptor.parameters if not p.has_default),
        )
        logger.debug(LoggingConstants.PLAN_COMPILED.format(
            entity_type.__name__, len(plan.scalars), len(plan.identities),
            len(plan.references) - len(plan.identities), len(plan.collections),
        ))
        return plan

    def _scalar_creator(self, owner_type: type, field_name: str, annotation: Any) -> Optional[Creator]:
        factory = self.customization.get_custom_value(owner_type, field_name)
        if factory is not None:
            return lambda hint: factory(self)
        return self.value_creator.get(annotation)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _run_hooks(hooks: List[PostCreateHook], obj: Any) -> None:
        for hook in hooks:
            hook(obj)

    def _log_creation_chain(self, entity_type: type, entries: List[Tuple[int, Any]]) -> None:
        logger.info(LoggingConstants.CREATION_CHAIN_HEADER.format(entity_type.__name__))
        for depth, obj in entries:
            logger.info(LoggingConstants.CREATION_CHAIN_ENTRY.format(
                LoggingConstants.CREATION_CHAIN_INDENT * (depth + 1), type(obj).__name__
            ))


__all__ = ["DataGenerator"]
