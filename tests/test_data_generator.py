# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the relational graph synthesizer.

Tests cover:
- Scalar population and key consistency
- Cycle termination through ancestor lookback
- Singleton reuse and ambiguous singleton bindings
- 1:1 identity relations
- Object and recursion ceilings
- Dataclass entities with constructor parameters
"""

from __future__ import annotations

import logging
import uuid

import numpy as np
import pytest

from memalchemy import (
    AmbiguousSingletonBindingError,
    DataGenerator,
    KeyResolutionError,
    ObjectLimitExceeded,
    RecursionLimitExceeded,
    UnsupportedTypeError,
)

from .models import (
    Account,
    Address,
    Building,
    Category,
    Child,
    Color,
    Document,
    Floor,
    Left,
    Measurement,
    Node,
    Owner,
    Parent,
    Person,
    Pet,
    Plain,
    Product,
    Profile,
    Ref,
    Settings,
    User,
)


class TestScalars:
    """Scalar field population."""

    def test_person_round_trip(self, generator):
        """A type with Id and Name gets a populated key and a non-empty name."""
        person = generator.create(Person)
        assert isinstance(person, Person)
        assert isinstance(person.Id, int)
        assert person.Name.startswith("Name")
        assert len(person.Name) > len("Name")

    def test_many_scalar_kinds(self, generator):
        measurement = generator.create(Measurement)
        assert type(measurement.small) is np.int8
        assert type(measurement.unsigned) is np.uint16
        assert type(measurement.ratio) is np.float32
        assert isinstance(measurement.color, Color)
        assert isinstance(measurement.token, uuid.UUID)
        assert isinstance(measurement.flag, bool)

    def test_plain_pydantic_model(self, generator):
        plain = generator.create(Plain)
        assert plain.label.startswith("label")

    def test_seeded_generators_agree(self):
        """The same seed builds the same values."""
        first = DataGenerator(seed=3).create(Person)
        second = DataGenerator(seed=3).create(Person)
        assert (first.Id, first.Name) == (second.Id, second.Name)

    def test_unsupported_field(self, generator):
        """A mapping field cannot be synthesized unless skipped."""
        with pytest.raises(UnsupportedTypeError):
            generator.create(Document)
        document = generator.for_type(Document).without("metadata").create()
        assert document.metadata == {}


class TestRelations:
    """Reference and collection wiring."""

    def test_root_collection_members(self, generator):
        """The root gets three children, each linked back to it."""
        parent = generator.create(Parent)
        assert len(parent.children) == 3
        for child in parent.children:
            assert child.parent is parent
            assert child.parent_id == parent.id

    def test_child_creates_parent(self, generator):
        """A child gets a parent whose collection contains the child only."""
        child = generator.create(Child)
        assert child.parent is not None
        assert child.parent_id == child.parent.id
        assert child.parent.children == [child]

    def test_leaf_collections_stay_empty(self, generator):
        """Collections below the root get no members by default."""
        child = generator.create(Child)
        assert len(child.parent.children) == 1

    def test_key_consistency_over_many_graphs(self, generator):
        """Every foreign key equals the primary key of the object it references."""
        for child in generator.create_many(Child, 20):
            assert child.parent_id == child.parent.id
        for parent in generator.create_many(Parent, 5):
            assert all(c.parent_id == parent.id for c in parent.children)

    def test_nullable_references(self, generator):
        """Optional foreign keys are populated at random, consistently either way."""
        pets = list(generator.create_many(Pet, 200))
        with_owner = [p for p in pets if p.owner is not None]
        without_owner = [p for p in pets if p.owner is None]
        assert with_owner and without_owner
        assert all(p.owner_id == p.owner.id and p.owner.pets == [p] for p in with_owner)
        assert all(p.owner_id is None for p in without_owner)
        assert len(generator.get_objects(Owner)) == len(with_owner)

    def test_absent_reference_without_defaults(self):
        """Optional fields without defaults read as None when the reference is left out."""
        refs = list(DataGenerator(seed=1).create_many(Ref, 40))
        absent = [r for r in refs if r.target is None]
        assert absent and len(absent) < len(refs)
        assert all(r.target_id is None for r in absent)
        assert all(r.target_id == r.target.id for r in refs if r.target is not None)
        assert all(isinstance(r.id, int) for r in refs)

    def test_cycle_terminates(self, generator):
        """A two-type reference cycle stops at the ancestor."""
        left = generator.create(Left)
        assert left.right.left is left
        assert left.right_id == left.right.id
        assert left.right.left_id == left.id
        assert len(generator.get_objects()) == 2

    def test_create_many_is_lazy(self, generator):
        """Nothing is built before iteration."""
        many = generator.create_many(Person, 4)
        assert generator.get_objects(Person) == []
        assert len(list(many)) == 4
        assert len(generator.get_objects(Person)) == 4
        assert len(list(generator.create_many(Person, 2))) == 2


class TestSingletons:
    """Singleton handling."""

    def test_singleton_is_shared(self, generator):
        """Two products point at the same category, which lists both."""
        generator.for_type(Category).register_singleton()
        first = generator.create(Product)
        second = generator.create(Product)
        assert first.category is second.category
        assert first.category.products == [first, second]
        assert first.category_id == second.category_id == first.category.id
        assert generator.get_singleton(Category) is first.category
        assert len(generator.get_objects(Category)) == 1

    def test_registered_instance(self, generator):
        """An instance handed to use() is returned for every reference."""
        category = Category(id=99, title="fixed")
        generator.for_type(Category).use(category)
        product = generator.create(Product)
        assert product.category is category
        assert product.category_id == 99
        assert category.title == "fixed"

    def test_ambiguous_binding(self, generator):
        """A singleton already linked to one user cannot be linked to another."""
        generator.for_type(Settings).register_singleton()
        user = generator.create(User)
        assert user.settings.user is user
        with pytest.raises(AmbiguousSingletonBindingError):
            generator.create(User)


class TestIdentityRelations:
    """1:1 relations sharing the primary key."""

    def test_key_propagation(self, generator, relations):
        """The dependent takes the primary key of its parent."""
        relations.register_foreign_keys(Profile, Account, "id")
        profile = generator.create(Profile)
        assert profile.account is not None
        assert profile.id == profile.account.id


class TestCeilings:
    """Safety ceilings."""

    def test_object_limit(self):
        """With reuse disabled the eleventh node exceeds a limit of ten."""
        generator = DataGenerator(object_limit=10)
        generator.for_type(Node).set_lookback(0)
        with pytest.raises(ObjectLimitExceeded):
            generator.create(Node)
        assert len(generator.get_objects(Node)) == 10

    def test_recursion_limit(self):
        generator = DataGenerator(recursion_limit=5)
        generator.for_type(Node).set_lookback(0)
        with pytest.raises(RecursionLimitExceeded):
            generator.create(Node)

    def test_object_limit_spans_calls(self):
        """The limit counts every object the generator has built, across calls."""
        generator = DataGenerator(object_limit=2)
        people = generator.create_many(Person, 3)
        next(people)
        next(people)
        with pytest.raises(ObjectLimitExceeded):
            next(people)
        assert generator.object_count == 2
        assert len(generator.get_objects(Person)) == 2

    def test_self_reference_reuses_ancestor(self, generator):
        """With the default lookback a node's parent is created once, then reused."""
        node = generator.create(Node)
        assert node.parent.parent is node


class TestDataclasses:
    """Entities built through their constructor."""

    def test_constructor_parameters(self, generator):
        """Required parameters are generated, including the referenced address."""
        building = generator.create(Building)
        assert isinstance(building.address, Address)
        assert building.address_id == building.address.id
        assert isinstance(building.address.street, str)
        assert len(generator.get_objects(Address)) == 1

    def test_dataclass_collection(self, generator):
        building = generator.create(Building)
        assert len(building.floors) == 3
        assert all(isinstance(f, Floor) and f.building is building for f in building.floors)
        assert all(f.building_id == building.id for f in building.floors)


class TestInspection:
    """Access to created objects."""

    def test_get_object(self, generator):
        parent = generator.create(Parent)
        assert generator.get_object(Parent) is parent
        assert generator.get_object(Child, 2) is parent.children[2]
        with pytest.raises(IndexError):
            generator.get_object(Child, 3)

    def test_creation_chain_logging(self, caplog):
        """The creation tree is logged after each create."""
        generator = DataGenerator(seed=1, log_creation=True)
        with caplog.at_level(logging.INFO, logger="memalchemy.data_generator"):
            generator.create(Parent)
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Creation chain for Parent:"
        assert messages[1] == "  Parent"
        assert messages[2:] == ["    Child"] * 3


class TestWithoutRelations:
    """Navigation-only synthesis."""

    def test_relation_without_key_fields(self, generator):
        """Without relations a reference with no foreign key field is still populated."""
        with pytest.raises(KeyResolutionError):
            generator.create(Profile)
        profile = generator.without_relations().create(Profile)
        assert isinstance(profile.account, Account)
        assert generator.get_object(Account) is profile.account
