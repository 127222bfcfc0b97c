# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for generator overrides registered through for_type() and build().
"""

from __future__ import annotations

import itertools

import pytest

from memalchemy import ConfigurationError, Customization, EntityReflection, KeyResolutionError

from .models import Category, Child, Node, Owner, Parent, Pet, Product


class TestIncludeAndRequire:
    """Collection sizes and forced references."""

    def test_include_count(self, generator):
        parent = generator.for_type(Parent).include("children", count=5).create()
        assert len(parent.children) == 5
        assert all(child.parent is parent for child in parent.children)

    def test_include_zero(self, generator):
        parent = generator.for_type(Parent).include("children", count=0).create()
        assert parent.children == []

    def test_include_rejects_references(self, generator):
        with pytest.raises(ConfigurationError):
            generator.for_type(Child).include("parent")

    def test_require_nullable_reference(self, generator):
        """A required reference is populated even though its foreign key is optional."""
        pets = list(generator.for_type(Pet).require("owner").create_many(50))
        assert all(pet.owner is not None and pet.owner_id == pet.owner.id for pet in pets)

    def test_require_rejects_scalars(self, generator):
        with pytest.raises(ConfigurationError):
            generator.for_type(Parent).require("name")

    def test_unknown_field(self, generator):
        with pytest.raises(KeyResolutionError):
            generator.for_type(Parent).include("siblings")


class TestValues:
    """Fixed values and factories."""

    def test_with_value(self, generator):
        """The root takes the fixed name; its children keep random ones."""
        parent = generator.for_type(Parent).with_value("name", "root").create()
        assert parent.name == "root"
        assert all(child.name != "root" for child in parent.children)

    def test_with_factory(self, generator):
        counter = itertools.count(1)
        generator.for_type(Parent).with_factory("id", lambda gen: next(counter))
        first = generator.create(Parent)
        second = generator.create(Parent)
        assert (first.id, second.id) == (1, 2)
        assert all(child.parent_id == 2 for child in second.children)

    def test_reference_factory(self, generator):
        """A reference value bypasses ancestor reuse but keeps the key in sync."""
        fixed = Parent(id=77, name="fixed")
        child = generator.for_type(Child).with_value("parent", fixed).create()
        assert child.parent is fixed
        assert child.parent_id == 77
        assert generator.get_objects(Parent) == []

    def test_with_constructor(self, generator):
        """A custom constructor replaces synthesis for its type."""
        generator.for_type(Category).with_constructor(lambda gen, hint: Category(id=7, title=hint))
        product = generator.create(Product)
        assert product.category.title == "category"
        assert product.category_id == 7
        assert product.category.products == []

    def test_use_instance(self, generator):
        shared = Owner(id=3)
        generator.for_type(Pet).require("owner").for_type(Owner).use(shared)
        pets = list(generator.create_many(Pet, 3))
        assert all(pet.owner is shared for pet in pets)
        assert shared.pets == pets


class TestSkipping:
    """Fields and types left untouched."""

    def test_without_field(self, generator):
        child = generator.for_type(Child).without("name").create()
        assert child.name == ""
        assert child.parent is not None

    def test_without_type(self, generator):
        """Skipping a type leaves every field referencing it unset."""
        generator.for_type(Parent).without()
        child = generator.create(Child)
        assert child.parent is None
        assert generator.get_objects(Parent) == []


class TestHooks:
    """Post-create callbacks."""

    def test_type_hook(self, generator):
        seen = []
        parent = generator.for_type(Child).post_create(seen.append).for_type(Parent).create()
        assert seen == parent.children

    def test_type_hook_runs_after_wiring(self, generator):
        """Type hooks see the finished object, relations included."""
        parents = []
        generator.for_type(Child).post_create(lambda child: parents.append(child.parent))
        child = generator.create(Child)
        assert parents == [child.parent]

    def test_field_hook(self, generator):
        names = []
        generator.for_type(Parent).post_create(lambda parent: names.append(parent.name), "name")
        parent = generator.create(Parent)
        assert names == [parent.name]


class TestLookback:
    """Ancestor reuse depth."""

    def test_disable_reuse_for_field(self, generator):
        """Children get their own parent instead of the one that created them."""
        parent = generator.for_type(Child).set_lookback(0, "parent").for_type(Parent).create()
        assert len(parent.children) == 3
        for child in parent.children:
            assert child.parent is not parent
            assert child.parent.children == [child]
        assert len(generator.get_objects(Parent)) == 4

    def test_field_lookback_wins_over_type(self, generator):
        """A field lookback overrides the lookback of the referenced type."""
        generator.for_type(Node).set_lookback(0).set_lookback(1, "parent")
        node = generator.create(Node)
        assert node.parent.parent is node


class TestBuild:
    """Forked generators."""

    def test_fork_does_not_leak(self, generator):
        forked = generator.build(Parent).with_value("name", "forked").create()
        assert forked.name == "forked"
        assert generator.create(Parent).name != "forked"

    def test_fork_inherits(self, generator):
        generator.for_type(Parent).with_value("name", "base")
        assert generator.build(Parent).create().name == "base"
        assert generator.build(Parent).with_value("name", "override").create().name == "override"
        assert generator.create(Parent).name == "base"


class TestCustomizationLookups:
    """Lookup precedence of the layered store."""

    def setup_method(self):
        self.parent_field = EntityReflection().describe(Child).field("parent")

    def test_default(self):
        assert Customization().get_lookback(Child, self.parent_field, 1) == 1

    def test_related_type_then_field(self):
        store = Customization()
        store.for_type(Parent).lookback = 4
        assert store.get_lookback(Child, self.parent_field, 1) == 4
        store.for_field(Child, "parent").lookback = 2
        assert store.get_lookback(Child, self.parent_field, 1) == 2

    def test_ancestor(self):
        base = Customization()
        base.for_type(Parent).lookback = 4
        fork = base.fork()
        assert fork.get_lookback(Child, self.parent_field, 1) == 4
        fork.for_field(Child, "parent").lookback = 2
        assert fork.get_lookback(Child, self.parent_field, 1) == 2
        assert base.get_lookback(Child, self.parent_field, 1) == 4

    def test_singleton_instance(self):
        store = Customization()
        assert store.get_singleton_instance(Parent) is None
        marker = Parent()
        store.for_type(Parent).instance = marker
        assert store.fork().get_singleton_instance(Parent) is marker
