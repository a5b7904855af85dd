"""Tests for the property mapper and the property resolver."""

import pytest
from conftest import Badge, Post

from querysieve.constants import RESOLUTION_ORDER, PropertySource
from querysieve.exceptions import AmbiguousMemberError, MemberNotFoundError, RegistrationError
from querysieve.mapper import PropertyMapper
from querysieve.resolver import PropertyResolver


class TestPropertyMapper:
    """Tests for fluent registration."""

    def test_register_defaults(self):
        mapper = PropertyMapper()
        mapper.property(Post, "comments")
        (registration,) = mapper.registrations(Post)
        assert registration.name == "comments"
        assert registration.full_name == "comments"
        assert not registration.can_filter
        assert not registration.can_sort

    def test_fluent_flags_and_name(self):
        mapper = PropertyMapper()
        mapper.property(Post, "author.name").can_filter().can_sort().has_name("AuthorName")
        (registration,) = mapper.registrations(Post)
        assert registration.name == "AuthorName"
        assert registration.full_name == "author.name"
        assert registration.can_filter and registration.can_sort
        assert [m.name for m in registration.members] == ["author", "name"]

    def test_registration_resolves_eagerly(self):
        mapper = PropertyMapper()
        with pytest.raises(MemberNotFoundError):
            mapper.property(Post, "author.email")

    def test_ambiguous_interface_member_fails_at_registration(self):
        mapper = PropertyMapper()
        with pytest.raises(AmbiguousMemberError):
            mapper.property(Badge, "name")

    def test_empty_name_rejected(self):
        mapper = PropertyMapper()
        with pytest.raises(RegistrationError):
            mapper.property(Post, "title").has_name("")

    def test_frozen_mapper_rejects_changes(self):
        mapper = PropertyMapper()
        builder = mapper.property(Post, "title")
        mapper.freeze()
        assert mapper.frozen
        with pytest.raises(RegistrationError, match="frozen"):
            mapper.property(Post, "likes")
        with pytest.raises(RegistrationError):
            builder.can_sort()

    def test_find_property_first_match_wins(self):
        mapper = PropertyMapper()
        mapper.property(Post, "likes").can_sort().has_name("score")
        mapper.property(Post, "comments").can_filter().can_sort().has_name("score")
        assert mapper.find_property(Post, "score").full_name == "likes"
        assert mapper.find_property(Post, "score", can_filter_required=True).full_name == "comments"

    def test_find_property_case_policy(self):
        mapper = PropertyMapper()
        mapper.property(Post, "title").can_filter()
        assert mapper.find_property(Post, "TITLE") is not None
        assert mapper.find_property(Post, "TITLE", case_sensitive=True) is None

    def test_find_property_other_type(self):
        mapper = PropertyMapper()
        mapper.property(Post, "title").can_filter()
        assert mapper.find_property(Badge, "title") is None


class TestPropertyResolver:
    """Tests for resolution across mapper and Sieve markers."""

    def test_resolution_order(self):
        assert RESOLUTION_ORDER == (PropertySource.MAPPER, PropertySource.ATTRIBUTE)

    def test_resolves_from_mapper(self):
        mapper = PropertyMapper()
        mapper.property(Post, "author.name").can_filter().has_name("AuthorName")
        resolved = PropertyResolver(mapper).resolve(Post, "authorname", can_filter_required=True)
        assert resolved.full_name == "author.name"
        assert resolved.source is PropertySource.MAPPER

    def test_falls_back_to_markers(self):
        resolved = PropertyResolver(PropertyMapper()).resolve(Post, "Title", can_filter_required=True)
        assert resolved.full_name == "title"
        assert resolved.source is PropertySource.ATTRIBUTE
        assert resolved.members[0].type is str

    def test_marker_name_overrides_attribute_name(self):
        resolver = PropertyResolver(PropertyMapper())
        assert resolver.resolve(Post, "popularity", can_sort_required=True).full_name == "likes"
        assert resolver.resolve(Post, "likes", can_sort_required=True) is None

    def test_mapper_takes_priority_over_markers(self):
        mapper = PropertyMapper()
        mapper.property(Post, "comments").can_sort().has_name("popularity")
        resolved = PropertyResolver(mapper).resolve(Post, "popularity", can_sort_required=True)
        assert resolved.full_name == "comments"
        assert resolved.source is PropertySource.MAPPER

    def test_capability_required(self):
        resolver = PropertyResolver(PropertyMapper())
        assert resolver.resolve(Post, "category", can_filter_required=True) is not None
        assert resolver.resolve(Post, "category", can_sort_required=True) is None

    def test_case_sensitive_policy(self):
        resolver = PropertyResolver(PropertyMapper(), case_sensitive=True)
        assert resolver.resolve(Post, "Title") is None
        assert resolver.resolve(Post, "title") is not None

    def test_unknown_name(self):
        assert PropertyResolver(PropertyMapper()).resolve(Post, "is_new") is None
