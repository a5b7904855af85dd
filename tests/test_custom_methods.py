"""Tests for custom filter and sort methods."""

from typing import TypeVar

import pytest
from conftest import Author, Comment, Post, titles

from querysieve.constants import FilterOperator
from querysieve.custom import (
    CustomFilterMethods,
    CustomMethods,
    CustomSortMethods,
    custom_method,
    invoke_custom_method,
)
from querysieve.exceptions import IncompatibleMethodError, MethodNotFoundError
from querysieve.queryables import ListQueryable, Queryable
from querysieve.querydsl.nodes import Lambda

AnyEntity = TypeVar("AnyEntity")
PostLike = TypeVar("PostLike", bound=Post)
TextOrPost = TypeVar("TextOrPost", Comment, Post)


class PostFilters(CustomFilterMethods):
    def is_new(self, source: Queryable[Post], operator, values) -> Queryable[Post]:
        return source.where(Lambda.of(Post, lambda p: p.attr("likes", int).lt(50)))

    def by_author(self, source: Queryable[Post], operator, values, author_name) -> Queryable[Post]:
        return source.where(lambda post: post.author is not None and post.author.name == author_name)

    def by_author_or_anyone(self, source: Queryable[Post], operator, values, author_name=None) -> Queryable[Post]:
        if author_name is None:
            return source
        return source.where(lambda post: post.author is not None and post.author.name == author_name)

    def only_comments(self, source: Queryable[Comment], operator, values) -> Queryable[Comment]:
        return source

    def first(self, source: Queryable[AnyEntity], operator, values) -> Queryable[AnyEntity]:
        return source.take(int(values[0]) if values else 1)

    def popular(self, source: Queryable[PostLike], operator, values) -> Queryable[PostLike]:
        return source.where(Lambda.of(Post, lambda p: p.attr("likes", int).gt(100)))

    def constrained(self, source: Queryable[TextOrPost], operator, values) -> Queryable[TextOrPost]:
        return source

    @custom_method(Author, name="by_age")
    def age_filter(self, source, operator, values):
        return source

    @custom_method(Post, name="by_age")
    def post_age_filter(self, source, operator, values):
        return source.where(lambda post: post.author is not None and post.author.age is not None)

    @custom_method(bound=[Author])
    def authors_only(self, source, operator, values):
        return source

    @staticmethod
    def plain(source: Queryable[Post], operator, values) -> Queryable[Post]:
        return source.skip(1)

    def broken(self, source: Queryable[Post], operator, values) -> Queryable[Post]:
        return list(source)

    def _helper(self):
        return None


class PostSorts(CustomSortMethods):
    def discussed(self, source: Queryable[Post], use_then_by, descending) -> Queryable[Post]:
        key = Lambda.of(Post, lambda p: p.attr("comments", int))
        return source.then_by(key, descending) if use_then_by else source.order_by(key, descending)


def call(methods, name, source, *extra):
    return methods.invoke(name, source, (source, FilterOperator.EQUALS, ["1"]), extra=list(extra) or None)


class TestMethodTable:
    """Tests for building the per-class method table."""

    def test_public_methods_only(self):
        table = PostFilters.method_table()
        assert "_helper" not in table
        assert "is_new" in table
        assert "plain" in table

    def test_table_is_cached_per_class(self):
        assert PostFilters.method_table() is PostFilters.method_table()
        assert "discussed" in PostSorts.method_table()
        assert "discussed" not in PostFilters.method_table()

    def test_exact_spec(self):
        (spec,) = PostFilters.method_table()["is_new"]
        assert spec.entity_type is Post
        assert not spec.generic
        assert spec.served == "Queryable[Post]"

    def test_generic_specs(self):
        (unbounded,) = PostFilters.method_table()["first"]
        (bounded,) = PostFilters.method_table()["popular"]
        (constrained,) = PostFilters.method_table()["constrained"]
        assert unbounded.generic and unbounded.bounds == ()
        assert bounded.generic and bounded.bounds == (Post,)
        assert constrained.any_bound and set(constrained.bounds) == {Comment, Post}

    def test_decorated_specs_share_a_name(self):
        specs = PostFilters.method_table()["by_age"]
        assert {spec.entity_type for spec in specs} == {Author, Post}
        assert {spec.attribute for spec in specs} == {"age_filter", "post_age_filter"}

    def test_base_class_has_no_methods(self):
        assert CustomMethods.method_table() == {}


class TestFind:
    """Tests for candidate selection."""

    def test_exact_match(self):
        method = PostFilters().find("is_new", Post)
        assert method.__name__ == "is_new"

    def test_case_insensitive_lookup(self):
        assert PostFilters().find("IS_NEW", Post).__name__ == "is_new"
        with pytest.raises(MethodNotFoundError):
            PostFilters().find("IS_NEW", Post, case_sensitive=True)

    def test_exact_match_wins_among_same_name(self):
        assert PostFilters().find("by_age", Post).__name__ == "post_age_filter"
        assert PostFilters().find("by_age", Author).__name__ == "age_filter"

    def test_generic_match(self):
        assert PostFilters().find("first", Comment).__name__ == "first"
        assert PostFilters().find("popular", Post).__name__ == "popular"
        assert PostFilters().find("constrained", Comment).__name__ == "constrained"
        assert PostFilters().find("authors_only", Author).__name__ == "authors_only"

    def test_not_found(self):
        with pytest.raises(MethodNotFoundError, match="missing not found."):
            PostFilters().find("missing", Post)

    def test_incompatible(self):
        with pytest.raises(IncompatibleMethodError) as exc_info:
            PostFilters().find("only_comments", Post)
        (error,) = exc_info.value.errors
        assert error.message == (
            "only_comments failed. Expected a custom method for type Queryable[Post] "
            "but only found for type Queryable[Comment]"
        )

    def test_incompatible_generic_bound(self):
        with pytest.raises(IncompatibleMethodError) as exc_info:
            PostFilters().find("popular", Comment)
        assert "Queryable[T: Post]" in exc_info.value.errors[0].message

    def test_incompatible_aggregates_every_candidate(self):
        with pytest.raises(IncompatibleMethodError) as exc_info:
            PostFilters().find("by_age", Comment)
        assert len(exc_info.value.errors) == 2


class TestInvoke:
    """Tests for invoking custom methods."""

    def test_invoke(self, source):
        assert titles(call(PostFilters(), "is_new", source)) == ["Hello", "hello again"]

    def test_generic_invoke(self, source):
        assert titles(call(PostFilters(), "first", source)) == ["Hello"]

    def test_static_method(self, source):
        assert titles(call(PostFilters(), "plain", source)) == ["Python tips", "Release notes", "hello again"]

    def test_extra_arguments_appended(self, source):
        assert titles(call(PostFilters(), "by_author", source, "Ann")) == ["Hello"]

    def test_extra_arguments_not_appended_when_not_needed(self, source):
        assert titles(call(PostFilters(), "is_new", source, "ignored")) == ["Hello", "hello again"]

    def test_extra_arguments_fill_defaulted_parameters(self, source):
        assert titles(call(PostFilters(), "by_author_or_anyone", source, "Bob")) == ["Release notes"]
        assert len(titles(call(PostFilters(), "by_author_or_anyone", source))) == 4

    def test_missing_arguments_raise(self, source):
        with pytest.raises(TypeError):
            call(PostFilters(), "by_author", source)

    def test_non_queryable_result(self, source):
        with pytest.raises(IncompatibleMethodError, match="instead of a Queryable"):
            call(PostFilters(), "broken", source)

    def test_sort_method(self, source):
        result = PostSorts().invoke("discussed", source, (source, False, True))
        assert titles(result) == ["Hello", "Release notes", "Python tips", "hello again"]

    def test_sort_method_then_by(self, source):
        ordered = source.order_by(lambda post: post.comments)
        result = PostSorts().invoke("discussed", ordered, (ordered, True, False))
        assert len(result.steps[-1][1]) == 2

    def test_invoke_custom_method_without_methods(self, source):
        with pytest.raises(MethodNotFoundError):
            invoke_custom_method(None, "is_new", source, (source, FilterOperator.EQUALS, None))

    def test_invoke_custom_method(self, posts):
        source = ListQueryable(posts, Post)
        result = invoke_custom_method(PostFilters(), "is_new", source, (source, FilterOperator.EQUALS, None))
        assert titles(result) == ["Hello", "hello again"]
