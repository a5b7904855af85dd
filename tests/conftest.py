"""Pytest configuration and fixtures for querysieve tests."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Optional, Protocol

import pytest
from dotenv import load_dotenv

from querysieve.attributes import Sieve
from querysieve.queryables import ListQueryable
from querysieve.querydsl.nodes import Lambda
from querysieve.schema import SieveOptions

# Load environment variables
load_dotenv()


# Entities shared by the resolver, compiler and processor tests
@dataclass
class Author:
    name: str
    age: Optional[int] = None


FEATURED = Lambda.of(Any, lambda e: e.attr("likes", int).gte(50))


@dataclass
class Post:
    title: Annotated[str, Sieve(can_filter=True, can_sort=True)]
    likes: Annotated[int, Sieve(can_filter=True, can_sort=True, name="popularity")] = 0
    comments: int = 0
    rating: Annotated[Optional[int], Sieve(can_filter=True, can_sort=True)] = None
    category: Annotated[Optional[str], Sieve(can_filter=True)] = None
    published: Annotated[Optional[datetime], Sieve(can_filter=True, can_sort=True)] = None
    author: Optional[Author] = None
    is_featured: Lambda[bool] = field(default=FEATURED)


# Static expression member, invoked against the record
Post.is_popular = Lambda.of(Post, lambda p: p.attr("likes", int).gt(100))


@dataclass
class Comment:
    text: str
    post: Optional[Post] = None


class Named(Protocol):
    name: str


class Titled(Protocol):
    name: str


class Labeled(Named, Protocol):
    """Interface inheriting `name` from exactly one interface."""


class Badge(Named, Titled, Protocol):
    """Interface inheriting `name` from two unrelated interfaces."""


@pytest.fixture
def ann():
    return Author("Ann", age=34)


@pytest.fixture
def bob():
    return Author("Bob")


@pytest.fixture
def posts(ann, bob):
    """Sample posts covering null authors, ratings, categories and dates."""
    return [
        Post("Hello", likes=10, comments=3, rating=4, category="news", published=datetime(2024, 1, 5, 10), author=ann),
        Post("Python tips", likes=120, comments=1, rating=None, category="tech", published=datetime(2024, 1, 6)),
        Post("Release notes", likes=55, comments=3, rating=2, category=None, published=None, author=bob),
        Post("hello again", likes=0, comments=0, rating=5, category="news", published=datetime(2024, 1, 5, 23)),
    ]


@pytest.fixture
def source(posts):
    return ListQueryable(posts, Post)


@pytest.fixture
def options():
    """Processor options independent of the environment."""
    return SieveOptions(
        case_sensitive=False,
        default_page_size=0,
        max_page_size=0,
        throw_exceptions=True,
        ignore_nulls_on_not_equal=True,
        disable_nullable_type_expression_for_sorting=False,
    )


def titles(queryable):
    return [post.title for post in queryable]
