"""Unit tests for LoadPlanBuilder and LoadPlan."""

from __future__ import annotations

import pytest

from row_orm.core.exceptions import (
    ConflictingScopeError,
    InvalidRelationPathError,
    UnknownRelationError,
    UnresolvableModelError,
)
from row_orm.core.registry import ModelRegistry
from row_orm.loading.builder import LoadPlanBuilder, plan, split_path
from row_orm.mapping.record import Model
from row_orm.relations import has_many
from tests.models import Comment, Post, User


def published(query):
    return query.where("published", 1)


class TestSplitPath:
    def test_single(self) -> None:
        assert split_path("posts") == ["posts"]

    def test_dotted(self) -> None:
        assert split_path("posts.comments.user") == ["posts", "comments", "user"]

    @pytest.mark.parametrize("path", ["", ".posts", "posts.", "posts..comments"])
    def test_empty_segment(self, path: str) -> None:
        with pytest.raises(InvalidRelationPathError):
            split_path(path)

    def test_non_string(self) -> None:
        with pytest.raises(InvalidRelationPathError):
            split_path(None)  # type: ignore[arg-type]


class TestLoadPlanBuilder:
    def test_single_path(self) -> None:
        load_plan = LoadPlanBuilder(User).include("posts").build()
        assert load_plan.model is User
        assert [node.name for node in load_plan.nodes] == ["posts"]
        assert load_plan.nodes[0].relation is User.posts
        assert load_plan.depth == 1

    def test_shared_prefix_merged(self) -> None:
        load_plan = (
            LoadPlanBuilder(User)
            .include("posts")
            .include("posts.comments")
            .include("posts.tags")
            .include("profile")
            .build()
        )
        assert load_plan.paths() == ["posts", "posts.comments", "posts.tags", "profile"]
        posts = load_plan.nodes[0]
        assert [child.relation for child in posts.children] == [Post.comments, Post.tags]
        assert load_plan.depth == 2

    def test_levels_are_breadth_first(self) -> None:
        load_plan = plan(User, ["posts.comments.user", "profile"])
        levels = [[node.name for node in level] for level in load_plan.levels()]
        assert levels == [["posts", "profile"], ["comments"], ["user"]]

    def test_scope_on_last_segment(self) -> None:
        load_plan = plan(User, [{"posts.comments": published}])
        posts = load_plan.nodes[0]
        assert posts.scope is None
        assert posts.children[0].scope is published

    def test_same_scope_twice_allowed(self) -> None:
        load_plan = plan(User, [{"posts": published}, {"posts": published}])
        assert load_plan.nodes[0].scope is published

    def test_conflicting_scopes(self) -> None:
        with pytest.raises(ConflictingScopeError, match="posts"):
            plan(User, [{"posts": published}, {"posts": lambda q: q}])

    def test_unknown_segment(self) -> None:
        with pytest.raises(UnknownRelationError, match="'Post' has no relation 'likes'"):
            plan(User, ["posts.likes"])

    def test_unresolvable_intermediate_model(self) -> None:
        registry = ModelRegistry()

        class Shelf(Model, registry=registry):
            books = has_many("Book")

        with pytest.raises(UnresolvableModelError, match="Book"):
            plan(Shelf, ["books.pages"])

    def test_single_string_accepted(self) -> None:
        assert plan(Comment, "post.user").paths() == ["post", "post.user"]

    def test_empty_plan_is_falsy(self) -> None:
        assert not plan(User, [])
        assert plan(User, []).depth == 0
