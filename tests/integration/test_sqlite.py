"""Integration test for relationship loading against SQLite.

Covers: query counts per relation, completeness, idempotence, count and
load agreement, nested loading, dangling keys, to-one tie-break and pivot
sharing, end-to-end against a real SQLite in-memory database.
"""

from __future__ import annotations

import sqlite3

import pytest

from row_orm.core.engine import Engine
from row_orm.core.exceptions import QueryExecutionError, RelationNotLoadedError
from row_orm.core.registry import ModelRegistry
from row_orm.loading.counts import CountAggregator, load_counts
from row_orm.loading.eager import load_relations
from row_orm.mapping.record import Model
from row_orm.relations import belongs_to_many
from row_orm.repository.base import Repository
from row_orm.repository.query import ModelQuery
from tests.models import Comment, Post, Profile, Role, Tag, User

ONE_LEVEL_RELATIONS = [
    (User, "posts", 1),
    (User, "profile", 1),
    (User, "comments", 1),
    (Post, "user", 1),
    (Comment, "post", 1),
    (User, "roles", 2),
    (Post, "tags", 2),
    (Tag, "posts", 2),
]


def add_users(engine: Engine, count: int) -> None:
    for offset in range(count):
        user_id = 1000 + offset
        engine.execute(
            "INSERT INTO users (id, name) VALUES (:id, :name)",
            {"id": user_id, "name": f"u{user_id}"},
        )
        engine.execute(
            "INSERT INTO posts (id, user_id, title) VALUES (:id, :user_id, 'bulk')",
            {"id": 5000 + offset, "user_id": user_id},
        )
        engine.execute(
            "INSERT INTO role_user (user_id, role_id) VALUES (:user_id, 1)", {"user_id": user_id}
        )


class TestQueryCounts:
    @pytest.mark.parametrize("model, relation, expected", ONE_LEVEL_RELATIONS)
    def test_constant_queries_per_relation(
        self, engine: Engine, statements: list[str], model, relation: str, expected: int
    ) -> None:
        records = ModelQuery(engine, model).fetch_all()
        statements.clear()
        load_relations(engine, records, relation)
        assert len(statements) == expected

    @pytest.mark.parametrize("extra", [0, 10, 50])
    def test_independent_of_batch_size(
        self, engine: Engine, statements: list[str], extra: int
    ) -> None:
        add_users(engine, extra)
        users = ModelQuery(engine, User).fetch_all()
        statements.clear()
        load_relations(engine, users, "posts", "roles")
        load_counts(engine, users, "posts", "roles")
        assert len(statements) == 1 + 2 + 1 + 1
        assert len(users) == 3 + extra


class TestCompleteness:
    @pytest.mark.parametrize("model, relation, _", ONE_LEVEL_RELATIONS)
    def test_every_parent_resolved(
        self, engine: Engine, model, relation: str, _: int
    ) -> None:
        records = ModelQuery(engine, model).with_relations(relation).fetch_all()
        empty = model.relationship(relation).empty_value()
        for record in records:
            state = record.get_relation(relation)
            assert state.loaded
            assert state.value is not None or empty is None

    def test_dangling_has_many_is_empty_list(self, engine: Engine) -> None:
        carol = ModelQuery(engine, User).with_relations("posts", "roles").find(3)
        assert carol.posts == []
        assert carol.roles == []

    def test_dangling_belongs_to_is_none(self, engine: Engine) -> None:
        orphan = ModelQuery(engine, Comment).with_relations("post").find(102)
        assert orphan.relation_loaded("post")
        assert orphan.post is None


class TestIdempotence:
    def test_resolving_twice_changes_nothing(self, engine: Engine) -> None:
        users = ModelQuery(engine, User).order_by("id").fetch_all()
        load_relations(engine, users, "posts.comments", "roles")
        snapshot = [user.to_dict() for user in users]
        load_relations(engine, users, "posts.comments", "roles")
        assert [user.to_dict() for user in users] == snapshot


class TestCountAgreement:
    @pytest.mark.parametrize(
        "model, relation",
        [
            (User, "posts"),
            (User, "comments"),
            (User, "roles"),
            (Post, "comments"),
            (Post, "tags"),
            (Tag, "posts"),
            (Role, "users"),
            (Comment, "replies"),
        ],
    )
    def test_count_equals_loaded_length(self, engine: Engine, model, relation: str) -> None:
        records = ModelQuery(engine, model).with_relations(relation).with_counts(relation)
        for record in records.fetch_all():
            assert record.get_count(relation) == len(record.related(relation))

    def test_scoped_count_equals_scoped_load(self, engine: Engine) -> None:
        scope = {"comments": lambda q: q.where("comments.parent_id", None)}
        posts = (
            ModelQuery(engine, Post)
            .with_relations(scope)
            .with_counts(scope)
            .order_by("id")
            .fetch_all()
        )
        assert [(post.comments_count, len(post.comments)) for post in posts] == [(1, 1), (0, 0)]


class TestNestedExample:
    def test_posts_comments_two_queries(self, engine: Engine, statements: list[str]) -> None:
        users = ModelQuery(engine, User).where_in("id", [1, 2]).order_by("id").fetch_all()
        statements.clear()
        load_relations(engine, users, "posts.comments")
        assert len(statements) == 2

        first, second = users
        assert [post.id for post in first.posts] == [10]
        assert [comment.id for comment in first.posts[0].comments] == [100, 101]
        assert [post.id for post in second.posts] == [11]
        assert second.posts[0].comments == []


class TestToOneTieBreak:
    def test_first_row_in_result_order_wins(self, engine: Engine) -> None:
        ascending = ModelQuery(engine, User).with_relations(
            {"profile": lambda q: q.order_by("profiles.id")}
        ).find(2)
        descending = ModelQuery(engine, User).with_relations(
            {"profile": lambda q: q.order_by("profiles.id", "DESC")}
        ).find(2)
        assert ascending.profile.bio == "Bob bio"
        assert descending.profile.bio == "Bob second bio"

    def test_belongs_to_back_reference(self, engine: Engine) -> None:
        profiles = ModelQuery(engine, Profile).with_relations("user").order_by("id").fetch_all()
        assert [profile.user.name for profile in profiles] == ["alice", "bob", "bob"]


class TestPivotSharing:
    def test_related_row_in_every_parent(self, engine: Engine) -> None:
        posts = ModelQuery(engine, Post).with_relations("tags").order_by("id").fetch_all()
        python_tags = [tag for post in posts for tag in post.tags if tag.name == "python"]
        assert len(python_tags) == 2
        assert python_tags[0] is python_tags[1]

    def test_inverse_direction(self, engine: Engine) -> None:
        roles = ModelQuery(engine, Role).with_relations("users").order_by("id").fetch_all()
        assert [sorted(user.id for user in role.users) for role in roles] == [[1], [1, 2]]

    def test_nested_through_pivot(self, engine: Engine) -> None:
        tags = ModelQuery(engine, Tag).with_relations("posts.user").order_by("id").fetch_all()
        python = tags[0]
        assert sorted(post.user.name for post in python.posts) == ["alice", "bob"]
        assert tags[2].posts == []


class TestFailureAndLazyLoading:
    def test_failed_plan_attaches_nothing(self, engine: Engine) -> None:
        query = ModelQuery(engine, User).with_relations(
            "profile", {"posts": lambda q: q.where_raw("no_such_column = :x", {"x": 1})}
        )
        with pytest.raises(QueryExecutionError, match="posts"):
            query.fetch_all()

        users = ModelQuery(engine, User).fetch_all()
        with pytest.raises(QueryExecutionError):
            load_relations(
                engine, users, "profile", {"posts": lambda q: q.where("no_such_column", 1)}
            )
        assert not any(user.relation_loaded("profile") for user in users)

    def test_unloaded_relation_raises(self, engine: Engine) -> None:
        user = ModelQuery(engine, User).find(1)
        with pytest.raises(RelationNotLoadedError):
            _ = user.posts

    def test_explicit_lazy_load(self, engine: Engine, statements: list[str]) -> None:
        user = Repository(engine, User).find(1)
        statements.clear()
        posts = user.load("posts")
        roles = user.load("roles")
        assert [post.title for post in posts] == ["Hello"]
        assert sorted(role.name for role in roles) == ["admin", "editor"]
        assert len(statements) == 2
        user.load("posts")
        assert len(statements) == 2


class TestMissingPivotTable:
    @pytest.fixture
    def members(self, engine: Engine) -> list[Model]:
        registry = ModelRegistry()

        class Member(Model, registry=registry):
            __table__ = "users"
            badges = belongs_to_many("Badge", table="no_such_pivot")

        class Badge(Model, registry=registry):
            __table__ = "tags"

        return ModelQuery(engine, Member).order_by("id").fetch_all()

    def test_eager_load_raises_driver_error(self, engine: Engine, members: list[Model]) -> None:
        with pytest.raises(QueryExecutionError, match="no_such_pivot") as exc_info:
            load_relations(engine, members, "badges")
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        assert not any(member.relation_loaded("badges") for member in members)

    def test_count_raises_driver_error(self, engine: Engine, members: list[Model]) -> None:
        relation = type(members[0]).relationship("badges")
        with pytest.raises(QueryExecutionError, match="no_such_pivot") as exc_info:
            CountAggregator(engine).attach_counts(members, relation)
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        assert all(member.get_count("badges") is None for member in members)
