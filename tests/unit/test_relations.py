"""Unit tests for relation declarations and their queries."""

from __future__ import annotations

import pytest

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import KeyConventionError, UnresolvableModelError
from row_orm.core.registry import ModelRegistry
from row_orm.mapping.record import Model
from row_orm.relations import (
    BelongsTo,
    BelongsToMany,
    HasMany,
    HasOne,
    belongs_to,
    belongs_to_many,
    has_many,
    has_one,
)
from tests.models import Comment, Post, Profile, Role, Tag, User


class TestBinding:
    def test_relations_table(self) -> None:
        assert set(User.__relations__) == {"profile", "posts", "comments", "roles"}

    def test_class_access_returns_bound_relation(self) -> None:
        relation = User.posts
        assert isinstance(relation, HasMany)
        assert relation.owner is User
        assert relation.name == "posts"
        assert User.relationship("posts") is relation

    def test_kinds(self) -> None:
        assert User.profile.kind is RelationKind.ONE_TO_ONE
        assert User.posts.kind is RelationKind.ONE_TO_MANY
        assert Post.user.kind is RelationKind.MANY_TO_ONE
        assert Post.tags.kind is RelationKind.MANY_TO_MANY
        assert not User.profile.many
        assert User.posts.many
        assert not Post.user.many
        assert Post.tags.many

    def test_related_model_resolved_lazily(self) -> None:
        assert User.posts.related_model is Post
        assert Comment.replies.related_model is Comment

    def test_unresolvable_related_model(self) -> None:
        registry = ModelRegistry()

        class Lonely(Model, registry=registry):
            friends = has_many("Nobody")

        with pytest.raises(UnresolvableModelError, match="Nobody"):
            _ = Lonely.friends.related_model
        with pytest.raises(UnresolvableModelError, match="Nobody"):
            Lonely.friends.validate()
        assert User.posts.validate() is User.posts

    def test_inherited_relations_rebound(self) -> None:
        registry = ModelRegistry()

        class Base(Model, registry=registry):
            notes = has_many("Note")

        class Child(Base, registry=registry):
            pass

        class Note(Model, registry=registry):
            pass

        assert Child.notes.owner is Child
        assert Child.notes.foreign_key == "child_id"
        assert Base.notes.foreign_key == "base_id"


class TestKeyDefaults:
    def test_has_one(self) -> None:
        relation = User.profile
        assert isinstance(relation, HasOne)
        assert relation.foreign_key == "user_id"
        assert relation.local_key == "id"
        assert relation.local_column == "id"
        assert relation.remote_column == "profiles.user_id"

    def test_has_many_explicit_key(self) -> None:
        relation = Comment.replies
        assert relation.foreign_key == "parent_id"
        assert relation.remote_column == "comments.parent_id"

    def test_belongs_to(self) -> None:
        relation = Profile.user
        assert isinstance(relation, BelongsTo)
        assert relation.foreign_key == "user_id"
        assert relation.owner_key == "id"
        assert relation.local_column == "user_id"
        assert relation.remote_column == "users.id"

    def test_belongs_to_many(self) -> None:
        relation = User.roles
        assert isinstance(relation, BelongsToMany)
        assert relation.table == "role_user"
        assert relation.foreign_pivot_key == "user_id"
        assert relation.related_pivot_key == "role_id"
        assert relation.parent_key == "id"
        assert relation.related_key == "id"
        assert Role.users.table == "role_user"
        assert Tag.posts.table == Post.tags.table == "post_tag"

    def test_local_key_follows_primary_key(self) -> None:
        registry = ModelRegistry()

        class Account(Model, registry=registry):
            __primary_key__ = "uuid"
            sessions = has_many("Session")

        assert Account.sessions.local_key == "uuid"

    def test_invalid_declared_key(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(KeyConventionError, match="foreign_key"):

            class Broken(Model, registry=registry):
                things = has_many("Thing", foreign_key="thing id")

    def test_self_referential_pivot_needs_keys(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(KeyConventionError, match="must differ"):

            class Person(Model, registry=registry):
                friends = belongs_to_many("Person")

    def test_self_referential_pivot_explicit_keys(self) -> None:
        registry = ModelRegistry()

        class Person(Model, registry=registry):
            friends = belongs_to_many(
                "Person",
                table="friendships",
                foreign_pivot_key="person_id",
                related_pivot_key="friend_id",
            )

        assert Person.friends.remote_column == "friendships.person_id"


class TestQueries:
    def test_eager_query(self) -> None:
        parents = [User(id=1), User(id=2), User(id=1), User(id=None)]
        sql, params = User.posts.build_eager_query(None, parents).compile()
        assert sql == "SELECT * FROM posts WHERE posts.user_id IN (:p0, :p1)"
        assert params == {"p0": 1, "p1": 2}

    def test_eager_query_with_scope(self) -> None:
        sql, params = User.posts.build_eager_query(
            None, [User(id=1)], lambda q: q.where("published", 1)
        ).compile()
        assert sql == "SELECT * FROM posts WHERE posts.user_id IN (:p0) AND published = :p1"
        assert params == {"p0": 1, "p1": 1}

    def test_single_query(self) -> None:
        sql, params = Post.user.build_single_query(None, Post(id=10, user_id=3)).compile()
        assert sql == "SELECT * FROM users WHERE users.id = :p0"
        assert params == {"p0": 3}

    def test_count_query(self) -> None:
        sql, params = User.posts.build_count_query(None, [1, 2]).compile()
        assert sql == (
            "SELECT posts.user_id AS __relation_key, COUNT(*) AS __relation_count "
            "FROM posts WHERE posts.user_id IN (:p0, :p1) GROUP BY posts.user_id"
        )
        assert params == {"p0": 1, "p1": 2}

    def test_pivot_related_query(self) -> None:
        sql, _ = Post.tags.build_eager_query(None, [Post(id=10)]).compile()
        assert sql == (
            "SELECT tags.* FROM tags INNER JOIN post_tag ON post_tag.tag_id = tags.id "
            "WHERE post_tag.post_id IN (:p0)"
        )

    def test_pivot_query(self) -> None:
        sql, _ = Post.tags.build_pivot_query(None, [10, 11]).compile()
        assert sql == (
            "SELECT post_tag.post_id AS __pivot_parent, post_tag.tag_id AS __pivot_related "
            "FROM post_tag WHERE post_tag.post_id IN (:p0, :p1)"
        )

    def test_pivot_count_query(self) -> None:
        sql, _ = Post.tags.build_count_query(None, [10]).compile()
        assert sql == (
            "SELECT post_tag.post_id AS __relation_key, COUNT(*) AS __relation_count "
            "FROM tags INNER JOIN post_tag ON post_tag.tag_id = tags.id "
            "WHERE post_tag.post_id IN (:p0) GROUP BY post_tag.post_id"
        )

    def test_empty_values(self) -> None:
        assert User.posts.empty_value() == []
        assert User.profile.empty_value() is None
        assert Post.user.empty_value() is None
        assert Post.tags.empty_value() == []


class TestHelpers:
    def test_helpers_build_unbound_declarations(self) -> None:
        assert isinstance(has_one("Profile"), HasOne)
        assert isinstance(has_many("Post"), HasMany)
        assert isinstance(belongs_to("User"), BelongsTo)
        assert isinstance(belongs_to_many("Role"), BelongsToMany)
        assert has_many("Post").owner is None
