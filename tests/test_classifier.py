"""
Tests for the relationship classifier.

Covers the four cardinality branches, their precedence, first-column wiring
of composite keys, and the silent skip of keys pointing outside the run.
"""

import pytest

from db_exporter.models import (
    Cardinality,
    Column,
    ForeignKey,
    Index,
    Relationship,
    RelationKind,
    TableMetadata,
)
from db_exporter.relations import RelationshipClassifier, classify_cardinality, make_relations


def make_table(name, columns, indexes=(), foreign_keys=(), namespace=None):
    return TableMetadata(
        name=name,
        columns=[Column(name=c, data_type="INTEGER") for c in columns],
        indexes=list(indexes),
        foreign_keys=list(foreign_keys),
        namespace=namespace,
    )


def pk(*columns):
    return Index(columns=list(columns), unique=True, primary=True)


def fk(local, table, foreign):
    return ForeignKey(local_columns=[local], foreign_table=table, foreign_columns=[foreign])


def tables_of(*tables):
    return {t.name: t for t in tables}


def rel(kind, target, method, local, foreign):
    return Relationship(
        kind=kind,
        target_class=target,
        method_name=method,
        local_column=local,
        foreign_column=foreign,
    )


@pytest.fixture
def users():
    return make_table("users", ["id", "email"], indexes=[pk("id")])


class TestClassifyCardinality:
    """Tests for the ordered decision rules."""

    def test_both_unique_is_one_to_one(self):
        """Test that two unique sides classify as one-to-one."""
        assert classify_cardinality(Index(["a"], True), Index(["b"], True)) == Cardinality.ONE_TO_ONE

    def test_foreign_unique_is_many_to_one(self):
        """Test that a unique referenced side classifies as many-to-one."""
        assert classify_cardinality(Index(["a"], False), Index(["b"], True)) == Cardinality.MANY_TO_ONE
        assert classify_cardinality(None, Index(["b"], True)) == Cardinality.MANY_TO_ONE

    def test_local_unique_is_one_to_many(self):
        """Test that a unique local side classifies as one-to-many."""
        assert classify_cardinality(Index(["a"], True), Index(["b"], False)) == Cardinality.ONE_TO_MANY
        assert classify_cardinality(Index(["a"], True), None) == Cardinality.ONE_TO_MANY

    def test_fallback_is_many_to_many(self):
        """Test the many-to-many fallback when neither side is unique."""
        assert classify_cardinality(None, None) == Cardinality.MANY_TO_MANY
        assert classify_cardinality(Index(["a"], False), Index(["b"], False)) == Cardinality.MANY_TO_MANY


class TestRelationshipClassifier:
    """Tests for relationship pairs attached to both endpoint tables."""

    def test_one_to_one(self, users):
        """Test declarations for a uniquely indexed foreign key."""
        profiles = make_table(
            "profiles",
            ["id", "user_id"],
            indexes=[pk("id"), Index(["user_id"], unique=True)],
            foreign_keys=[fk("user_id", "users", "id")],
        )
        tables = tables_of(users, profiles)

        pairs = make_relations(tables)

        assert [p.cardinality for p in pairs] == [Cardinality.ONE_TO_ONE]
        assert profiles.relationships == [
            rel(RelationKind.HAS_ONE, "Users", "user", "id", "user_id"),
        ]
        assert users.relationships == [
            rel(RelationKind.BELONGS_TO, "Profiles", "profiles", "user_id", "id"),
        ]

    def test_many_to_one(self, users):
        """Test declarations for a plain indexed foreign key to a primary key."""
        posts = make_table(
            "posts",
            ["id", "user_id"],
            indexes=[pk("id"), Index(["user_id"], unique=False)],
            foreign_keys=[fk("user_id", "users", "id")],
        )
        tables = tables_of(users, posts)

        pairs = make_relations(tables)

        assert pairs[0].cardinality == Cardinality.MANY_TO_ONE
        assert posts.relationships == [
            rel(RelationKind.BELONGS_TO, "Users", "user", "user_id", "id"),
        ]
        assert users.relationships == [
            rel(RelationKind.HAS_MANY, "Posts", "posts", "user_id", "id"),
        ]

    def test_many_to_one_without_local_index(self, users):
        """Test that a missing local index counts as not unique."""
        posts = make_table("posts", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")])

        pairs = make_relations(tables_of(users, posts))

        assert pairs[0].cardinality == Cardinality.MANY_TO_ONE

    def test_one_to_many(self):
        """Test declarations when only the local side is unique."""
        customers = make_table("customers", ["id", "code"],
                               indexes=[pk("id"), Index(["code"], unique=False)])
        legacy_orders = make_table(
            "legacy_orders",
            ["id", "customer_code"],
            indexes=[pk("id"), Index(["customer_code"], unique=True)],
            foreign_keys=[fk("customer_code", "customers", "code")],
        )

        pairs = make_relations(tables_of(customers, legacy_orders))

        assert pairs[0].cardinality == Cardinality.ONE_TO_MANY
        assert legacy_orders.relationships == [
            rel(RelationKind.HAS_MANY, "Customers", "customer_code", "code", "customer_code"),
        ]
        assert customers.relationships == [
            rel(RelationKind.BELONGS_TO, "LegacyOrders", "legacy_orders", "customer_code", "code"),
        ]

    def test_many_to_many_without_pivot(self):
        """Test declarations when neither side is unique."""
        authors = make_table("authors", ["id", "name"], indexes=[pk("id")])
        notes = make_table("notes", ["id", "author_name"], indexes=[pk("id")],
                           foreign_keys=[fk("author_name", "authors", "name")])

        pairs = make_relations(tables_of(authors, notes))

        assert pairs[0].cardinality == Cardinality.MANY_TO_MANY
        assert notes.relationships == [
            rel(RelationKind.HAS_MANY, "Authors", "author_name", "name", "author_name"),
        ]
        assert authors.relationships == [
            rel(RelationKind.HAS_MANY, "Notes", "notes", "author_name", "name"),
        ]

    def test_join_table_referencing_primary_keys(self):
        """Test a join table whose keys point at primary keys."""
        posts = make_table("posts", ["id"], indexes=[pk("id")])
        tags = make_table("tags", ["id"], indexes=[pk("id")])
        post_tags = make_table(
            "post_tags",
            ["post_id", "tag_id"],
            indexes=[Index(["post_id"]), Index(["tag_id"])],
            foreign_keys=[fk("post_id", "posts", "id"), fk("tag_id", "tags", "id")],
        )

        pairs = make_relations(tables_of(posts, tags, post_tags))

        assert [p.cardinality for p in pairs] == [Cardinality.MANY_TO_ONE] * 2
        assert posts.relationships == [
            rel(RelationKind.HAS_MANY, "PostTags", "post_tags", "post_id", "id"),
        ]
        assert tags.relationships == [
            rel(RelationKind.HAS_MANY, "PostTags", "post_tags", "tag_id", "id"),
        ]
        assert post_tags.relationships == [
            rel(RelationKind.BELONGS_TO, "Posts", "post", "post_id", "id"),
            rel(RelationKind.BELONGS_TO, "Tags", "tag", "tag_id", "id"),
        ]

    def test_join_table_without_unique_indexes(self):
        """Test a join table whose targets have no unique index."""
        posts = make_table("posts", ["id"])
        tags = make_table("tags", ["id"])
        post_tags = make_table(
            "post_tags",
            ["post_id", "tag_id"],
            indexes=[Index(["post_id"]), Index(["tag_id"])],
            foreign_keys=[fk("post_id", "posts", "id"), fk("tag_id", "tags", "id")],
        )

        make_relations(tables_of(posts, tags, post_tags))

        assert [r.kind for r in posts.relationships] == [RelationKind.HAS_MANY]
        assert [r.kind for r in tags.relationships] == [RelationKind.HAS_MANY]
        assert [r.kind for r in post_tags.relationships] == [RelationKind.HAS_MANY] * 2

    def test_both_unique_does_not_fall_through_to_many_to_one(self, users):
        """Test that one-to-one takes precedence over many-to-one."""
        accounts = make_table(
            "accounts",
            ["id", "user_id"],
            indexes=[pk("id"), Index(["user_id"], unique=True)],
            foreign_keys=[fk("user_id", "users", "id")],
        )

        make_relations(tables_of(users, accounts))

        assert [r.kind for r in accounts.relationships] == [RelationKind.HAS_ONE]
        assert [r.kind for r in users.relationships] == [RelationKind.BELONGS_TO]

    def test_foreign_key_outside_working_set_is_skipped(self, users):
        """Test that keys to tables outside the run are skipped."""
        posts = make_table(
            "posts",
            ["id", "user_id", "category_id"],
            indexes=[pk("id")],
            foreign_keys=[fk("category_id", "categories", "id"), fk("user_id", "users", "id")],
        )
        tables = tables_of(users, posts)

        pairs = make_relations(tables)

        assert len(pairs) == 1
        assert all(r.method_name != "category" for r in posts.relationships)
        assert len(posts.relationships) == 1
        assert len(users.relationships) == 1

    def test_only_external_foreign_keys_add_nothing(self):
        """Test a table whose only key points outside the run."""
        audit = make_table("audit_log", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")])

        pairs = make_relations(tables_of(audit))

        assert pairs == []
        assert audit.relationships == []

    def test_self_referencing_table(self):
        """Test a table referencing itself gets both declarations."""
        categories = make_table(
            "categories",
            ["id", "parent_id"],
            indexes=[pk("id"), Index(["parent_id"])],
            foreign_keys=[fk("parent_id", "categories", "id")],
        )

        make_relations(tables_of(categories))

        assert categories.relationships == [
            rel(RelationKind.BELONGS_TO, "Categories", "parent", "parent_id", "id"),
            rel(RelationKind.HAS_MANY, "Categories", "categories", "parent_id", "id"),
        ]

    def test_composite_key_wired_on_first_column(self):
        """Test that composite keys are wired on their first columns."""
        order_lines = make_table(
            "order_lines",
            ["order_id", "product_id"],
            indexes=[Index(["order_id", "product_id"], unique=True, primary=True)],
        )
        shipments = make_table(
            "shipments",
            ["id", "order_id", "product_id"],
            indexes=[pk("id"), Index(["order_id", "product_id"])],
            foreign_keys=[ForeignKey(
                local_columns=["order_id", "product_id"],
                foreign_table="order_lines",
                foreign_columns=["order_id", "product_id"],
            )],
        )

        pairs = make_relations(tables_of(order_lines, shipments))

        assert pairs[0].cardinality == Cardinality.MANY_TO_ONE
        assert shipments.relationships == [
            rel(RelationKind.BELONGS_TO, "OrderLines", "order", "order_id", "order_id"),
        ]

    def test_index_with_other_column_order_does_not_cover(self):
        """Test that an index in another column order does not cover a key."""
        order_lines = make_table(
            "order_lines",
            ["order_id", "product_id"],
            indexes=[Index(["product_id", "order_id"], unique=True)],
        )
        shipments = make_table(
            "shipments",
            ["id", "order_id", "product_id"],
            indexes=[pk("id")],
            foreign_keys=[ForeignKey(
                local_columns=["order_id", "product_id"],
                foreign_table="order_lines",
                foreign_columns=["order_id", "product_id"],
            )],
        )

        pairs = make_relations(tables_of(order_lines, shipments))

        assert pairs[0].cardinality == Cardinality.MANY_TO_MANY

    def test_namespace_in_target_class(self):
        """Test that targets carry the namespace."""
        users = make_table("users", ["id"], indexes=[pk("id")], namespace="app.models")
        posts = make_table("posts", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")], namespace="app.models")

        make_relations(tables_of(users, posts))

        assert posts.relationships[0].target_class == "app.models.Users"
        assert users.relationships[0].target_class == "app.models.Posts"

    def test_foreign_method_name_uses_full_table_name(self, users):
        """Test that inverse method names keep the table prefix."""
        users.prefix = "app_"
        posts = make_table("app_blog_posts", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")])
        posts.prefix = "app_"

        make_relations(tables_of(users, posts))

        assert users.relationships[0].method_name == "app_blog_posts"
        assert users.relationships[0].target_class == "BlogPosts"

    def test_duplicate_method_names_are_reported(self, users):
        """Test reporting repeated inverse method names."""
        posts = make_table(
            "posts",
            ["id", "author_id", "editor_id"],
            indexes=[pk("id")],
            foreign_keys=[fk("author_id", "users", "id"), fk("editor_id", "users", "id")],
        )

        make_relations(tables_of(users, posts))

        assert [r.method_name for r in posts.relationships] == ["author", "editor"]
        assert posts.duplicate_method_names() == []
        assert users.duplicate_method_names() == ["posts"]

    def test_processing_follows_catalog_order(self, users):
        """Test that declarations follow catalog order."""
        comments = make_table("comments", ["id", "user_id"], indexes=[pk("id")],
                              foreign_keys=[fk("user_id", "users", "id")])
        posts = make_table("posts", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")])

        make_relations(tables_of(users, posts, comments))

        assert [r.method_name for r in users.relationships] == ["posts", "comments"]


class TestClassifierPasses:
    """Tests for infer/apply separation and repeated runs."""

    @pytest.fixture
    def tables(self, users):
        posts = make_table("posts", ["id", "user_id"], indexes=[pk("id")],
                           foreign_keys=[fk("user_id", "users", "id")])
        return tables_of(users, posts)

    def test_infer_does_not_touch_tables(self, tables):
        """Test that inferring leaves the tables unchanged."""
        pairs = RelationshipClassifier(tables).infer()

        assert len(pairs) == 1
        assert all(t.relationships == [] for t in tables.values())

    def test_apply_appends_pairs(self, tables):
        """Test applying inferred pairs to their tables."""
        classifier = RelationshipClassifier(tables)
        pairs = classifier.infer()
        classifier.apply(pairs)

        assert tables["posts"].relationships == [pairs[0].local]
        assert tables["users"].relationships == [pairs[0].foreign]

    def test_second_run_doubles_relationships(self, tables):
        """Test that classifying twice appends every declaration again."""
        classifier = RelationshipClassifier(tables)
        classifier.classify()
        classifier.classify()

        assert len(tables["posts"].relationships) == 2
        assert len(tables["users"].relationships) == 2
        assert tables["posts"].relationships[0] == tables["posts"].relationships[1]

    def test_pair_to_dict(self, tables):
        """Test dict serialization of a relationship pair."""
        pair = RelationshipClassifier(tables).infer()[0]
        data = pair.to_dict()

        assert data["local_table"] == "posts"
        assert data["foreign_table"] == "users"
        assert data["cardinality"] == "N:1"
        assert data["local"]["kind"] == "belongs_to"
        assert data["foreign"]["kind"] == "has_many"
