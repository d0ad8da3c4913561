"""Tests for the intermediate representation (uniform_build.scaffolder.ir).

The backend and frontend structures are derived independently per entity;
these tests check that they agree on every shared name.
"""

from __future__ import annotations

import pytest

from uniform_build.models import EdgeKind
from uniform_build.scaffolder.ir import (
    association_table_name,
    build_association_tables,
    build_client_spec,
    build_model_spec,
    build_page_spec,
    build_provider_spec,
    build_route_set,
    build_schema_spec,
    entity_names,
)

pytestmark = pytest.mark.unit


class TestEntityNames:
    def test_post(self):
        names = entity_names("Post")
        assert names.singular == "post"
        assert names.plural == "posts"
        assert names.table == "posts"
        assert names.schema_instance == "post_schema"
        assert names.schema_many == "posts_schema"
        assert names.collection_path == "/posts"
        assert names.item_path == "/posts/{id}"

    def test_camel_case_is_lowercased(self):
        assert entity_names("BlogPost").plural == "blogposts"

    def test_association_table_is_sorted(self):
        assert association_table_name("Tag", "Post") == "posts_tags"
        assert association_table_name("Post", "Tag") == "posts_tags"


class TestCrossEmitterNaming:
    def test_names_agree_for_every_entity(self, tagged_config):
        for entity in tagged_config.entities:
            model = build_model_spec(entity, tagged_config)
            schema = build_schema_spec(entity, tagged_config)
            routes = build_route_set(entity, tagged_config)
            client = build_client_spec(entity, tagged_config)
            provider = build_provider_spec(entity, tagged_config)
            page = build_page_spec(entity, tagged_config)

            plural = entity.lower() + "s"
            assert model.names == schema.names == routes.names == client.names
            assert provider.names == page.names == model.names
            assert routes.route("list").path == f"/{plural}"
            assert [b.path for b in client.bindings] == [r.path for r in routes.routes]
            assert [b.method for b in client.bindings] == [r.method.lower() for r in routes.routes]
            assert provider.fetch_function == client.list_function == f"get{entity}s"
            assert provider.hook == f"use{entity}s"
            assert page.route_path == routes.route("list").path

    def test_client_functions(self, blog_config):
        client = build_client_spec("Post", blog_config)
        assert [b.function for b in client.bindings] == [
            "getPosts", "getPost", "createPost", "updatePost", "deletePost",
        ]
        assert [(b.takes_id, b.takes_data) for b in client.bindings] == [
            (False, False), (True, False), (False, True), (True, True), (True, False),
        ]

    def test_route_functions(self, blog_config):
        routes = build_route_set("Comment", blog_config)
        assert [r.function for r in routes.routes] == [
            "get_comments", "get_comment", "create_comment", "update_comment", "delete_comment",
        ]
        assert routes.route("get").flask_rule == "/comments/<int:id>"
        with pytest.raises(KeyError):
            routes.route("patch")


class TestForeignKeys:
    def test_many_to_one_adds_required_field(self, blog_config):
        assert build_route_set("Comment", blog_config).required_fields == ("name", "post_id")
        assert build_route_set("Post", blog_config).required_fields == ("name",)

    def test_model_foreign_keys_match_required_fields(self, tagged_config):
        for entity in tagged_config.entities:
            model = build_model_spec(entity, tagged_config)
            routes = build_route_set(entity, tagged_config)
            assert routes.required_fields == ("name", *model.foreign_keys)

    def test_one_foreign_key_per_many_to_one_edge(self, tagged_config):
        for entity in tagged_config.entities:
            many_to_one = [
                e for e in tagged_config.edges_for(entity) if e.kind is EdgeKind.MANY_TO_ONE
            ]
            model = build_model_spec(entity, tagged_config)
            assert len(model.foreign_keys) == len(many_to_one)

    def test_foreign_key_column(self, blog_config):
        model = build_model_spec("Comment", blog_config)
        (fk,) = [c for c in model.columns if c.foreign_key]
        assert fk.name == "post_id"
        assert fk.foreign_key == "posts.id"
        assert fk.nullable is False


class TestRelationships:
    def test_back_populates_matches_inverse(self, tagged_config):
        for entity in tagged_config.entities:
            model = build_model_spec(entity, tagged_config)
            for rel in model.relationships:
                target = build_model_spec(rel.target, tagged_config)
                assert rel.back_populates in {r.attribute for r in target.relationships}

    def test_one_to_many_cascades(self, blog_config):
        (rel,) = build_model_spec("Post", blog_config).relationships
        assert rel.attribute == "comments"
        assert rel.cascade == "all, delete-orphan"

    def test_many_to_many_uses_shared_table(self, tagged_config):
        post_rel = [r for r in build_model_spec("Post", tagged_config).relationships if r.target == "Tag"]
        tag_rel = build_model_spec("Tag", tagged_config).relationships
        assert post_rel[0].secondary == tag_rel[0].secondary == "posts_tags"

    def test_association_tables_once_per_pair(self, tagged_config):
        (table,) = build_association_tables(tagged_config)
        assert table.name == "posts_tags"
        assert (table.left_table, table.left_column) == ("posts", "post_id")
        assert (table.right_table, table.right_column) == ("tags", "tag_id")

    def test_nested_schema_fields(self, blog_config):
        (nested,) = build_schema_spec("Comment", blog_config).nested
        assert nested.attribute == "post"
        assert nested.target_schema == "PostSchema"
        assert nested.many is False
        assert nested.only == ("id", "name")
        (post_nested,) = build_schema_spec("Post", blog_config).nested
        assert post_nested.many is True

    def test_nested_fields_stop_at_columns_in_a_cycle(self, cyclic_config):
        relationship_attributes = {
            edge.field_name
            for entity in cyclic_config.entities
            for edge in cyclic_config.edges_for(entity)
        }
        for entity in cyclic_config.entities:
            for nested in build_schema_spec(entity, cyclic_config).nested:
                assert not set(nested.only) & relationship_attributes
