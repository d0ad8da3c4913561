"""Tests for the backend emitters (uniform_build.scaffolder.backend_gen).

Covers:
- Planned backend files for each API consumer
- Rendered Python files are syntactically valid
- Models, schemas and routes for the blog and tag projects
- OpenAPI document and versioned blueprint
"""

from __future__ import annotations

import ast

import pytest

from uniform_build.scaffolder.backend_gen import BackendGenerator, build_openapi
from uniform_build.scaffolder.plan import GenerationPlan

pytestmark = pytest.mark.unit


@pytest.fixture
def backend_gen(renderer) -> BackendGenerator:
    return BackendGenerator(renderer)


def planned(backend_gen, config) -> GenerationPlan:
    plan = GenerationPlan(project_name=config.project_name)
    backend_gen.plan(config, plan)
    return plan


def literal_assignment(source: str, name: str):
    for node in ast.parse(source).body:
        if isinstance(node, ast.Assign) and any(
            isinstance(t, ast.Name) and t.id == name for t in node.targets
        ):
            return ast.literal_eval(node.value)
    raise AssertionError(f"{name} not assigned")


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


class TestPlan:
    def test_fullstack_files(self, backend_gen, blog_config):
        plan = planned(backend_gen, blog_config)
        assert plan.file_paths == [
            "backend/app/__init__.py",
            "backend/app/extensions.py",
            "backend/run.py",
            "backend/config.py",
            "backend/requirements.txt",
            "backend/.env.example",
            "backend/app/models.py",
            "backend/app/schemas.py",
            "backend/app/routes.py",
        ]
        assert "backend/instance" in plan.directories

    def test_mobile_adds_docs_and_versioning(self, backend_gen, mobile_api_config):
        plan = planned(backend_gen, mobile_api_config)
        assert [f.path for f in plan.files_by_emitter("backend-docs")] == ["backend/app/docs.py"]
        assert [f.path for f in plan.files_by_emitter("backend-versioning")] == [
            "backend/app/versioning.py"
        ]

    def test_third_party_adds_docs_only(self, backend_gen, make_config):
        config = make_config(project_type="backend-only", api_consumer="third-party")
        paths = planned(backend_gen, config).file_paths
        assert "backend/app/docs.py" in paths
        assert "backend/app/versioning.py" not in paths

    def test_every_python_file_compiles(self, backend_gen, tagged_config, mobile_api_config):
        for config in (tagged_config, mobile_api_config):
            for planned_file in planned(backend_gen, config).files:
                if planned_file.path.endswith(".py"):
                    compile(planned_file.render(), planned_file.path, "exec")


# ---------------------------------------------------------------------------
# Models and schemas
# ---------------------------------------------------------------------------


class TestModels:
    def test_one_class_per_entity(self, backend_gen, blog_config):
        source = backend_gen.render_models(blog_config)
        classes = [n.name for n in ast.parse(source).body if isinstance(n, ast.ClassDef)]
        assert classes == ["Post", "Comment"]
        assert "__tablename__ = 'comments'" in source

    def test_foreign_key_and_relationships(self, backend_gen, blog_config):
        source = backend_gen.render_models(blog_config)
        assert "post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False)" in source
        assert "post = db.relationship('Post', back_populates='comments')" in source
        assert (
            "comments = db.relationship('Comment', back_populates='post', "
            "cascade='all, delete-orphan')" in source
        )

    def test_association_table(self, backend_gen, tagged_config):
        source = backend_gen.render_models(tagged_config)
        assert source.count("posts_tags = db.Table(") == 1
        assert "secondary=posts_tags" in source
        assert source.index("posts_tags = db.Table(") < source.index("class User(")

    def test_no_relationship_section_without_edges(self, backend_gen, make_config):
        source = backend_gen.render_models(make_config(entities=["Task"]))
        assert "# Relationships" not in source

    def test_schemas(self, backend_gen, blog_config):
        source = backend_gen.render_schemas(blog_config)
        assert "from .models import Post, Comment" in source
        assert "post = ma.Nested('PostSchema', many=False, only=('id', 'name'))" in source
        assert "comments = ma.Nested('CommentSchema', many=True, only=('id', 'name'))" in source
        assert "posts_schema = PostSchema(many=True)" in source
        assert "comment_schema = CommentSchema()" in source

    def test_cyclic_schemas_nest_one_level(self, backend_gen, cyclic_config):
        source = backend_gen.render_schemas(cyclic_config)
        compile(source, "schemas.py", "exec")
        assert source.count("ma.Nested(") == 6
        assert source.count("only=('id', 'name')") == 6
        assert "exclude=" not in source


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


class TestRoutes:
    def test_route_functions(self, backend_gen, blog_config):
        source = backend_gen.render_routes(blog_config)
        functions = [n.name for n in ast.parse(source).body if isinstance(n, ast.FunctionDef)]
        assert functions == [
            "get_posts", "get_post", "create_post", "update_post", "delete_post",
            "get_comments", "get_comment", "create_comment", "update_comment", "delete_comment",
            "health",
        ]

    def test_rules(self, backend_gen, blog_config):
        source = backend_gen.render_routes(blog_config)
        assert "@api_bp.route('/comments', methods=['POST'])" in source
        assert "@api_bp.route('/comments/<int:id>', methods=['DELETE'])" in source
        assert "@api_bp.route('/health', methods=['GET'])" in source

    def test_required_fields(self, backend_gen, blog_config):
        source = backend_gen.render_routes(blog_config)
        assert "required = ['name', 'post_id']" in source
        assert "required = ['name']" in source
        assert "), 400" in source

    def test_non_object_body_is_rejected(self, backend_gen, blog_config):
        source = backend_gen.render_routes(blog_config)
        guard = "if not isinstance(data, dict):\n        return jsonify({'error': 'Expected a JSON object'}), 400"
        # create and update, for both entities
        assert source.count(guard) == 4


# ---------------------------------------------------------------------------
# Application factory and consumer toggles
# ---------------------------------------------------------------------------


class TestAppFactory:
    def test_cors_for_fullstack(self, backend_gen, blog_config):
        assert "CORS(app)" in backend_gen.render_app_init(blog_config)
        assert "Flask-CORS" in backend_gen.render_requirements(blog_config)

    def test_marshmallow_pinned_below_4(self, backend_gen, blog_config):
        pins = dict(
            line.split("==") for line in backend_gen.render_requirements(blog_config).splitlines() if "==" in line
        )
        assert pins["marshmallow"].startswith("3.")
        assert pins["Flask-Marshmallow"] == "1.2.1"

    def test_no_cors_for_internal(self, backend_gen, make_config):
        config = make_config(project_type="backend-only", api_consumer="internal")
        init = backend_gen.render_app_init(config)
        assert "CORS" not in init
        assert "Flask-CORS" not in backend_gen.render_requirements(config)
        compile(init, "__init__.py", "exec")

    def test_mobile_registers_docs_and_versioning(self, backend_gen, mobile_api_config):
        init = backend_gen.render_app_init(mobile_api_config)
        assert "app.register_blueprint(docs_bp, url_prefix='/api/docs')" in init
        assert "register_versioned_api(app)" in init
        versioning = backend_gen.render_versioning(mobile_api_config)
        assert "url_prefix='/api/' + API_VERSION" in versioning

    def test_run_uses_backend_port(self, backend_gen, blog_config):
        assert "port=5555" in backend_gen.render_run(blog_config)


class TestOpenApi:
    def test_paths_match_routes(self, mobile_api_config):
        document = build_openapi(mobile_api_config, BackendGenerator.route_sets(mobile_api_config))
        assert set(document["paths"]) == {
            "/api/users", "/api/users/{id}", "/api/recipes", "/api/recipes/{id}", "/api/health",
        }
        assert set(document["paths"]["/api/users/{id}"]) == {"get", "put", "delete"}
        create = document["paths"]["/api/users"]["post"]
        assert create["operationId"] == "create_user"
        assert create["requestBody"]["content"]["application/json"]["schema"]["required"] == ["name"]

    def test_docs_module_embeds_document(self, backend_gen, mobile_api_config):
        source = backend_gen.render_docs(mobile_api_config)
        document = literal_assignment(source, "OPENAPI_SPEC")
        assert document == build_openapi(
            mobile_api_config, BackendGenerator.route_sets(mobile_api_config)
        )
        assert document["info"]["title"] == "mobile-api"
