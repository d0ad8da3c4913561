"""Structured intermediate representation of the generated artifacts.

Each emitter renders one of these structures instead of assembling names on
its own, so the naming shared by backend and frontend (``post``/``posts``,
``/api/posts``, ``getPosts``, ``usePosts``) is derived in exactly one
place: :func:`entity_names`.  Tests check the cross-file invariants on these
structures before any text is produced.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..models import EdgeKind, ProjectConfig


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

class EntityNames(_Frozen):
    """All tokens derived from one entity name."""

    class_name: str
    singular: str
    plural: str
    table: str
    schema_instance: str
    schema_many: str
    collection_path: str
    item_path: str


def entity_names(entity: str) -> EntityNames:
    singular = entity.lower()
    plural = singular + "s"
    return EntityNames(
        class_name=entity,
        singular=singular,
        plural=plural,
        table=plural,
        schema_instance=f"{singular}_schema",
        schema_many=f"{plural}_schema",
        collection_path=f"/{plural}",
        item_path=f"/{plural}/{{id}}",
    )


def association_table_name(entity1: str, entity2: str) -> str:
    """Bridge table shared by both sides of a many-to-many edge."""
    return "_".join(sorted((entity_names(entity1).table, entity_names(entity2).table)))


# ---------------------------------------------------------------------------
# Backend model
# ---------------------------------------------------------------------------

class ModelColumn(_Frozen):
    name: str
    type: str
    primary_key: bool = False
    nullable: bool = True
    foreign_key: Optional[str] = None
    default: Optional[str] = None
    onupdate: Optional[str] = None


class ModelRelationship(_Frozen):
    attribute: str
    target: str
    back_populates: str
    kind: EdgeKind
    secondary: Optional[str] = None
    cascade: Optional[str] = None


class AssociationTable(_Frozen):
    name: str
    left_table: str
    left_column: str
    right_table: str
    right_column: str


class ModelSpec(_Frozen):
    names: EntityNames
    columns: tuple[ModelColumn, ...]
    relationships: tuple[ModelRelationship, ...]

    @property
    def foreign_keys(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns if c.foreign_key)


_UTC_NOW = "lambda: datetime.now(timezone.utc)"


def build_model_spec(entity: str, config: ProjectConfig) -> ModelSpec:
    names = entity_names(entity)
    columns = [
        ModelColumn(name="id", type="db.Integer", primary_key=True),
        ModelColumn(name="name", type="db.String(255)", nullable=False),
    ]
    relationships = []

    for edge in config.edges_for(entity):
        target = entity_names(edge.target)
        if edge.kind is EdgeKind.MANY_TO_ONE:
            columns.append(
                ModelColumn(
                    name=edge.foreign_key,
                    type="db.Integer",
                    nullable=False,
                    foreign_key=f"{target.table}.id",
                )
            )
        relationships.append(
            ModelRelationship(
                attribute=edge.field_name,
                target=edge.target,
                back_populates=edge.inverse_name,
                kind=edge.kind,
                secondary=association_table_name(entity, edge.target)
                if edge.kind is EdgeKind.MANY_TO_MANY
                else None,
                cascade="all, delete-orphan" if edge.kind is EdgeKind.ONE_TO_MANY else None,
            )
        )

    columns.append(ModelColumn(name="created_at", type="db.DateTime", default=_UTC_NOW))
    columns.append(
        ModelColumn(name="updated_at", type="db.DateTime", default=_UTC_NOW, onupdate=_UTC_NOW)
    )
    return ModelSpec(names=names, columns=tuple(columns), relationships=tuple(relationships))


def build_association_tables(config: ProjectConfig) -> tuple[AssociationTable, ...]:
    """One bridge table per many-to-many pair, in first-seen order."""
    tables: dict[str, AssociationTable] = {}
    for entity in config.entities:
        for edge in config.edges_for(entity):
            if edge.kind is not EdgeKind.MANY_TO_MANY:
                continue
            name = association_table_name(entity, edge.target)
            if name in tables:
                continue
            left, right = sorted((entity_names(entity), entity_names(edge.target)),
                                 key=lambda n: n.table)
            tables[name] = AssociationTable(
                name=name,
                left_table=left.table,
                left_column=f"{left.singular}_id",
                right_table=right.table,
                right_column=f"{right.singular}_id",
            )
    return tuple(tables.values())


# ---------------------------------------------------------------------------
# Serialization schema
# ---------------------------------------------------------------------------

class NestedField(_Frozen):
    """A related object, dumped as its ``only`` columns and nothing deeper."""

    attribute: str
    target_schema: str
    many: bool
    only: tuple[str, ...] = ("id", "name")


class SchemaSpec(_Frozen):
    names: EntityNames
    nested: tuple[NestedField, ...]


def build_schema_spec(entity: str, config: ProjectConfig) -> SchemaSpec:
    nested = tuple(
        NestedField(
            attribute=edge.field_name,
            target_schema=f"{edge.target}Schema",
            many=edge.kind is not EdgeKind.MANY_TO_ONE,
        )
        for edge in config.edges_for(entity)
    )
    return SchemaSpec(names=entity_names(entity), nested=nested)


# ---------------------------------------------------------------------------
# HTTP routes
# ---------------------------------------------------------------------------

class RouteSpec(_Frozen):
    """One CRUD endpoint.  ``path`` is relative to the API prefix and uses
    ``{id}`` for the item placeholder."""

    action: str
    method: str
    path: str
    function: str

    @property
    def takes_id(self) -> bool:
        return "{id}" in self.path

    @property
    def flask_rule(self) -> str:
        return self.path.replace("{id}", "<int:id>")


class RouteSet(_Frozen):
    names: EntityNames
    routes: tuple[RouteSpec, ...]
    required_fields: tuple[str, ...]

    def route(self, action: str) -> RouteSpec:
        for route in self.routes:
            if route.action == action:
                return route
        raise KeyError(action)


def build_route_set(entity: str, config: ProjectConfig) -> RouteSet:
    names = entity_names(entity)
    routes = (
        RouteSpec(action="list", method="GET", path=names.collection_path,
                  function=f"get_{names.plural}"),
        RouteSpec(action="get", method="GET", path=names.item_path,
                  function=f"get_{names.singular}"),
        RouteSpec(action="create", method="POST", path=names.collection_path,
                  function=f"create_{names.singular}"),
        RouteSpec(action="update", method="PUT", path=names.item_path,
                  function=f"update_{names.singular}"),
        RouteSpec(action="delete", method="DELETE", path=names.item_path,
                  function=f"delete_{names.singular}"),
    )
    required = ["name"]
    for edge in config.edges_for(entity):
        if edge.foreign_key:
            required.append(edge.foreign_key)
    return RouteSet(names=names, routes=routes, required_fields=tuple(required))


# ---------------------------------------------------------------------------
# Frontend bindings
# ---------------------------------------------------------------------------

class ClientBinding(_Frozen):
    """One exported function of ``services/api.js``, mirroring a route."""

    function: str
    method: str
    path: str
    takes_id: bool
    takes_data: bool


class ClientSpec(_Frozen):
    names: EntityNames
    bindings: tuple[ClientBinding, ...]

    @property
    def list_function(self) -> str:
        return self.bindings[0].function


_CLIENT_PREFIX = {"list": "get", "get": "get", "create": "create",
                  "update": "update", "delete": "delete"}


def build_client_spec(entity: str, config: ProjectConfig) -> ClientSpec:
    route_set = build_route_set(entity, config)
    names = route_set.names
    bindings = []
    for route in route_set.routes:
        suffix = names.class_name + ("s" if route.action == "list" else "")
        bindings.append(
            ClientBinding(
                function=f"{_CLIENT_PREFIX[route.action]}{suffix}",
                method=route.method.lower(),
                path=route.path,
                takes_id=route.takes_id,
                takes_data=route.action in ("create", "update"),
            )
        )
    return ClientSpec(names=names, bindings=tuple(bindings))


class ProviderSpec(_Frozen):
    names: EntityNames
    context: str
    provider: str
    hook: str
    fetch_function: str
    state_variable: str
    state_setter: str
    refetch_function: str


def build_provider_spec(entity: str, config: ProjectConfig) -> ProviderSpec:
    client = build_client_spec(entity, config)
    names = client.names
    return ProviderSpec(
        names=names,
        context=f"{names.class_name}Context",
        provider=f"{names.class_name}Provider",
        hook=f"use{names.class_name}s",
        fetch_function=client.list_function,
        state_variable=names.plural,
        state_setter=f"set{names.class_name}s",
        refetch_function=f"fetch{names.class_name}s",
    )


class PageSpec(_Frozen):
    names: EntityNames
    component: str
    route_path: str
    title: str
    provider: ProviderSpec


def build_page_spec(entity: str, config: ProjectConfig) -> PageSpec:
    provider = build_provider_spec(entity, config)
    names = provider.names
    return PageSpec(
        names=names,
        component=f"{names.class_name}Page",
        route_path=names.collection_path,
        title=f"{names.class_name}s",
        provider=provider,
    )
