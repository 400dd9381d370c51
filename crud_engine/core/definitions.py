"""
Model definition types.

A ModelDefinition is an immutable description of one runtime-declared
entity: its fields, storage table, ownership rule and per-role permissions.
Definitions are never mutated in place; re-registration builds a new
object and swaps it into the catalog.

The persisted JSON shape uses the camelCase keys ``tableName`` and
``ownerField``; ``from_dict``/``to_dict`` translate between the two.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class FieldRelation:
    """Informational link to another model. Never resolved by the engine."""

    model: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"model": self.model, "type": self.type}


@dataclass(frozen=True)
class ModelField:
    """
    A single declared field.

    ``default`` of None means "no default". ``unique`` is advisory only.
    """

    name: str
    type: str
    required: bool = False
    default: Any = None
    unique: bool = False
    relation: FieldRelation | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelField":
        relation = data.get("relation")
        return cls(
            name=data["name"],
            type=data["type"],
            required=bool(data.get("required", False)),
            default=data.get("default"),
            unique=bool(data.get("unique", False)),
            relation=FieldRelation(**relation) if relation else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        if self.has_default:
            data["default"] = self.default
        if self.unique:
            data["unique"] = True
        if self.relation:
            data["relation"] = self.relation.to_dict()
        return data


def _freeze_rbac(rbac: Mapping[str, Any]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({role: tuple(perms) for role, perms in rbac.items()})


@dataclass(frozen=True)
class ModelDefinition:
    """
    Runtime-declared schema for one entity type.

    Attributes:
        name: Unique catalog key
        fields: Declared fields, in declaration order
        rbac: Role name -> permissions (actions or the ``all`` sentinel).
            A role missing from the table has no access.
        table_name: Storage table; derived once at registration if absent
        owner_field: Field holding the creating principal's id, if any
    """

    name: str
    fields: tuple[ModelField, ...]
    rbac: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    table_name: str | None = None
    owner_field: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "rbac", _freeze_rbac(self.rbac))

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> ModelField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def owner(self) -> ModelField | None:
        """The declared owner field, if the model has one."""
        if not self.owner_field:
            return None
        return self.get_field(self.owner_field)

    def derive_table_name(self) -> str:
        """Lowercase plural of the model name (``Task`` -> ``tasks``)."""
        return f"{self.name.lower()}s"

    def with_table_name(self, table_name: str) -> "ModelDefinition":
        return replace(self, table_name=table_name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelDefinition":
        """
        Build a definition from its JSON shape.

        The input is expected to have passed schema validation
        (see ``crud_engine.core.schema``).
        """
        return cls(
            name=data["name"],
            fields=tuple(ModelField.from_dict(f) for f in data.get("fields", [])),
            rbac=data.get("rbac") or {},
            table_name=data.get("tableName") or None,
            owner_field=data.get("ownerField") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.table_name:
            data["tableName"] = self.table_name
        data["fields"] = [f.to_dict() for f in self.fields]
        if self.owner_field:
            data["ownerField"] = self.owner_field
        data["rbac"] = {role: list(perms) for role, perms in self.rbac.items()}
        return data

