"""Intermediate Representation (IR) for introspected GraphQL schemas.

The raw introspection payload is decoded into pydantic models so the
wrapper-type chain (NON_NULL / LIST / named) is read through explicit
attributes. Resolution produces ResolvedField trees, plain dataclasses
rebuilt on every call.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

# Type names treated as leaves regardless of what the schema calls scalar
SCALAR_TYPES = frozenset({
    "String", "Int", "Float", "Boolean", "ID", "DateTime", "Date",
})


def is_scalar(type_name: str) -> bool:
    """Check if a type is one of the fixed scalar names."""
    return type_name in SCALAR_TYPES


class TypeRef(BaseModel):
    """A type reference: either a named type or a NON_NULL/LIST wrapper."""
    model_config = ConfigDict(populate_by_name=True)

    kind: str
    name: str | None = None
    of_type: "TypeRef | None" = Field(default=None, alias="ofType")

    @property
    def is_non_null(self) -> bool:
        return self.kind == "NON_NULL"

    @property
    def is_list(self) -> bool:
        return self.kind == "LIST"


class IntrospectionArgument(BaseModel):
    """An argument of a root query field."""
    name: str
    type: TypeRef


class IntrospectionField(BaseModel):
    """A field of the root query type or of a named type."""
    name: str
    type: TypeRef
    args: list[IntrospectionArgument] = Field(default_factory=list)


class IntrospectionType(BaseModel):
    """A named type. Fields are absent for scalars, enums and inputs."""
    name: str
    kind: str
    fields: list[IntrospectionField] | None = None

    def get_field(self, name: str) -> IntrospectionField | None:
        for schema_field in self.fields or []:
            if schema_field.name == name:
                return schema_field
        return None


class IntrospectionQueryType(BaseModel):
    """The root query type."""
    name: str | None = None
    fields: list[IntrospectionField] = Field(default_factory=list)

    def get_field(self, name: str) -> IntrospectionField | None:
        for query_field in self.fields:
            if query_field.name == name:
                return query_field
        return None


class IntrospectionSchema(BaseModel):
    """The `__schema` object returned by introspection."""
    model_config = ConfigDict(populate_by_name=True)

    query_type: IntrospectionQueryType = Field(alias="queryType")
    types: list[IntrospectionType] = Field(default_factory=list)

    _types_by_name: dict[str, IntrospectionType] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._types_by_name = {t.name: t for t in self.types}

    def get_type_by_name(self, name: str) -> IntrospectionType | None:
        """Look up a named type."""
        return self._types_by_name.get(name)


@dataclass
class ResolvedField:
    """A field of a resolved row type.

    `fields` stays None for scalars and for types already expanded on the
    current path. Non-scalar types without fields of their own (enums)
    resolve to an empty list.
    """
    name: str
    type: str
    is_required: bool = False
    is_array: bool = False
    fields: list["ResolvedField"] | None = None

    @property
    def has_subfields(self) -> bool:
        return bool(self.fields)

    @property
    def is_scalar(self) -> bool:
        return is_scalar(self.type)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase structure used for JSON output."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "isRequired": self.is_required,
            "isArray": self.is_array,
        }
        if self.fields is not None:
            result["fields"] = [child.to_dict() for child in self.fields]
        return result
