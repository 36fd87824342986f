"""Declaration files: TOML schema, validation, conversion to TypeDecl.

File format::

    [[types]]
    name = "Box"
    var = "a"              # designated variable (default "a")
    params = []            # leading fixed parameters (default none)

      [[types.constructors]]
      name = "mk"
      fields = ["a", { name = "count", type = "Nat" }]

Fields are either a bare type expression or a ``{name, type}`` table.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from deriva.domain.errors import DeclarationError
from deriva.domain.parse import parse_type
from deriva.domain.types import Constructor, TypeDecl
from deriva.domain.types import Field as DeclField


class FieldSpec(BaseModel):
    """A named field entry."""

    model_config = {"frozen": True, "extra": "forbid"}

    name: str | None = None
    type: str


class ConstructorSpec(BaseModel):
    """[[types.constructors]] entry."""

    model_config = {"frozen": True, "extra": "forbid"}

    name: str
    fields: list[str | FieldSpec] = Field(default_factory=list)


class TypeSpec(BaseModel):
    """[[types]] entry."""

    model_config = {"frozen": True, "extra": "forbid"}

    name: str
    var: str = "a"
    params: list[str] = Field(default_factory=list)
    constructors: list[ConstructorSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_names(self) -> TypeSpec:
        if self.var in self.params:
            msg = f"{self.name}: designated variable {self.var!r} repeated in params"
            raise ValueError(msg)
        seen: set[str] = set()
        for ctor in self.constructors:
            if ctor.name in seen:
                msg = f"{self.name}: duplicate constructor {ctor.name!r}"
                raise ValueError(msg)
            seen.add(ctor.name)
        return self

    def to_decl(self) -> TypeDecl:
        variables = {self.var, *self.params}
        constructors = []
        for ctor in self.constructors:
            fields = []
            for entry in ctor.fields:
                spec = entry if isinstance(entry, FieldSpec) else FieldSpec(type=entry)
                try:
                    fields.append(DeclField(parse_type(spec.type, variables), spec.name))
                except DeclarationError as exc:
                    raise DeclarationError(
                        exc.message, type_name=self.name, constructor=ctor.name, field=spec.name
                    ) from exc
            constructors.append(Constructor(ctor.name, tuple(fields)))
        return TypeDecl(
            name=self.name,
            constructors=tuple(constructors),
            var=self.var,
            params=tuple(self.params),
        )


class DeclarationFile(BaseModel):
    """Root of a declaration file."""

    model_config = {"frozen": True, "extra": "forbid"}

    types: list[TypeSpec] = Field(default_factory=list)


def parse_declarations(data: dict[str, Any]) -> list[TypeDecl]:
    """Validate already-decoded TOML *data* and convert it to declarations.

    Raises:
        DeclarationError: Schema violation or unparsable type expression.
    """
    try:
        doc = DeclarationFile.model_validate(data)
    except ValidationError as exc:
        raise DeclarationError(f"Invalid declaration file: {exc}") from exc
    return [spec.to_decl() for spec in doc.types]


def load_declarations(path: Path) -> list[TypeDecl]:
    """Read and parse a TOML declaration file.

    Raises:
        DeclarationError: Unreadable file, invalid TOML, or invalid schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeclarationError(f"Cannot read {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise DeclarationError(f"Invalid TOML in {path}: {exc}") from exc
    return parse_declarations(data)
