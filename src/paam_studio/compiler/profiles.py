"""Per-target data tables used by the compilers.

A profile holds everything that differs between output languages when
rendering the same PAAM field: the native type for each PAAM type, the
fallback for unknown types, and literal syntax for defaults. Profiles are
built once here and shared read-only by every compiler instance.
"""

import json
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class TargetProfile(BaseModel):
    """Literal syntax and type table for one output language."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_map: dict[str, str]
    fallback_type: str  # used for any PAAM type missing from type_map
    true_literal: str = "true"
    false_literal: str = "false"
    null_literal: str = "null"
    quote: Literal["double", "single"] = "double"
    escape_dollar: bool = False  # Kotlin string templates
    float_suffix: str = ""  # appended to numeric defaults of float_types
    float_types: tuple[str, ...] = ()
    string_types: tuple[str, ...] = ()  # native types that accept a string default

    def map_type(self, paam_type: str) -> str:
        return self.type_map.get(paam_type, self.fallback_type)

    def string_literal(self, value: str) -> str:
        if self.quote == "single":
            return "'" + value.replace("'", "''") + "'"
        literal = json.dumps(value, ensure_ascii=False)
        if self.escape_dollar:
            literal = literal.replace("$", "\\$")
        return literal

    def format_default(self, value: Any, paam_type: str | None = None) -> str:
        """Render a default value as a literal of this language.

        Strings are quoted, booleans use the bare boolean literal and numbers
        stay bare. Lists and dicts are rendered as a quoted JSON string.
        """
        if value is None:
            return self.null_literal
        if isinstance(value, bool):
            return self.true_literal if value else self.false_literal
        if isinstance(value, (int, float)):
            if paam_type is not None and self.map_type(paam_type) in self.float_types:
                return f"{value}{self.float_suffix}"
            return str(value)
        if isinstance(value, str):
            return self.string_literal(value)
        return self.string_literal(json.dumps(value))

    def accepts_default(self, value: Any, paam_type: str) -> bool:
        """False when a string default would not type-check against the native type."""
        if not isinstance(value, str) or not self.string_types:
            return True
        return self.map_type(paam_type) in self.string_types


_STRING_TYPES = ("string", "text", "email", "url", "file", "image", "enum")
_DATE_TYPES = ("date", "datetime", "time")


def _table(strings: str, integer: str, float_: str, boolean: str, dates: str, **extra: str) -> dict[str, str]:
    table = {t: strings for t in _STRING_TYPES}
    table.update({t: dates for t in _DATE_TYPES})
    table.update({"integer": integer, "float": float_, "boolean": boolean})
    table.update(extra)
    return table


TYPESCRIPT = TargetProfile(
    name="typescript",
    type_map=_table("string", "number", "number", "boolean", "Date", json="any", uuid="string", reference="string"),
    fallback_type="string",
    null_literal="null",
)

PRISMA = TargetProfile(
    name="prisma",
    type_map=_table("String", "Int", "Float", "Boolean", "DateTime", json="Json", uuid="String", reference="String"),
    fallback_type="String",
    string_types=("String",),
)

KOTLIN = TargetProfile(
    name="kotlin",
    type_map=_table("String", "Int", "Float", "Boolean", "Date", json="String", uuid="String", reference="Long"),
    fallback_type="String",
    escape_dollar=True,
    float_suffix="f",
    float_types=("Float",),
    string_types=("String",),
)

SWIFT = TargetProfile(
    name="swift",
    type_map=_table("String", "Int", "Double", "Bool", "Date", json="Any", uuid="UUID", reference="UUID"),
    fallback_type="String",
    null_literal="nil",
    string_types=("String",),
)

CORE_DATA = TargetProfile(
    name="core-data",
    type_map=_table("String", "Integer 64", "Double", "Boolean", "Date", json="Transformable", uuid="UUID", reference="UUID"),
    fallback_type="String",
    true_literal="YES",
    false_literal="NO",
    null_literal="",
)

POSTGRESQL = TargetProfile(
    name="postgresql",
    type_map=_table(
        "VARCHAR(255)", "INTEGER", "DOUBLE PRECISION", "BOOLEAN", "TIMESTAMP",
        text="TEXT", date="DATE", time="TIME", url="TEXT", file="TEXT", image="TEXT",
        json="JSONB", uuid="UUID", reference="UUID",
    ),
    fallback_type="TEXT",
    true_literal="TRUE",
    false_literal="FALSE",
    null_literal="NULL",
    quote="single",
)

MYSQL = TargetProfile(
    name="mysql",
    type_map=_table(
        "VARCHAR(255)", "INT", "DOUBLE", "BOOLEAN", "DATETIME",
        text="TEXT", date="DATE", time="TIME", url="TEXT", file="TEXT", image="TEXT",
        json="JSON", uuid="CHAR(36)", reference="CHAR(36)",
    ),
    fallback_type="TEXT",
    true_literal="TRUE",
    false_literal="FALSE",
    null_literal="NULL",
    quote="single",
)

SQLITE = TargetProfile(
    name="sqlite",
    type_map=_table("TEXT", "INTEGER", "REAL", "INTEGER", "TEXT", json="TEXT", uuid="TEXT", reference="TEXT"),
    fallback_type="TEXT",
    true_literal="1",
    false_literal="0",
    null_literal="NULL",
    quote="single",
)

PROFILES = MappingProxyType({
    profile.name: profile
    for profile in (TYPESCRIPT, PRISMA, KOTLIN, SWIFT, CORE_DATA, POSTGRESQL, MYSQL, SQLITE)
})

SQL_PROFILES = MappingProxyType({"postgresql": POSTGRESQL, "mysql": MYSQL, "sqlite": SQLITE})

# Human-readable description of what each flow step type does at runtime.
# Placeholders are filled from the step config, falling back to the defaults.
STEP_IMPLEMENTATIONS = MappingProxyType({
    "form": ("Render form with fields: {fields}", {"fields": "unknown"}),
    "api-call": ("Make {method} request to {endpoint}", {"method": "POST", "endpoint": "unknown endpoint"}),
    "validation": ("Validate data against schema: {entity}", {"entity": "unknown"}),
    "auth-check": ("Check authentication and authorization", {}),
    "notification": ("Send {type} notification", {"type": "info"}),
    "redirect": ("Redirect to {url}", {"url": "unknown"}),
})


def describe_step(step_type: str, config: dict) -> str:
    if step_type not in STEP_IMPLEMENTATIONS:
        return f"Execute {step_type} step"
    template, defaults = STEP_IMPLEMENTATIONS[step_type]
    values = {}
    for key, default in defaults.items():
        value = config.get(key) or default
        values[key] = ", ".join(str(v) for v in value) if isinstance(value, list) else value
    return template.format(**values)
