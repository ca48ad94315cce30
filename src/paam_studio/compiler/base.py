"""Shared compiler contract: result types, option checking and entity contexts.

Every target compiler follows the same pipeline: validate the document,
check the requested options against what the target supports, then render
files from typed contexts built over the PAAM models. Compilers only read
the document and never touch the filesystem; writing files is the caller's
job.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from paam_studio.compiler.naming import camel_case, pascal_case, snake_case
from paam_studio.compiler.profiles import TargetProfile
from paam_studio.model.paam import Entity, EntityField, Paam, UiComponent
from paam_studio.validation.schema import is_ready_for_generation, validate


class GeneratedFile(BaseModel):
    path: str  # project-relative
    content: str
    type: str  # activity / fragment / viewmodel / model / service / utility / config / component / page / api
    language: str  # kotlin / xml / typescript / tsx / swift / prisma / sql / json / javascript / plist / dockerfile / toml


class CompilationResult(BaseModel):
    success: bool = False
    files: list[GeneratedFile] = []
    warnings: list[str] = []
    errors: list[str] = []
    metadata: dict[str, Any] = {}

    def add(self, path: str, content: str, type: str, language: str) -> None:
        """Record a generated file. Paths must stay inside the project root."""
        if path.startswith("/") or any(part in (".", "..") for part in path.split("/")):
            raise ValueError(f"path {path!r} leaves the project directory")
        self.files.append(GeneratedFile(path=path, content=content, type=type, language=language))

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def file(self, path: str) -> GeneratedFile | None:
        return next((f for f in self.files if f.path == path), None)

    def paths(self) -> list[str]:
        return [f.path for f in self.files]


class CompileOptions(BaseModel):
    strict: bool = False  # readiness issues fail the compile instead of warning


# -- typed render contexts -----------------------------------------------------


class FieldContext(BaseModel):
    id: str
    name: str
    identifier: str  # camelCase, safe to use as a variable name
    column: str  # snake_case
    paam_type: str
    native_type: str
    required: bool
    unique: bool
    default: str | None  # literal in target syntax, None when absent or not representable
    label: str
    widget: str | None = None
    options: list[dict] = []  # [{value, label}] for select widgets


class RelationContext(BaseModel):
    id: str
    name: str
    type: str
    target_id: str
    target_name: str  # PascalCase name of the target entity
    target_var: str
    cascade: bool
    on_delete: str


class EntityContext(BaseModel):
    id: str
    name: str  # PascalCase type name
    var: str  # camelCase variable name
    table: str  # snake_case table / collection name
    description: str
    fields: list[FieldContext]
    relationships: list[RelationContext]
    has_id_field: bool  # False means targets synthesize a primary key

    @property
    def plural(self) -> str:
        return f"{self.name}s"


def build_field_context(field: EntityField, profile: TargetProfile) -> FieldContext:
    default = None
    if field.default_value is not None and profile.accepts_default(field.default_value, field.type):
        default = profile.format_default(field.default_value, field.type)
    return FieldContext(
        id=field.id,
        name=field.name,
        identifier=camel_case(field.id),
        column=snake_case(field.id),
        paam_type=field.type,
        native_type=profile.map_type(field.type),
        required=field.required,
        unique=bool(field.unique),
        default=default,
        label=(field.ui.label if field.ui and field.ui.label else field.name),
        widget=field.ui.widget if field.ui else None,
        options=[o.model_dump() for o in field.ui.options] if field.ui and field.ui.options else [],
    )


def resolve_relationships(entity: Entity, paam: Paam, result: CompilationResult) -> list[RelationContext]:
    """Resolve relationship targets, omitting (and warning about) unknown ones."""
    by_id = {e.id: e for e in paam.entities}
    relations = []
    for rel in entity.relationships:
        target = by_id.get(rel.target_entity)
        if target is None:
            result.warn(
                f'Entity "{entity.name}": relationship "{rel.name}" targets unknown entity '
                f'"{rel.target_entity}"; relationship omitted'
            )
            continue
        relations.append(RelationContext(
            id=rel.id,
            name=rel.name,
            type=rel.type,
            target_id=target.id,
            target_name=pascal_case(target.name),
            target_var=camel_case(target.name),
            cascade=bool(rel.cascade),
            on_delete=rel.on_delete or "restrict",
        ))
    return relations


def build_entity_context(entity: Entity, paam: Paam, profile: TargetProfile, result: CompilationResult) -> EntityContext:
    fields = [build_field_context(f, profile) for f in entity.fields]
    return EntityContext(
        id=entity.id,
        name=pascal_case(entity.name),
        var=camel_case(entity.name),
        table=snake_case(entity.name),
        description=entity.description,
        fields=fields,
        relationships=resolve_relationships(entity, paam, result),
        has_id_field=any(f.identifier == "id" for f in fields),
    )


# -- compiler base -------------------------------------------------------------


class Compiler(ABC):
    """Base class for target compilers.

    Subclasses set ``target``, ``profile`` and ``options_model`` and list the
    option values they support in ``SUPPORTED``: for each option name, a pair
    of (fully implemented values, placeholder values).
    """

    target: ClassVar[str] = ""
    profile: TargetProfile
    options_model: ClassVar[type[CompileOptions]] = CompileOptions
    SUPPORTED: ClassVar[dict[str, tuple[tuple[str, ...], tuple[str, ...]]]] = {}

    def __init__(self, profile: TargetProfile | None = None):
        if profile is not None:
            self.profile = profile

    def compile(self, paam: Paam, options: CompileOptions | dict | None = None) -> CompilationResult:
        result = CompilationResult(metadata={"target": self.target})

        try:
            options = self._resolve_options(options)
        except ValidationError as e:
            result.errors.append(f"Invalid options: {e}")
            return result

        report = validate(paam.to_document())
        if not report.valid:
            result.errors.extend(report.errors)
            return result

        readiness = is_ready_for_generation(paam)
        if readiness.issues:
            if options.strict:
                result.errors.extend(readiness.issues)
                return result
            for issue in readiness.issues:
                result.warn(issue)

        if not self._check_options(options, result):
            return result

        logger.info(f"Compiling '{paam.metadata.name}' for {self.target}")
        try:
            self.generate(paam, options, result)
        except Exception as e:
            logger.exception(f"{self.target} compilation of '{paam.metadata.name}' failed")
            result.errors.append(f"Compilation failed: {e}")

        result.success = not result.errors
        result.metadata.update(
            options=options.model_dump(),
            file_count=len(result.files),
            entity_count=len(paam.entities),
        )
        logger.info(f"{self.target}: {len(result.files)} files, {len(result.warnings)} warnings")
        return result

    @abstractmethod
    def generate(self, paam: Paam, options: CompileOptions, result: CompilationResult) -> None:
        """Render every file for ``paam`` into ``result``."""

    def _resolve_options(self, options: CompileOptions | dict | None) -> CompileOptions:
        if options is None:
            return self.options_model()
        if isinstance(options, dict):
            return self.options_model.model_validate(options)
        if not isinstance(options, self.options_model):
            return self.options_model.model_validate(options.model_dump())
        return options

    def _check_options(self, options: CompileOptions, result: CompilationResult) -> bool:
        for option, (full, placeholders) in self.SUPPORTED.items():
            value = getattr(options, option)
            label = option.replace("_", " ")
            if value in full:
                continue
            if value in placeholders:
                result.warn(f"{value} {label} is a placeholder implementation")
                continue
            result.errors.append(f"Unsupported {label}: {value}")
            return False
        return True

    def entities(self, paam: Paam, result: CompilationResult) -> list[EntityContext]:
        return [build_entity_context(e, paam, self.profile, result) for e in paam.entities]

    def bound_entity(self, component: UiComponent, by_id: dict[str, EntityContext],
                     result: CompilationResult) -> EntityContext | None:
        """Entity a UI component is bound to; unknown entities are warned about."""
        binding = component.data_binding
        if binding is None:
            return None
        entity = by_id.get(binding.entity)
        if entity is None:
            result.warn(
                f'Component "{component.name}": data binding references unknown entity '
                f'"{binding.entity}"; rendered without data'
            )
        return entity

    @contextmanager
    def item(self, result: CompilationResult, label: str):
        """Skip one item when rendering it fails, recording a warning instead."""
        try:
            yield
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            result.warn(f"Skipped {label}: {e}")
