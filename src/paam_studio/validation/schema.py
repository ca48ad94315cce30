"""Structural validation and generation-readiness checks for PAAM documents.

``validate`` works on raw documents (dicts straight from JSON/YAML) so that
it can report problems the pydantic models would refuse to load. It never
raises: every problem ends up in the returned error list.
"""

from typing import Any

from pydantic import BaseModel

from paam_studio.model.paam import Paam


class ValidationReport(BaseModel):
    valid: bool
    errors: list[str]


class ReadinessReport(BaseModel):
    ready: bool
    issues: list[str]


def validate(document: Any) -> ValidationReport:
    """Check the top-level structure of a raw PAAM document."""
    errors: list[str] = []
    try:
        if not isinstance(document, dict):
            return ValidationReport(valid=False, errors=["PAAM document must be an object"])

        if not document.get("$schema"):
            errors.append("Missing $schema property")
        if not document.get("version"):
            errors.append("Missing version property")
        if not document.get("metadata"):
            errors.append("Missing metadata property")

        entities = document.get("entities")
        if not isinstance(entities, list):
            errors.append("entities must be an array")
            entities = []
        flows = document.get("flows")
        if not isinstance(flows, list):
            errors.append("flows must be an array")
            flows = []

        for i, entity in enumerate(entities):
            errors.extend(_check_item(entity, f"Entity {i}", "fields"))
        for i, flow in enumerate(flows):
            errors.extend(_check_item(flow, f"Flow {i}", "steps"))
    except Exception as e:  # a malformed document must not escape as an exception
        errors.append(f"Validation error: {e}")

    return ValidationReport(valid=not errors, errors=errors)


def _check_item(item: Any, label: str, list_key: str) -> list[str]:
    if not isinstance(item, dict):
        return [f"{label}: must be an object"]
    errors = []
    if not item.get("id"):
        errors.append(f"{label}: Missing id")
    if not item.get("name"):
        errors.append(f"{label}: Missing name")
    if not isinstance(item.get(list_key), list):
        errors.append(f"{label}: {list_key} must be an array")
    return errors


def is_ready_for_generation(paam: Paam) -> ReadinessReport:
    """Check that a document has enough content to compile.

    A required field without a default is only flagged when it declares an
    empty ``validation`` list; omitting ``validation`` altogether is fine.
    """
    issues: list[str] = []

    if not paam.entities:
        issues.append("No entities defined")
    if not paam.flows:
        issues.append("No flows defined")

    for entity in paam.entities:
        if not entity.fields:
            issues.append(f'Entity "{entity.name}" has no fields')
        for field in entity.fields:
            if field.required and field.default_value is None and field.validation == []:
                issues.append(
                    f'Field "{field.name}" in entity "{entity.name}" is required '
                    "but has no default value or validation"
                )

    return ReadinessReport(ready=not issues, issues=issues)


# -- cross-reference checks ----------------------------------------------------


def validate_references(document: Any) -> ValidationReport:
    """Check that ids referenced across the document resolve.

    Covers duplicate entity/flow ids, relationship targets, component data
    bindings and entities named by flow step configs. Kept separate from
    ``validate`` so that structural validation stays lenient.
    """
    errors: list[str] = []
    try:
        structure = validate(document)
        if not structure.valid:
            return structure

        entities = [e for e in document["entities"] if isinstance(e, dict)]
        fields_by_entity = {
            e.get("id"): {f.get("id") for f in e.get("fields", []) if isinstance(f, dict)}
            for e in entities
        }

        errors.extend(_duplicates([e.get("id") for e in entities], "entity"))
        errors.extend(_duplicates([f.get("id") for f in document["flows"] if isinstance(f, dict)], "flow"))

        for entity in entities:
            for rel in entity.get("relationships") or []:
                target = rel.get("targetEntity")
                if target not in fields_by_entity:
                    errors.append(
                        f'Entity "{entity.get("id")}": relationship "{rel.get("id")}" '
                        f'targets unknown entity "{target}"'
                    )

        for component in (document.get("ui") or {}).get("components") or []:
            binding = component.get("dataBinding")
            if not binding:
                continue
            entity_id = binding.get("entity")
            if entity_id not in fields_by_entity:
                errors.append(
                    f'Component "{component.get("id")}": data binding references unknown entity "{entity_id}"'
                )
                continue
            for field_id in binding.get("fields") or []:
                if field_id not in fields_by_entity[entity_id]:
                    errors.append(
                        f'Component "{component.get("id")}": field "{field_id}" '
                        f'is not defined on entity "{entity_id}"'
                    )

        for flow in document["flows"]:
            for step in flow.get("steps") or []:
                config = step.get("config") or {}
                for key in ("entity", "targetEntity"):
                    entity_id = config.get(key)
                    if entity_id is not None and entity_id not in fields_by_entity:
                        errors.append(
                            f'Flow "{flow.get("id")}": step "{step.get("id")}" '
                            f'references unknown entity "{entity_id}"'
                        )
    except Exception as e:  # a malformed document must not escape as an exception
        errors.append(f"Validation error: {e}")

    return ValidationReport(valid=not errors, errors=errors)


def _duplicates(ids: list, kind: str) -> list[str]:
    seen: set = set()
    errors = []
    for item_id in ids:
        if item_id in seen:
            errors.append(f'Duplicate {kind} id "{item_id}"')
        seen.add(item_id)
    return errors
