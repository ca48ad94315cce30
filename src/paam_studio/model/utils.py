"""Helpers for creating, querying and editing PAAM documents."""

import json
import random
import string
import time
from datetime import datetime, timezone

from pydantic import ValidationError

from paam_studio.config import get_settings
from paam_studio.errors import PaamParseError
from paam_studio.model.paam import Entity, Flow, Metadata, Paam
from paam_studio.validation.schema import validate

ID_ALPHABET = string.ascii_lowercase + string.digits


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_empty(name: str, description: str) -> Paam:
    """Create a PAAM document with default auth, UI, API and data sections."""
    now = _now()
    return Paam(
        schema_uri=get_settings().schema_uri,
        version="0.1.0",
        metadata=Metadata(
            name=name,
            description=description,
            version="1.0.0",
            created=now,
            modified=now,
            tags=[],
            platforms=["web"],
        ),
    )


def find_entity(paam: Paam, entity_id: str) -> Entity | None:
    return next((e for e in paam.entities if e.id == entity_id), None)


def find_flow(paam: Paam, flow_id: str) -> Flow | None:
    return next((f for f in paam.flows if f.id == flow_id), None)


def add_entity(paam: Paam, entity: Entity) -> Paam:
    """Append an entity and refresh metadata.modified. Mutates and returns ``paam``."""
    paam.entities.append(entity)
    paam.metadata.modified = _now()
    return paam


def add_flow(paam: Paam, flow: Flow) -> Paam:
    """Append a flow and refresh metadata.modified. Mutates and returns ``paam``."""
    paam.flows.append(flow)
    paam.metadata.modified = _now()
    return paam


def generate_id(prefix: str = "") -> str:
    """Return an id like ``entity_1718000000000_k3j9x0abc``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(ID_ALPHABET, k=9))
    return f"{prefix}_{millis}_{suffix}"


def clone(paam: Paam) -> Paam:
    return paam.model_copy(deep=True)


def to_json(paam: Paam, indent: int = 2) -> str:
    return json.dumps(paam.to_document(), indent=indent, ensure_ascii=False)


def from_json(text: str) -> Paam:
    """Parse and validate a PAAM document from JSON text.

    Raises PaamParseError when the text is not JSON or the document is invalid.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise PaamParseError(f"Failed to parse PAAM JSON: {e}") from e
    return build_paam(document)


def build_paam(document: dict) -> Paam:
    """Validate a raw document and build the model from it."""
    report = validate(document)
    if not report.valid:
        raise PaamParseError(f"Invalid PAAM: {', '.join(report.errors)}", report.errors)
    try:
        return Paam.model_validate(document)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise PaamParseError(f"Invalid PAAM: {', '.join(errors)}", errors) from e


def get_referencing_entities(paam: Paam, entity_id: str) -> list[Entity]:
    """Entities that declare a relationship targeting ``entity_id``."""
    return [
        entity for entity in paam.entities
        if any(rel.target_entity == entity_id for rel in entity.relationships)
    ]


def get_flows_using_entity(paam: Paam, entity_id: str) -> list[Flow]:
    """Flows with at least one step whose config names ``entity_id``."""
    return [
        flow for flow in paam.flows
        if any(
            step.config.get("entity") == entity_id or step.config.get("targetEntity") == entity_id
            for step in flow.steps
        )
    ]
