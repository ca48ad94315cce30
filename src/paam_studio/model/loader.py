"""Read and write PAAM documents as JSON or YAML files."""

import json
from pathlib import Path

import yaml
from loguru import logger

from paam_studio.errors import PaamParseError
from paam_studio.model.paam import Paam
from paam_studio.model.utils import build_paam


def load_document(file_path: Path) -> dict:
    """Load a raw PAAM document from a .json, .yaml or .yml file.

    JSON is a subset of YAML, so both formats go through yaml.safe_load.
    """
    text = Path(file_path).read_text(encoding="utf-8")
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PaamParseError(f"Failed to parse {file_path}: {e}") from e
    if not isinstance(document, dict):
        raise PaamParseError(f"{file_path} does not contain a PAAM object")
    return document


def load_paam(file_path: Path) -> Paam:
    """Load, validate and build a PAAM model from a file."""
    document = load_document(file_path)
    paam = build_paam(document)
    logger.debug(f"Loaded PAAM '{paam.metadata.name}' from {file_path}: "
                 f"{len(paam.entities)} entities, {len(paam.flows)} flows")
    return paam


def dump_paam(paam: Paam, file_path: Path) -> None:
    """Write a PAAM model as JSON (or YAML for .yaml/.yml paths)."""
    file_path = Path(file_path)
    document = paam.to_document()
    if file_path.suffix in (".yaml", ".yml"):
        content = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    else:
        content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
