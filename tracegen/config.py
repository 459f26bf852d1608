"""Parameter and landscape file loading.

Generation and trace parameters live in YAML files using either snake_case
or camelCase keys. Landscapes and traces are exchanged as JSON.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from tracegen.model import Application
from tracegen.serialization import CleanedApplication, clean_landscape, reconstruct_landscape
from tracegen.structure import load_landscape_document
from tracegen.trace import Trace, trace_to_dicts
from tracegen.types import AppGenerationParameters, TraceGenerationParameters


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    with open(path) as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Expected a mapping at the top of {path}, got {type(raw).__name__}"
        raise ValueError(msg)
    return raw


def load_generation_parameters(path: Path) -> AppGenerationParameters:
    """Load landscape generation parameters from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the YAML is malformed.
        pydantic.ValidationError: If a value violates its constraint.
    """
    return AppGenerationParameters.model_validate(_load_yaml_mapping(path))


def load_trace_parameters(path: Path) -> TraceGenerationParameters:
    """Load trace simulation parameters from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the YAML is malformed.
        pydantic.ValidationError: If a value violates its constraint.
    """
    return TraceGenerationParameters.model_validate(_load_yaml_mapping(path))


def load_landscape_file(path: Path) -> list[Application]:
    """Read a landscape JSON file and rebuild its live trees.

    Both the cleaned application list and the structure format are accepted.
    """
    with open(path) as fh:
        raw = json.load(fh)
    return reconstruct_landscape(load_landscape_document(raw))


def cleaned_to_json(cleaned: Sequence[CleanedApplication]) -> str:
    return json.dumps([app.to_json_dict() for app in cleaned], indent=2)


def write_cleaned_file(cleaned: Sequence[CleanedApplication], path: Path) -> None:
    """Write already-cleaned applications as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(cleaned_to_json(cleaned) + "\n")


def landscape_to_json(applications: Sequence[Application]) -> str:
    return cleaned_to_json(clean_landscape(applications))


def write_landscape_file(applications: Sequence[Application], path: Path) -> None:
    """Write the cleaned landscape as JSON, creating parent directories."""
    write_cleaned_file(clean_landscape(applications), path)


def trace_to_json(trace: Trace) -> str:
    return json.dumps(trace_to_dicts(trace), indent=2)


def write_trace_file(trace: Trace, path: Path) -> None:
    """Write the span forest as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(trace_to_json(trace) + "\n")
