"""Import adapter for the node/application "structure" landscape format.

A structure document groups applications by host node::

    {"landscapeToken": "...", "nodes": [{"ipAddress": "...", "hostName": "...",
      "applications": [{"name": "...", "language": "java", "instanceId": "0",
        "packages": [{"name": "...", "subPackages": [...],
          "classes": [{"name": "...", "methods": [{"name": "..."}]}]}]}]}]}

Every application of every node becomes one :class:`CleanedApplication`.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tracegen.serialization import (
    CleanedApplication,
    CleanedClass,
    CleanedMethod,
    CleanedPackage,
)

logger = logging.getLogger(__name__)


class _Structure(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StructureMethod(_Structure):
    name: str
    method_hash: str | None = None


class StructureClass(_Structure):
    name: str
    methods: list[StructureMethod] = Field(default_factory=list)


class StructurePackage(_Structure):
    name: str
    sub_packages: list[StructurePackage] = Field(default_factory=list)
    classes: list[StructureClass] = Field(default_factory=list)


class StructureApplication(_Structure):
    name: str
    language: str = ""
    instance_id: str = ""
    packages: list[StructurePackage] = Field(default_factory=list)


class StructureNode(_Structure):
    ip_address: str = ""
    host_name: str = ""
    applications: list[StructureApplication] = Field(default_factory=list)


class StructureLandscape(_Structure):
    landscape_token: str
    nodes: list[StructureNode]


def is_structure_landscape(data: Any) -> bool:
    """Whether ``data`` looks like a structure document.

    Requires a string ``landscapeToken`` and a non-empty ``nodes`` list whose
    entries all carry an ``applications`` list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("landscapeToken"), str):
        return False
    nodes = data.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        return False
    return all(isinstance(n, dict) and isinstance(n.get("applications"), list) for n in nodes)


class _AppConverter:
    def __init__(self, app_name: str) -> None:
        self.app_name = app_name
        self.classes: list[CleanedClass] = []
        self.packages: list[CleanedPackage] = []
        self.methods: list[CleanedMethod] = []
        self.fqns: dict[int, str] = {}

    def package(self, data: StructurePackage, path: tuple[str, ...]) -> CleanedPackage:
        path = (*path, data.name)
        package = CleanedPackage(name=data.name)
        for class_data in data.classes:
            methods = [CleanedMethod(identifier=m.name) for m in class_data.methods]
            self.methods.extend(methods)
            cleaned = CleanedClass(
                identifier=class_data.name,
                methods=methods,
                parent_app_name=self.app_name,
            )
            self.fqns[id(cleaned)] = ".".join((*path, cleaned.identifier))
            package.classes.append(cleaned)
            self.classes.append(cleaned)
        for sub_data in data.sub_packages:
            package.subpackages.append(self.package(sub_data, path))
        self.packages.append(package)
        return package


def convert_structure_landscape(data: StructureLandscape | dict[str, Any]) -> list[CleanedApplication]:
    """Flatten all applications of all nodes into cleaned applications.

    The entry point is the first class that has methods, or the first class
    when none has any. Applications without classes get an empty FQN.
    """
    if not isinstance(data, StructureLandscape):
        data = StructureLandscape.model_validate(data)

    result: list[CleanedApplication] = []
    for node in data.nodes:
        for app in node.applications:
            converter = _AppConverter(app.name)
            root_packages = [converter.package(p, ()) for p in app.packages]

            entry_point_fqn = ""
            if converter.classes:
                entry = next((c for c in converter.classes if c.methods), converter.classes[0])
                entry_point_fqn = converter.fqns[id(entry)]

            result.append(
                CleanedApplication(
                    name=app.name,
                    root_packages=root_packages,
                    entry_point_fqn=entry_point_fqn,
                    classes=converter.classes,
                    packages=converter.packages,
                    methods=converter.methods,
                )
            )
    logger.info("Converted %d applications from %d nodes", len(result), len(data.nodes))
    return result


def load_landscape_document(data: Any) -> list[CleanedApplication]:
    """Accept either a structure document or a list of cleaned applications.

    Raises:
        ValueError: If ``data`` is neither shape.
        pydantic.ValidationError: If an entry is malformed.
    """
    if is_structure_landscape(data):
        return convert_structure_landscape(data)
    if isinstance(data, list):
        return [CleanedApplication.model_validate(item) for item in data]
    msg = "Landscape document must be a list of applications or a structure landscape"
    raise ValueError(msg)
