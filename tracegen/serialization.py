"""Parent-free landscape copies and their reconstruction.

The live tree is cyclic (``parent`` back-references), so it never crosses a
boundary as-is. :func:`clean_application` produces a pydantic copy without
back-references and with the entry point reduced to its FQN;
:func:`reconstruct_application` rebuilds a live tree from such a copy.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from tracegen.model import Application, CodeClass, CodeMethod, CodePackage, class_fqn
from tracegen.types import ReconstructionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cleaned models
# ---------------------------------------------------------------------------


class _Cleaned(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CleanedMethod(_Cleaned):
    identifier: str


class CleanedClass(_Cleaned):
    identifier: str
    methods: list[CleanedMethod] = Field(default_factory=list)
    parent_app_name: str


class CleanedPackage(_Cleaned):
    name: str
    classes: list[CleanedClass] = Field(default_factory=list)
    subpackages: list[CleanedPackage] = Field(default_factory=list)


class CleanedApplication(_Cleaned):
    """Serializable application: a package forest plus cleaned flat lists.

    Older documents carry a single ``rootPackage``; it is accepted and
    wrapped into ``rootPackages``.
    """

    name: str
    root_packages: list[CleanedPackage]
    entry_point_fqn: str = ""
    classes: list[CleanedClass] = Field(default_factory=list)
    packages: list[CleanedPackage] = Field(default_factory=list)
    methods: list[CleanedMethod] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _single_root_package(cls, data: Any) -> Any:
        if isinstance(data, dict) and "rootPackage" in data and "rootPackages" not in data:
            data = dict(data)
            root = data.pop("rootPackage")
            data["rootPackages"] = [root] if root is not None else []
        return data

    def to_json_dict(self) -> dict[str, Any]:
        """camelCase JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


def _clean_class(code_class: CodeClass) -> CleanedClass:
    return CleanedClass(
        identifier=code_class.identifier,
        methods=[CleanedMethod(identifier=m.identifier) for m in code_class.methods],
        parent_app_name=code_class.parent_app_name,
    )


def _clean_package(package: CodePackage) -> CleanedPackage:
    return CleanedPackage(
        name=package.name,
        classes=[_clean_class(c) for c in package.classes],
        subpackages=[_clean_package(p) for p in package.subpackages],
    )


def clean_application(app: Application) -> CleanedApplication:
    """Copy an application without back-references or links."""
    return CleanedApplication(
        name=app.name,
        root_packages=[_clean_package(p) for p in app.root_packages],
        entry_point_fqn=class_fqn(app.entry_point),
        classes=[_clean_class(c) for c in app.classes],
        packages=[_clean_package(p) for p in app.packages],
        methods=[CleanedMethod(identifier=m.identifier) for m in app.methods],
    )


def clean_landscape(applications: Sequence[Application]) -> list[CleanedApplication]:
    return [clean_application(app) for app in applications]


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------


@dataclass
class ReconstructionResult:
    """A rebuilt application and whether its entry point had to be guessed."""

    application: Application
    used_entry_point_fallback: bool = False


class _TreeBuilder:
    """Rebuilds one application tree, collecting flat lists on the way."""

    def __init__(self, app_name: str) -> None:
        self.app_name = app_name
        self.classes: list[CodeClass] = []
        self.packages: list[CodePackage] = []
        self.methods: list[CodeMethod] = []

    def package(self, data: CleanedPackage, parent: CodePackage | None) -> CodePackage:
        package = CodePackage(name=data.name, parent=parent)
        self.packages.append(package)
        for class_data in data.classes:
            package.classes.append(self.code_class(class_data, package))
        for sub_data in data.subpackages:
            package.subpackages.append(self.package(sub_data, package))
        return package

    def code_class(self, data: CleanedClass, parent: CodePackage) -> CodeClass:
        methods = [CodeMethod(m.identifier) for m in data.methods]
        self.methods.extend(methods)
        code_class = CodeClass(
            identifier=data.identifier,
            methods=methods,
            parent_app_name=data.parent_app_name or self.app_name,
            parent=parent,
        )
        self.classes.append(code_class)
        return code_class


def reconstruct_application(data: CleanedApplication | dict[str, Any]) -> ReconstructionResult:
    """Rebuild a live tree from a cleaned application.

    Parent references are assigned top-down; the flat lists are rebuilt
    by traversal so they hold the tree's own instances. The entry point is
    looked up by FQN, falling back to the first class of the traversal.

    Raises:
        ReconstructionError: If the tree contains no class at all.
        pydantic.ValidationError: If ``data`` is a malformed dict.
    """
    if not isinstance(data, CleanedApplication):
        data = CleanedApplication.model_validate(data)

    builder = _TreeBuilder(data.name)
    root_packages = [builder.package(p, None) for p in data.root_packages]
    if not builder.classes:
        msg = f"Application {data.name} has no classes"
        raise ReconstructionError(msg)

    entry_point = next((c for c in builder.classes if class_fqn(c) == data.entry_point_fqn), None)
    used_fallback = entry_point is None
    if entry_point is None:
        entry_point = builder.classes[0]
        logger.warning(
            "Entry point %r not found in %s, using %s",
            data.entry_point_fqn, data.name, class_fqn(entry_point),
        )

    app = Application(
        name=data.name,
        root_packages=root_packages,
        entry_point=entry_point,
        classes=builder.classes,
        packages=builder.packages,
        methods=builder.methods,
    )
    return ReconstructionResult(application=app, used_entry_point_fallback=used_fallback)


def reconstruct_landscape(
    data: Iterable[CleanedApplication | dict[str, Any]],
) -> list[Application]:
    """Rebuild every application of a cleaned landscape."""
    return [reconstruct_application(item).application for item in data]
