"""In-memory landscape tree: methods, classes, packages and applications.

Packages and classes keep a ``parent`` back-reference so that ancestor walks
(FQN computation, neighbour lookup) are O(depth). The resulting object graph
is cyclic; use :mod:`tracegen.serialization` to cross any boundary.

Nodes compare and hash by identity, so they can live in visited sets even
when two classes share an identifier.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class CodeMethod:
    """A method, owned by exactly one class."""

    identifier: str


@dataclass(eq=False)
class CodeClass:
    """A class: leaf of the package tree, owner of methods."""

    identifier: str
    methods: list[CodeMethod]
    parent_app_name: str
    parent: CodePackage | None = field(default=None, repr=False)
    linked_class: CodeClass | None = field(default=None, repr=False)


@dataclass(eq=False)
class CodePackage:
    """A package holding classes and nested subpackages."""

    name: str
    classes: list[CodeClass] = field(default_factory=list)
    subpackages: list[CodePackage] = field(default_factory=list)
    parent: CodePackage | None = field(default=None, repr=False)


@dataclass(eq=False)
class Application:
    """One generated (or reconstructed) application.

    ``classes``, ``packages`` and ``methods`` hold the very instances
    reachable from ``root_packages``.
    """

    name: str
    root_packages: list[CodePackage]
    entry_point: CodeClass
    classes: list[CodeClass]
    packages: list[CodePackage]
    methods: list[CodeMethod]


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def class_fqn(code_class: CodeClass) -> str:
    """Dot-joined package path from the root down to the class."""
    parts = [code_class.identifier]
    package = code_class.parent
    while package is not None:
        parts.append(package.name)
        package = package.parent
    return ".".join(reversed(parts))


def all_child_classes(package: CodePackage) -> list[CodeClass]:
    """Classes of a package and of all its subpackages, depth-first."""
    result = list(package.classes)
    for subpackage in package.subpackages:
        result.extend(all_child_classes(subpackage))
    return result


def iter_packages(packages: list[CodePackage]) -> Iterator[CodePackage]:
    """Yield packages depth-first, each before its subpackages."""
    for package in packages:
        yield package
        yield from iter_packages(package.subpackages)


def package_depth(packages: list[CodePackage]) -> int:
    """Number of package levels below (and including) ``packages``."""
    if not packages:
        return 0
    return 1 + max(package_depth(p.subpackages) for p in packages)
