"""Randomized bottom-up landscape generation.

An application tree is built from the leaves upward. The total number of
classes is drawn first; then, for every package layer from the deepest to
the shallowest, a random share of the remaining classes is placed on that
layer, shuffled between the packages built on the layer below, and the
whole layer is cut into random-length runs that each become a new package.
Whatever classes are left end up directly in the synthetic
``org.tracegenerator.<app>`` namespace package.
"""

from __future__ import annotations

import logging
import math
import random

from tracegen.constants import ROOT_NAMESPACE
from tracegen.model import Application, CodeClass, CodeMethod, CodePackage, iter_packages
from tracegen.naming import NamePool
from tracegen.types import AppGenerationParameters

logger = logging.getLogger(__name__)


class LandscapeGenerator:
    """Builds applications from one random source and one shared name pool.

    Args:
        rng: Random source; every draw of the generator goes through it.
        names: Name pool shared by all applications of this generator.
            Defaults to a fresh pool drawing from ``rng``.
    """

    def __init__(self, rng: random.Random, names: NamePool | None = None) -> None:
        self._rng = rng
        self.names = names or NamePool(rng)

    def generate_many(self, params: AppGenerationParameters, count: int) -> list[Application]:
        """Generate ``count`` applications with identical parameters."""
        return [self.generate(params) for _ in range(count)]

    def generate(self, params: AppGenerationParameters) -> Application:
        """Generate a single application tree.

        Args:
            params: Size and shape parameters (already validated).

        Returns:
            A fresh Application whose flat lists share identity with its tree.
        """
        rng = self._rng
        app_name = self.names.app_name()

        classes: list[CodeClass] = []
        packages: list[CodePackage] = []
        methods: list[CodeMethod] = []

        class_count = rng.randint(params.min_class_count, params.max_class_count)
        remaining_class_count = class_count
        current_layer: list[CodePackage | CodeClass] = []

        for layer in range(params.package_depth, 0, -1):
            # Deepest layer requires at least one class
            min_in_layer = 1 if layer == params.package_depth else 0
            max_in_layer = max(math.floor(remaining_class_count * params.balance), min_in_layer)
            classes_in_layer = rng.randint(min_in_layer, max_in_layer)
            remaining_class_count -= classes_in_layer

            new_classes = [
                self._new_class(params, app_name, classes, methods)
                for _ in range(classes_in_layer)
            ]

            # Interleave with the packages of the layer below
            for new_class in new_classes:
                current_layer.insert(rng.randint(0, len(current_layer)), new_class)

            new_packages: list[CodePackage] = []
            while current_layer:
                take = rng.randint(1, len(current_layer))
                package = CodePackage(name=self.names.package_name())
                for component in current_layer[:take]:
                    component.parent = package
                    if isinstance(component, CodeClass):
                        package.classes.append(component)
                    else:
                        package.subpackages.append(component)
                del current_layer[:take]
                new_packages.append(package)
                packages.append(package)

            logger.debug(
                "Layer %d of %s: %d classes, %d packages",
                layer, app_name, classes_in_layer, len(new_packages),
            )
            current_layer = list(new_packages)

        assert not any(isinstance(c, CodeClass) for c in current_layer)

        namespace = _namespace_chain(app_name)
        innermost = namespace[-1]
        for package in current_layer:
            package.parent = innermost
            innermost.subpackages.append(package)  # type: ignore[arg-type]

        for _ in range(remaining_class_count):
            leftover = self._new_class(params, app_name, classes, methods)
            leftover.parent = innermost
            innermost.classes.append(leftover)

        packages.extend(namespace)
        entry_point = rng.choice(classes)

        logger.info(
            "Generated app %s: %d classes, %d packages, %d methods",
            app_name, len(classes), len(packages), len(methods),
        )
        return Application(
            name=app_name,
            root_packages=[namespace[0]],
            entry_point=entry_point,
            classes=classes,
            packages=packages,
            methods=methods,
        )

    def _new_class(
        self,
        params: AppGenerationParameters,
        app_name: str,
        classes: list[CodeClass],
        methods: list[CodeMethod],
    ) -> CodeClass:
        """Create a class with freshly named methods and record both."""
        method_count = self._rng.randint(params.min_method_count, params.max_method_count)
        new_methods = [CodeMethod(self.names.method_name()) for _ in range(method_count)]
        methods.extend(new_methods)
        new_class = CodeClass(
            identifier=self.names.class_name(),
            methods=new_methods,
            parent_app_name=app_name,
        )
        classes.append(new_class)
        return new_class


def _namespace_chain(app_name: str) -> list[CodePackage]:
    """Build ``org -> tracegenerator -> <app>`` and return it root first."""
    chain: list[CodePackage] = []
    parent: CodePackage | None = None
    for name in (*ROOT_NAMESPACE, app_name.replace("-", "")):
        package = CodePackage(name=name, parent=parent)
        if parent is not None:
            parent.subpackages.append(package)
        chain.append(package)
        parent = package
    return chain


def generate_landscape(
    params: AppGenerationParameters,
    rng: random.Random | None = None,
) -> list[Application]:
    """Generate ``params.app_count`` applications.

    Args:
        params: Generation parameters. ``params.seed`` seeds a fresh random
            source when ``rng`` is not given; without a seed, OS entropy is
            used.
        rng: Optional explicit random source.

    Returns:
        The generated applications, all named from one shared pool.
    """
    rng = rng or random.Random(params.seed)
    generator = LandscapeGenerator(rng)
    return generator.generate_many(params, params.app_count)


def count_non_synthetic_packages(app: Application) -> int:
    """Packages below the synthetic namespace wrapper."""
    return sum(1 for _ in iter_packages(app.root_packages)) - len(ROOT_NAMESPACE) - 1
