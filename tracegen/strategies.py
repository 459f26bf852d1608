"""Communication styles: how the simulator picks the next class to call.

Three styles with increasing locality:
1. TRUE_RANDOM: any class, uniformly
2. COHESIVE: stay within the previous class's package, except that one
   interface class per package jumps to its linked class in another package
3. RANDOM_EXIT: stay within the package, leaving it with a 1/5 chance

Each strategy is a plain function; :data:`STRATEGIES` maps styles to them.
A strategy raises :class:`ExhaustionError` when its candidate pool is empty.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence

from tracegen.constants import EXIT_CHANCE
from tracegen.model import Application, CodeClass, all_child_classes
from tracegen.types import CommunicationStyle, ExhaustionError

logger = logging.getLogger(__name__)

NextClassStrategy = Callable[
    [random.Random, Sequence[CodeClass], CodeClass, set[CodeClass], bool],
    CodeClass,
]


def _choose(
    rng: random.Random,
    candidates: Sequence[CodeClass],
    style: CommunicationStyle,
) -> CodeClass:
    if not candidates:
        raise ExhaustionError(style)
    return rng.choice(candidates)


def _unvisited(classes: Sequence[CodeClass], visited: set[CodeClass]) -> list[CodeClass]:
    return [c for c in classes if c not in visited]


def true_random(
    rng: random.Random,
    classes: Sequence[CodeClass],
    previous_class: CodeClass,
    visited_classes: set[CodeClass],
    allow_cyclic_calls: bool,
) -> CodeClass:
    """Uniform choice over all (unvisited, unless cycles are allowed) classes."""
    pool = classes if allow_cyclic_calls else _unvisited(classes, visited_classes)
    return _choose(rng, pool, CommunicationStyle.TRUE_RANDOM)


def cohesive(
    rng: random.Random,
    classes: Sequence[CodeClass],
    previous_class: CodeClass,
    visited_classes: set[CodeClass],
    allow_cyclic_calls: bool,
) -> CodeClass:
    """Follow the interface link if there is one, else stay in the package."""
    if previous_class.parent is None:
        return true_random(rng, classes, previous_class, visited_classes, allow_cyclic_calls)

    if previous_class.linked_class is not None:
        return previous_class.linked_class

    neighbours = all_child_classes(previous_class.parent)
    pool = neighbours if allow_cyclic_calls else _unvisited(neighbours, visited_classes)
    return _choose(rng, pool, CommunicationStyle.COHESIVE)


def random_exit(
    rng: random.Random,
    classes: Sequence[CodeClass],
    previous_class: CodeClass,
    visited_classes: set[CodeClass],
    allow_cyclic_calls: bool,
) -> CodeClass:
    """Stay in the package most of the time, occasionally leave it."""
    if previous_class.parent is None:
        return true_random(rng, classes, previous_class, visited_classes, allow_cyclic_calls)

    neighbours = all_child_classes(previous_class.parent)

    if rng.randint(1, EXIT_CHANCE) != 1:
        pool = neighbours if allow_cyclic_calls else _unvisited(neighbours, visited_classes)
        if pool:
            return rng.choice(pool)
        # nothing unvisited nearby: leave the package instead

    neighbour_set = set(neighbours)
    outsiders = [c for c in classes if c not in neighbour_set]
    if not allow_cyclic_calls:
        outsiders = _unvisited(outsiders, visited_classes)
    return _choose(rng, outsiders, CommunicationStyle.RANDOM_EXIT)


STRATEGIES: dict[CommunicationStyle, NextClassStrategy] = {
    CommunicationStyle.TRUE_RANDOM: true_random,
    CommunicationStyle.COHESIVE: cohesive,
    CommunicationStyle.RANDOM_EXIT: random_exit,
}


def select_next_class(
    style: CommunicationStyle,
    rng: random.Random,
    classes: Sequence[CodeClass],
    previous_class: CodeClass,
    visited_classes: set[CodeClass],
    allow_cyclic_calls: bool,
) -> CodeClass:
    """Dispatch to the strategy registered for ``style``.

    Raises:
        ExhaustionError: If the strategy has no eligible candidate.
    """
    strategy = STRATEGIES[style]
    return strategy(rng, classes, previous_class, visited_classes, allow_cyclic_calls)


def link_interface_classes(applications: Sequence[Application], rng: random.Random) -> int:
    """Link one class of every package to a class of the next package.

    Packages without classes are skipped; the remaining ones form a ring in
    landscape order, so the last package links back to the first. Links
    from earlier runs are cleared first.

    Returns:
        Number of links placed.
    """
    for app in applications:
        for code_class in app.classes:
            code_class.linked_class = None

    packages = [p for app in applications for p in app.packages if p.classes]
    if not packages:
        logger.debug("Landscape has no packages with classes, no interfaces placed")
        return 0

    for i, package in enumerate(packages):
        selected = rng.choice(package.classes)
        selected.linked_class = rng.choice(packages[(i + 1) % len(packages)].classes)

    logger.debug("Placed %d interface links", len(packages))
    return len(packages)
