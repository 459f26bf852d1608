"""Call-stack based trace simulation over a generated landscape.

The simulator keeps a stack of ``(class, span)`` frames. Every iteration
selects the next class (through the active communication style), opens a
span for it, randomly pops frames off the stack (each popped span becomes a
child of the frame below and is closed at the current time), and pushes the
new frame. Once the requested number of calls has been made, the stack is
drained and the bottom frame, the entry span, is the root of the trace.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass

from tracegen.constants import ATTR_CODE_FUNCTION_NAME, ATTR_CODE_NAMESPACE, ATTR_SERVICE_NAME
from tracegen.model import Application, CodeClass, CodeMethod, class_fqn
from tracegen.strategies import link_interface_classes, select_next_class
from tracegen.trace import Span, Trace
from tracegen.types import (
    CommunicationStyle,
    EmptyLandscapeError,
    ExhaustionError,
    TraceGenerationParameters,
)

logger = logging.getLogger(__name__)

Frame = tuple[CodeClass, Span]
MethodRef = tuple[CodeClass, CodeMethod]


@dataclass
class SimulationStats:
    """Bookkeeping of the most recent :meth:`TraceSimulator.simulate` run.

    Attributes:
        generated_spans: Call spans produced, the entry span excluded.
        effective_call_count: Number of calls the run aimed for.
        exhaustion_pops: Frames force-popped because no class was eligible.
        peak_stack_depth: Largest number of simultaneous stack frames.
        terminated_early: Whether the run stopped before the call count.
    """

    generated_spans: int = 0
    effective_call_count: int = 0
    exhaustion_pops: int = 0
    peak_stack_depth: int = 1
    terminated_early: bool = False


class TraceSimulator:
    """Simulates traces with one parameter set and one random source.

    Args:
        params: Trace parameters (already validated).
        rng: Optional random source. Defaults to ``random.Random(params.seed)``,
            reseeded at the start of every run when a seed is set.
    """

    def __init__(
        self,
        params: TraceGenerationParameters,
        rng: random.Random | None = None,
    ) -> None:
        self.params = params
        self._reseed = rng is None and params.seed is not None
        self._rng = rng or random.Random(params.seed)
        self.stats = SimulationStats()

    def simulate(self, applications: Sequence[Application]) -> Trace:
        """Walk the landscape and return the resulting span forest.

        The first application supplies the entry point of the trace.

        Raises:
            EmptyLandscapeError: If ``applications`` is empty.
            ValueError: If a class of the landscape has no methods.
        """
        if not applications:
            msg = "Must provide at least 1 application to generate a trace for"
            raise EmptyLandscapeError(msg)
        _check_methods(applications)

        params = self.params
        if self._reseed:
            self._rng.seed(params.seed)
        rng = self._rng
        self.stats = SimulationStats()

        if params.communication_style is CommunicationStyle.COHESIVE:
            link_interface_classes(applications, rng)

        classes = [c for app in applications for c in app.classes]
        entry_class = applications[0].entry_point
        entry_method = rng.choice(entry_class.methods)
        stack: list[Frame] = [(entry_class, self._make_span(entry_class, entry_method, 0.0))]

        visited_classes: set[CodeClass] = {entry_class}
        previous_class = entry_class

        all_methods: list[MethodRef] = [(c, m) for c in classes for m in c.methods]
        visited_methods: set[MethodRef] = {(entry_class, entry_method)}

        effective_call_count = params.call_count
        if params.visit_all_methods:
            effective_call_count = max(params.call_count, len(all_methods))
        self.stats.effective_call_count = effective_call_count

        time_passed = 0.0
        generated = 0

        while generated < effective_call_count:
            try:
                next_class, next_method = self._select(
                    classes, previous_class, visited_classes, all_methods, visited_methods
                )
            except ExhaustionError:
                if len(stack) <= 1:
                    logger.warning(
                        "No eligible class left after %d of %d calls, ending trace early",
                        generated, effective_call_count,
                    )
                    self.stats.terminated_early = True
                    break
                previous_class = _pop_frame(stack, time_passed, visited_classes)
                self.stats.exhaustion_pops += 1
                continue

            span = self._make_span(next_class, next_method, time_passed)
            visited_classes.add(next_class)
            previous_class = next_class

            while len(stack) > 1 and (
                len(stack) >= params.max_connection_depth or rng.randint(0, 1) == 1
            ):
                previous_class = _pop_frame(stack, time_passed, visited_classes)

            stack.append((next_class, span))
            self.stats.peak_stack_depth = max(self.stats.peak_stack_depth, len(stack))

            generated += 1
            # time_passed == duration once every call is made
            time_passed = params.duration * generated / effective_call_count

        self.stats.generated_spans = generated

        trace: Trace = []
        while stack:
            _, span = stack.pop()
            span.close(time_passed)
            if stack:
                stack[-1][1].children.append(span)
            else:
                trace.append(span)

        logger.info(
            "Simulated %d of %d calls over %d apps (%s)",
            generated, effective_call_count, len(applications),
            params.communication_style.value,
        )
        return trace

    def _select(
        self,
        classes: list[CodeClass],
        previous_class: CodeClass,
        visited_classes: set[CodeClass],
        all_methods: list[MethodRef],
        visited_methods: set[MethodRef],
    ) -> MethodRef:
        """Pick the next (class, method), preferring unvisited methods in coverage mode."""
        params = self.params
        if params.visit_all_methods:
            unvisited = [ref for ref in all_methods if ref not in visited_methods]
            if unvisited:
                ref = self._rng.choice(unvisited)
                visited_methods.add(ref)
                return ref

        next_class = select_next_class(
            params.communication_style,
            self._rng,
            classes,
            previous_class,
            visited_classes,
            params.allow_cyclic_calls,
        )
        next_method = self._rng.choice(next_class.methods)
        if params.visit_all_methods:
            visited_methods.add((next_class, next_method))
        return next_class, next_method

    def _make_span(self, code_class: CodeClass, method: CodeMethod, start: float) -> Span:
        fqn = class_fqn(code_class)
        attributes = dict(self.params.fixed_attributes)
        attributes[ATTR_SERVICE_NAME] = code_class.parent_app_name
        attributes[ATTR_CODE_NAMESPACE] = fqn
        attributes[ATTR_CODE_FUNCTION_NAME] = method.identifier
        return Span(
            name=f"{fqn}.{method.identifier}",
            relative_start_time=start,
            attributes=attributes,
        )


def _pop_frame(stack: list[Frame], time: float, visited_classes: set[CodeClass]) -> CodeClass:
    """Close the top frame, hang it under the frame below, return that frame's class."""
    head_class, head_span = stack.pop()
    head_span.close(time)
    visited_classes.discard(head_class)
    stack[-1][1].children.append(head_span)
    return stack[-1][0]


def _check_methods(applications: Sequence[Application]) -> None:
    for app in applications:
        for code_class in app.classes:
            if not code_class.methods:
                msg = f"Class {class_fqn(code_class)} of app {app.name} has no methods"
                raise ValueError(msg)


def simulate_trace(
    applications: Sequence[Application],
    params: TraceGenerationParameters,
) -> Trace:
    """Convenience wrapper: simulate one trace with a fresh simulator."""
    return TraceSimulator(params).simulate(applications)
