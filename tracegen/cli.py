"""CLI for tracegen.

Usage:
    tracegen generate --app-count 2 --seed 7 --output landscape.json
    tracegen simulate --landscape landscape.json --style cohesive --output trace.json
    tracegen convert --input structure.json --output landscape.json
    tracegen inspect --landscape landscape.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
import yaml
from pydantic import BaseModel, ValidationError

from tracegen.config import (
    cleaned_to_json,
    landscape_to_json,
    load_generation_parameters,
    load_landscape_file,
    load_trace_parameters,
    trace_to_json,
    write_cleaned_file,
    write_landscape_file,
    write_trace_file,
)
from tracegen.constants import (
    MAX_APP_COUNT,
    MAX_CALL_COUNT,
    MAX_CALL_DEPTH,
    MAX_CLASS_COUNT,
    MAX_METHODS,
    MAX_PACKAGE_DEPTH,
    MAX_TRACE_DURATION,
)
from tracegen.landscape import generate_landscape
from tracegen.model import class_fqn, package_depth
from tracegen.simulation import TraceSimulator
from tracegen.structure import convert_structure_landscape, is_structure_landscape
from tracegen.trace import span_count, trace_depth
from tracegen.types import (
    AppGenerationParameters,
    CommunicationStyle,
    TraceGenerationParameters,
)

app = typer.Typer(
    name="tracegen",
    help="Generate fake application landscapes and simulate traces over them.",
    add_completion=False,
)

ParamsT = TypeVar("ParamsT", bound=BaseModel)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Generate fake application landscapes and simulate traces over them."""
    _setup_logging(verbose)


def _build_params(
    model: type[ParamsT],
    base: ParamsT | None,
    overrides: dict[str, Any],
) -> ParamsT:
    """Layer explicitly passed options over a parameter file."""
    data = base.model_dump() if base is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_attributes(pairs: list[str]) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Attribute must look like key=value, got {pair!r}"
            raise typer.BadParameter(msg, param_hint="--attribute")
        attributes[key] = value
    return attributes


def _load_params_file(loader: Any, path: Path | None) -> Any:
    if path is None:
        return None
    try:
        return loader(path)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--params") from exc


def _emit(text: str, output: Path | None, writer: Any, payload: Any) -> None:
    if output is None:
        typer.echo(text)
    else:
        writer(payload, output)
        typer.echo(f"Wrote {output}", err=True)


@app.command()
def generate(
    app_count: Annotated[
        int | None, typer.Option(min=1, max=MAX_APP_COUNT, help="Number of applications.")
    ] = None,
    package_depth_: Annotated[
        int | None,
        typer.Option("--package-depth", min=0, max=MAX_PACKAGE_DEPTH, help="Package layers per app."),
    ] = None,
    min_classes: Annotated[
        int | None, typer.Option(min=1, max=MAX_CLASS_COUNT, help="Minimum classes per app.")
    ] = None,
    max_classes: Annotated[
        int | None, typer.Option(min=1, max=MAX_CLASS_COUNT, help="Maximum classes per app.")
    ] = None,
    min_methods: Annotated[
        int | None, typer.Option(min=1, max=MAX_METHODS, help="Minimum methods per class.")
    ] = None,
    max_methods: Annotated[
        int | None, typer.Option(min=1, max=MAX_METHODS, help="Maximum methods per class.")
    ] = None,
    balance: Annotated[
        float | None, typer.Option(min=0.0, max=1.0, help="Share of classes placed per layer.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Random seed for reproducibility.")] = None,
    params: Annotated[Path | None, typer.Option(help="YAML file with generation parameters.")] = None,
    output: Annotated[Path | None, typer.Option(help="Output JSON file (stdout when omitted).")] = None,
) -> None:
    """Generate a landscape and write it as cleaned JSON."""
    base = _load_params_file(load_generation_parameters, params)
    gen_params = _build_params(AppGenerationParameters, base, {
        "app_count": app_count,
        "package_depth": package_depth_,
        "min_class_count": min_classes,
        "max_class_count": max_classes,
        "min_method_count": min_methods,
        "max_method_count": max_methods,
        "balance": balance,
        "seed": seed,
    })

    applications = generate_landscape(gen_params)
    _emit(landscape_to_json(applications), output, write_landscape_file, applications)


@app.command()
def simulate(
    landscape: Annotated[Path, typer.Option(help="Landscape JSON file (cleaned or structure format).")],
    duration: Annotated[
        int | None, typer.Option(min=1, max=MAX_TRACE_DURATION, help="Total trace duration.")
    ] = None,
    call_count: Annotated[
        int | None, typer.Option(min=1, max=MAX_CALL_COUNT, help="Number of calls to simulate.")
    ] = None,
    max_depth: Annotated[
        int | None, typer.Option(min=1, max=MAX_CALL_DEPTH, help="Maximum call stack depth.")
    ] = None,
    style: Annotated[
        CommunicationStyle | None, typer.Option(case_sensitive=False, help="Communication style.")
    ] = None,
    allow_cyclic: Annotated[
        bool | None,
        typer.Option("--allow-cyclic/--no-allow-cyclic", help="Allow calls into classes on the stack."),
    ] = None,
    visit_all_methods: Annotated[
        bool | None,
        typer.Option("--visit-all-methods/--no-visit-all-methods", help="Cover every method once."),
    ] = None,
    attribute: Annotated[
        list[str] | None, typer.Option(help="Fixed span attribute key=value (repeatable).")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Random seed for reproducibility.")] = None,
    params: Annotated[Path | None, typer.Option(help="YAML file with trace parameters.")] = None,
    output: Annotated[Path | None, typer.Option(help="Output JSON file (stdout when omitted).")] = None,
) -> None:
    """Simulate one trace over a landscape file."""
    base = _load_params_file(load_trace_parameters, params)
    fixed_attributes = dict(base.fixed_attributes) if base is not None else {}
    fixed_attributes.update(_parse_attributes(attribute or []))

    trace_params = _build_params(TraceGenerationParameters, base, {
        "duration": duration,
        "call_count": call_count,
        "max_connection_depth": max_depth,
        "communication_style": style,
        "allow_cyclic_calls": allow_cyclic,
        "visit_all_methods": visit_all_methods,
        "fixed_attributes": fixed_attributes,
        "seed": seed,
    })

    try:
        applications = load_landscape_file(landscape)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--landscape") from exc

    simulator = TraceSimulator(trace_params)
    try:
        trace = simulator.simulate(applications)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    stats = simulator.stats
    _emit(trace_to_json(trace), output, write_trace_file, trace)
    typer.echo(
        f"{span_count(trace)} spans, depth {trace_depth(trace)}, "
        f"peak stack {stats.peak_stack_depth}"
        + (" (ended early)" if stats.terminated_early else ""),
        err=True,
    )


@app.command()
def convert(
    input_: Annotated[Path, typer.Option("--input", help="Structure-format landscape JSON.")],
    output: Annotated[Path | None, typer.Option(help="Output JSON file (stdout when omitted).")] = None,
) -> None:
    """Convert a structure-format landscape into cleaned landscape JSON."""
    try:
        with open(input_) as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--input") from exc
    if not is_structure_landscape(raw):
        msg = "File is not a structure landscape (needs landscapeToken and nodes)"
        raise typer.BadParameter(msg, param_hint="--input")

    cleaned = convert_structure_landscape(raw)
    _emit(cleaned_to_json(cleaned), output, write_cleaned_file, cleaned)


@app.command()
def inspect(
    landscape: Annotated[Path, typer.Option(help="Landscape JSON file (cleaned or structure format).")],
) -> None:
    """Print counts, depth and entry point of every application."""
    try:
        applications = load_landscape_file(landscape)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--landscape") from exc

    name_width = max((len(a.name) for a in applications), default=11)
    header = (
        f"{'Application':<{name_width}}  {'Classes':>7}  {'Packages':>8}  "
        f"{'Methods':>7}  {'Depth':>5}  Entry point"
    )
    typer.echo(header)
    typer.echo("-" * len(header))
    for application in applications:
        typer.echo(
            f"{application.name:<{name_width}}  {len(application.classes):>7}  "
            f"{len(application.packages):>8}  {len(application.methods):>7}  "
            f"{package_depth(application.root_packages):>5}  {class_fqn(application.entry_point)}"
        )


if __name__ == "__main__":
    app()
