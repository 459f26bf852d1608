"""tracegen: fake application landscapes and simulated traces over them."""

from tracegen.landscape import LandscapeGenerator, generate_landscape
from tracegen.model import Application, CodeClass, CodeMethod, CodePackage
from tracegen.serialization import (
    CleanedApplication,
    ReconstructionResult,
    clean_landscape,
    reconstruct_landscape,
)
from tracegen.simulation import SimulationStats, TraceSimulator, simulate_trace
from tracegen.trace import Span
from tracegen.types import (
    AppGenerationParameters,
    CommunicationStyle,
    EmptyLandscapeError,
    ExhaustionError,
    ReconstructionError,
    TraceGenerationParameters,
)

__all__ = [
    "AppGenerationParameters",
    "Application",
    "CleanedApplication",
    "CodeClass",
    "CodeMethod",
    "CodePackage",
    "CommunicationStyle",
    "EmptyLandscapeError",
    "ExhaustionError",
    "LandscapeGenerator",
    "ReconstructionError",
    "ReconstructionResult",
    "SimulationStats",
    "Span",
    "TraceGenerationParameters",
    "TraceSimulator",
    "clean_landscape",
    "generate_landscape",
    "reconstruct_landscape",
    "simulate_trace",
]

__version__ = "0.1.0"
