"""Pure session-generation engine: enumeration, indexing, classification, planning."""

from .classification import ClassifiedOccurrence, OccurrenceOutcome, SkipReason, classify
from .generation import GenerationRequest, build_generation_request
from .planner import GenerationPlan, GenerationRange, SkipSample, build_plan, resolve_range
from .recurrence import Occurrence, check_expansion_limits, enumerate_occurrences
from .session_index import ExistingSession, ExistingSessionIndex

__all__ = [
    "ClassifiedOccurrence",
    "ExistingSession",
    "ExistingSessionIndex",
    "GenerationPlan",
    "GenerationRange",
    "GenerationRequest",
    "Occurrence",
    "OccurrenceOutcome",
    "SkipReason",
    "SkipSample",
    "build_generation_request",
    "build_plan",
    "check_expansion_limits",
    "classify",
    "enumerate_occurrences",
    "resolve_range",
]
