"""
Graceful degradation for independent provider lookups.

A fan-out is described as a set of named slices. Every slice is launched
concurrently, the caller is suspended until all of them settle, and each
outcome is reduced to either the fetched value or the slice's default plus
a failure flag. One slice failing never cancels or blocks the others.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, Optional, TypeVar

import structlog

from app.core.exceptions import describe_error

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class SliceSpec(Generic[T]):
    """One independent branch of a fan-out."""

    name: str
    default_factory: Callable[[], T]
    # None means the slice has nothing to fetch and settles to its default
    fetch: Optional[Callable[[], Awaitable[Optional[T]]]] = None


@dataclass
class SliceResult(Generic[T]):
    """Settled outcome of a slice."""

    name: str
    value: T
    failed: bool = False
    skipped: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class FanOutResult:
    """All settled slices of one fan-out, keyed by slice name."""

    slices: Dict[str, SliceResult] = field(default_factory=dict)

    def value(self, name: str) -> Any:
        return self.slices[name].value

    def failed(self, name: str) -> bool:
        return self.slices[name].failed

    @property
    def failed_slices(self) -> list[str]:
        return [name for name, result in self.slices.items() if result.failed]


def reduce_outcome(spec: SliceSpec[T], outcome: Any) -> SliceResult[T]:
    """Map a raw outcome (value or exception) onto a settled slice result."""
    if isinstance(outcome, Exception):
        return SliceResult(
            name=spec.name,
            value=spec.default_factory(),
            failed=True,
            error=describe_error(outcome),
            error_type=type(outcome).__name__,
        )

    if outcome is None:
        return SliceResult(name=spec.name, value=spec.default_factory())

    return SliceResult(name=spec.name, value=outcome)


async def resolve_slice(
    spec: SliceSpec[T],
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> SliceResult[T]:
    """
    Run a single slice, downgrading any failure to its default.

    Cancellation is not an ``Exception`` and is left to propagate.
    """
    log = log or logger

    if spec.fetch is None:
        return SliceResult(name=spec.name, value=spec.default_factory(), skipped=True)

    try:
        outcome = await spec.fetch()
    except Exception as e:
        outcome = e

    result = reduce_outcome(spec, outcome)
    if result.failed:
        log.warning(
            "slice_fetch_failed",
            slice=spec.name,
            error=result.error,
            error_type=result.error_type,
        )
    return result


async def gather_slices(
    specs: Iterable[SliceSpec],
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> FanOutResult:
    """
    Launch every slice concurrently and join on all of them.

    Returns only once every slice has settled; the result always contains
    one entry per slice.
    """
    specs = list(specs)
    names = [spec.name for spec in specs]
    if len(set(names)) != len(names):
        raise ValueError(f"Slice names must be unique: {names}")

    results = await asyncio.gather(*(resolve_slice(spec, log) for spec in specs))
    return FanOutResult(slices={result.name: result for result in results})
