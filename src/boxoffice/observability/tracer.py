"""
Tracer protocol and implementations.

Services and persistence backends receive a tracer as a dependency instead
of talking to OpenTelemetry directly:

- OpenTelemetryTracer: real spans through the opentelemetry-api tracer
- NullTracer: no spans (tracing disabled)
- MockTracer: records span names and attributes for tests

Example:
    >>> class VenueService:
    ...     def __init__(self, tracer: Tracer | None = None, enable_tracing: bool = True):
    ...         self._tracer = tracer or create_tracer(__name__, enable_tracing)
    ...
    ...     async def delete(self, external_id) -> bool:
    ...         with self._tracer.span("boxoffice.venue.delete", {"boxoffice.external_id": str(external_id)}):
    ...             ...
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Span, TracerProvider


@runtime_checkable
class Tracer(Protocol):
    """
    Protocol for span creation.

    Implementations return a context manager that yields the active span (or
    None when tracing is disabled).
    """

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span | None]:
        """
        Create a span context.

        Args:
            name: Span name, ``boxoffice.<component>.<operation>``
            attributes: Span attributes (optional)
        """
        ...

    @property
    def enabled(self) -> bool:
        """Whether spans are actually recorded."""
        ...


class NullTracer:
    """No-op tracer used when tracing is disabled."""

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        yield None

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Tracer backed by the OpenTelemetry API.

    Spans go to whatever TracerProvider the application installed; with no
    provider configured the API hands out non-recording spans.

    Args:
        tracer_name: Instrumentation scope name (typically __name__)
        tracer_provider: Provider to use instead of the global one
    """

    def __init__(self, tracer_name: str, tracer_provider: TracerProvider | None = None) -> None:
        self._tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span | None]:
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True


class MockTracer:
    """
    Tracer for tests that records every span it is asked to open.

    Example:
        >>> tracer = MockTracer()
        >>> with tracer.span("boxoffice.show.create", {"k": "v"}):
        ...     pass
        >>> tracer.span_names
        ['boxoffice.show.create']
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, dict[str, Any] | None]] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        self.spans.append((name, attributes))
        yield None

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def attributes_for(self, name: str) -> dict[str, Any]:
        """Attributes of the first span with ``name``."""
        for span_name, attributes in self.spans:
            if span_name == name:
                return dict(attributes or {})
        raise KeyError(name)

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """
    Create the tracer for a component.

    Args:
        name: Tracer name (typically __name__)
        enable_tracing: Whether to record spans

    Returns:
        OpenTelemetryTracer when enabled, NullTracer otherwise
    """
    if enable_tracing:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
]
