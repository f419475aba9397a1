# gistbot/observability/tracing.py
"""
Minimal OpenTelemetry tracing bootstrap.
- Initializes a TracerProvider with a Console exporter.
- Instruments the SQLAlchemy engine so every gist query gets a span.
- Idempotent: safe to call multiple times.
- No-op unless TRACING_ENABLED is set.
"""
from __future__ import annotations

import typing as _t

from opentelemetry import trace
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, ConsoleSpanExporter
from sqlalchemy.ext.asyncio import AsyncEngine

_OTEL_INITIALIZED = False


def init_tracing(settings: _t.Any, engine: AsyncEngine | None = None) -> bool:
    """Install the tracer provider and SQLAlchemy instrumentation.

    Returns True when tracing is active after the call.
    """
    global _OTEL_INITIALIZED

    if _OTEL_INITIALIZED:
        return True
    if not getattr(settings, "TRACING_ENABLED", False):
        return False

    # service.name is important for trace grouping
    service_name = getattr(settings, "SERVICE_NAME", None) or "gistbot"
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    _OTEL_INITIALIZED = True
    return True


def get_tracer(name: str = "gistbot") -> trace.Tracer:
    return trace.get_tracer(name)
