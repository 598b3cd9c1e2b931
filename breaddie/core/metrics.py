"""Prometheus instrumentation for HTTP traffic, LLM usage and story generation."""

from __future__ import annotations

import os
from typing import Callable, cast

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CollectorRegistry, Counter, Histogram, multiprocess
from prometheus_client.openmetrics.exposition import generate_latest as generate_openmetrics
from prometheus_fastapi_instrumentator import Instrumentator, metrics

REQUEST_LATENCY_BUCKETS = (
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
    float("inf"),
)

OPERATION_LABEL = "operation"
MODEL_LABEL = "model"

LLM_PROMPT_TOKENS_TOTAL = Counter(
    "breaddie_llm_prompt_tokens_total",
    "Prompt tokens consumed by language model requests.",
    labelnames=(OPERATION_LABEL, MODEL_LABEL),
)

LLM_COMPLETION_TOKENS_TOTAL = Counter(
    "breaddie_llm_completion_tokens_total",
    "Completion tokens produced by language model responses.",
    labelnames=(OPERATION_LABEL, MODEL_LABEL),
)

LLM_TOTAL_TOKENS_TOTAL = Counter(
    "breaddie_llm_total_tokens_total",
    "Prompt plus completion tokens per language model interaction.",
    labelnames=(OPERATION_LABEL, MODEL_LABEL),
)

STORY_GENERATION_TOTAL = Counter(
    "breaddie_story_generation_total",
    "Adaptive story generation attempts by outcome.",
    labelnames=("outcome",),
)


def _labels(operation: str | None, model: str | None) -> dict[str, str]:
    return {
        OPERATION_LABEL: (operation or "").strip().lower() or "unspecified",
        MODEL_LABEL: (model or "").strip() or "unknown",
    }


def record_llm_usage_metrics(
    *,
    operation: str | None,
    model: str | None,
    prompt_tokens: int,
    completion_tokens: int,
    total_tokens: int,
) -> None:
    """Increment Prometheus counters for the provided LLM usage snapshot."""
    labels = _labels(operation, model)

    LLM_PROMPT_TOKENS_TOTAL.labels(**labels).inc(max(prompt_tokens, 0))
    LLM_COMPLETION_TOKENS_TOTAL.labels(**labels).inc(max(completion_tokens, 0))
    LLM_TOTAL_TOKENS_TOTAL.labels(**labels).inc(max(total_tokens, 0))


def record_story_outcome(outcome: str) -> None:
    STORY_GENERATION_TOTAL.labels(outcome=outcome).inc()


def setup_metrics(app: FastAPI) -> None:
    """Attach Prometheus instrumentation and expose the /metrics endpoint."""

    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_round_latency_decimals=True,
        round_latency_decimals=4,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[r"/metrics"],
    )

    instrumentator.add(
        metrics.default(
            should_only_respect_2xx_for_highr=True,
            should_exclude_streaming_duration=True,
        )
    )

    latency = _latency_with_request_id()
    if latency is not None:
        instrumentator.add(latency)

    instrumentator.instrument(app)
    _register_metrics_endpoint(app, instrumentator.registry)


def _latency_with_request_id() -> Callable[[metrics.Info], None] | None:
    """Record per-endpoint latency while storing request_id as exemplar."""

    try:
        latency_histogram = Histogram(
            "breaddie_request_latency_seconds",
            "Latency distribution enriched with request_id exemplars.",
            labelnames=("handler", "method", "status"),
            buckets=REQUEST_LATENCY_BUCKETS,
        )
    except ValueError as error:  # pragma: no cover - occurs only when the app is built twice
        if "Duplicated timeseries" in str(error) or "Duplicated time series" in str(error):
            return None
        raise

    def instrumentation(info: metrics.Info) -> None:
        request_id = getattr(info.request.state, "request_id", None)
        exemplar = {"request_id": request_id} if request_id else None

        labels = (info.modified_handler, info.method, info.modified_status)

        try:
            latency_histogram.labels(*labels).observe(info.modified_duration, exemplar=exemplar)
        except TypeError:
            latency_histogram.labels(*labels).observe(info.modified_duration)

    return instrumentation


def _register_metrics_endpoint(app: FastAPI, registry: CollectorRegistry) -> None:
    """Expose /metrics in OpenMetrics format to preserve exemplars."""

    @app.get("/metrics", include_in_schema=False, tags=["observability"])
    async def metrics_endpoint() -> Response:
        active_registry = registry
        if "PROMETHEUS_MULTIPROC_DIR" in os.environ:
            active_registry = CollectorRegistry()
            collector = cast(
                Callable[[CollectorRegistry], None],
                multiprocess.MultiProcessCollector,
            )
            collector(active_registry)

        generate = cast(
            Callable[[CollectorRegistry], bytes],
            generate_openmetrics,
        )
        payload = generate(active_registry)
        media_type = "application/openmetrics-text; version=1.0.0; charset=utf-8"
        return Response(content=payload, media_type=media_type)


__all__ = [
    "LLM_COMPLETION_TOKENS_TOTAL",
    "LLM_PROMPT_TOKENS_TOTAL",
    "LLM_TOTAL_TOKENS_TOTAL",
    "STORY_GENERATION_TOTAL",
    "record_llm_usage_metrics",
    "record_story_outcome",
    "setup_metrics",
]
