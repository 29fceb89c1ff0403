from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from threading import Lock
from typing import Any, Literal

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


InstrumentKind = Literal["counter", "gauge", "histogram"]
LabelValues = Mapping[str, Any]


class MetricsContractError(ValueError):
    """Raised when an instrument is used in a way its declaration forbids."""


class DuplicateNameError(MetricsContractError):
    pass


class UnknownInstrumentError(MetricsContractError):
    pass


class InstrumentKindError(MetricsContractError):
    pass


class LabelMismatchError(MetricsContractError):
    pass


@dataclass(frozen=True)
class Instrument:
    """Declaration of a metric: its name, kind and fixed label names."""

    name: str
    documentation: str
    kind: InstrumentKind
    labelnames: tuple[str, ...] = ()
    buckets: tuple[float, ...] | None = None

    def build(self) -> Counter | Gauge | Histogram:
        # registry=None: registration happens through MetricsRegistry.register.
        if self.kind == "counter":
            return Counter(self.name, self.documentation, self.labelnames, registry=None)
        if self.kind == "gauge":
            return Gauge(self.name, self.documentation, self.labelnames, registry=None)
        if self.kind == "histogram":
            if self.buckets is None:
                return Histogram(self.name, self.documentation, self.labelnames, registry=None)
            return Histogram(self.name, self.documentation, self.labelnames, registry=None, buckets=self.buckets)
        raise InstrumentKindError(f"Unsupported instrument kind: {self.kind!r}")


@dataclass
class _Registered:
    instrument: Instrument
    metric: Counter | Gauge | Histogram


class MetricsRegistry:
    """Process-local set of named instruments rendered in Prometheus text format.

    Instruments are addressed by name and must always be written with exactly
    their declared label names. Each series is locked by prometheus_client, so
    a render never sees a torn value.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, *, default_collectors: bool = True) -> None:
        self._lock = Lock()
        self._registry = CollectorRegistry(auto_describe=True)
        self._instruments: dict[str, _Registered] = {}
        if default_collectors:
            ProcessCollector(registry=self._registry)
            PlatformCollector(registry=self._registry)
            GCCollector(registry=self._registry)

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry

    def register(self, instrument: Instrument) -> None:
        with self._lock:
            if instrument.name in self._instruments:
                raise DuplicateNameError(f"Instrument already registered: {instrument.name}")
            metric = instrument.build()
            try:
                self._registry.register(metric)
            except ValueError as exc:
                # Name clashes with a default collector's series.
                raise DuplicateNameError(str(exc)) from exc
            self._instruments[instrument.name] = _Registered(instrument=instrument, metric=metric)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._instruments)

    def observe(self, name: str, labels: LabelValues | None, value: float) -> None:
        self._series(name, "histogram", labels).observe(float(value))

    def increment(self, name: str, labels: LabelValues | None = None, amount: float = 1) -> None:
        if amount < 0:
            raise MetricsContractError(f"Counter {name} can only increase, got amount={amount}")
        self._series(name, "counter", labels).inc(amount)

    def set(self, name: str, labels: LabelValues | None, value: float) -> None:
        self._series(name, "gauge", labels).set(float(value))

    def sample_value(self, sample_name: str, labels: LabelValues | None = None) -> float | None:
        """Current value of one exposed sample, e.g. ``http_request_duration_ms_count``."""

        str_labels = {key: str(value) for key, value in (labels or {}).items()}
        return self._registry.get_sample_value(sample_name, str_labels)

    def render(self) -> bytes:
        return generate_latest(self._registry)

    def _series(self, name: str, kind: InstrumentKind, labels: LabelValues | None) -> Any:
        with self._lock:
            registered = self._instruments.get(name)
        if registered is None:
            raise UnknownInstrumentError(f"No instrument named {name}")

        instrument = registered.instrument
        if instrument.kind != kind:
            raise InstrumentKindError(f"{name} is a {instrument.kind}, not a {kind}")

        given = dict(labels or {})
        if set(given) != set(instrument.labelnames):
            raise LabelMismatchError(
                f"{name} expects labels {sorted(instrument.labelnames)}, got {sorted(given)}"
            )
        if not instrument.labelnames:
            return registered.metric
        return registered.metric.labels(**{key: str(value) for key, value in given.items()})
