from __future__ import annotations
import logging
from typing import Callable, Protocol, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

from .errors import ConfigurationError
from .options import ControllerOptions, Option

logger = logging.getLogger(__name__)

NAME_LABEL = "name"
LABELS = (NAME_LABEL,)

C = TypeVar("C", Counter, Gauge)


class Telemetry(Protocol):
    """Observer notified after every controller update."""

    def observe(self, target: float, current: float, control_signal: float) -> None:
        ...


def register(factory: Callable[..., C], metric_name: str, documentation: str,
             registry: CollectorRegistry) -> C:
    """Register a labelled collector, reusing one already in the registry.

    A registry that already holds a compatible collector under ``metric_name``
    hands that collector back, so controllers sharing a name share instruments.
    Anything else the registry rejects is raised as a ConfigurationError.
    """
    collector = factory(metric_name, documentation, labelnames=LABELS, registry=None)
    try:
        registry.register(collector)
    except ValueError as err:
        # prometheus_client exposes no public lookup for registered collectors
        existing = registry._names_to_collectors.get(metric_name)
        if type(existing) is not type(collector) or tuple(existing._labelnames) != LABELS:
            raise ConfigurationError(f"cannot register {metric_name}: {err}") from err
        logger.debug("reusing registered collector %s", metric_name)
        return existing
    return collector


class PrometheusTelemetry:
    """Exports the latest target, measurement and control signal of a named controller."""

    def __init__(self, name: str, registry: CollectorRegistry = REGISTRY):
        self.name = name
        self.updates_total = register(Counter, "pid_updates_total",
                                      "Number of controller updates.", registry)
        self.target = register(Gauge, "pid_target",
                               "Target value of the latest update.", registry)
        self.current = register(Gauge, "pid_current",
                                "Measured value of the latest update.", registry)
        self.control_signal = register(Gauge, "pid_control_signal",
                                       "Control signal returned by the latest update.", registry)

    def observe(self, target: float, current: float, control_signal: float) -> None:
        self.updates_total.labels(self.name).inc()
        self.target.labels(self.name).set(target)
        self.current.labels(self.name).set(current)
        self.control_signal.labels(self.name).set(control_signal)


def with_prometheus_metrics(name: str, registry: CollectorRegistry = REGISTRY) -> Option:
    """Export update metrics labelled with ``name`` to a Prometheus registry."""
    def apply(o: ControllerOptions):
        o.telemetry = PrometheusTelemetry(name, registry)
    return apply
