"""
Monitoring sources: application log/metric buffers and cloud-provider sources.

Provider collection (AWS CloudWatch, Azure Monitor, Proxmox) is not implemented yet;
those sources raise SourceUnavailableError instead of returning empty lists, so callers
can tell "no data" from "no integration".
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cloudcore.schemas.monitoring import LogEntry, LogLevel, MetricData, SourceStatus

if TYPE_CHECKING:
    from cloudcore.core.config import Settings

logger = logging.getLogger(__name__)

PROVIDER_SOURCES = ("aws", "azure", "proxmox")

_PYTHON_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class SourceUnavailableError(Exception):
    """Raised when a monitoring source has no working integration."""

    def __init__(self, source: str, kind: str) -> None:
        self.source = source
        self.kind = kind
        self.message = f"{source} {kind} collection is not available"
        super().__init__(self.message)


class UnknownSourceError(Exception):
    """Raised when a caller names a source that is not registered."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.message = f"Unknown monitoring source: {source}"
        super().__init__(self.message)


class LogSource(ABC):
    """Something that can produce log entries."""

    name: str
    available: bool = True

    @abstractmethod
    def fetch_logs(self, vm_id: str | None = None) -> list[LogEntry]:
        """Return entries newest first, optionally only those for vm_id."""


class MetricSource(ABC):
    """Something that can produce metric samples."""

    name: str
    available: bool = True

    @abstractmethod
    def collect_metrics(self) -> list[MetricData]:
        """Return samples newest first."""


class ApplicationLogSource(LogSource):
    """Bounded in-memory buffer of application events, newest first."""

    name = "app"

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(
        self,
        level: LogLevel,
        message: str,
        metadata: dict[str, Any] | None = None,
        vm_id: str | None = None,
        user_id: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            level=level,
            message=message,
            metadata=metadata,
            source="app",
            vm_id=vm_id,
            user_id=user_id,
        )
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def fetch_logs(self, vm_id: str | None = None) -> list[LogEntry]:
        with self._lock:
            entries = list(self._entries)
        if vm_id is None:
            return entries
        return [
            e
            for e in entries
            if e.vm_id == vm_id or (e.metadata or {}).get("vmId") == vm_id
        ]


class ApplicationMetricSource(MetricSource):
    """Bounded in-memory buffer of application metric samples, newest first."""

    name = "app"

    def __init__(self, max_samples: int = 200) -> None:
        self._samples: deque[MetricData] = deque(maxlen=max_samples)
        self._lock = threading.Lock()

    def record(
        self,
        metric_name: str,
        value: float,
        unit: str = "count",
        dimensions: dict[str, str] | None = None,
    ) -> MetricData:
        sample = MetricData(metric_name=metric_name, value=value, unit=unit, dimensions=dimensions)
        with self._lock:
            self._samples.appendleft(sample)
        return sample

    def collect_metrics(self) -> list[MetricData]:
        with self._lock:
            return list(self._samples)


class UnavailableLogSource(LogSource):
    """Provider log source without an integration."""

    available = False

    def __init__(self, name: str) -> None:
        self.name = name

    def fetch_logs(self, vm_id: str | None = None) -> list[LogEntry]:
        raise SourceUnavailableError(self.name, "log")


class UnavailableMetricSource(MetricSource):
    """Provider metric source without an integration."""

    available = False

    def __init__(self, name: str) -> None:
        self.name = name

    def collect_metrics(self) -> list[MetricData]:
        raise SourceUnavailableError(self.name, "metric")


class MonitoringService:
    """Routes log and metric queries to named sources and records application events."""

    def __init__(
        self,
        app_logs: ApplicationLogSource,
        app_metrics: ApplicationMetricSource,
        log_sources: Mapping[str, LogSource] | None = None,
        metric_sources: Mapping[str, MetricSource] | None = None,
    ) -> None:
        self.app_logs = app_logs
        self.app_metrics = app_metrics
        self._log_sources: dict[str, LogSource] = {"app": app_logs, **(log_sources or {})}
        self._metric_sources: dict[str, MetricSource] = {
            "app": app_metrics,
            **(metric_sources or {}),
        }

    def log_event(
        self,
        level: LogLevel,
        message: str,
        metadata: dict[str, Any] | None = None,
        vm_id: str | None = None,
        user_id: str | None = None,
    ) -> LogEntry:
        """Record an application event and mirror it to the Python logger."""
        entry = self.app_logs.record(level, message, metadata=metadata, vm_id=vm_id, user_id=user_id)
        logger.log(
            _PYTHON_LOG_LEVELS[level],
            message,
            extra={"event_metadata": metadata or {}, "vm_id": vm_id, "user_id": user_id},
        )
        return entry

    def record_metric(
        self,
        metric_name: str,
        value: float,
        unit: str = "count",
        dimensions: dict[str, str] | None = None,
    ) -> MetricData:
        return self.app_metrics.record(metric_name, value, unit=unit, dimensions=dimensions)

    def get_logs(self, source: str = "app", vm_id: str | None = None) -> list[LogEntry]:
        if source not in self._log_sources:
            raise UnknownSourceError(source)
        return self._log_sources[source].fetch_logs(vm_id=vm_id)

    def get_metrics(self, source: str = "app") -> list[MetricData]:
        if source not in self._metric_sources:
            raise UnknownSourceError(source)
        return self._metric_sources[source].collect_metrics()

    def source_status(self) -> list[SourceStatus]:
        names = list(dict.fromkeys([*self._log_sources, *self._metric_sources]))
        return [
            SourceStatus(
                name=name,
                logs_available=name in self._log_sources and self._log_sources[name].available,
                metrics_available=name in self._metric_sources
                and self._metric_sources[name].available,
            )
            for name in names
        ]


def build_monitoring_service(settings: Settings) -> MonitoringService:
    """Application sources backed by memory; provider sources registered as unavailable."""
    return MonitoringService(
        app_logs=ApplicationLogSource(max_entries=settings.MONITORING_LOG_BUFFER_SIZE),
        app_metrics=ApplicationMetricSource(max_samples=settings.MONITORING_METRIC_BUFFER_SIZE),
        log_sources={name: UnavailableLogSource(name) for name in PROVIDER_SOURCES},
        metric_sources={name: UnavailableMetricSource(name) for name in PROVIDER_SOURCES},
    )
