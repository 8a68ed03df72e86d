"""
Docker & Server Performance Monitor

This package watches a single Docker host and emails alerts for:
- High host CPU usage (with the busiest containers listed)
- High CPU usage in individual containers
"""

__version__ = '0.1.0'

from .config_loader import ConfigLoader, load_config
from .errors import (
    MonitorError,
    ConfigLoadError,
    RuntimeConnectionError,
    RuntimeUnavailable,
    PerContainerStatsError,
    TelemetryUnavailable,
    DispatchError
)
from .models import AlertMessage, ContainerSnapshot, HostSnapshot, ThresholdEvent
from .orchestrator import CycleResult, PerformanceMonitor

__all__ = [
    'ConfigLoader',
    'load_config',
    'MonitorError',
    'ConfigLoadError',
    'RuntimeConnectionError',
    'RuntimeUnavailable',
    'PerContainerStatsError',
    'TelemetryUnavailable',
    'DispatchError',
    'AlertMessage',
    'ContainerSnapshot',
    'HostSnapshot',
    'ThresholdEvent',
    'CycleResult',
    'PerformanceMonitor'
]
