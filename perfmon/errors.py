"""
Error taxonomy for the performance monitor
"""


class MonitorError(Exception):
    """Base exception for all monitor errors"""


class ConfigLoadError(MonitorError):
    """Configuration file missing, unparseable or invalid"""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        msg = f"Cannot load configuration from {path}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class RuntimeConnectionError(MonitorError):
    """Container runtime unreachable at startup"""

    def __init__(self, detail: str = ""):
        msg = "Docker connection failed"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class RuntimeUnavailable(MonitorError):
    """Container runtime call failed while monitoring"""


class PerContainerStatsError(MonitorError):
    """Stats for a single container could not be obtained"""

    def __init__(self, container_id: str, detail: str = ""):
        self.container_id = container_id
        msg = f"Error getting stats for container {container_id}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class TelemetryUnavailable(MonitorError):
    """Host telemetry could not be read"""


class DispatchError(MonitorError):
    """Alert message could not be built or delivered"""
