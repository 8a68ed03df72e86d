"""
Data models - immutable snapshots and messages passed between components
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Tuple


@dataclass(frozen=True)
class MemoryUsage:
    """Host memory reading (bytes)"""
    total: int
    used: int
    available: int
    percent: float


@dataclass(frozen=True)
class DiskUsage:
    """Root filesystem reading (bytes)"""
    total: int
    used: int
    available: int
    percent: float


@dataclass(frozen=True)
class LoadAverage:
    """System load average over 1, 5 and 15 minutes"""
    one_min: float = 0.0
    five_min: float = 0.0
    fifteen_min: float = 0.0


@dataclass(frozen=True)
class SystemInfo:
    """Static host description"""
    hostname: str
    os: str
    kernel: str
    cpu_count: int
    cpu_brand: str
    total_memory: int
    boot_time: datetime


@dataclass(frozen=True)
class HostSnapshot:
    """Point-in-time reading of the host"""
    timestamp: datetime
    cpu_usage_percent: float
    memory: MemoryUsage
    disk: DiskUsage
    load_average: LoadAverage
    system_info: SystemInfo


@dataclass(frozen=True)
class ContainerSnapshot:
    """Point-in-time reading of a single container"""
    id: str  # Short (12 char) display id
    name: str
    image: str
    status: str
    cpu_usage_percent: float
    memory_usage_bytes: int
    memory_limit_bytes: int
    memory_percent: float
    timestamp: datetime
    ports: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'image': self.image,
            'status': self.status,
            'cpu_usage_percent': self.cpu_usage_percent,
            'memory_usage_bytes': self.memory_usage_bytes,
            'memory_limit_bytes': self.memory_limit_bytes,
            'memory_percent': self.memory_percent,
            'ports': list(self.ports),
            'timestamp': self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class DockerSystemInfo:
    """Docker daemon summary shown in the status report"""
    version: str = "unknown"
    api_version: str = "unknown"
    containers: int = 0
    containers_running: int = 0
    containers_paused: int = 0
    containers_stopped: int = 0
    images: int = 0
    server_version: str = "unknown"
    memory_total: int = 0
    cpu_count: int = 0


@dataclass(frozen=True)
class ThresholdEvent:
    """Result of comparing readings against a threshold"""
    triggered: bool
    threshold: float
    value: float = 0.0
    containers: Tuple[ContainerSnapshot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AlertMessage:
    """A composed alert ready for dispatch"""
    subject: str
    text_body: str
    html_body: str
