"""
Host Sampler - Reads host CPU, memory, disk and load average via psutil
"""

import platform
import socket
from datetime import datetime, timezone
from typing import Tuple

import psutil
import structlog

from .errors import TelemetryUnavailable
from .models import DiskUsage, HostSnapshot, LoadAverage, MemoryUsage, SystemInfo
from .thresholds import check_host_cpu_threshold

logger = structlog.get_logger(__name__)


def _cpu_brand() -> str:
    """Best-effort CPU model name"""
    try:
        with open('/proc/cpuinfo', 'r', encoding='utf-8') as f:
            for line in f:
                if line.lower().startswith('model name'):
                    return line.split(':', 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or "Unknown"


class HostSampler:
    """Produces HostSnapshot readings of the local machine"""

    def __init__(self, cpu_interval: float = 1.0, disk_path: str = '/'):
        """
        Initialize host sampler

        Args:
            cpu_interval: Seconds psutil measures over for CPU usage
            disk_path: Mount point reported as disk usage
        """
        self.cpu_interval = cpu_interval
        self.disk_path = disk_path

    def get_cpu_usage(self) -> float:
        """Current host-wide CPU usage percentage"""
        try:
            return float(psutil.cpu_percent(interval=self.cpu_interval))
        except (psutil.Error, OSError) as e:
            raise TelemetryUnavailable(f"CPU usage unavailable: {e}") from e

    def get_memory_usage(self) -> MemoryUsage:
        """Current virtual memory usage"""
        try:
            mem = psutil.virtual_memory()
        except (psutil.Error, OSError) as e:
            raise TelemetryUnavailable(f"Memory usage unavailable: {e}") from e

        return MemoryUsage(
            total=mem.total,
            used=mem.used,
            available=mem.available,
            percent=float(mem.percent)
        )

    def get_disk_usage(self) -> DiskUsage:
        """Disk usage of the configured mount point, zeros if unreadable"""
        try:
            disk = psutil.disk_usage(self.disk_path)
        except (psutil.Error, OSError) as e:
            logger.warning("Disk usage unavailable", path=self.disk_path, error=str(e))
            return DiskUsage(total=0, used=0, available=0, percent=0.0)

        return DiskUsage(
            total=disk.total,
            used=disk.used,
            available=disk.free,
            percent=float(disk.percent)
        )

    def get_load_average(self) -> LoadAverage:
        """1/5/15 minute load average, zeros where the platform has none"""
        try:
            one, five, fifteen = psutil.getloadavg()
        except (AttributeError, OSError) as e:
            logger.warning("Load average unavailable", error=str(e))
            return LoadAverage()

        return LoadAverage(one_min=one, five_min=five, fifteen_min=fifteen)

    def get_system_info(self) -> SystemInfo:
        """Static description of the host"""
        try:
            boot_time = datetime.fromtimestamp(psutil.boot_time(), tz=timezone.utc)
        except (psutil.Error, OSError):
            boot_time = datetime.now(timezone.utc)

        try:
            total_memory = psutil.virtual_memory().total
        except (psutil.Error, OSError):
            total_memory = 0

        return SystemInfo(
            hostname=socket.gethostname() or "Unknown",
            os=platform.platform() or "Unknown",
            kernel=platform.release() or "Unknown",
            cpu_count=psutil.cpu_count() or 0,
            cpu_brand=_cpu_brand(),
            total_memory=total_memory,
            boot_time=boot_time
        )

    def sample(self) -> HostSnapshot:
        """
        Take a full host snapshot

        Returns:
            HostSnapshot with every field read during this call

        Raises:
            TelemetryUnavailable: If CPU or memory cannot be read
        """
        timestamp = datetime.now()
        cpu_usage = self.get_cpu_usage()

        return HostSnapshot(
            timestamp=timestamp,
            cpu_usage_percent=cpu_usage,
            memory=self.get_memory_usage(),
            disk=self.get_disk_usage(),
            load_average=self.get_load_average(),
            system_info=self.get_system_info()
        )

    @staticmethod
    def check_cpu_threshold(snapshot: HostSnapshot, threshold: float) -> Tuple[bool, float]:
        """Compare a snapshot's CPU usage against threshold (strictly greater)"""
        return check_host_cpu_threshold(snapshot, threshold)
