"""
Container Sampler - Reads per-container resource usage from the Docker daemon
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import docker
import structlog
from docker.errors import DockerException

from .errors import PerContainerStatsError, RuntimeConnectionError, RuntimeUnavailable
from .models import ContainerSnapshot, DockerSystemInfo
from .thresholds import check_container_cpu_threshold

logger = structlog.get_logger(__name__)

SHORT_ID_LENGTH = 12


def calculate_cpu_percent(stats: Dict[str, Any]) -> float:
    """
    CPU percentage from a non-streaming stats sample

    The daemon returns the current reading in cpu_stats and the previous one
    in precpu_stats, so a single sample carries the delta.

    Args:
        stats: Raw stats dict from container.stats(stream=False)

    Returns:
        CPU usage percentage, 0.0 when no delta is available
    """
    try:
        cpu_stats = stats['cpu_stats']
        precpu_stats = stats.get('precpu_stats') or {}
        cpu_delta = cpu_stats['cpu_usage']['total_usage'] - \
            precpu_stats.get('cpu_usage', {}).get('total_usage', 0)
        system_delta = cpu_stats.get('system_cpu_usage', 0) - \
            precpu_stats.get('system_cpu_usage', 0)
        cpu_count = cpu_stats.get('online_cpus') or \
            len(cpu_stats['cpu_usage'].get('percpu_usage') or []) or 1

        if system_delta > 0 and cpu_delta > 0:
            return (cpu_delta / system_delta) * cpu_count * 100.0
    except (KeyError, TypeError, ZeroDivisionError):
        pass
    return 0.0


def calculate_memory(stats: Dict[str, Any]) -> Tuple[int, int, float]:
    """
    Memory usage from a stats sample

    Returns:
        (usage_bytes, limit_bytes, percent); percent is 0.0 when limit is 0
    """
    memory_stats = stats.get('memory_stats') or {}
    mem_usage = memory_stats.get('usage') or 0
    mem_limit = memory_stats.get('limit') or 0
    mem_percent = (mem_usage / mem_limit) * 100.0 if mem_limit > 0 else 0.0
    return mem_usage, mem_limit, mem_percent


def format_ports(attrs: Dict[str, Any]) -> Tuple[str, ...]:
    """Published port mappings as 'host_port:container_port' strings"""
    ports = (attrs.get('NetworkSettings') or {}).get('Ports') or {}
    port_mappings = []

    for container_port, host_info in ports.items():
        if host_info:
            for mapping in host_info:
                host_port = mapping.get('HostPort', '')
                port_mappings.append(f"{host_port}:{container_port}")

    return tuple(port_mappings)


def sort_by_cpu(snapshots: Sequence[ContainerSnapshot]) -> List[ContainerSnapshot]:
    """Sort by CPU usage, highest first; ties keep their listing order"""
    return sorted(snapshots, key=lambda s: s.cpu_usage_percent, reverse=True)


class ContainerSampler:
    """Produces ContainerSnapshot readings for every container on the daemon"""

    def __init__(self, client: docker.DockerClient, max_workers: int = 4):
        """
        Initialize container sampler

        Args:
            client: Connected Docker client, owned by this sampler
            max_workers: Parallel stats requests per listing
        """
        self.client = client
        self.max_workers = max(1, max_workers)

    @classmethod
    def connect(cls, timeout: int = 10, max_workers: int = 4) -> 'ContainerSampler':
        """
        Connect to the local Docker daemon and verify it answers

        Args:
            timeout: API timeout in seconds for every daemon call
            max_workers: Parallel stats requests per listing

        Returns:
            ContainerSampler bound to the daemon

        Raises:
            RuntimeConnectionError: If the daemon cannot be reached
        """
        try:
            client = docker.from_env(timeout=timeout)
            client.ping()
        except (DockerException, OSError) as e:
            logger.error("Failed to connect to Docker", error=str(e))
            raise RuntimeConnectionError(str(e)) from e

        logger.info("Connected to Docker daemon successfully")
        return cls(client, max_workers=max_workers)

    def _snapshot(self, container) -> ContainerSnapshot:
        """
        Build the snapshot for one container

        Raises:
            PerContainerStatsError: If the container's stats cannot be read
        """
        container_id = container.id or "unknown"
        try:
            attrs = container.attrs or {}
            name = (attrs.get('Name') or container.name or "unknown").lstrip('/')
            image = (attrs.get('Config') or {}).get('Image') or "unknown"
            status = container.status or "unknown"

            stats = container.stats(stream=False)
            cpu_usage = calculate_cpu_percent(stats)
            mem_usage, mem_limit, mem_percent = calculate_memory(stats)
        except (DockerException, OSError, ValueError, KeyError, AttributeError, TypeError) as e:
            raise PerContainerStatsError(container_id[:SHORT_ID_LENGTH], str(e)) from e

        return ContainerSnapshot(
            id=container_id[:SHORT_ID_LENGTH],
            name=name,
            image=image,
            status=status,
            cpu_usage_percent=cpu_usage,
            memory_usage_bytes=mem_usage,
            memory_limit_bytes=mem_limit,
            memory_percent=mem_percent,
            ports=format_ports(attrs),
            timestamp=datetime.now()
        )

    def _try_snapshot(self, container) -> Optional[ContainerSnapshot]:
        try:
            return self._snapshot(container)
        except PerContainerStatsError as e:
            logger.error("Skipping container", container_id=e.container_id, error=str(e))
            return None

    def list_snapshots(self) -> List[ContainerSnapshot]:
        """
        Snapshot every container known to the daemon

        Containers that vanish before they are inspected, or whose stats
        fail, are logged and left out.

        Returns:
            Snapshots sorted by CPU usage, highest first

        Raises:
            RuntimeUnavailable: If the container listing itself fails
        """
        try:
            containers = self.client.containers.list(all=True, ignore_removed=True)
        except (DockerException, OSError) as e:
            raise RuntimeUnavailable(f"Cannot list containers: {e}") from e

        if not containers:
            return []

        workers = min(self.max_workers, len(containers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self._try_snapshot, containers))

        snapshots = [s for s in results if s is not None]
        logger.debug("Container stats collected", listed=len(containers), sampled=len(snapshots))
        return sort_by_cpu(snapshots)

    def get_top_cpu_containers(self, limit: int) -> List[ContainerSnapshot]:
        """The `limit` busiest containers"""
        return self.list_snapshots()[:limit]

    def get_docker_system_info(self) -> DockerSystemInfo:
        """
        Daemon-wide counters and versions

        Raises:
            RuntimeUnavailable: If the daemon does not answer
        """
        try:
            info = self.client.info()
            version = self.client.version()
        except (DockerException, OSError) as e:
            raise RuntimeUnavailable(f"Cannot read Docker system info: {e}") from e

        return DockerSystemInfo(
            version=version.get('Version') or "unknown",
            api_version=version.get('ApiVersion') or "unknown",
            containers=info.get('Containers') or 0,
            containers_running=info.get('ContainersRunning') or 0,
            containers_paused=info.get('ContainersPaused') or 0,
            containers_stopped=info.get('ContainersStopped') or 0,
            images=info.get('Images') or 0,
            server_version=info.get('ServerVersion') or "unknown",
            memory_total=info.get('MemTotal') or 0,
            cpu_count=info.get('NCPU') or 0
        )

    @staticmethod
    def check_cpu_threshold(containers: Sequence[ContainerSnapshot],
                            threshold: float) -> Tuple[bool, List[ContainerSnapshot]]:
        """Containers strictly above threshold, sorted order preserved"""
        return check_container_cpu_threshold(containers, threshold)
