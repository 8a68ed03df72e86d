"""
Threshold evaluation - pure comparisons of snapshots against configured limits

A reading triggers only when it is strictly greater than the threshold.
"""

from typing import List, Sequence, Tuple

import structlog

from .models import ContainerSnapshot, HostSnapshot, ThresholdEvent

logger = structlog.get_logger(__name__)

# Containers listed alongside a host CPU alert. This never decides whether
# to alert; the primary threshold comes from monitoring.cpu_threshold.
SECONDARY_CONTAINER_THRESHOLD = 50.0


def check_host_cpu_threshold(snapshot: HostSnapshot, threshold: float) -> Tuple[bool, float]:
    """
    Check host CPU usage against threshold

    Args:
        snapshot: Host snapshot
        threshold: CPU percentage limit

    Returns:
        (is_high, cpu_usage_percent)
    """
    cpu_usage = snapshot.cpu_usage_percent

    if cpu_usage > threshold:
        logger.warning("High CPU usage detected", cpu_usage=round(cpu_usage, 2), threshold=threshold)
        return True, cpu_usage

    logger.info("CPU usage is normal", cpu_usage=round(cpu_usage, 2))
    return False, cpu_usage


def containers_above(containers: Sequence[ContainerSnapshot], threshold: float) -> List[ContainerSnapshot]:
    """Containers whose CPU usage exceeds threshold, input order preserved"""
    return [c for c in containers if c.cpu_usage_percent > threshold]


def check_container_cpu_threshold(containers: Sequence[ContainerSnapshot],
                                  threshold: float) -> Tuple[bool, List[ContainerSnapshot]]:
    """
    Check container CPU usage against threshold

    Args:
        containers: Container snapshots, sorted by CPU descending
        threshold: CPU percentage limit

    Returns:
        (has_high_cpu, high_cpu_containers)
    """
    high_cpu_containers = containers_above(containers, threshold)
    has_high_cpu = bool(high_cpu_containers)

    if has_high_cpu:
        logger.warning("High CPU usage detected in containers", count=len(high_cpu_containers))
        for container in high_cpu_containers:
            logger.warning("High container CPU", container=container.name,
                           cpu_usage=round(container.cpu_usage_percent, 2))
    else:
        logger.info("All containers have normal CPU usage")

    return has_high_cpu, high_cpu_containers


def containers_for_host_alert(containers: Sequence[ContainerSnapshot]) -> List[ContainerSnapshot]:
    """Containers worth listing in a host CPU alert"""
    return containers_above(containers, SECONDARY_CONTAINER_THRESHOLD)


def evaluate_host(snapshot: HostSnapshot, threshold: float) -> ThresholdEvent:
    """Host evaluation as a ThresholdEvent"""
    triggered, cpu_usage = check_host_cpu_threshold(snapshot, threshold)
    return ThresholdEvent(triggered=triggered, threshold=threshold, value=cpu_usage)


def evaluate_containers(containers: Sequence[ContainerSnapshot], threshold: float) -> ThresholdEvent:
    """Container evaluation as a ThresholdEvent"""
    triggered, high_cpu = check_container_cpu_threshold(containers, threshold)
    peak = max((c.cpu_usage_percent for c in high_cpu), default=0.0)
    return ThresholdEvent(
        triggered=triggered,
        threshold=threshold,
        value=peak,
        containers=tuple(high_cpu)
    )
