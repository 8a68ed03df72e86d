"""Shared fixtures: snapshot factories and fake Docker objects."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from perfmon.config_loader import ConfigLoader
from perfmon.models import (
    ContainerSnapshot,
    DiskUsage,
    HostSnapshot,
    LoadAverage,
    MemoryUsage,
    SystemInfo,
)

FIXED_NOW = datetime(2024, 5, 17, 14, 30, 5)


def make_stats(cpu_total=0, precpu_total=0, system=0, presystem=0, online_cpus=1,
               mem_usage=0, mem_limit=0):
    """Raw dict shaped like container.stats(stream=False)"""
    return {
        'cpu_stats': {
            'cpu_usage': {'total_usage': cpu_total},
            'system_cpu_usage': system,
            'online_cpus': online_cpus,
        },
        'precpu_stats': {
            'cpu_usage': {'total_usage': precpu_total},
            'system_cpu_usage': presystem,
        },
        'memory_stats': {'usage': mem_usage, 'limit': mem_limit},
    }


def stats_for_cpu(percent, mem_usage=100, mem_limit=1000):
    """Stats whose computed CPU usage is exactly `percent` on one CPU"""
    return make_stats(cpu_total=int(percent * 100), precpu_total=0,
                      system=10_000, presystem=0, online_cpus=1,
                      mem_usage=mem_usage, mem_limit=mem_limit)


def make_container(container_id='a' * 64, name='/web', image='nginx:latest',
                   status='running', stats=None, ports=None):
    """MagicMock standing in for docker.models.containers.Container"""
    container = MagicMock()
    container.id = container_id
    container.name = name.lstrip('/')
    container.status = status
    container.attrs = {
        'Name': name,
        'Config': {'Image': image},
        'NetworkSettings': {'Ports': ports or {}},
    }
    container.stats.return_value = stats if stats is not None else make_stats()
    return container


def make_client(containers=()):
    """MagicMock standing in for docker.DockerClient"""
    client = MagicMock()
    client.containers.list.return_value = list(containers)
    return client


@pytest.fixture
def container_snapshot():
    """Factory for ContainerSnapshot with sensible defaults"""
    def _make(name='web', cpu=0.0, memory_percent=10.0, image='nginx:latest',
              status='running', container_id='abcdef123456'):
        return ContainerSnapshot(
            id=container_id,
            name=name,
            image=image,
            status=status,
            cpu_usage_percent=cpu,
            memory_usage_bytes=100,
            memory_limit_bytes=1000,
            memory_percent=memory_percent,
            timestamp=FIXED_NOW,
        )
    return _make


@pytest.fixture
def host_snapshot():
    """Factory for HostSnapshot with a given CPU usage"""
    def _make(cpu=10.0):
        return HostSnapshot(
            timestamp=FIXED_NOW,
            cpu_usage_percent=cpu,
            memory=MemoryUsage(total=8000, used=4000, available=4000, percent=50.0),
            disk=DiskUsage(total=1000, used=250, available=750, percent=25.0),
            load_average=LoadAverage(0.5, 0.4, 0.3),
            system_info=SystemInfo(
                hostname='docker-host',
                os='Linux',
                kernel='6.1.0',
                cpu_count=4,
                cpu_brand='Test CPU',
                total_memory=8000,
                boot_time=datetime(2024, 5, 1, tzinfo=timezone.utc),
            ),
        )
    return _make


@pytest.fixture
def config():
    """ConfigLoader holding the built-in defaults"""
    return ConfigLoader('unused.json')
