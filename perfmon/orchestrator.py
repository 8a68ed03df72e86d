"""
Performance Monitor - Runs check cycles: sample, evaluate, compose, dispatch
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import structlog

from .alert_composer import TIMESTAMP_FORMAT, AlertComposer
from .config_loader import ConfigLoader
from .container_sampler import ContainerSampler
from .email_sender import EmailNotifier
from .errors import RuntimeUnavailable, TelemetryUnavailable
from .host_sampler import HostSampler
from .models import AlertMessage, ContainerSnapshot, DockerSystemInfo, HostSnapshot
from .thresholds import containers_for_host_alert, evaluate_containers, evaluate_host

logger = structlog.get_logger(__name__)

VERDICT_ALERT = "⚠️  High CPU usage detected! Check your email for alerts."
VERDICT_OK = "✅ All systems normal."

STATUS_TOP_CONTAINERS = 5


@dataclass
class CycleResult:
    """Outcome of one check cycle"""
    server_triggered: bool = False
    server_cpu: float = 0.0
    container_triggered: bool = False
    high_cpu_containers: List[ContainerSnapshot] = field(default_factory=list)
    alerts_sent: int = 0

    @property
    def triggered(self) -> bool:
        """Any alert condition this cycle"""
        return self.server_triggered or self.container_triggered


class PerformanceMonitor:
    """Sequences host and container checks and dispatches alerts"""

    def __init__(self, config: ConfigLoader, host_sampler: HostSampler,
                 container_sampler: ContainerSampler, notifier: EmailNotifier,
                 composer: Optional[AlertComposer] = None):
        """
        Initialize monitor

        Args:
            config: Loaded configuration (read only)
            host_sampler: Host telemetry adapter
            container_sampler: Docker telemetry adapter
            notifier: Email notifier
            composer: Alert composer, built from the config when omitted
        """
        self.config = config
        self.cpu_threshold = float(config.get('monitoring.cpu_threshold', 80.0))
        self.check_interval = int(config.get('monitoring.check_interval', 300))
        self.host_sampler = host_sampler
        self.container_sampler = container_sampler
        self.notifier = notifier
        self.composer = composer or AlertComposer(self.cpu_threshold)

        logger.info("Performance Monitor initialized", cpu_threshold=self.cpu_threshold)

    @classmethod
    def create(cls, config: ConfigLoader) -> 'PerformanceMonitor':
        """
        Build a monitor wired to the real host, Docker daemon and SMTP server

        Raises:
            RuntimeConnectionError: If the Docker daemon cannot be reached
        """
        container_sampler = ContainerSampler.connect(
            timeout=int(config.get('monitoring.docker_stats_timeout', 10))
        )
        logger.info("Docker monitor initialized successfully")

        return cls(
            config=config,
            host_sampler=HostSampler(),
            container_sampler=container_sampler,
            notifier=EmailNotifier(config.section('email'))
        )

    def _sample_host(self) -> Optional[HostSnapshot]:
        try:
            return self.host_sampler.sample()
        except TelemetryUnavailable as e:
            logger.error("Host telemetry unavailable", error=str(e))
            return None

    def _sample_containers(self) -> Optional[List[ContainerSnapshot]]:
        try:
            return self.container_sampler.list_snapshots()
        except RuntimeUnavailable as e:
            logger.error("Container listing failed", error=str(e))
            return None

    def _docker_info(self) -> Optional[DockerSystemInfo]:
        try:
            return self.container_sampler.get_docker_system_info()
        except RuntimeUnavailable as e:
            logger.error("Docker system info unavailable", error=str(e))
            return None

    def _dispatch(self, kind: str, message: AlertMessage) -> bool:
        sent = self.notifier.send(message)
        if sent:
            logger.info("Alert email sent", alert=kind)
        else:
            logger.error("Failed to send alert email", alert=kind)
        return sent

    def check_server_cpu(self, snapshot: Optional[HostSnapshot],
                         containers: List[ContainerSnapshot], now: datetime) -> Tuple[bool, float, bool]:
        """
        Evaluate host CPU and alert when above threshold

        Returns:
            (is_high, cpu_usage, alert_sent)
        """
        logger.info("Checking server CPU usage...")
        if snapshot is None:
            return False, 0.0, False

        event = evaluate_host(snapshot, self.cpu_threshold)
        if not event.triggered:
            return False, event.value, False

        message = self.composer.host_cpu_alert(event.value, containers_for_host_alert(containers), now)
        return True, event.value, self._dispatch("server_cpu", message)

    def check_container_cpu(self, containers: List[ContainerSnapshot],
                            now: datetime) -> Tuple[bool, List[ContainerSnapshot], bool]:
        """
        Evaluate container CPU and alert when any is above threshold

        Returns:
            (has_high_cpu, high_cpu_containers, alert_sent)
        """
        logger.info("Checking Docker container CPU usage...")
        event = evaluate_containers(containers, self.cpu_threshold)
        high_cpu = list(event.containers)
        if not event.triggered:
            return False, high_cpu, False

        message = self.composer.container_cpu_alert(high_cpu, now)
        return True, high_cpu, self._dispatch("container_cpu", message)

    def run_cycle(self) -> CycleResult:
        """
        Run one complete check cycle

        Host telemetry and container listing failures are logged and the
        cycle carries on with what it has.

        Returns:
            CycleResult summarising the cycle
        """
        logger.info("Starting monitoring check...")
        now = datetime.now()

        snapshot = self._sample_host()
        containers = self._sample_containers() or []

        server_high, server_cpu, server_sent = self.check_server_cpu(snapshot, containers, now)
        container_high, high_cpu, container_sent = self.check_container_cpu(containers, now)

        result = CycleResult(
            server_triggered=server_high,
            server_cpu=server_cpu,
            container_triggered=container_high,
            high_cpu_containers=high_cpu,
            alerts_sent=int(server_sent) + int(container_sent)
        )

        logger.info("Monitoring check completed", server_cpu=round(server_cpu, 2),
                    high_cpu_containers=len(high_cpu), alerts_sent=result.alerts_sent)
        return result

    def run_monitoring(self) -> bool:
        """Run one cycle; True if any alert condition was met"""
        return self.run_cycle().triggered

    def status_report(self) -> str:
        """Human-readable snapshot of host and Docker state"""
        snapshot = self._sample_host()
        containers = self._sample_containers()
        docker_info = self._docker_info()

        timestamp = snapshot.timestamp if snapshot else datetime.now()
        lines = [
            "",
            "=" * 60,
            f"SYSTEM STATUS - {timestamp.strftime(TIMESTAMP_FORMAT)}",
            "=" * 60,
            "",
            "🖥️  SERVER:",
        ]

        if snapshot is None:
            lines.append("   Host telemetry unavailable")
        else:
            load = snapshot.load_average
            lines.extend([
                f"   Hostname: {snapshot.system_info.hostname}",
                f"   CPU Usage: {snapshot.cpu_usage_percent:.2f}%",
                f"   Memory Usage: {snapshot.memory.percent:.2f}%",
                f"   Disk Usage: {snapshot.disk.percent:.2f}%",
                f"   Load Average: {load.one_min:.2f} {load.five_min:.2f} {load.fifteen_min:.2f}",
            ])

        lines.extend(["", "🐳 DOCKER:"])
        if docker_info is None:
            lines.append("   Docker system info: unavailable")
        else:
            lines.extend([
                f"   Version: {docker_info.version}",
                f"   Total Containers: {docker_info.containers} "
                f"({docker_info.containers_running} running)",
            ])

        if containers is None:
            lines.append("   Containers: unavailable")
        else:
            lines.append(f"   Sampled Containers: {len(containers)}")

        if containers:
            lines.append("")
            lines.append("   Top CPU Containers:")
            for i, container in enumerate(containers[:STATUS_TOP_CONTAINERS], start=1):
                lines.append(f"   {i}. {container.name}: {container.cpu_usage_percent:.2f}% CPU")

        lines.extend(["", "=" * 60])
        return "\n".join(lines)

    def print_status_summary(self):
        """Print the status report"""
        print(self.status_report())

    def test_email(self) -> bool:
        """Send a test message and report the outcome"""
        logger.info("Testing email configuration...")

        success = self.notifier.send(self.composer.test_message())
        if success:
            print("✅ Test email sent successfully!")
        else:
            print("❌ Failed to send test email. Check your configuration.")
        return success

    def run_continuous(self, stop_event: Optional[threading.Event] = None):
        """
        Run check cycles until stop_event is set

        A stop request takes effect between cycles, never inside one.

        Args:
            stop_event: Event that ends the loop; runs forever when omitted
        """
        stop_event = stop_event or threading.Event()
        logger.info("Starting continuous monitoring", interval_seconds=self.check_interval)

        while not stop_event.is_set():
            try:
                triggered = self.run_monitoring()
                print(VERDICT_ALERT if triggered else VERDICT_OK)
            except Exception:
                logger.exception("Error during monitoring check")

            stop_event.wait(self.check_interval)

        logger.info("Continuous monitoring stopped")
