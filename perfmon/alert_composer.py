"""
Alert Composer - Builds subject, plain-text and HTML bodies for alert emails
"""

from datetime import datetime
from typing import Optional, Sequence

from .models import AlertMessage, ContainerSnapshot

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

NO_CONTAINERS_TEXT = "No specific containers with high CPU usage detected."

_CELL = "padding: 8px;"
_HEADER_CELL = "padding: 8px; text-align: left;"
_CPU_CELL = "padding: 8px; color: #ef4444; font-weight: bold;"


def strip_html_tags(html: str) -> str:
    """
    Plain-text rendering of an HTML fragment

    Everything between '<' and '>' is dropped, each line is trimmed and
    blank lines are removed.

    Args:
        html: HTML string

    Returns:
        Plain text string
    """
    result = []
    in_tag = False

    for ch in html:
        if ch == '<':
            in_tag = True
        elif ch == '>':
            in_tag = False
        elif not in_tag:
            result.append(ch)

    lines = (line.strip() for line in ''.join(result).splitlines())
    return '\n'.join(line for line in lines if line)


def format_container_table(containers: Sequence[ContainerSnapshot], detailed: bool = False) -> str:
    """
    HTML table of containers

    Args:
        containers: Containers to list
        detailed: Add a Status column

    Returns:
        HTML table, or an explanatory paragraph when there are no containers
    """
    if not containers:
        return f"<p>{NO_CONTAINERS_TEXT}</p>"

    headers = ["Container Name", "CPU Usage", "Memory Usage", "Image"]
    if detailed:
        headers.append("Status")

    html = "<table border='1' style='border-collapse: collapse; width: 100%;'>\n"
    html += "<tr style='background-color: #f2f2f2;'>"
    html += "".join(f"<th style='{_HEADER_CELL}'>{h}</th>" for h in headers)
    html += "</tr>\n"

    for container in containers:
        html += "<tr>"
        html += f"<td style='{_CELL}'>{container.name}</td>"
        html += f"<td style='{_CPU_CELL}'>{container.cpu_usage_percent:.2f}%</td>"
        html += f"<td style='{_CELL}'>{container.memory_percent:.2f}%</td>"
        html += f"<td style='{_CELL}'>{container.image}</td>"
        if detailed:
            html += f"<td style='{_CELL}'>{container.status}</td>"
        html += "</tr>\n"

    html += "</table>"
    return html


def _wrap(title: str, body: str, footer: str) -> str:
    return f"""
<html>
<body style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;">
    <h2>{title}</h2>
    {body}
    <br>
    <p><em>This is an automated alert from your Docker & Server Performance Monitoring System.</em></p>
    <p><em>{footer}</em></p>
</body>
</html>
"""


def _message(subject: str, html: str) -> AlertMessage:
    return AlertMessage(subject=subject, text_body=strip_html_tags(html), html_body=html)


class AlertComposer:
    """Builds AlertMessage instances from evaluation results"""

    def __init__(self, cpu_threshold: float):
        """
        Initialize composer

        Args:
            cpu_threshold: Configured CPU threshold shown in host alerts
        """
        self.cpu_threshold = cpu_threshold

    def host_cpu_alert(self, server_cpu: float, containers: Sequence[ContainerSnapshot],
                       now: Optional[datetime] = None) -> AlertMessage:
        """
        Alert for host CPU above threshold

        Args:
            server_cpu: Host CPU usage percentage
            containers: Busy containers to list with the alert
            now: Check time

        Returns:
            AlertMessage
        """
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        subject = f"🚨 HIGH CPU USAGE ALERT - {timestamp}"

        body = f"""
    <p><strong>Time:</strong> {timestamp}</p>
    <h3>📊 Server CPU Usage</h3>
    <p><strong>Current CPU Usage:</strong> <span style="color: #ef4444; font-size: 18px; font-weight: bold;">{server_cpu:.2f}%</span></p>
    <p><strong>Threshold:</strong> {self.cpu_threshold:g}%</p>
    <h3>🐳 High CPU Docker Containers</h3>
    {format_container_table(containers)}
"""
        html = _wrap("🚨 HIGH CPU USAGE ALERT", body,
                     "Please check your server and containers immediately.")
        return _message(subject, html)

    def container_cpu_alert(self, containers: Sequence[ContainerSnapshot],
                            now: Optional[datetime] = None) -> AlertMessage:
        """
        Alert for containers above threshold

        Args:
            containers: Containers over the threshold
            now: Check time

        Returns:
            AlertMessage
        """
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        subject = f"🐳 HIGH CONTAINER CPU ALERT - {timestamp}"

        body = f"""
    <p><strong>Time:</strong> {timestamp}</p>
    <p><strong>Threshold:</strong> {self.cpu_threshold:g}%</p>
    <h3>🔥 High CPU Docker Containers</h3>
    {format_container_table(containers, detailed=True)}
"""
        html = _wrap("🐳 HIGH CONTAINER CPU USAGE ALERT", body,
                     "Please check the highlighted containers immediately.")
        return _message(subject, html)

    def test_message(self, now: Optional[datetime] = None) -> AlertMessage:
        """Message used to verify the email configuration"""
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        subject = "🧪 Test Email - Docker & Server Performance Monitoring"

        body = f"""
    <p>This is a test email from your Docker & Server Performance Monitoring System.</p>
    <p><strong>Time:</strong> {timestamp}</p>
    <p>If you receive this email, your email configuration is working correctly.</p>
"""
        html = _wrap("🧪 Test Email", body,
                     "System is ready to send alerts when CPU usage exceeds the threshold.")
        return _message(subject, html)
