"""Tests for the command line entry point."""

import threading
from unittest.mock import MagicMock, patch

import pytest

import monitor
from perfmon.errors import RuntimeConnectionError


@pytest.fixture
def fake_monitor():
    instance = MagicMock()
    instance.run_monitoring.return_value = False
    with patch.object(monitor, 'setup_logging'), \
            patch.object(monitor, '_install_stop_handlers'), \
            patch.object(monitor.PerformanceMonitor, 'create', return_value=instance):
        yield instance


def test_default_runs_single_check(fake_monitor, tmp_path, capsys):
    assert monitor.main(['--config', str(tmp_path / 'missing.json')]) == 0

    fake_monitor.run_monitoring.assert_called_once_with()
    assert monitor.VERDICT_OK in capsys.readouterr().out


def test_single_check_alert_verdict(fake_monitor, capsys):
    fake_monitor.run_monitoring.return_value = True

    monitor.main([])

    assert monitor.VERDICT_ALERT in capsys.readouterr().out


def test_status_flag(fake_monitor):
    monitor.main(['-s'])

    fake_monitor.print_status_summary.assert_called_once_with()
    fake_monitor.run_monitoring.assert_not_called()


def test_test_email_wins_over_other_modes(fake_monitor):
    monitor.main(['--status', '--continuous', '--test-email'])

    fake_monitor.test_email.assert_called_once_with()
    fake_monitor.print_status_summary.assert_not_called()
    fake_monitor.run_continuous.assert_not_called()


def test_status_wins_over_continuous(fake_monitor):
    monitor.main(['-r', '-s'])

    fake_monitor.print_status_summary.assert_called_once_with()
    fake_monitor.run_continuous.assert_not_called()


def test_continuous_flag_passes_stop_event(fake_monitor):
    monitor.main(['-r'])

    [stop_event] = fake_monitor.run_continuous.call_args.args
    assert isinstance(stop_event, threading.Event)
    monitor._install_stop_handlers.assert_called_once_with(stop_event)


def test_config_path_is_loaded(fake_monitor, tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{"monitoring": {"cpu_threshold": 42.0}}', encoding='utf-8')

    monitor.main(['-c', str(path)])

    config = monitor.PerformanceMonitor.create.call_args.args[0]
    assert config.get('monitoring.cpu_threshold') == 42.0


def test_docker_unreachable_exits_with_failure(tmp_path):
    with patch.object(monitor, 'setup_logging'), \
            patch.object(monitor.PerformanceMonitor, 'create',
                         side_effect=RuntimeConnectionError("refused")):
        assert monitor.main(['-c', str(tmp_path / 'missing.json')]) == 1
