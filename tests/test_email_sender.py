"""Tests for the SMTP email notifier."""

import smtplib
from unittest.mock import patch

import pytest

from perfmon.email_sender import EmailNotifier
from perfmon.models import AlertMessage

MESSAGE = AlertMessage(subject="🚨 HIGH CPU USAGE ALERT - now", text_body="cpu high",
                       html_body="<p>cpu high</p>")


def email_config(**overrides):
    config = {
        'enabled': True,
        'smtp_server': 'smtp.example.com',
        'smtp_port': 587,
        'sender_email': 'monitor@example.com',
        'sender_password': 'secret',
        'recipient_email': 'ops@example.com',
    }
    config.update(overrides)
    return config


@pytest.fixture
def smtp():
    with patch('perfmon.email_sender.smtplib.SMTP') as smtp_cls:
        yield smtp_cls


def test_enabled_with_complete_config():
    assert EmailNotifier(email_config()).enabled is True


@pytest.mark.parametrize("overrides", [
    {'enabled': False},
    {'sender_email': ''},
    {'sender_password': ''},
    {'recipient_email': ''},
    {'sender_email': None},
])
def test_disabled_notifier_never_touches_smtp(smtp, overrides):
    notifier = EmailNotifier(email_config(**overrides))

    assert notifier.enabled is False
    assert notifier.send(MESSAGE) is False
    smtp.assert_not_called()


def test_send_uses_starttls_and_login(smtp):
    assert EmailNotifier(email_config()).send(MESSAGE) is True

    smtp.assert_called_once_with('smtp.example.com', 587, timeout=30)
    server = smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once_with()
    server.login.assert_called_once_with('monitor@example.com', 'secret')
    server.send_message.assert_called_once()


def test_send_builds_two_part_message(smtp):
    EmailNotifier(email_config()).send(MESSAGE)

    msg = smtp.return_value.__enter__.return_value.send_message.call_args[0][0]
    assert msg.get_content_type() == 'multipart/alternative'
    assert [p.get_content_type() for p in msg.get_payload()] == ['text/plain', 'text/html']
    assert msg['To'] == 'ops@example.com'
    assert msg['From'] == 'monitor@example.com'


def test_send_without_tls(smtp):
    EmailNotifier(email_config(use_tls=False)).send(MESSAGE)
    smtp.return_value.__enter__.return_value.starttls.assert_not_called()


def test_implicit_tls_on_port_465(smtp):
    with patch('perfmon.email_sender.smtplib.SMTP_SSL') as smtp_ssl:
        assert EmailNotifier(email_config(smtp_port=465)).send(MESSAGE) is True

    smtp_ssl.assert_called_once_with('smtp.example.com', 465, timeout=30)
    smtp.assert_not_called()


def test_multiple_recipients(smtp):
    EmailNotifier(email_config(recipient_email='a@example.com, b@example.com')).send(MESSAGE)

    msg = smtp.return_value.__enter__.return_value.send_message.call_args[0][0]
    assert msg['To'] == 'a@example.com, b@example.com'


@pytest.mark.parametrize("overrides", [
    {'sender_email': 'not-an-address'},
    {'recipient_email': 'ops@'},
])
def test_bad_address_returns_false_without_smtp(smtp, overrides):
    assert EmailNotifier(email_config(**overrides)).send(MESSAGE) is False
    smtp.assert_not_called()


def test_transport_error_returns_false(smtp):
    smtp.return_value.__enter__.return_value.login.side_effect = \
        smtplib.SMTPAuthenticationError(535, b'bad credentials')

    assert EmailNotifier(email_config()).send(MESSAGE) is False


def test_connection_error_returns_false(smtp):
    smtp.side_effect = OSError("connection refused")
    assert EmailNotifier(email_config()).send(MESSAGE) is False
