"""
Notification tests — email rendering and SMTP delivery, sheets webhook, dispatcher.

All network calls are mocked.
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from survey_quote.config import Settings
from survey_quote.notifications import dispatch_notifications
from survey_quote.notifications.mailer import (
    EmailNotifier, build_subject, fmt_num, format_submitted, nl, render_email_html, render_email_text,
)
from survey_quote.notifications.sheets import SheetsWebhookNotifier
from survey_quote.schemas import QuoteSubmission

from conftest import FailingNotifier, RecordingNotifier, point_north_of_depot, sample_payload


def _result(orchestrator, **overrides):
    return orchestrator.process(QuoteSubmission.model_validate(sample_payload(**overrides)))


def _settings(**overrides) -> Settings:
    values = {
        "SMTP_HOST": "",
        "SMTP_PORT": 0,
        "SMTP_USER": "",
        "SMTP_PASS": "",
        "SHEETS_WEBHOOK_URL": "",
    }
    values.update(overrides)
    return Settings(**values)


SMTP_ON = {
    "SMTP_HOST": "smtp.example.com",
    "SMTP_PORT": 587,
    "SMTP_USER": "quotes@example.com",
    "SMTP_PASS": "app-password",
    "FROM_EMAIL": "quotes@example.com",
    "TO_EMAIL": "estimating@example.com",
}


# ============================================================
# Formatting helpers
# ============================================================

def test_fmt_num():
    assert fmt_num(1234.5) == "1,234.5"
    assert fmt_num(1234.567) == "1,234.57"
    assert fmt_num(2450.0, 0) == "2,450"
    assert fmt_num(20) == "20"
    assert fmt_num(None) == ""
    assert fmt_num("12") == ""
    assert fmt_num(float("nan")) == ""


def test_nl_blank_is_dash():
    assert nl(None) == "—"
    assert nl("   ") == "—"
    assert nl("Buda") == "Buda"


def test_format_submitted_millis():
    assert format_submitted(1762430400000) == "2025-11-06 12:00:00 UTC"
    assert format_submitted("2025-11-06T10:00:00Z") == "2025-11-06T10:00:00Z"


# ============================================================
# Email rendering
# ============================================================

def test_email_renders_priced_lidar(orchestrator):
    result = _result(orchestrator)
    html = render_email_html(result)
    assert "New Quote Submission — Onion Creek Topo" in html
    assert "Dana Ruiz" in html
    assert "<strong>$2,450</strong>" in html
    assert "dtm ($450)" in html
    assert "LiDAR Density" in html
    assert "Photo GSD" not in html
    assert result.submission.meta.request_id in html


def test_email_renders_manual_quote(orchestrator):
    aoi = sample_payload()["aoi"]
    aoi["totalArea_acres"] = 450
    html = render_email_html(_result(orchestrator, aoi=aoi))
    assert "manual quote required" in html
    assert "Estimated Price" not in html
    assert "Area &gt; 300 acres</td><td>Yes" in html


def test_email_renders_photo_options_and_mobilization(orchestrator):
    options = {"service": "photo", "photo": {"gsd": "1in"}, "mobilization": {"on": True}}
    aoi = sample_payload()["aoi"]
    aoi["totalArea_acres"] = 10
    aoi["centroid_lonlat"] = point_north_of_depot(40)
    html = render_email_html(_result(orchestrator, options=options, aoi=aoi))
    assert "Photo GSD" in html
    assert "LiDAR Density" not in html
    assert "40 mi · $260" in html
    assert "<strong>$1,260</strong>" in html


def test_email_unknown_service_area(orchestrator):
    aoi = sample_payload()["aoi"]
    aoi["features"] = []
    html = render_email_html(_result(orchestrator, aoi=aoi))
    assert "In service area</td><td>Unknown" in html


def test_email_escapes_user_input(orchestrator):
    project = dict(sample_payload()["project"], projectName="<script>alert(1)</script>")
    result = _result(orchestrator, project=project)
    html = render_email_html(result)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert build_subject(result) == "New Quote Submission — <script>alert(1)</script>"


def test_email_subject_blank_project(orchestrator):
    project = dict(sample_payload()["project"], projectName="")
    assert build_subject(_result(orchestrator, project=project)) == "New Quote Submission — —"


def test_email_text_part(orchestrator):
    text = render_email_text(_result(orchestrator))
    assert "Estimated price: $2,450" in text
    assert "In service area: Yes" in text


# ============================================================
# Email delivery
# ============================================================

def test_email_disabled_without_smtp(orchestrator):
    notifier = EmailNotifier(_settings())
    assert notifier.enabled is False
    with patch("survey_quote.notifications.mailer.smtplib.SMTP") as smtp_cls:
        notifier.notify(_result(orchestrator))
    smtp_cls.assert_not_called()


def test_email_sent_with_starttls(orchestrator):
    notifier = EmailNotifier(_settings(**SMTP_ON))
    with patch("survey_quote.notifications.mailer.smtplib.SMTP") as smtp_cls:
        notifier.notify(_result(orchestrator))
    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=20.0)
    server = smtp_cls.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("quotes@example.com", "app-password")
    msg = server.send_message.call_args[0][0]
    assert msg["To"] == "estimating@example.com"
    assert msg["Subject"] == "New Quote Submission — Onion Creek Topo"


def test_email_uses_ssl_on_465(orchestrator):
    notifier = EmailNotifier(_settings(**dict(SMTP_ON, SMTP_PORT=465)))
    with patch("survey_quote.notifications.mailer.smtplib.SMTP_SSL") as ssl_cls, \
            patch("survey_quote.notifications.mailer.smtplib.SMTP") as plain_cls:
        notifier.notify(_result(orchestrator))
    plain_cls.assert_not_called()
    server = ssl_cls.return_value
    server.starttls.assert_not_called()
    server.send_message.assert_called_once()


def test_email_failure_propagates_to_dispatcher(orchestrator):
    """The notifier raises; the dispatcher thread is what swallows it."""
    notifier = EmailNotifier(_settings(**SMTP_ON))
    with patch("survey_quote.notifications.mailer.smtplib.SMTP", side_effect=OSError("refused")):
        with pytest.raises(OSError):
            notifier.notify(_result(orchestrator))


# ============================================================
# Sheets webhook
# ============================================================

def test_sheets_noop_without_url(orchestrator):
    notifier = SheetsWebhookNotifier(_settings())
    assert notifier.enabled is False
    with patch("survey_quote.notifications.sheets.urllib.request.urlopen") as urlopen:
        notifier.notify(_result(orchestrator))
    urlopen.assert_not_called()


def test_sheets_posts_flat_payload(orchestrator):
    notifier = SheetsWebhookNotifier(_settings(SHEETS_WEBHOOK_URL="https://script.example.com/exec"))
    response = MagicMock()
    response.status = 200
    response.read.return_value = b'{"result":"success"}'
    with patch("survey_quote.notifications.sheets.urllib.request.urlopen") as urlopen:
        urlopen.return_value.__enter__.return_value = response
        result = _result(orchestrator)
        notifier.notify(result)

    req = urlopen.call_args[0][0]
    assert urlopen.call_args[1]["timeout"] == 10.0
    assert req.full_url == "https://script.example.com/exec"
    assert req.get_method() == "POST"
    body = json.loads(req.data)
    assert set(body) == {"contact", "project", "aoi", "flags", "service", "quote", "options", "meta"}
    assert body["service"] == "lidar"
    assert body["quote"]["price"] == 2450
    assert body["quote"]["manualQuote"] is False
    assert body["flags"]["autoQuoteEligible"] is True
    assert body["project"]["projectName"] == "Onion Creek Topo"
    assert body["meta"]["requestId"] == result.submission.meta.request_id


# ============================================================
# Dispatcher
# ============================================================

def test_dispatch_runs_each_notifier_in_its_own_thread(orchestrator):
    first, second = RecordingNotifier(), RecordingNotifier()
    threads = dispatch_notifications([first, second], _result(orchestrator))
    assert len(threads) == 2
    assert all(t.daemon for t in threads)
    for t in threads:
        t.join(2)
    assert len(first.results) == 1 and len(second.results) == 1


def test_dispatch_logs_failures(orchestrator, caplog):
    caplog.set_level(logging.ERROR, logger="survey_quote.notifications")
    recorder = RecordingNotifier()
    threads = dispatch_notifications([FailingNotifier(), recorder], _result(orchestrator))
    for t in threads:
        t.join(2)
    assert recorder.results
    assert "failing notification failed" in caplog.text
    assert "webhook unreachable" in caplog.text
