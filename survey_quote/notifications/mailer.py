"""
Internal quote email — HTML summary of a submission sent over SMTP.

Disabled (logs and returns) unless SMTP_HOST, SMTP_PORT, SMTP_USER and
SMTP_PASS are all configured.
"""

import logging
import math
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from ..config import Settings, settings as default_settings
from ..schemas import QuoteResult

logger = logging.getLogger(__name__)

LABEL = 'style="padding:2px 8px 2px 0;color:#555;"'
LABEL_TOP = 'style="padding:2px 8px 2px 0;color:#555;vertical-align:top;"'
TABLE = 'cellpadding="0" cellspacing="0" style="border-collapse:collapse;"'
HEADING = 'style="margin:18px 0 6px;"'


def fmt_num(n, digits: int = 2) -> str:
    """1234.5 -> '1,234.5'. Non-numbers render blank."""
    if isinstance(n, bool) or not isinstance(n, (int, float)) or not math.isfinite(n):
        return ""
    text = f"{n:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def yesno(value) -> str:
    return "Yes" if value else "No"


def nl(value) -> str:
    """Blank values render as an em dash."""
    text = "" if value is None else str(value)
    return escape(text) if text.strip() else "—"


def tri_state(value) -> str:
    return "Unknown" if value is None else yesno(value)


def format_submitted(value) -> str:
    """submittedAt arrives as epoch millis or an ISO string."""
    if value is None or value == "":
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    if isinstance(value, (int, float)):
        try:
            ts = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return str(value)
        return ts.strftime("%Y-%m-%d %H:%M:%S UTC")
    return escape(str(value))


def _row(label: str, value: str, top: bool = False) -> str:
    return f"<tr><td {LABEL_TOP if top else LABEL}>{label}</td><td>{value}</td></tr>"


def _table(rows) -> str:
    return f"<table {TABLE}>" + "".join(rows) + "</table>"


def build_subject(result: QuoteResult) -> str:
    name = result.submission.project.project_name
    return f"New Quote Submission — {name.strip() if name and name.strip() else '—'}"


def render_email_html(result: QuoteResult) -> str:
    """Internal HTML summary: contact, project, AOI, flags, options and the computed quote."""
    sub = result.submission
    c, p, a, opts, meta = sub.contact, sub.project, sub.aoi, sub.options, sub.meta
    flags, quote = result.flags, result.quote
    bd = quote.breakdown

    centroid = a.centroid_lonlat
    centroid_text = ", ".join(escape(str(v)) for v in centroid) if isinstance(centroid, (list, tuple)) and centroid else "—"

    sections = [
        f'<h2 style="margin:0 0 12px;">{escape(build_subject(result))}</h2>',
        f"<h3 {HEADING}>Contact</h3>",
        _table([
            _row("Name", nl(c.name)),
            _row("Company", nl(c.company)),
            _row("Email", nl(c.email)),
            _row("Phone", nl(c.phone)),
        ]),
        f"<h3 {HEADING}>Project</h3>",
        _table([
            _row("Name", nl(p.project_name)),
            _row("Location", nl(p.location)),
            _row("Schedule", nl(p.schedule)),
            _row("Not a legal survey", yesno(p.not_legal_survey)),
            _row("Notes", nl(p.notes), top=True),
        ]),
        f"<h3 {HEADING}>AOI</h3>",
        _table([
            _row("Polygons", str(a.count or 0)),
            _row("Total Area (acres)", fmt_num(a.total_area_acres)),
            _row("Total Area (hectares)", fmt_num(a.total_area_hectares)),
            _row("Total Area (sq km)", fmt_num(a.total_area_sq_km)),
            _row("Centroid [lon, lat]", centroid_text),
        ]),
        f"<h3 {HEADING}>Flags</h3>",
        _table([
            _row("In service area", tri_state(flags.in_service_area)),
            _row("Area &gt; 300 acres", yesno(flags.area_over_300_acres)),
            _row("Auto-quote eligible", tri_state(flags.auto_quote_eligible)),
        ]),
        f"<h3 {HEADING}>Service</h3>",
        f'<p style="margin:0 0 8px;"><strong>Type:</strong> {escape(result.service)}</p>',
    ]

    option_rows = [_row("Service", nl(opts.service))]
    if result.service in ("photo", "photogrammetry"):
        option_rows.append(_row("Photo GSD", nl(opts.photo.gsd)))
    else:
        add_ons = ", ".join(escape(k) for k in opts.lidar.add_ons) or "—"
        option_rows += [
            _row("LiDAR Density", nl(opts.lidar.density)),
            _row("LiDAR Accuracy", nl(opts.lidar.accuracy)),
            _row("LiDAR Add-ons", add_ons, top=True),
        ]
    option_rows.append(_row("Mobilization", "On" if opts.mobilization.on else "Off"))
    mobilization_text = f"{bd.mobilization_miles} mi · ${fmt_num(bd.mobilization_charge, 0)}"
    option_rows.append(_row("Mobilization Details", mobilization_text))
    sections += [f"<h3 {HEADING}>Selected Options</h3>", _table(option_rows)]

    sections.append(f"<h3 {HEADING}>Calculated Quote (internal)</h3>")
    if quote.manual:
        sections.append('<p style="margin:0;">Over 300 acres — manual quote required.</p>')
    else:
        quote_rows = [
            _row("Estimated Price", f"<strong>${fmt_num(quote.price, 0)}</strong>"),
            _row("Base", f"${fmt_num(bd.base, 0)}"),
        ]
        if hasattr(bd, "density_factor"):
            quote_rows.append(_row("Density factor", str(bd.density_factor)))
            quote_rows.append(_row("Accuracy factor", str(bd.accuracy_factor)))
            if bd.add_ons:
                add_ons = ", ".join(escape(k) for k in bd.add_ons)
                quote_rows.append(_row("Add-ons", f"{add_ons} (${fmt_num(bd.add_ons_total, 0)})"))
        else:
            quote_rows.append(_row("GSD", f"{escape(bd.gsd)} (factor {bd.factor})"))
        quote_rows.append(_row("Mobilization", mobilization_text))
        sections.append(_table(quote_rows))

    sections.append(
        '<p style="margin:18px 0 0;color:#666;font-size:12px;">'
        f"Submitted: {format_submitted(meta.submitted_at)}"
        f" &nbsp;·&nbsp; v{nl(meta.version)}"
        f" &nbsp;·&nbsp; Request ID: {nl(meta.request_id)}"
        "</p>"
    )

    body = "\n".join(sections)
    return (
        '<div style="font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;'
        f'line-height:1.45;color:#111;">\n{body}\n</div>'
    )


def render_email_text(result: QuoteResult) -> str:
    """Plain-text fallback part."""
    sub, quote = result.submission, result.quote
    price = "manual quote required" if quote.manual else f"${fmt_num(quote.price, 0)}"
    return "\n".join([
        f"New quote submission: {sub.project.project_name or '—'}",
        f"Contact: {sub.contact.name or '—'} <{sub.contact.email or '—'}>",
        f"Service: {result.service}",
        f"Area (acres): {fmt_num(sub.aoi.total_area_acres)}",
        f"In service area: {tri_state(result.flags.in_service_area)}",
        f"Estimated price: {price}",
        f"Request ID: {sub.meta.request_id or '—'}",
    ])


class EmailNotifier:
    """Sends the internal quote email."""

    name = "email"

    def __init__(self, config: Settings = None):
        self.config = config or default_settings

    @property
    def enabled(self) -> bool:
        return self.config.smtp_configured

    def build_message(self, result: QuoteResult) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.config.FROM_EMAIL
        msg["To"] = self.config.TO_EMAIL
        msg["Subject"] = build_subject(result)
        msg.attach(MIMEText(render_email_text(result), "plain"))
        msg.attach(MIMEText(render_email_html(result), "html"))
        return msg

    def notify(self, result: QuoteResult) -> None:
        if not self.enabled:
            logger.info("SMTP not configured — skipping quote email for %s", result.submission.meta.request_id)
            return

        msg = self.build_message(result)
        cfg = self.config
        if cfg.SMTP_PORT == 465:
            server = smtplib.SMTP_SSL(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT_SECONDS)
        with server:
            if cfg.SMTP_PORT != 465:
                server.starttls()
            server.login(cfg.SMTP_USER, cfg.SMTP_PASS)
            server.send_message(msg)

        logger.info("Quote email sent: %s → %s", msg["Subject"][:60], cfg.TO_EMAIL)
