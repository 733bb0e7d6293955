"""Flask application: JSON API for report intake plus the browser dashboard."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, render_template, request
from flask_cors import CORS

from .config import Config
from .errors import NotFoundError, ReportError, ValidationError
from .render import build_report_view, count_today, format_timestamp, role_label
from .store import Report, ReportStore
from .transcripts.export import JSONL_MIMETYPE, download_filename, export_document, iso_timestamp

_LOGGER = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")
dashboard = Blueprint("dashboard", __name__)


def _store() -> ReportStore:
    return current_app.extensions["report_store"]


def _is_missing(value: Any) -> bool:
    return value is None or value is False or value == ""


def _get_report(report_id: str) -> Report:
    report = _store().get_by_id(report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return report


# --- API ---


@api.route("/report", methods=["POST"])
def create_report():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}

    session_id = body.get("sessionId")
    session_data = body.get("sessionData")
    raw_jsonl = body.get("rawJsonl")

    if _is_missing(session_id) or _is_missing(session_data):
        raise ValidationError("Missing required fields: sessionId and sessionData")
    if not isinstance(raw_jsonl, str) or not raw_jsonl:
        raw_jsonl = None

    report_id = _store().insert(session_id, session_data, raw_jsonl)
    _LOGGER.info("Report received: ID %s, Session: %s", report_id, session_id)

    return jsonify({
        "success": True,
        "reportId": report_id,
        "message": "Report stored successfully",
    }), 201


@api.route("/reports", methods=["GET"])
def list_reports():
    reports = [report.to_dict() for report in _store().list_all()]
    return jsonify({"success": True, "reports": reports})


@api.route("/reports/<report_id>", methods=["GET"])
def get_report(report_id: str):
    report = _get_report(report_id)
    return jsonify({"success": True, "report": report.to_dict()})


@api.route("/reports/<report_id>", methods=["DELETE"])
def delete_report(report_id: str):
    if _store().delete_by_id(report_id) == 0:
        raise NotFoundError("Report not found")
    _LOGGER.info("Report deleted: ID %s", report_id)
    return jsonify({"success": True, "message": "Report deleted successfully"})


@api.route("/reports/<report_id>/download", methods=["GET"])
def download_report(report_id: str):
    report = _get_report(report_id)
    content = export_document(report.session_data, report.raw_jsonl)
    filename = download_filename(report.id, report.timestamp)

    return Response(
        content,
        mimetype=JSONL_MIMETYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --- Dashboard ---


@dashboard.route("/")
def index():
    reports = _store().list_all()
    return render_template(
        "index.html",
        reports=reports,
        total=len(reports),
        today=count_today(reports),
    )


@dashboard.route("/reports/<report_id>")
def report_detail(report_id: str):
    view = build_report_view(_get_report(report_id))
    return render_template("report.html", view=view)


@dashboard.route("/health")
def health():
    return jsonify({"status": "ok", "timestamp": iso_timestamp()})


# --- Errors ---


def _handle_report_error(exc: ReportError):
    if exc.status_code >= 500:
        _LOGGER.error("%s %s failed: %s (%s)", request.method, request.path, exc.message, exc.details)
    else:
        _LOGGER.info("%s %s rejected: %s", request.method, request.path, exc.message)

    if request.path.startswith("/api/"):
        return jsonify(exc.to_dict()), exc.status_code
    page = render_template("error.html", title=exc.title, message=exc.message, details=exc.details)
    return page, exc.status_code


def create_app(config: Config | None = None, store: ReportStore | None = None) -> Flask:
    """Build the Flask app around a report store."""
    if config is None:
        config = Config()
    if store is None:
        store = ReportStore(config.data_file)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    app.json.sort_keys = False
    app.extensions["report_store"] = store

    app.jinja_env.filters["display_time"] = format_timestamp
    app.jinja_env.filters["role_label"] = role_label

    CORS(app, resources={r"/api/*": {"origins": "*"}}, send_wildcard=True)

    app.register_blueprint(api)
    app.register_blueprint(dashboard)
    app.register_error_handler(ReportError, _handle_report_error)
    return app
