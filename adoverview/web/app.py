from __future__ import annotations

import logging
import os
import tempfile
from io import BytesIO
from pathlib import Path

from flask import Blueprint, Flask, current_app, jsonify, request, send_file
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..excel.reader import WorkbookReadError, ensure_xlsx
from ..models.config_models import DashboardConfig
from ..services.analysis import AnalysisResult, analyze_workbook

logger = logging.getLogger(__name__)

"""HTTP boundary (Flask).

POST /api/upload      multipart field `excel` (+ optional `targetCac`)
POST /api/report.pdf  same input (+ optional `notes`), returns a PDF download
GET  /api/health

Status codes: 400 missing / non-.xlsx upload, 422 sheet format not
recognized (body carries the table preview), 500 unreadable workbook or
unexpected failure.
"""

__all__ = [
    "api_bp",
    "create_app",
]

api_bp = Blueprint("api_bp", __name__, url_prefix="/api")


class UploadError(Exception):
    """Client-side upload problem, answered with 400."""


def _config() -> DashboardConfig:
    return current_app.config["DASHBOARD"]


def _parse_target_cac(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw.replace(",", "").strip())
    except ValueError:
        raise UploadError("targetCac must be a number.")
    return value if value > 0 else None


def _analyze_upload() -> AnalysisResult:
    """Run the analysis on the uploaded workbook.

    The upload is spooled to a temporary .xlsx file which is always removed
    after parsing.
    """
    cfg = _config()
    f = request.files.get("excel")
    if f is None or not f.filename:
        raise UploadError("No file uploaded.")
    try:
        ensure_xlsx(f.filename, cfg.upload.allowed_extensions)
    except WorkbookReadError as e:
        raise UploadError(str(e))
    target_cac = _parse_target_cac(request.form.get("targetCac"))

    fd, tmp_name = tempfile.mkstemp(suffix=Path(f.filename).suffix.lower())
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            f.save(out)
        result = analyze_workbook(tmp_path, cfg, target_cac=target_cac)
    finally:
        tmp_path.unlink(missing_ok=True)
    logger.info(f"upload '{f.filename}': sheet='{result.sheet_name}' recognized={result.recognized}")
    return result


@api_bp.errorhandler(UploadError)
def _upload_error(e: UploadError):
    return jsonify({"error": str(e)}), 400


@api_bp.errorhandler(WorkbookReadError)
def _read_error(e: WorkbookReadError):
    logger.error(f"upload: {e}")
    return jsonify({"error": str(e)}), 500


@api_bp.post("/upload")
def upload():
    result = _analyze_upload()
    payload = result.to_payload()
    if not result.recognized:
        return jsonify(payload), 422
    return jsonify(payload)


@api_bp.post("/report.pdf")
def report_pdf():
    from ..report.pdf import render_dashboard_pdf

    result = _analyze_upload()
    if not result.recognized:
        return jsonify(result.to_payload()), 422
    source = request.files["excel"].filename
    data = render_dashboard_pdf(
        result,
        source_name=source,
        notes=request.form.get("notes"),
        currency=_config().currency_symbol,
    )
    return send_file(
        BytesIO(data),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"{Path(source).stem}-dashboard.pdf",
    )


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"})


def create_app(config: DashboardConfig | None = None) -> Flask:
    app = Flask(__name__)
    cfg = config or DashboardConfig()
    app.config["DASHBOARD"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.upload.max_bytes
    # series の順序 (シート上の行順) を保つ
    app.json.sort_keys = False
    app.register_blueprint(api_bp)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        return jsonify({"error": f"File too large (max {cfg.upload.max_bytes} bytes)."}), 413

    @app.errorhandler(Exception)
    def _unexpected(e):
        # HTTP 例外 (404/405 等) はそのまま返す
        if isinstance(e, HTTPException):
            return e
        logger.exception("unhandled error")
        return jsonify({"error": str(e) or "Server error."}), 500

    return app
