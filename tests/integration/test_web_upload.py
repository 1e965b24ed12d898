from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from adoverview.models.config_models import DashboardConfig, UploadConfig
from adoverview.web.app import create_app


@pytest.fixture()
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def _upload(client, path: Path, url: str = "/api/upload", **form):
    data = {"excel": (io.BytesIO(path.read_bytes()), path.name), **form}
    return client.post(url, data=data, content_type="multipart/form-data")


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_upload_success(client, overview_workbook: Path):
    resp = _upload(client, overview_workbook)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["mode"] == "overview-style"
    assert body["labels"] == ["Jan 25", "Feb 25", "Mar 25", "Apr 25"]
    # series keep sheet row order in the serialized JSON
    raw = json.loads(resp.get_data(as_text=True))
    assert list(raw["series"]) == [
        "Total Ad Spent", "No. of Messages", "Total Revenue", "No. of Customers", "CTR",
    ]
    assert list(raw) == [
        "mode", "sheetName", "labels", "series", "kpis",
        "costPerMessageSeries", "recommendations", "tablePreview",
    ]


def test_upload_target_cac(client, overview_workbook: Path):
    resp = _upload(client, overview_workbook, targetCac="75")
    assert [r["title"] for r in resp.get_json()["recommendations"]] == ["CAC above target"]
    resp = _upload(client, overview_workbook, targetCac="")
    assert [r["title"] for r in resp.get_json()["recommendations"]] == ["Healthy signals"]
    resp = _upload(client, overview_workbook, targetCac="abc")
    assert resp.status_code == 400


def test_upload_without_file(client):
    resp = client.post("/api/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No file uploaded."}


def test_upload_wrong_extension(client, temp_workdir: Path):
    f = temp_workdir / "data.csv"
    f.write_text("a,b\n1,2\n", encoding="utf-8")
    resp = _upload(client, f)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Only .xlsx files are allowed."}


def test_upload_unrecognized(client, unrecognized_workbook: Path):
    resp = _upload(client, unrecognized_workbook)
    assert resp.status_code == 422
    body = resp.get_json()
    assert body["error"] == "Could not detect Overview-style format. Please use the provided sample format."
    assert body["tablePreview"]["sheetName"] == "Sheet1"
    assert body["tablePreview"]["rows"][1] == ["a", 1]


def test_upload_corrupt_workbook(client, temp_workdir: Path):
    f = temp_workdir / "broken.xlsx"
    f.write_bytes(b"garbage")
    resp = _upload(client, f)
    assert resp.status_code == 500
    assert "cannot read workbook" in resp.get_json()["error"]


def test_upload_too_large(overview_workbook: Path):
    app = create_app(DashboardConfig(upload=UploadConfig(max_bytes=100)))
    resp = _upload(app.test_client(), overview_workbook)
    assert resp.status_code == 413
    assert "too large" in resp.get_json()["error"]


def test_report_pdf(client, overview_workbook: Path):
    resp = _upload(client, overview_workbook, url="/api/report.pdf", notes="Check March gap")
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")
    assert "overview-dashboard.pdf" in resp.headers["Content-Disposition"]


def test_report_pdf_unrecognized(client, unrecognized_workbook: Path):
    resp = _upload(client, unrecognized_workbook, url="/api/report.pdf")
    assert resp.status_code == 422
