from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from staffbook.core.config import settings
from staffbook.core.store import get_store
from staffbook.main import create_app

EMPLOYEES_CSV = (
    b"name,employeeId,employeeType,designation,salaryPerDay\n"
    b"Asha,E1,Staff,Clerk,500\n"
    b",E2,staff,Loader,\n"
    b"Mina,E3,manager,Accountant,abc\n"
    b"Ravi,E4,LABOUR,Loader,450\n"
)


@pytest.fixture
def client(store):
    app = create_app(with_db=False)
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_list_import_types(client):
    resp = client.get("/api/import/types")

    assert resp.status_code == 200
    types = {t["type"]: t for t in resp.json()}
    assert types["employee"]["required_fields"] == ["name", "employeeId", "employeeType", "designation"]
    assert types["holiday"]["collection"] == "holidays"


def test_import_employees(client, store):
    resp = client.post(
        "/api/import/employees",
        files={"file": ("employees.csv", EMPLOYEES_CSV, "text/csv")},
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": 2,
        "errors": [
            "Row 3: Missing required field: name",
            "Row 4: Employee type must be staff or labour, Salary per day must be a number",
        ],
        "warnings": [],
    }
    saved = store.collections["employees"]
    assert [d["employeeId"] for d in saved] == ["E1", "E4"]
    assert saved[1]["employeeType"] == "labour"
    assert saved[1]["salaryPerDay"] == 450


def test_preview_reports_headers_rows_and_dry_run(client, store):
    resp = client.post(
        "/api/import/employee/preview",
        files={"file": ("employees.csv", EMPLOYEES_CSV, "text/csv")},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["headers"] == ["name", "employeeId", "employeeType", "designation", "salaryPerDay"]
    assert body["total_rows"] == 4
    assert len(body["preview_rows"]) == 4
    assert body["summary"]["will_succeed"] == 2
    assert body["summary"]["will_fail"] == 2
    assert [r["status"] for r in body["rows"]] == ["valid", "error", "error", "valid"]
    assert body["rows"][0]["normalized_data"]["employeeType"] == "staff"
    # a preview never writes
    assert store.create_calls == []


def test_preview_is_capped(client, monkeypatch):
    monkeypatch.setattr(settings, "PREVIEW_ROWS", 2)

    resp = client.post(
        "/api/import/employee/preview",
        files={"file": ("employees.csv", EMPLOYEES_CSV, "text/csv")},
    )

    assert len(resp.json()["preview_rows"]) == 2


def test_oversized_upload_is_rejected(client, store, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)

    resp = client.post(
        "/api/import/employee",
        files={"file": ("employees.csv", EMPLOYEES_CSV, "text/csv")},
    )

    assert resp.status_code == 413
    assert store.create_calls == []


def test_strict_holiday_dates_setting(client, store, monkeypatch):
    monkeypatch.setattr(settings, "STRICT_HOLIDAY_DATES", True)

    resp = client.post(
        "/api/import/holiday",
        files={"file": ("holidays.csv", b"name,date\nDiwali,someday\nHoli,2024-03-25\n", "text/csv")},
    )

    assert resp.json()["success"] == 1
    assert resp.json()["errors"] == ["Row 2: Date must be a valid date"]


def test_empty_upload_is_rejected(client, store):
    resp = client.post(
        "/api/import/holiday",
        files={"file": ("holidays.csv", b"name,date\n", "text/csv")},
    )

    assert resp.status_code == 400
    assert store.create_calls == []


def test_unreadable_upload_is_rejected(client):
    resp = client.post(
        "/api/import/holiday",
        files={"file": ("holidays.xlsx", b"PK\x03\x04garbage", "application/octet-stream")},
    )

    assert resp.status_code == 400


def test_unknown_import_type(client):
    resp = client.post(
        "/api/import/payslips",
        files={"file": ("x.csv", b"name\nA\n", "text/csv")},
    )

    assert resp.status_code == 400


def test_download_template(client):
    resp = client.get("/api/import/company/template")

    assert resp.status_code == 200
    assert "company-template.xlsx" in resp.headers["content-disposition"]
    ws = load_workbook(io.BytesIO(resp.content)).active
    assert [list(r) for r in ws.iter_rows(values_only=True)] == [["name"], ["ABC Corporation"]]


def test_master_data_export(client):
    resp = client.get("/api/export/master-data")

    assert resp.status_code == 200
    assert "master-data-" in resp.headers["content-disposition"]
    assert load_workbook(io.BytesIO(resp.content)).sheetnames == [
        "Companies", "Units", "Groups", "Shifts", "Holidays",
    ]


def test_csv_export(client, store):
    store.collections["employees"].append({"id": "x1", "name": "Asha"})

    resp = client.get("/api/export/employees", params={"format": "csv"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.content.decode("utf-8-sig").splitlines() == ["id,name", "x1,Asha"]


def test_unknown_export_kind(client):
    assert client.get("/api/export/payroll").status_code == 422


def test_export_with_store_down(make_store):
    app = create_app(with_db=False)
    app.dependency_overrides[get_store] = lambda: make_store(unavailable=True)
    with TestClient(app) as c:
        assert c.get("/api/export/complete-backup").status_code == 503
        assert c.get("/api/export/allowances/monthly-report").status_code == 503


def test_allowance_report_download(client, store):
    store.collections["allowances"].append({"employeeId": "E1", "date": "2026-10-02", "type": "food", "amount": 30})

    resp = client.get("/api/export/allowances/monthly-report")

    assert resp.status_code == 200
    assert "Allowance_Report.xlsx" in resp.headers["content-disposition"]
    assert load_workbook(io.BytesIO(resp.content)).sheetnames == ["October 2026"]
