"""API tests for backup export and restore."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from crewledger.fastapi.core.utils import legacy_uuid


LEGACY_BACKUP = {
    "employees": [
        {"id": "1709625600000", "name": "Ayu", "position": "Picker", "status": "Active"},
    ],
    "pieceRates": [
        {"id": "1709625600100", "taskName": "Harvest", "rate": 10},
    ],
    "dailyLogs": [
        {
            "id": "1709625600200",
            "date": "2024-03-05",
            "tasks": [
                {"pieceRateId": "1709625600100", "taskName": "Harvest", "rate": 10, "quantity": 20, "subTotal": 200},
            ],
            "presentEmployeeIds": ["1709625600000", "1709625600999"],
            "totalGrossEarnings": 150,
        },
        {
            "id": "1709625600300",
            "date": "2024-03-05",
            "tasks": [],
            "customTasks": [{"taskName": "Sorting", "rate": 5, "quantity": 10}],
            "presentEmployeeIds": ["1709625600000"],
        },
    ],
    "payslips": [
        {
            "id": "1709625600400",
            "employeeId": "1709625600000",
            "employeeName": "Ayu",
            "period": "March 2024",
            "logs": [
                {"date": "2024-03-05", "taskName": "Harvest", "totalDailyGross": 200,
                 "workersPresent": 2, "yourEarning": 100},
            ],
            "grossSalary": 100,
            "netSalary": 100,
            "createdAt": "2024-04-01T09:00:00Z",
        },
        {
            "id": "1709625600500",
            "employeeId": "1709625600000",
            "employeeName": "Ayu",
            "period": "Feb payroll",
            "logs": [
                {"date": "2024-02-10", "taskName": "Harvest", "totalDailyGross": 40,
                 "workersPresent": 1, "yourEarning": 40},
            ],
            "grossSalary": 40,
            "netSalary": 40,
            "createdAt": "2024-03-01T09:00:00Z",
        },
    ],
}


def _by_id(records):
    return sorted(records, key=lambda record: record["id"])


def test_export_uses_backup_layout(client, harvest_day):
    client.post("/api/v1/payslips/bulk", json={"period": "2024-03"})

    response = client.get("/api/v1/backup/export")

    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    document = response.json()
    assert set(document) >= {"employees", "pieceRates", "dailyLogs", "payslips"}
    log = document["dailyLogs"][0]
    assert log["presentEmployeeIds"]
    assert log["tasks"][0]["taskName"] == "Harvest"
    assert log["totalGrossEarnings"] == 200
    assert log["individualEarnings"] == 100
    assert document["payslips"][0]["periodKey"] == "2024-03"


def test_export_restore_round_trip(client, harvest_day):
    client.post("/api/v1/payslips/bulk", json={"period": "2024-03"})
    client.delete(f"/api/v1/employees/{harvest_day['crew']['C']['id']}")
    exported = client.get("/api/v1/backup/export").json()

    response = client.post("/api/v1/backup/restore", json=exported)
    again = client.get("/api/v1/backup/export").json()

    assert response.status_code == 200
    summary = response.json()
    assert (summary["employees"], summary["daily_logs"], summary["payslips"]) == (3, 1, 2)
    assert summary["placeholder_employees"] == 0
    for key in ("employees", "pieceRates", "dailyLogs", "payslips"):
        assert _by_id(again[key]) == _by_id(exported[key])


def test_restore_replaces_existing_data(client, harvest_day, create_employee):
    create_employee("Dewi")

    client.post("/api/v1/backup/restore", json=LEGACY_BACKUP)

    names = [e["name"] for e in client.get("/api/v1/employees/").json()["employees"]]
    assert names == ["Ayu"]


def test_restore_repairs_legacy_backup(client):
    response = client.post("/api/v1/backup/restore", json=LEGACY_BACKUP)

    assert response.status_code == 200, response.text
    summary = response.json()
    assert summary["merged_duplicate_dates"] == 1
    assert summary["placeholder_employees"] == 1
    assert summary["daily_logs"] == 1
    assert summary["payslips"] == 2

    log = client.get("/api/v1/daily-logs/date/2024-03-05").json()
    assert log["id"] == str(legacy_uuid("1709625600200"))
    assert Decimal(log["total_gross_earnings"]) == Decimal("250")
    assert log["workers_present"] == 2
    assert Decimal(log["individual_earnings"]) == Decimal("125")
    assert log["tasks"][0]["piece_rate_id"] == str(legacy_uuid("1709625600100"))
    assert log["custom_tasks"][0]["task_name"] == "Sorting"

    employees = client.get("/api/v1/employees/").json()
    assert [e["id"] for e in employees["employees"]] == [str(legacy_uuid("1709625600000"))]

    payslips = client.get("/api/v1/payslips/").json()["payslips"]
    periods = sorted((p["period_year"], p["period_month"], p["period"]) for p in payslips)
    assert periods == [(2024, 2, "February 2024"), (2024, 3, "March 2024")]


def test_restore_requires_all_collections(client, harvest_day):
    response = client.post("/api/v1/backup/restore", json={"employees": [], "pieceRates": []})

    assert response.status_code == 422
    assert "Invalid backup file format" in response.json()["detail"]
    assert client.get("/api/v1/employees/").json()["total"] == 3


def test_failed_restore_keeps_existing_data(client, harvest_day):
    broken = dict(LEGACY_BACKUP, employees=[{"id": "1", "name": "Ayu", "status": "Retired"}])

    response = client.post("/api/v1/backup/restore", json=broken)

    assert response.status_code == 422
    assert client.get("/api/v1/employees/").json()["total"] == 3
    assert client.get("/api/v1/daily-logs/").json()["total"] == 1


def test_placeholder_employees_are_stamped_deleted_in_utc(client):
    client.post("/api/v1/backup/restore", json=LEGACY_BACKUP)

    exported = client.get("/api/v1/backup/export").json()

    ghost = next(e for e in exported["employees"] if e["id"] == str(legacy_uuid("1709625600999")))
    deleted_at = datetime.fromisoformat(ghost["deletedAt"].replace("Z", "+00:00"))
    if deleted_at.tzinfo is None:
        deleted_at = deleted_at.replace(tzinfo=timezone.utc)
    assert ghost["status"] == "Inactive"
    assert abs(datetime.now(timezone.utc) - deleted_at) < timedelta(minutes=5)
