"""API tests for saving, re-opening and listing daily group logs."""

import logging
from decimal import Decimal
from uuid import UUID, uuid4

from crewledger.fastapi.crud.daily_log import repair_cached_totals
from crewledger.fastapi.models.daily_log import DailyGroupLog


def test_save_computes_totals(harvest_day):
    log = harvest_day["log"]

    assert log["log_date"] == "2024-03-05"
    assert Decimal(log["total_gross_earnings"]) == Decimal("200")
    assert Decimal(log["individual_earnings"]) == Decimal("100")
    assert log["workers_present"] == 2
    assert log["tasks"][0]["task_name"] == "Harvest"
    assert Decimal(log["tasks"][0]["sub_total"]) == Decimal("200")


def test_resaving_a_date_replaces_the_log(client, harvest_day, save_log):
    crew = harvest_day["crew"]

    response = save_log(
        "2024-03-05",
        tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "30"}],
        present=[crew["A"]["id"], crew["B"]["id"], crew["C"]["id"]],
    )

    assert response.status_code == 200
    assert response.json()["id"] == harvest_day["log"]["id"]
    assert Decimal(response.json()["individual_earnings"]) == Decimal("100")
    listing = client.get("/api/v1/daily-logs/").json()
    assert listing["total"] == 1
    assert listing["daily_logs"][0]["workers_present"] == 3


def test_reopened_tasks_keep_their_copied_rate(client, harvest_day, save_log):
    rate_id = harvest_day["rate"]["id"]
    client.put(f"/api/v1/piece-rates/{rate_id}", json={"rate": "15", "task_name": "Picking"})

    reopened = client.get("/api/v1/daily-logs/date/2024-03-05").json()
    task = reopened["tasks"][0]
    resaved = save_log(
        "2024-03-05",
        tasks=[{
            "piece_rate_id": task["piece_rate_id"],
            "task_name": task["task_name"],
            "rate": task["rate"],
            "quantity": task["quantity"],
        }],
        present=reopened["present_employee_ids"],
    ).json()

    assert task["task_name"] == "Harvest"
    assert Decimal(task["rate"]) == Decimal("10")
    assert Decimal(resaved["total_gross_earnings"]) == Decimal("200")


def test_new_catalog_task_uses_current_rate(client, harvest_day, save_log):
    rate_id = harvest_day["rate"]["id"]
    client.put(f"/api/v1/piece-rates/{rate_id}", json={"rate": "15"})
    crew = harvest_day["crew"]

    log = save_log(
        "2024-03-06",
        tasks=[{"piece_rate_id": rate_id, "quantity": "20"}],
        present=[crew["A"]["id"]],
    ).json()

    assert Decimal(log["total_gross_earnings"]) == Decimal("300")


def test_custom_tasks_contribute(harvest_day, save_log):
    crew = harvest_day["crew"]

    log = save_log(
        "2024-03-07",
        custom_tasks=[{"task_name": "Sorting", "rate": "5", "quantity": "10"}],
        present=[crew["A"]["id"], crew["B"]["id"]],
    ).json()

    assert log["tasks"] == []
    assert log["custom_tasks"][0]["task_name"] == "Sorting"
    assert Decimal(log["individual_earnings"]) == Decimal("25")


def test_log_requires_tasks_and_presence(harvest_day, save_log):
    crew = harvest_day["crew"]
    rate_id = harvest_day["rate"]["id"]

    no_tasks = save_log("2024-03-08", present=[crew["A"]["id"]])
    nobody = save_log("2024-03-08", tasks=[{"piece_rate_id": rate_id, "quantity": "1"}])

    assert no_tasks.status_code == 422
    assert nobody.status_code == 422


def test_non_positive_quantity_is_rejected(harvest_day, save_log):
    response = save_log(
        "2024-03-08",
        tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "0"}],
        present=[harvest_day["crew"]["A"]["id"]],
    )

    assert response.status_code == 422


def test_unknown_rate_or_employee_is_404(harvest_day, save_log):
    crew = harvest_day["crew"]

    unknown_rate = save_log("2024-03-08", tasks=[{"piece_rate_id": str(uuid4()), "quantity": "1"}],
                            present=[crew["A"]["id"]])
    unknown_employee = save_log("2024-03-08", tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "1"}],
                                present=[str(uuid4())])

    assert unknown_rate.status_code == 404
    assert unknown_employee.status_code == 404


def test_inactive_employee_cannot_be_newly_marked_present(client, harvest_day, save_log):
    crew = harvest_day["crew"]
    client.patch(f"/api/v1/employees/{crew['C']['id']}/status", json={"status": "Inactive"})

    response = save_log(
        "2024-03-08",
        tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "1"}],
        present=[crew["C"]["id"]],
    )

    assert response.status_code == 422


def test_inactive_employee_already_present_may_stay(client, harvest_day, save_log):
    crew = harvest_day["crew"]
    client.patch(f"/api/v1/employees/{crew['B']['id']}/status", json={"status": "Inactive"})

    response = save_log(
        "2024-03-05",
        tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "40"}],
        present=[crew["A"]["id"], crew["B"]["id"]],
    )

    assert response.status_code == 200
    assert Decimal(response.json()["individual_earnings"]) == Decimal("200")


def test_reads_ignore_stale_cached_totals(client, harvest_day, db_session):
    log = db_session.get(DailyGroupLog, UUID(harvest_day["log"]["id"]))
    log.total_gross_earnings = Decimal("1")
    log.individual_earnings = Decimal("1")
    db_session.commit()

    reopened = client.get(f"/api/v1/daily-logs/{harvest_day['log']['id']}").json()

    assert Decimal(reopened["total_gross_earnings"]) == Decimal("200")
    assert Decimal(reopened["individual_earnings"]) == Decimal("100")


def test_list_by_period(client, harvest_day, save_log):
    crew = harvest_day["crew"]
    save_log("2024-04-01", tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "1"}],
             present=[crew["A"]["id"]])

    march = client.get("/api/v1/daily-logs/", params={"period": "2024-03"}).json()
    everything = client.get("/api/v1/daily-logs/").json()

    assert [log["log_date"] for log in march["daily_logs"]] == ["2024-03-05"]
    assert [log["log_date"] for log in everything["daily_logs"]] == ["2024-04-01", "2024-03-05"]
    assert client.get("/api/v1/daily-logs/", params={"period": "2024-13"}).status_code == 422


def test_deleting_a_rate_keeps_recorded_tasks(client, harvest_day):
    client.delete(f"/api/v1/piece-rates/{harvest_day['rate']['id']}")

    task = client.get("/api/v1/daily-logs/date/2024-03-05").json()["tasks"][0]

    assert task["piece_rate_id"] is None
    assert task["task_name"] == "Harvest"


def test_delete_log(client, harvest_day):
    log_id = harvest_day["log"]["id"]

    assert client.delete(f"/api/v1/daily-logs/{log_id}").status_code == 204
    assert client.get(f"/api/v1/daily-logs/{log_id}").status_code == 404
    assert client.get("/api/v1/daily-logs/date/2024-03-05").status_code == 404


def test_repair_rewrites_stale_cached_totals(harvest_day, db_session):
    log = db_session.get(DailyGroupLog, UUID(harvest_day["log"]["id"]))
    log.total_gross_earnings = Decimal("1")
    db_session.commit()

    reported = repair_cached_totals(db_session, dry_run=True)
    assert [row.id for row in reported] == [log.id]
    db_session.refresh(log)
    assert log.total_gross_earnings == Decimal("1")

    repaired = repair_cached_totals(db_session)
    db_session.refresh(log)

    assert len(repaired) == 1
    assert log.total_gross_earnings == Decimal("200")
    assert log.individual_earnings == Decimal("100")
    assert repair_cached_totals(db_session) == []


def test_copied_task_must_come_from_the_stored_log(client, harvest_day, save_log):
    crew = harvest_day["crew"]
    forged = {"piece_rate_id": harvest_day["rate"]["id"], "task_name": "Harvest", "rate": "999", "quantity": "1"}

    new_date = save_log("2024-03-06", tasks=[forged], present=[crew["A"]["id"]])
    resaved = save_log("2024-03-05", tasks=[forged], present=[crew["A"]["id"]])
    unlinked = save_log("2024-03-06", tasks=[dict(forged, piece_rate_id=None)], present=[crew["A"]["id"]])

    assert new_date.status_code == 422
    assert resaved.status_code == 422
    assert unlinked.status_code == 422
    assert client.get("/api/v1/daily-logs/date/2024-03-06").status_code == 404
    stored = client.get("/api/v1/daily-logs/date/2024-03-05").json()
    assert Decimal(stored["total_gross_earnings"]) == Decimal("200")


def test_copied_task_matching_the_catalog_is_accepted(harvest_day, save_log):
    task = {"piece_rate_id": harvest_day["rate"]["id"], "task_name": "Harvest", "rate": "10", "quantity": "3"}

    response = save_log("2024-03-06", tasks=[task], present=[harvest_day["crew"]["A"]["id"]])

    assert response.status_code == 200
    assert Decimal(response.json()["total_gross_earnings"]) == Decimal("30")


def test_quantities_beyond_stored_precision_are_rejected(client, harvest_day, save_log):
    crew = harvest_day["crew"]

    catalog = save_log("2024-03-06", tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "0.00001"}],
                       present=[crew["A"]["id"]])
    custom = save_log("2024-03-06", custom_tasks=[{"task_name": "Sorting", "rate": "0.123456", "quantity": "1"}],
                      present=[crew["A"]["id"]])

    assert catalog.status_code == 422
    assert custom.status_code == 422
    assert client.get("/api/v1/daily-logs/date/2024-03-06").status_code == 404


def test_resave_reports_stale_cached_totals(harvest_day, db_session, save_log, caplog):
    log = db_session.get(DailyGroupLog, UUID(harvest_day["log"]["id"]))
    log.total_gross_earnings = Decimal("1")
    db_session.commit()
    crew = harvest_day["crew"]

    with caplog.at_level(logging.INFO, logger="crewledger.fastapi.crud.daily_log"):
        save_log("2024-03-05", tasks=[{"piece_rate_id": harvest_day["rate"]["id"], "quantity": "20"}],
                 present=[crew["A"]["id"], crew["B"]["id"]])

    stale = [r.getMessage() for r in caplog.records if "were stale" in r.getMessage()]
    assert len(stale) == 1
    assert "gross 1" in stale[0]
    assert "-> 200" in stale[0]
