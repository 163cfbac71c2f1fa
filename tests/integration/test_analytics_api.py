import pytest

AS_OF = "2025-03-01T00:00:00Z"


def _backfill(client, headers, backdate, created_at, complete=False, **fields):
    payload = {"title": "Backfilled"}
    payload.update(fields)
    task = client.post("/tasks", json=payload, headers=headers).json()
    backdate(task["id"], created_at)
    if complete:
        task = client.post(f"/tasks/{task['id']}/toggle", headers=headers).json()
    return task


def test_golden_january(client, make_user, backdate):
    _, headers = make_user()
    _backfill(
        client, headers, backdate, "2025-01-07T09:00:00Z", complete=True,
        description="Prepare slides", estimated_time=1.5,
    )
    _backfill(client, headers, backdate, "2025-01-07T10:00:00Z")

    response = client.get(
        "/analytics", params={"year": 2025, "month": 1, "as_of": AS_OF}, headers=headers
    )
    assert response.status_code == 200
    report = response.json()

    assert report["task_count"] == 2
    assert len(report["monthly_data"]) == 1
    january = report["monthly_data"][0]
    assert january["month"] == "January"
    assert [w["week_start"] for w in january["weekly_data"]][:2] == ["2024-12-29", "2025-01-05"]

    week = january["weekly_data"][1]
    assert (week["dp"], week["rh"], week["wo"]) == (20, 10, 15)
    assert week["percentage"] == pytest.approx(16.0)
    assert week["status"] == "completed"
    assert len(week["tasks"]) == 2
    assert all(w["status"] == "not_sent" for i, w in enumerate(january["weekly_data"]) if i != 1)

    assert january["staff"] == pytest.approx(3.2)
    assert january["structural"] == pytest.approx(11.56)
    assert january["average"] == pytest.approx(7.38)

    assert report["weekly_data"][0]["month"] == "January"
    assert report["distribution"]["total_weeks"] == 5
    assert report["overall"]["monthly_target"] == 95.0
    assert report["overall"]["achievement"] == "C"


def test_late_status_follows_as_of(client, make_user, backdate):
    _, headers = make_user()
    _backfill(client, headers, backdate, "2025-01-06T08:00:00Z", deadline="2025-01-10T17:00:00Z")

    def second_week(as_of):
        report = client.get(
            "/analytics", params={"year": 2025, "month": 1, "as_of": as_of}, headers=headers
        ).json()
        return report["monthly_data"][0]["weekly_data"][1]["status"]

    assert second_week("2025-01-09T00:00:00Z") == "completed"
    assert second_week("2025-01-11T00:00:00Z") == "late"


def test_full_year_report(client, make_user):
    _, headers = make_user()
    report = client.get("/analytics", params={"year": 2024, "as_of": AS_OF}, headers=headers).json()

    assert [m["month"] for m in report["monthly_data"]][0] == "January"
    assert len(report["monthly_data"]) == 12
    assert report["overall"]["overall_score"] == 0
    assert report["formulas"]["structural"] == "(Avg Score TAL x 80%) + (MO x 20%)"


def test_invalid_period(client, make_user):
    _, headers = make_user()
    assert client.get("/analytics", params={"year": 2025, "month": 13}, headers=headers).status_code == 400
    assert client.get("/analytics", params={"year": 1500}, headers=headers).status_code == 400


def test_other_users_tasks_do_not_count(client, make_user, backdate):
    _, owner = make_user()
    _, other = make_user()
    _backfill(client, owner, backdate, "2025-02-03T08:00:00Z", complete=True)

    report = client.get("/analytics", params={"year": 2025, "month": 2, "as_of": AS_OF}, headers=other).json()
    assert report["task_count"] == 0


def test_preview_scores_unsaved_tasks(client, make_user):
    _, headers = make_user()
    tasks = [
        {
            "id": "a", "title": "Plan", "description": "d", "estimated_time": 2,
            "completed": True, "completed_at": "2025-01-07T12:00:00Z",
            "created_at": "2025-01-07T09:00:00Z", "category": "Work",
        },
        {"id": "b", "title": "Open", "created_at": "2025-01-07T10:00:00Z", "category": "Work"},
    ]

    response = client.post(
        "/analytics/preview",
        json={"tasks": tasks, "year": 2025, "month": 1, "as_of": AS_OF},
        headers=headers,
    )
    assert response.status_code == 200
    january = response.json()["monthly_data"][0]
    assert january["average"] == pytest.approx(7.38)

    # nothing was stored
    assert client.get("/tasks", headers=headers).json() == []


@pytest.mark.parametrize(
    "percentage, grade, severity",
    [(100, "A+", "excellent"), (90, "A", "good"), (84.99, "B", "fair"), (77, "C", "fair"), (0, "C", "poor")],
)
def test_grade_endpoint(client, percentage, grade, severity):
    response = client.get("/analytics/grade", params={"percentage": percentage})
    assert response.status_code == 200
    assert response.json() == {"percentage": percentage, "grade": grade, "severity": severity}


def test_grade_endpoint_rejects_out_of_range(client):
    assert client.get("/analytics/grade", params={"percentage": 101}).status_code == 422
