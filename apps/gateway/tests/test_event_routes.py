"""活动运营路由测试

测试内容：
1. 发布活动：201 / 同时段冲突 409 / force 强制发布 / 无权 403
2. 冲突预检
3. 任务与预算：创建、修改、删除，修改后重新读取可见
4. 错误结构：未知活动 404、校验失败 422
"""

from datetime import date

from httpx import AsyncClient

CLUB_ID = "club-robotics"


def _draft(**overrides) -> dict:
    body = {
        "title": "Chess Night",
        "date": "2026-11-14",
        "time_display": "2:00 PM - 4:00 PM",
        "club_id": CLUB_ID,
        "club_name": "Robotics Club",
    }
    body.update(overrides)
    return body


class TestPublishEvent:
    async def test_publish_returns_201(self, client: AsyncClient, officer_headers):
        resp = await client.post("/api/events", json=_draft(), headers=officer_headers)

        assert resp.status_code == 201
        data = resp.json()
        assert data["published"] is True
        event_id = data["event_id"]

        ops = await client.get(f"/api/events/{event_id}/operations")
        assert ops.status_code == 200
        assert ops.json()["event"]["time_display"] == "2:00 PM - 4:00 PM"

    async def test_time_display_from_24h_times(self, client: AsyncClient, officer_headers):
        body = _draft(time_display=None, start_time="18:15", end_time="20:00")
        resp = await client.post("/api/events", json=body, headers=officer_headers)

        event_id = resp.json()["event_id"]
        ops = (await client.get(f"/api/events/{event_id}/operations")).json()
        assert ops["event"]["time_display"] == "6:15 PM - 8:00 PM"

    async def test_same_start_time_conflicts(
        self, client: AsyncClient, officer_headers, stored_event
    ):
        resp = await client.post("/api/events", json=_draft(), headers=officer_headers)

        assert resp.status_code == 409
        data = resp.json()
        assert data["error"]["code"] == "EVENT_COLLISION"
        assert [c["event_id"] for c in data["collisions"]] == [stored_event.event_id]
        assert data["collisions"][0]["club_name"] == "Robotics Club"

    async def test_force_publishes_despite_conflict(
        self, client: AsyncClient, officer_headers, stored_event
    ):
        resp = await client.post(
            "/api/events?force=true", json=_draft(), headers=officer_headers
        )
        assert resp.status_code == 201

    async def test_announcement_skips_collision_check(
        self, client: AsyncClient, officer_headers, stored_event
    ):
        resp = await client.post(
            "/api/events", json=_draft(kind="announcement"), headers=officer_headers
        )
        assert resp.status_code == 201

    async def test_other_club_forbidden(self, client: AsyncClient, outsider_headers):
        resp = await client.post("/api/events", json=_draft(), headers=outsider_headers)

        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "PERMISSION_DENIED"

    async def test_missing_title_rejected(self, client: AsyncClient, officer_headers):
        resp = await client.post(
            "/api/events", json=_draft(title=""), headers=officer_headers
        )
        assert resp.status_code == 422


class TestCollisionCheck:
    async def test_reports_collisions(self, client: AsyncClient, stored_event):
        resp = await client.post(
            "/api/events/collisions",
            json={"date": "2026-11-14", "start_time": "14:00"},
        )
        assert resp.status_code == 200
        assert [c["event_id"] for c in resp.json()["collisions"]] == [stored_event.event_id]

    async def test_candidate_excluded(self, client: AsyncClient, stored_event):
        resp = await client.post(
            "/api/events/collisions",
            json={
                "date": "2026-11-14",
                "start_time": "14:00",
                "candidate_event_id": stored_event.event_id,
            },
        )
        assert resp.json()["collisions"] == []

    async def test_different_minute(self, client: AsyncClient, stored_event):
        resp = await client.post(
            "/api/events/collisions",
            json={"date": str(date(2026, 11, 14)), "start_time": "14:30"},
        )
        assert resp.json()["collisions"] == []


class TestOperations:
    async def test_unknown_event_404(self, client: AsyncClient):
        resp = await client.get("/api/events/does-not-exist/operations")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EVENT_NOT_FOUND"

    async def test_empty_operations(self, client: AsyncClient, stored_event):
        resp = await client.get(f"/api/events/{stored_event.event_id}/operations")

        data = resp.json()
        assert data["tasks"] == []
        assert data["budget"]["items"] == []
        assert data["participants"]["summary"]["total"] == 0

    async def test_read_is_open_but_write_requires_officer(
        self, client: AsyncClient, stored_event, outsider_headers
    ):
        url = f"/api/events/{stored_event.event_id}/tasks"
        resp = await client.post(url, json={"title": "Sneaky"}, headers=outsider_headers)
        assert resp.status_code == 403

        resp = await client.post(url, json={"title": "Anonymous"})
        assert resp.status_code == 403

        ops = await client.get(f"/api/events/{stored_event.event_id}/operations")
        assert ops.json()["tasks"] == []

    async def test_put_replaces_tasks_and_budget(
        self, client: AsyncClient, stored_event, officer_headers
    ):
        base = f"/api/events/{stored_event.event_id}"
        await client.post(f"{base}/tasks", json={"title": "Old"}, headers=officer_headers)

        resp = await client.put(
            f"{base}/operations",
            json={
                "tasks": [
                    {
                        "task_id": "t-1",
                        "title": "Book hall",
                        "assigned_to": ["Meera"],
                        "created_by": "Asha",
                        "created_at": "2026-10-18T10:00:00Z",
                    }
                ],
                "budget": [
                    {"item_id": "b-1", "description": "Hall", "estimated_cost": "500"}
                ],
            },
            headers=officer_headers,
        )

        assert resp.status_code == 200
        assert resp.json() == {"event_id": stored_event.event_id, "saved": True}
        data = (await client.get(f"{base}/operations")).json()
        assert [t["title"] for t in data["tasks"]] == ["Book hall"]
        assert data["budget"]["totals"]["total_estimated"] == "500"

    async def test_put_negative_amount_422(
        self, client: AsyncClient, stored_event, officer_headers
    ):
        base = f"/api/events/{stored_event.event_id}"
        resp = await client.put(
            f"{base}/operations",
            json={
                "tasks": [],
                "budget": [
                    {
                        "item_id": "b-1",
                        "description": "Refund",
                        "estimated_cost": "-500",
                        "actual_cost": "-20",
                        "paid": True,
                    }
                ],
            },
            headers=officer_headers,
        )

        assert resp.status_code == 422
        assert resp.json()["detail"][0]["loc"][:3] == ["body", "budget", 0]
        assert (await client.get(f"{base}/operations")).json()["budget"]["items"] == []

    async def test_summaries(self, client: AsyncClient, stored_event, officer_headers):
        base = f"/api/events/{stored_event.event_id}"
        late = (
            await client.post(
                f"{base}/tasks",
                json={"title": "Old errand", "deadline": "2020-01-01"},
                headers=officer_headers,
            )
        ).json()
        done = (
            await client.post(
                f"{base}/tasks",
                json={"title": "Posters", "deadline": "2020-01-01"},
                headers=officer_headers,
            )
        ).json()
        await client.patch(
            f"{base}/tasks/{done['task_id']}",
            json={"status": "completed"},
            headers=officer_headers,
        )
        for description, category, cost in (
            ("Hall", "venue", 100),
            ("Stage", "venue", 30),
            ("Pizza", "catering", 45),
        ):
            await client.post(
                f"{base}/budget",
                json={"description": description, "category": category, "estimated_cost": cost},
                headers=officer_headers,
            )

        data = (await client.get(f"{base}/operations")).json()

        assert data["task_summary"] == {
            "status_counts": {"pending": 1, "in-progress": 0, "completed": 1},
            "overdue": [late["task_id"]],
        }
        by_category = data["budget"]["by_category"]
        assert set(by_category) == {"venue", "catering"}
        assert by_category["venue"]["total_estimated"] == "130"
        assert by_category["catering"]["total_estimated"] == "45"


class TestTaskRoutes:
    async def test_create_task_notifies_assignees(
        self, client: AsyncClient, test_app, stored_event, officer_headers
    ):
        resp = await client.post(
            f"/api/events/{stored_event.event_id}/tasks",
            json={"title": "Book hall", "assigned_to": ["Meera"], "deadline": "2026-11-01"},
            headers=officer_headers,
        )

        assert resp.status_code == 201
        task = resp.json()
        assert task["status"] == "pending"
        assert task["assigned_to_emails"] == ["meera@club.org"]
        assert task["created_by"] == "Asha"

        notifier = test_app.state.notifier
        notifier.send_task_assignment_emails.assert_awaited_once()
        assert notifier.send_task_assignment_emails.await_args.kwargs["addresses"] == [
            "meera@club.org"
        ]

    async def test_blank_title_422(self, client: AsyncClient, stored_event, officer_headers):
        resp = await client.post(
            f"/api/events/{stored_event.event_id}/tasks",
            json={"title": "   "},
            headers=officer_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"

    async def test_status_change_and_delete(
        self, client: AsyncClient, stored_event, officer_headers
    ):
        base = f"/api/events/{stored_event.event_id}"
        task = (
            await client.post(f"{base}/tasks", json={"title": "Posters"}, headers=officer_headers)
        ).json()
        assert task["assigned_to"] == ["Unassigned"]

        resp = await client.patch(
            f"{base}/tasks/{task['task_id']}",
            json={"status": "completed"},
            headers=officer_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

        data = (await client.get(f"{base}/operations")).json()
        assert data["tasks"][0]["status"] == "completed"

        resp = await client.delete(f"{base}/tasks/{task['task_id']}", headers=officer_headers)
        assert resp.json() == {"task_id": task["task_id"], "deleted": True}
        assert (await client.get(f"{base}/operations")).json()["tasks"] == []

    async def test_unknown_task_404(self, client: AsyncClient, stored_event, officer_headers):
        resp = await client.patch(
            f"/api/events/{stored_event.event_id}/tasks/missing",
            json={"status": "completed"},
            headers=officer_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


class TestBudgetRoutes:
    async def test_budget_lifecycle(self, client: AsyncClient, stored_event, officer_headers):
        base = f"/api/events/{stored_event.event_id}"
        hall = (
            await client.post(
                f"{base}/budget",
                json={"description": "Hall", "category": "venue", "estimated_cost": 100},
                headers=officer_headers,
            )
        ).json()
        food = (
            await client.post(
                f"{base}/budget",
                json={"description": "Food", "category": "catering", "estimated_cost": 50},
                headers=officer_headers,
            )
        ).json()

        resp = await client.patch(
            f"{base}/budget/{hall['item_id']}",
            json={"actual_cost": 120, "paid": True},
            headers=officer_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["paid"] is True
        await client.patch(
            f"{base}/budget/{food['item_id']}",
            json={"actual_cost": 40},
            headers=officer_headers,
        )

        totals = (await client.get(f"{base}/operations")).json()["budget"]["totals"]
        assert totals == {
            "total_estimated": "150",
            "total_actual": "160",
            "total_paid": "120",
            "total_unpaid": "40",
        }

        resp = await client.delete(f"{base}/budget/{hall['item_id']}", headers=officer_headers)
        assert resp.status_code == 200
        items = (await client.get(f"{base}/operations")).json()["budget"]["items"]
        assert [i["description"] for i in items] == ["Food"]

    async def test_negative_amount_rejected(
        self, client: AsyncClient, stored_event, officer_headers
    ):
        resp = await client.post(
            f"/api/events/{stored_event.event_id}/budget",
            json={"description": "Refund", "estimated_cost": -5},
            headers=officer_headers,
        )
        assert resp.status_code == 422

    async def test_unknown_item_404(self, client: AsyncClient, stored_event, officer_headers):
        resp = await client.delete(
            f"/api/events/{stored_event.event_id}/budget/missing", headers=officer_headers
        )
        assert resp.status_code == 404
