"""
Clinic Tracker Backend — Daily Archive API Tests
=================================================

What:  Endpoint tests for /api/archive.

What we test:
    ✅ Archiving reports per-log counts with camelCase keys
    ✅ Only rows of the requested date are captured
    ✅ Reading an archive returns the decoded rows, [] for empty logs
    ✅ Archiving the same day again replaces the snapshot (deleted rows drop out)
    ✅ A failure part-way through → 500, earlier snapshot left untouched
    ✅ Undecodable stored columns come back as [] and are named
    ✅ Unknown user → 404, missing archive → 404
"""

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from clinic_api.models import DailyArchive
from clinic_api.services.record_service import record_service


async def seed_day(client, user_id, day="2024-03-01"):
    await client.post(
        "/api/breakfast",
        json={"user_id": user_id, "breakfast_text": "Oatmeal", "breakfast_date": day},
    )
    await client.post(
        "/api/breakfast",
        json={"user_id": user_id, "breakfast_text": "Coffee", "breakfast_date": day},
    )
    await client.post(
        "/api/weight", json={"user_id": user_id, "weight": 71.2, "weight_date": day}
    )


class TestCreateArchive:

    @pytest.mark.asyncio
    async def test_counts(self, test_client, user):
        await seed_day(test_client, user.id)
        # Different day, must not be captured
        await seed_day(test_client, user.id, day="2024-03-02")

        response = await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Archive completed"
        assert body["archivedDate"] == "2024-03-01"
        assert body["archivedCounts"] == {
            "breakfasts": 2,
            "lunches": 0,
            "dinners": 0,
            "snacks": 0,
            "exercises": 0,
            "weights": 1,
            "dailyReviews": 0,
        }

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, test_client, user):
        response = await test_client.post(
            "/api/archive", json={"userId": user.id + 10, "archiveDate": "2024-03-01"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_rearchive_replaces_snapshot(self, test_client, user, session_factory):
        await seed_day(test_client, user.id)
        await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )
        day_rows = await test_client.get(f"/api/breakfast/date/2024-03-01/user/{user.id}")
        oatmeal = next(row for row in day_rows.json() if row["breakfast_text"] == "Oatmeal")
        await test_client.delete(f"/api/breakfast/{oatmeal['id']}/user/{user.id}")
        await test_client.post(
            "/api/lunch",
            json={"user_id": user.id, "lunch_text": "Soup", "lunch_date": "2024-03-01"},
        )

        response = await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )
        stored = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")

        assert response.json()["archivedCounts"]["breakfasts"] == 1
        assert response.json()["archivedCounts"]["lunches"] == 1
        assert [row["breakfast_text"] for row in stored.json()["breakfast_data"]] == ["Coffee"]
        assert [row["lunch_text"] for row in stored.json()["lunch_data"]] == ["Soup"]
        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(DailyArchive))
        assert count == 1

    @pytest.mark.asyncio
    async def test_failure_mid_sequence_keeps_previous_snapshot(
        self, test_client, user, monkeypatch
    ):
        await seed_day(test_client, user.id)
        await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )
        before = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")
        await test_client.post(
            "/api/lunch",
            json={"user_id": user.id, "lunch_text": "Soup", "lunch_date": "2024-03-01"},
        )

        original = record_service.fetch_for_date
        calls = []

        async def fail_on_snacks(db, kind, user_id, day):
            calls.append(kind.name)
            if len(calls) == 4:
                raise OperationalError("SELECT", {}, Exception("connection lost"))
            return await original(db, kind, user_id, day)

        monkeypatch.setattr(record_service, "fetch_for_date", fail_on_snacks)

        response = await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )
        monkeypatch.undo()
        after = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")

        assert len(calls) == 4
        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert "connection lost" not in response.json()["message"]
        assert after.status_code == 200
        assert after.json() == before.json()
        assert after.json()["lunch_data"] == []


class TestGetArchive:

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client, user):
        await seed_day(test_client, user.id)
        await test_client.post(
            "/api/archive", json={"userId": user.id, "archiveDate": "2024-03-01"}
        )

        response = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")

        body = response.json()
        assert response.status_code == 200
        assert body["archive_date"] == "2024-03-01"
        assert body["user_id"] == user.id
        assert [row["breakfast_text"] for row in body["breakfast_data"]] == ["Oatmeal", "Coffee"]
        assert body["weight_data"][0]["weight"] == 71.2
        assert body["dinner_data"] == []
        assert body["daily_review_data"] == []
        assert body["decode_fallbacks"] == []

    @pytest.mark.asyncio
    async def test_missing_archive_is_404(self, test_client, user):
        response = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_undecodable_column_falls_back(self, test_client, user, session_factory):
        async with session_factory() as session:
            session.add(
                DailyArchive(
                    archive_date=date(2024, 3, 1),
                    user_id=user.id,
                    breakfast_data='[{"breakfast_text": "Toast"}]',
                    lunch_data="{broken",
                    dinner_data='{"not": "a list"}',
                    snack_data=None,
                    exercise_data="null",
                    weight_data="",
                    daily_review_data="[]",
                )
            )
            await session.commit()

        response = await test_client.get(f"/api/archive/date/2024-03-01/user/{user.id}")

        body = response.json()
        assert response.status_code == 200
        assert body["breakfast_data"] == [{"breakfast_text": "Toast"}]
        assert body["lunch_data"] == []
        assert body["dinner_data"] == []
        assert body["snack_data"] == []
        assert body["decode_fallbacks"] == ["lunch_data", "dinner_data"]
