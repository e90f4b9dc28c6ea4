"""
Clinic Tracker Backend — Daily Review API Tests
================================================

What:  Endpoint tests for /api/daily-review (one review per user per day).

What we test:
    ✅ First POST for a day creates (201), the second overwrites (200)
    ✅ Options outside 1-5 are rejected
    ✅ Date lookup returns the single review or 404
    ✅ Partial update and ownership checks
"""

import pytest
from sqlalchemy import func, select

from clinic_api.models import DailyReview


def review_body(user_id, day="2024-03-01", hunger=3, comment=None):
    return {
        "user_id": user_id,
        "review_date": day,
        "hunger_option": hunger,
        "hunger_text": "Normal",
        "sleep_option": 4,
        "sleep_text": "Good",
        "activity_option": 2,
        "activity_text": "Light",
        "emotion_option": 5,
        "emotion_text": "Great",
        "alcohol_option": 1,
        "alcohol_text": "None",
        "comment": comment,
    }


class TestSaveReview:

    @pytest.mark.asyncio
    async def test_create_then_overwrite(self, test_client, user, session_factory):
        first = await test_client.post("/api/daily-review", json=review_body(user.id))
        second = await test_client.post(
            "/api/daily-review", json=review_body(user.id, hunger=5, comment="Late dinner")
        )

        assert first.status_code == 201
        assert first.json()["message"] == "Daily review created successfully"
        assert second.status_code == 200
        assert second.json()["message"] == "Daily review updated successfully"
        assert second.json()["review"]["id"] == first.json()["review"]["id"]
        assert second.json()["review"]["hunger_option"] == 5
        assert second.json()["review"]["comment"] == "Late dinner"

        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(DailyReview))
        assert count == 1

    @pytest.mark.asyncio
    async def test_other_days_are_separate_reviews(self, test_client, user):
        await test_client.post("/api/daily-review", json=review_body(user.id, day="2024-03-01"))
        response = await test_client.post(
            "/api/daily-review", json=review_body(user.id, day="2024-03-02")
        )

        listing = await test_client.get(f"/api/daily-review/user/{user.id}")

        assert response.status_code == 201
        assert [row["review_date"] for row in listing.json()] == ["2024-03-02", "2024-03-01"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("option", [0, 6])
    async def test_option_out_of_range(self, test_client, user, option):
        response = await test_client.post(
            "/api/daily-review", json=review_body(user.id, hunger=option)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, test_client, user):
        response = await test_client.post("/api/daily-review", json=review_body(user.id + 50))
        assert response.status_code == 404


class TestReadUpdateDelete:

    @pytest.mark.asyncio
    async def test_review_for_date(self, test_client, user):
        await test_client.post("/api/daily-review", json=review_body(user.id))

        found = await test_client.get(f"/api/daily-review/date/2024-03-01/user/{user.id}")
        missing = await test_client.get(f"/api/daily-review/date/2024-03-02/user/{user.id}")

        assert found.status_code == 200
        assert found.json()["sleep_text"] == "Good"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, user):
        created = await test_client.post("/api/daily-review", json=review_body(user.id))
        review_id = created.json()["review"]["id"]

        response = await test_client.put(
            f"/api/daily-review/{review_id}/user/{user.id}",
            json={"sleep_option": 1, "sleep_text": "Poor"},
        )

        updated = response.json()["updated_record"]
        assert response.status_code == 200
        assert updated["sleep_option"] == 1
        assert updated["hunger_option"] == 3

    @pytest.mark.asyncio
    async def test_delete_foreign_review_is_403(self, test_client, user, other_user):
        created = await test_client.post("/api/daily-review", json=review_body(user.id))
        review_id = created.json()["review"]["id"]

        forbidden = await test_client.delete(f"/api/daily-review/{review_id}/user/{other_user.id}")
        deleted = await test_client.delete(f"/api/daily-review/{review_id}/user/{user.id}")

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json()["deleted_record"]["id"] == review_id
