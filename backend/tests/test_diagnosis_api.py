"""
Clinic Tracker Backend — Diagnosis API Tests
=============================================

What:  Endpoint tests for /api/diagnosis.
How:   The `patient` fixture carries a complete lab panel (see conftest.py);
       expected scores are computed with the same index functions, with the
       patient's age taken as of today.

What we test:
    ✅ Preview computes the configured formula and the fibrosis side index
    ✅ Preview stores nothing; POST appends to the history (201)
    ✅ ?formula= overrides the configured formula; unknown names → 400
    ✅ Incomplete labs give null scores instead of errors
    ✅ Unknown patients → 404
"""

from datetime import date

import pytest

from clinic_api.clinical import indices

# Same as PATIENT_LABS["birth_date"] in conftest.py
PATIENT_BIRTH_DATE = date(1970, 1, 1)


def patient_age():
    return indices.age_from_birth_date(PATIENT_BIRTH_DATE, date.today())


class TestPreview:

    @pytest.mark.asyncio
    async def test_default_formula(self, test_client, patient):
        response = await test_client.get(f"/api/diagnosis/patient/{patient.patient_id}/preview")

        body = response.json()
        expected = indices.calculate_fli(patient_age(), 40.0, 200, 25.0)
        assert response.status_code == 200
        assert body["id"] is None
        assert body["persisted"] is False
        assert body["formula"] == "fli_ast"
        assert body["has_diabetes"] is False
        assert body["index"]["name"] == "fli_ast"
        assert body["index"]["score"] == expected
        assert body["index"]["interpretation"] == indices.interpret_fli(expected)
        assert body["index"]["label"]
        assert body["fibrosis"]["name"] == "fibrosis"
        assert body["fibrosis"]["score"] is not None

    @pytest.mark.asyncio
    async def test_preview_is_not_stored(self, test_client, patient):
        await test_client.get(f"/api/diagnosis/patient/{patient.patient_id}/preview")

        history = await test_client.get(f"/api/diagnosis/patient/{patient.patient_id}")

        assert history.json() == {"patient_id": patient.patient_id, "diagnoses": []}

    @pytest.mark.asyncio
    async def test_formula_override(self, test_client, patient):
        hsi = await test_client.get(
            f"/api/diagnosis/patient/{patient.patient_id}/preview", params={"formula": "hsi"}
        )
        logistic = await test_client.get(
            f"/api/diagnosis/patient/{patient.patient_id}/preview",
            params={"formula": "fli_logistic"},
        )

        # 8 * 25/40 + 30 + 2 (female)
        assert hsi.json()["formula"] == "hsi"
        assert hsi.json()["index"]["score"] == 37.0
        assert hsi.json()["index"]["interpretation"] == "high"
        assert logistic.json()["index"]["score"] == pytest.approx(78.73, abs=0.05)

    @pytest.mark.asyncio
    async def test_unknown_formula_is_400(self, test_client, patient):
        response = await test_client.get(
            f"/api/diagnosis/patient/{patient.patient_id}/preview", params={"formula": "apri"}
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "formula"

    @pytest.mark.asyncio
    async def test_incomplete_labs(self, test_client):
        await test_client.post(
            "/api/emr",
            json={"patient_name": "No Labs", "patient_id": "P-2000", "email": "n@example.com"},
        )

        response = await test_client.get("/api/diagnosis/patient/P-2000/preview")

        body = response.json()
        assert response.status_code == 200
        assert body["index"]["score"] is None
        assert body["index"]["interpretation"] is None
        assert body["fibrosis"]["score"] is None

    @pytest.mark.asyncio
    async def test_unknown_patient_is_404(self, test_client):
        response = await test_client.get("/api/diagnosis/patient/P-NONE/preview")
        assert response.status_code == 404


class TestDiagnoseAndHistory:

    @pytest.mark.asyncio
    async def test_diagnose_appends_history(self, test_client, patient):
        url = f"/api/diagnosis/patient/{patient.patient_id}"
        first = await test_client.post(url)
        second = await test_client.post(url, params={"formula": "hsi"})

        history = await test_client.get(url)

        assert first.status_code == 201
        assert first.json()["persisted"] is True
        assert first.json()["id"] is not None

        rows = history.json()["diagnoses"]
        assert [row["id"] for row in rows] == [second.json()["id"], first.json()["id"]]
        assert rows[0]["formula"] == "hsi"
        assert rows[0]["index_score"] == 37.0
        assert rows[0]["index_interpretation"] == "high"
        assert rows[1]["formula"] == "fli_ast"
        assert rows[1]["fibrosis_score"] == first.json()["fibrosis"]["score"]

    @pytest.mark.asyncio
    async def test_unknown_patient_is_404(self, test_client):
        created = await test_client.post("/api/diagnosis/patient/P-NONE")
        history = await test_client.get("/api/diagnosis/patient/P-NONE")

        assert created.status_code == 404
        assert history.status_code == 404
