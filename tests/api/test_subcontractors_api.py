"""API tests for subcontractor endpoints (SQLite-backed ASGI client)."""

from httpx import AsyncClient

from subcompliance.domain.enums import ProfileQuestion

BASE = "/api/v1/subcontractors"


def _profile(**answers: str) -> dict:
    profile = {
        q.value: "no" for q in ProfileQuestion if q != ProfileQuestion.SOKA_BAU_SUBJECT
    }
    profile["company_type"] = "construction_firm"
    profile.update(answers)
    return profile


async def _create(client: AsyncClient, **answers: str) -> dict:
    response = await client.post(
        BASE, json={"name": "Bau GmbH", "profile": _profile(**answers)}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _approve(client: AsyncClient, sub_id: str, doc: str) -> None:
    ids = {"subcontractor_id": sub_id, "document_type_id": doc}
    response = await client.post(
        "/api/v1/documents/uploaded",
        json={**ids, "artifact_ref": f"s3://{doc}", "uploaded_by": "u"},
    )
    assert response.status_code == 200, response.text
    response = await client.post(
        "/api/v1/documents/review",
        json={**ids, "reviewer": "r", "decision": "accept"},
    )
    assert response.status_code == 200, response.text


async def test_create_subcontractor(client: AsyncClient) -> None:
    """Creation derives requirements and stores a non-compliant aggregate."""
    data = await _create(client)
    assert data["status"] == "inactive"
    assert data["compliance_status"] == "non_compliant"
    assert data["profile"]["soka_bau_subject"] is None

    response = await client.get(f"{BASE}/{data['id']}/requirements")
    assert response.status_code == 200
    rows = {r["document_type_id"]: r for r in response.json()}
    assert set(rows) == {
        "freistellungsbescheinigung",
        "gewerbeanmeldung",
        "haftpflicht",
        "handwerksrolle",
        "unbedenklichkeitsbescheinigung",
    }
    assert rows["haftpflicht"]["level"] == "required"
    assert rows["haftpflicht"]["label"] == "Betriebshaftpflichtversicherung"
    assert rows["haftpflicht"]["due_date"] == "2026-03-16"
    assert rows["handwerksrolle"]["level"] == "optional"


async def test_create_requires_name(client: AsyncClient) -> None:
    """Request validation errors return 422."""
    response = await client.post(BASE, json={"profile": _profile()})
    assert response.status_code == 422


async def test_get_unknown_subcontractor(client: AsyncClient) -> None:
    """Unknown ids return 404 with the error body."""
    response = await client.get(f"{BASE}/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "RESOURCE_NOT_FOUND"
    assert body["details"] == {"resource_type": "subcontractor", "resource_id": "nope"}


async def test_compliance_reads(client: AsyncClient) -> None:
    """Status (cached and strict) and summary agree."""
    sub_id = (await _create(client))["id"]
    cached = (await client.get(f"{BASE}/{sub_id}/compliance")).json()
    strict = (await client.get(f"{BASE}/{sub_id}/compliance?strict=true")).json()
    assert cached == {
        "subcontractor_id": sub_id,
        "status": "non_compliant",
        "strict": False,
    }
    assert strict["status"] == "non_compliant"
    assert strict["strict"] is True

    summary = (await client.get(f"{BASE}/{sub_id}/compliance/summary")).json()
    assert summary["missing_documents"] == ["gewerbeanmeldung", "haftpflicht"]
    assert summary["optional_count"] == 3
    assert summary["evaluated_on"] == "2026-03-02"


async def test_activation_requires_compliance(client: AsyncClient) -> None:
    """Activation is refused with 409 until all required documents are accepted."""
    sub_id = (await _create(client))["id"]
    response = await client.post(f"{BASE}/{sub_id}/activate")
    assert response.status_code == 409
    assert response.json()["error"] == "NOT_COMPLIANT"
    assert response.json()["details"]["missing_documents"] == [
        "gewerbeanmeldung",
        "haftpflicht",
    ]

    await _approve(client, sub_id, "gewerbeanmeldung")
    await _approve(client, sub_id, "haftpflicht")
    response = await client.post(f"{BASE}/{sub_id}/activate")
    assert response.status_code == 200
    assert response.json()["status"] == "active"

    response = await client.get(f"{BASE}/{sub_id}/project-assignment-validation")
    assert response.json()["valid"] is True
    assert response.json()["compliance_status"] == "compliant"


async def test_assignment_validation_for_inactive(client: AsyncClient) -> None:
    """Inactive subcontractors cannot be assigned."""
    sub_id = (await _create(client))["id"]
    response = await client.get(f"{BASE}/{sub_id}/project-assignment-validation")
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert data["reason"] == "Subcontractor is inactive"


async def test_profile_update_adds_requirements(client: AsyncClient) -> None:
    """A profile change re-derives requirements."""
    sub_id = (await _create(client))["id"]
    response = await client.put(
        f"{BASE}/{sub_id}/profile", json=_profile(processes_personal_data="yes")
    )
    assert response.status_code == 200
    assert response.json()["created"] == 1
    summary = (await client.get(f"{BASE}/{sub_id}/compliance/summary")).json()
    assert "avv" in summary["missing_documents"]


async def test_legacy_profile_update(client: AsyncClient) -> None:
    """Legacy payloads are converted at the boundary."""
    sub_id = (await _create(client))["id"]
    response = await client.put(
        f"{BASE}/{sub_id}/profile/legacy",
        json={
            "company_type": "baubetrieb",
            "requires_employees": True,
            "answers": {"doesConstructionWork": "no", "processesPersonalData": "no"},
            "orgFlags": {"hrRegistered": False},
        },
    )
    assert response.status_code == 200, response.text
    stored = (await client.get(f"{BASE}/{sub_id}")).json()
    assert stored["profile"]["has_employees"] == "yes"
    assert stored["profile"]["sends_workers_abroad"] == "unknown"

    uncertain = (await client.get(f"{BASE}/{sub_id}/profile/uncertainties")).json()
    assert "sends_workers_abroad" in uncertain["unknown_questions"]
    assert "a1_bescheinigung" in uncertain["uncertain_documents"]


async def test_legacy_profile_with_bad_company_type(client: AsyncClient) -> None:
    """Unknown legacy company types are a 400 validation error."""
    sub_id = (await _create(client))["id"]
    response = await client.put(
        f"{BASE}/{sub_id}/profile/legacy", json={"company_type": "verein"}
    )
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "company_type"


async def test_custom_documents(client: AsyncClient) -> None:
    """Custom documents are created once per label."""
    sub_id = (await _create(client))["id"]
    response = await client.post(
        f"{BASE}/{sub_id}/custom-documents", json={"label": "Meisterbrief"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["document_type_id"] == "custom:meisterbrief"
    assert data["label"] == "Meisterbrief"
    assert data["is_custom"] is True
    assert data["level"] == "required"

    duplicate = await client.post(
        f"{BASE}/{sub_id}/custom-documents", json={"label": "meisterbrief"}
    )
    assert duplicate.status_code == 400


async def test_recompute_assignment_scope(client: AsyncClient) -> None:
    """Recomputing a project assignment scope creates its own rows."""
    sub_id = (await _create(client))["id"]
    response = await client.post(
        f"{BASE}/{sub_id}/recompute", params={"project_assignment_id": "proj-1"}
    )
    assert response.status_code == 200
    assert response.json()["created"] == 5
    again = await client.post(f"{BASE}/{sub_id}/recompute")
    assert again.json()["unchanged"] == 5

    scoped = await client.get(
        f"{BASE}/{sub_id}/requirements", params={"project_assignment_id": "proj-1"}
    )
    assert {r["project_assignment_id"] for r in scoped.json()} == {"proj-1"}


async def test_deactivate_and_delete(client: AsyncClient) -> None:
    """Deactivation is reported; deletion removes the subcontractor."""
    sub_id = (await _create(client))["id"]
    response = await client.post(f"{BASE}/{sub_id}/deactivate")
    assert response.status_code == 200
    assert response.json()["status"] == "deactivated"

    assert (await client.delete(f"{BASE}/{sub_id}")).status_code == 204
    assert (await client.get(f"{BASE}/{sub_id}")).status_code == 404
    assert (await client.delete(f"{BASE}/{sub_id}")).status_code == 404
