"""API tests for the document lifecycle endpoints."""

from httpx import AsyncClient

from fakes import RecordingNotificationService
from subcompliance.api.v1.dependencies import get_notification_service
from subcompliance.domain.enums import ProfileQuestion
from subcompliance.main import app
from subcompliance.shared.enums import NotificationKind

DOCS = "/api/v1/documents"


async def _create(client: AsyncClient) -> str:
    profile = {
        q.value: "no" for q in ProfileQuestion if q != ProfileQuestion.SOKA_BAU_SUBJECT
    }
    profile["company_type"] = "construction_firm"
    response = await client.post(
        "/api/v1/subcontractors", json={"name": "Bau GmbH", "profile": profile}
    )
    return response.json()["id"]


def _ids(sub_id: str, doc: str = "haftpflicht") -> dict:
    return {"subcontractor_id": sub_id, "document_type_id": doc}


async def test_upload_review_accept(client: AsyncClient) -> None:
    """Upload, start review and accept; history grows with each step."""
    sub_id = await _create(client)
    response = await client.post(
        f"{DOCS}/uploaded",
        json={**_ids(sub_id), "artifact_ref": "s3://h", "uploaded_by": "u"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "submitted"

    response = await client.post(
        f"{DOCS}/start-review", json={**_ids(sub_id), "reviewer": "r"}
    )
    assert response.json()["status"] == "in_review"

    response = await client.post(
        f"{DOCS}/review",
        json={**_ids(sub_id), "reviewer": "r", "decision": "accept"},
    )
    data = response.json()
    assert response.status_code == 200
    assert data["status"] == "accepted"
    assert data["effective_status"] == "accepted"
    assert data["valid_until"] == "2027-03-02"
    assert data["validity_source"] == "system"
    assert [h["action"] for h in data["history"]] == [
        "submitted",
        "review_started",
        "accepted",
    ]


async def test_accept_with_near_expiry_is_expiring(client: AsyncClient) -> None:
    """An override inside the expiring window shows as expiring."""
    sub_id = await _create(client)
    await client.post(
        f"{DOCS}/uploaded",
        json={**_ids(sub_id), "artifact_ref": "s3://h", "uploaded_by": "u"},
    )
    response = await client.post(
        f"{DOCS}/review",
        json={
            **_ids(sub_id),
            "reviewer": "r",
            "decision": "accept",
            "valid_until": "2026-03-20",
        },
    )
    data = response.json()
    assert data["status"] == "accepted"
    assert data["effective_status"] == "expiring"
    assert data["validity_source"] == "admin_override"


async def test_reject_and_re_request(client: AsyncClient) -> None:
    """A rejection needs a reason; a rejected document can be re-requested."""
    sub_id = await _create(client)
    await client.post(
        f"{DOCS}/uploaded",
        json={**_ids(sub_id), "artifact_ref": "s3://h", "uploaded_by": "u"},
    )
    short = await client.post(
        f"{DOCS}/review",
        json={**_ids(sub_id), "reviewer": "r", "decision": "reject", "reason": "bad"},
    )
    assert short.status_code == 400
    assert short.json()["details"] == {"field": "reason"}

    response = await client.post(
        f"{DOCS}/review",
        json={
            **_ids(sub_id),
            "reviewer": "r",
            "decision": "reject",
            "reason": "Policy number is not visible",
        },
    )
    assert response.json()["status"] == "rejected"
    assert response.json()["rejection_reason"] == "Policy number is not visible"

    response = await client.post(
        f"{DOCS}/re-request", json={**_ids(sub_id), "actor": "admin"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "missing"
    assert response.json()["due_date"] == "2026-03-16"


async def test_invalid_transition_is_conflict(client: AsyncClient) -> None:
    """Reviewing a missing document returns 409 INVALID_TRANSITION."""
    sub_id = await _create(client)
    response = await client.post(
        f"{DOCS}/review",
        json={**_ids(sub_id), "reviewer": "r", "decision": "accept"},
    )
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "INVALID_TRANSITION"
    assert body["details"]["current_status"] == "missing"


async def test_unknown_decision_is_rejected(client: AsyncClient) -> None:
    """decision must be accept or reject."""
    sub_id = await _create(client)
    response = await client.post(
        f"{DOCS}/review",
        json={**_ids(sub_id), "reviewer": "r", "decision": "maybe"},
    )
    assert response.status_code == 422


async def test_upload_for_unknown_requirement(client: AsyncClient) -> None:
    """Uploads for a type without a requirement row return 404."""
    sub_id = await _create(client)
    response = await client.post(
        f"{DOCS}/uploaded",
        json={**_ids(sub_id, "avv"), "artifact_ref": "s3://a", "uploaded_by": "u"},
    )
    assert response.status_code == 404


async def test_status_change_is_sent_after_commit_only(client: AsyncClient) -> None:
    """A committed transition notifies once; a failed request notifies nothing."""
    notifier = RecordingNotificationService()
    app.dependency_overrides[get_notification_service] = lambda: notifier
    sub_id = await _create(client)

    response = await client.post(
        f"{DOCS}/uploaded",
        json={**_ids(sub_id), "artifact_ref": "s3://h", "uploaded_by": "u"},
    )
    assert response.status_code == 200
    [sent] = notifier.sent
    assert sent.kind == NotificationKind.STATUS_CHANGED
    assert sent.metadata["status"] == "submitted"

    short = await client.post(
        f"{DOCS}/review",
        json={**_ids(sub_id), "reviewer": "r", "decision": "reject", "reason": "bad"},
    )
    assert short.status_code == 400
    conflict = await client.post(
        f"{DOCS}/re-request", json={**_ids(sub_id), "actor": "admin"}
    )
    assert conflict.status_code == 409
    assert len(notifier.sent) == 1
