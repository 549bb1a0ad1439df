# Hippies Portal - Agreement Tests

import pytest

from portal.services.agreement import clean_signature


SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUg=="


@pytest.fixture
def va_agreement(admin_client):
    response = admin_client.post(
        "/api/agreements",
        json={
            "title": "Contractor terms",
            "allowed_types": ["VA"],
            "doc_links": ["https://docs.example/terms", "  "],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_agreement_cleans_links(va_agreement):
    assert va_agreement["doc_links"] == ["https://docs.example/terms"]
    assert va_agreement["allowed_types"] == ["VA"]


def test_allowed_types_validated(admin_client):
    empty = admin_client.post("/api/agreements", json={"title": "x", "allowed_types": []})
    unknown = admin_client.post("/api/agreements", json={"title": "x", "allowed_types": ["Remote"]})

    assert empty.json()["detail"] == "Select at least one employee type"
    assert unknown.status_code == 400


def test_agreements_listed_for_matching_type(employee_client, coworker_client, va_agreement):
    mine = employee_client.get("/api/agreements/me").json()

    assert [(a["title"], a["status"]) for a in mine] == [("Contractor terms", "pending")]
    assert coworker_client.get("/api/agreements/me").json() == []


def test_sign_agreement(employee_client, va_agreement):
    response = employee_client.post(
        f"/api/agreements/{va_agreement['agreement_id']}/sign",
        json={"signature_base64": SIGNATURE},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "signed"
    assert employee_client.get("/api/agreements/me").json()[0]["status"] == "signed"


def test_wrong_type_cannot_sign(coworker_client, va_agreement):
    response = coworker_client.post(
        f"/api/agreements/{va_agreement['agreement_id']}/sign",
        json={"signature_base64": SIGNATURE},
    )

    assert response.status_code == 403


def test_blank_signature_rejected(employee_client, va_agreement):
    response = employee_client.post(
        f"/api/agreements/{va_agreement['agreement_id']}/sign",
        json={"signature_base64": "data:image/png;base64,"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Signature is required"


def test_clean_signature_accepts_bare_base64():
    assert clean_signature("  iVBORw0KGgo=  ") == "iVBORw0KGgo="


@pytest.mark.parametrize("value", ["not base64 at all!!", "data:image/png;base64,@@@@", "abc"])
def test_clean_signature_rejects_garbage(value):
    with pytest.raises(ValueError, match="Signature is not valid base64"):
        clean_signature(value)


def test_garbage_signature_is_not_stored(employee_client, va_agreement):
    response = employee_client.post(
        f"/api/agreements/{va_agreement['agreement_id']}/sign",
        json={"signature_base64": "not base64 at all!!"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Signature is not valid base64"


def test_tracker_summary(admin_client, employee_client, coworker, va_agreement):
    employee_client.post(
        f"/api/agreements/{va_agreement['agreement_id']}/sign",
        json={"signature_base64": SIGNATURE},
    )

    rows = {r["employee_name"]: r["status"] for r in admin_client.get("/api/agreements/tracker").json()}

    assert rows["Sam Rivera"] == "signed"
    # Store staff are not eligible for a VA-only agreement
    assert "Jo Park" not in rows


def test_admin_crud(admin_client, va_agreement):
    agreement_id = va_agreement["agreement_id"]

    updated = admin_client.patch(f"/api/agreements/{agreement_id}", json={"allowed_types": ["VA", "Store"]})
    assert updated.json()["allowed_types"] == ["VA", "Store"]

    assert [a["agreement_id"] for a in admin_client.get("/api/agreements").json()] == [agreement_id]
    assert admin_client.delete(f"/api/agreements/{agreement_id}").status_code == 204
    assert admin_client.get(f"/api/agreements/{agreement_id}").status_code == 404


def test_employee_cannot_manage(employee_client):
    assert employee_client.post("/api/agreements", json={"title": "x", "allowed_types": ["VA"]}).status_code == 403
    assert employee_client.get("/api/agreements/tracker").status_code == 403
