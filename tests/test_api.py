import pytest
from fastapi.testclient import TestClient

from diploma_registry import api
from diploma_registry.api import app

client = TestClient(app)

ISSUER = {"X-Caller": "ST1TEST"}
STRANGER = {"X-Caller": "ST3FAKE"}


def diploma(fill: int, **overrides):
    body = {
        "institution_id": 1,
        "student_id": 1,
        "template_id": 1,
        "content_hash": bytes([fill]).hex() * 32,
        "issuance_date": 100,
        "degree_type": "Bachelor",
        "gpa": 350,
        "honors": "Cum Laude",
        "major": "Computer Science",
        "minor": "Math",
        "location": "University City",
        "currency": "STX",
        "expiry": 200,
        "credits": 120,
        "thesis_title": "AI Thesis",
        "advisor": "Dr. Smith",
        "committee": ["Dr. A", "Dr. B"],
    }
    body.update(overrides)
    return body


def configure(identity="ST2TEST"):
    return client.post("/authority-contract", json={"identity": identity})


def issue(body, headers=ISSUER):
    return client.post("/diplomas", json=body, headers=headers)


# Happy path -> id 0, fee transferred
def test_issue_and_get():
    assert configure().status_code == 200
    r = issue(diploma(1))
    assert r.status_code == 200
    assert r.json() == {"ok": True, "value": 0}

    r = client.get("/diplomas/0")
    assert r.status_code == 200
    body = r.json()
    assert body["diploma_id"] == 0
    assert body["diploma"]["issuer"] == "ST1TEST"
    assert body["diploma"]["content_hash"] == "01" * 32
    assert body["diploma"]["committee"] == ["Dr. A", "Dr. B"]
    assert body["diploma"]["status"] is True

    assert client.get("/transfers").json() == [
        {"amount": 100, "sender": "ST1TEST", "recipient": "ST2TEST", "block_height": 0}
    ]
    assert client.get("/diplomas/count").json() == {"ok": True, "value": 1}


# Issuance before configuration -> 109
def test_issue_without_authority_contract():
    r = issue(diploma(4))
    assert r.status_code == 409
    assert r.json()["detail"] == {"error_code": 109, "error": "INSTITUTION_NOT_VERIFIED"}


# Duplicate hash -> 106
def test_duplicate_hash_conflict():
    configure()
    issue(diploma(1))
    r = issue(diploma(1, degree_type="Master"))
    assert r.status_code == 409
    assert r.json()["detail"]["error_code"] == 106


# Unknown caller -> 100
def test_unauthorized_caller():
    configure()
    r = issue(diploma(2), headers={"X-Caller": "ST2FAKE"})
    assert r.status_code == 403
    assert r.json()["detail"]["error_code"] == 100


# Field errors -> 422 with the first failing code
def test_field_error_codes():
    configure()
    r = issue(diploma(5, gpa=450))
    assert r.status_code == 422
    assert r.json()["detail"] == {"error_code": 110, "error": "INVALID_GPA"}

    r = issue(diploma(6, content_hash="ab" * 31), headers={"X-Caller": "ST2FAKE"})
    assert r.json()["detail"]["error_code"] == 104


# Non-hex content hash is rejected by the hash check, in order
def test_undecodable_hash():
    configure()
    r = issue(diploma(7, content_hash="not-hex"))
    assert r.json()["detail"]["error_code"] == 104

    r = issue(diploma(7, content_hash="not-hex", institution_id=0))
    assert r.json()["detail"]["error_code"] == 101


def test_missing_caller_header():
    configure()
    r = client.post("/diplomas", json=diploma(8))
    assert r.status_code == 422


# Update: issuer succeeds, stranger gets a bare rejection
def test_update_flow():
    configure()
    issue(diploma(9))

    r = client.put("/diplomas/0", json={"gpa": 360, "honors": "Summa Cum Laude"}, headers=STRANGER)
    assert r.status_code == 403
    assert r.json()["detail"] == "UPDATE_REJECTED"
    assert client.get("/diplomas/0/update").status_code == 404

    r = client.put("/diplomas/0", json={"gpa": 360, "honors": "Summa Cum Laude"}, headers=ISSUER)
    assert r.status_code == 200
    assert client.get("/diplomas/0").json()["diploma"]["gpa"] == 360
    assert client.get("/diplomas/0/update").json()["updater"] == "ST1TEST"


def test_get_missing_diploma():
    assert client.get("/diplomas/42").status_code == 404


def test_existence_by_hash():
    configure()
    issue(diploma(12))

    r = client.get("/diplomas/by-hash/" + "0c" * 32)
    assert r.json() == {"content_hash": "0c" * 32, "exists": True, "diploma_id": 0}

    r = client.get("/diplomas/by-hash/" + "0d" * 32)
    assert r.json()["exists"] is False
    assert r.json()["diploma_id"] is None

    assert client.get("/diplomas/by-hash/xyz").status_code == 422


# Configuration endpoints
def test_authority_contract_write_once():
    assert configure().status_code == 200
    r = configure("ST9OTHER")
    assert r.status_code == 409
    assert api.REGISTRY.authority_contract == "ST2TEST"

    assert configure("SP000000000000000000002Q6VF78").status_code == 409


def test_issuance_fee():
    r = client.post("/issuance-fee", json={"fee": 200})
    assert r.status_code == 409

    configure()
    r = client.post("/issuance-fee", json={"fee": 200})
    assert r.status_code == 200
    issue(diploma(13))
    assert client.get("/transfers", params={"recipient": "ST2TEST"}).json()[0]["amount"] == 200


def test_authority_lookup():
    assert client.get("/authorities/ST1TEST").json() == {"ok": True, "value": True}
    assert client.get("/authorities/ST2FAKE").json() == {"ok": True, "value": False}


# Block clock moves issuance-date validation forward
def test_advance_blocks():
    configure()
    r = client.post("/blocks/advance", json={"blocks": 150})
    assert r.json() == {"block_height": 150}

    r = issue(diploma(14))
    assert r.json()["detail"]["error_code"] == 105


def test_request_id_echoed():
    r = client.get("/diplomas/count", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
    assert client.get("/diplomas/count").headers["X-Request-ID"]


# A blank authority contract leaves the registry unconfigured
def test_blank_authority_contract():
    configure("")
    assert client.post("/issuance-fee", json={"fee": 5}).status_code == 409

    r = issue(diploma(15))
    assert r.status_code == 409
    assert r.json()["detail"]["error_code"] == 109
    assert client.get("/transfers").json() == []


# JSON booleans are not ids
def test_bool_id_rejected():
    configure()
    r = issue(diploma(16, institution_id=True))
    assert r.status_code == 422
    assert r.json()["detail"] == {"error_code": 101, "error": "INVALID_INSTITUTION"}
    assert client.get("/diplomas/count").json() == {"ok": True, "value": 0}


# Malformed field types fail their own check, first failure wins
def test_malformed_types_keep_check_order():
    configure()
    r = issue(diploma(17, institution_id=0, gpa=3.5))
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == 101

    r = issue(diploma(17, gpa=3.5))
    assert r.json()["detail"]["error_code"] == 110

    r = issue(diploma(17, content_hash=12, committee="Dr. A"))
    assert r.json()["detail"]["error_code"] == 104

    r = issue(diploma(17, committee="Dr. A"))
    assert r.json()["detail"]["error_code"] == 125


# Invalid environment values stop startup
def test_startup_rejects_negative_capacity(monkeypatch):
    monkeypatch.setattr(api, "MAX_DIPLOMAS", -1)
    with pytest.raises(ValueError, match="DIPLOMA_MAX_DIPLOMAS"):
        api._startup()


def test_startup_rejects_burn_authority_contract(monkeypatch):
    monkeypatch.setattr(api, "AUTHORITY_CONTRACT", "SP000000000000000000002Q6VF78")
    with pytest.raises(ValueError, match="burn identity"):
        api._startup()


def test_update_rejects_bool_gpa():
    configure()
    issue(diploma(18))
    r = client.put("/diplomas/0", json={"gpa": True, "honors": ""}, headers=ISSUER)
    assert r.status_code == 403
    assert client.get("/diplomas/0").json()["diploma"]["gpa"] == 350
