from bestworkers.services.registration import registration_service
from bestworkers.services.tokens import session_issuer

REGISTRATION = {
    "name": "Asha Rao",
    "email": "a@x.com",
    "mobile": "9999999999",
    "pin": "1234",
    "confirm_pin": "1234",
}

PROFILE = {
    "name": "Asha Rao",
    "email": "a@x.com",
    "mobile_no": "9999999999",
    "state": "Karnataka",
    "district": "Bengaluru Urban",
    "city": "Bengaluru",
    "service_category": "Home Repair",
    "service_name": "Plumber",
    "experience": "5 years",
    "service_price": 400,
}


def _activate(client) -> str:
    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    code = response.json()["otp"]
    response = client.post("/api/auth/verify-otp", json={**REGISTRATION, "code": code})
    assert response.status_code == 201
    return response.json()["token"]


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "Backend running"}


def test_register_verify_login_flow(client, mailer):
    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["email"] == "a@x.com"
    assert payload["expires_in_seconds"] == 300
    assert mailer.sent[0][0] == "a@x.com"

    response = client.post(
        "/api/auth/verify-otp", json={**REGISTRATION, "code": payload["otp"]}
    )
    assert response.status_code == 201
    verified = response.json()
    assert verified["token"]
    assert verified["data"]["verified"] is True
    assert "pin" not in verified["data"]
    assert "pin_hash" not in verified["data"]

    response = client.post("/api/auth/login", json={"email": "a@x.com", "pin": "1234"})
    assert response.status_code == 200
    assert response.json()["data"]["id"] == verified["data"]["id"]


def test_errors_use_structured_envelope(client):
    _activate(client)

    response = client.post("/api/auth/login", json={"email": "a@x.com", "pin": "0000"})
    assert response.status_code == 401
    wrong_pin = response.json()
    assert wrong_pin == {
        "success": False,
        "error": "AuthError",
        "message": "Invalid credentials",
    }

    response = client.post("/api/auth/login", json={"email": "z@x.com", "pin": "1234"})
    assert response.status_code == 401
    assert response.json() == wrong_pin

    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"


def test_invalid_code_is_a_validation_error(client):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post("/api/auth/verify-otp", json={**REGISTRATION, "code": "abcdef"})

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert response.json()["message"] == "Invalid OTP or OTP has expired"


def test_request_validation_maps_to_validation_error(client):
    response = client.post(
        "/api/auth/register", json={**REGISTRATION, "mobile": "12345"}
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"] == "ValidationError"
    assert payload["message"].startswith("mobile")


def test_pin_mismatch_is_rejected(client, mailer):
    response = client.post(
        "/api/auth/register", json={**REGISTRATION, "confirm_pin": "4321"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "PINs do not match"
    assert mailer.sent == []


def test_resend_returns_new_code(client, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(registration_service._otps, "generate", lambda: next(codes))
    first = client.post("/api/auth/register", json=REGISTRATION).json()["otp"]

    response = client.post("/api/auth/resend-otp", json={"email": "a@x.com"})

    assert response.status_code == 200
    assert response.json()["message"] == "New OTP sent to your email"
    assert response.json()["otp"] == "222222"
    stale = client.post("/api/auth/verify-otp", json={**REGISTRATION, "code": first})
    assert stale.status_code == 400


def test_mail_failure_is_a_server_error(client, mailer):
    mailer.fail = True

    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "UpstreamError",
        "message": "Failed to send verification email",
    }


def test_auth_gate_rejects_bad_tokens_uniformly(client):
    responses = [
        client.get("/api/auth/me"),
        client.get("/api/auth/me", headers={"Authorization": "Token abc"}),
        client.get("/api/auth/me", headers=_auth("not-a-token")),
        client.post("/api/professions", json=PROFILE, headers=_auth("x.y.z")),
    ]

    for response in responses:
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "AuthError",
            "message": "Not authorized",
        }


def test_me_reflects_profile_linkage(client):
    token = _activate(client)

    response = client.get("/api/auth/me", headers=_auth(token))
    assert response.status_code == 200
    assert response.json()["data"]["kind"] == "basic"

    response = client.post("/api/professions", json=PROFILE, headers=_auth(token))
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "pending"

    response = client.get("/api/auth/me", headers=_auth(token))
    data = response.json()["data"]
    assert data["kind"] == "professional"
    assert data["account"]["has_profile"] is True
    assert data["profile"]["service_name"] == "Plumber"


def test_profession_search_and_update(client):
    token = _activate(client)
    client.post("/api/professions", json=PROFILE, headers=_auth(token))

    response = client.get("/api/professions", params={"serviceName": "plumber"})
    assert response.status_code == 200
    assert response.json()["count"] == 1

    response = client.get("/api/professions", params={"serviceName": ".*"})
    assert response.json()["count"] == 0

    response = client.get("/api/professions")
    assert response.status_code == 400
    assert response.json()["message"] == "Service name is required"

    response = client.put(
        "/api/professions/me", json={"service_price": ""}, headers=_auth(token)
    )
    assert response.status_code == 200
    assert response.json()["data"]["service_price"] is None
    assert response.json()["data"]["city"] == "Bengaluru"

    response = client.get("/api/professions/me", headers=_auth(token))
    assert response.json()["data"]["service_price"] is None


def test_update_own_profile_requires_existing_profile(client):
    token = _activate(client)

    response = client.put("/api/professions/me", json={"city": "Mysuru"}, headers=_auth(token))

    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


def test_user_update_and_change_pin(client):
    token = _activate(client)

    response = client.put("/api/users/update", json={"name": "Asha R"}, headers=_auth(token))
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Asha R"

    response = client.put(
        "/api/users/change-pin",
        json={"current_pin": "1234", "new_pin": "5678", "confirm_pin": "5678"},
        headers=_auth(token),
    )
    assert response.status_code == 200
    assert response.json()["message"] == "PIN changed successfully"

    response = client.post("/api/auth/login", json={"email": "a@x.com", "pin": "5678"})
    assert response.status_code == 200


def test_token_for_deleted_account_is_not_found(client):
    token = session_issuer.issue(999).token

    response = client.get("/api/auth/me", headers=_auth(token))

    assert response.status_code == 404
