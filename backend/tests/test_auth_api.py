"""
HTTP tests for the auth router: status codes, camelCase bodies and the
{"success": false, "message": ...} error shape
"""
import pytest
from fastapi.testclient import TestClient

ACCOUNT_ID = "735269466602"
DIRECTORY_PHONE = "+918085745154"

SIGNUP_BODY = {
    "accountId": ACCOUNT_ID,
    "displayName": "Ravi Kumar",
    "password": "Password1",
    "region": "Madhya Pradesh",
    "subregion": "Indore",
}


def _signup(client, **overrides):
    body = dict(SIGNUP_BODY, **overrides)
    return client.post("/api/auth/create-user-send-otp", json=body)


class TestSignupEndpoints:

    def test_create_user_send_otp(self, client: TestClient, directory_entry):
        response = _signup(client)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["phone"] == DIRECTORY_PHONE
        assert data["providerId"] == "sim_ravikumar"
        assert data["sessionToken"]
        assert data["message"].endswith("(simulated)")

    def test_full_signup_then_replay(self, client: TestClient, directory_entry):
        token = _signup(client).json()["sessionToken"]

        bad = client.post("/api/auth/verify-otp-signup", json={"sessionToken": token, "otp": "12"})
        assert bad.status_code == 400
        assert bad.json() == {"success": False, "message": "OTP must be 6 digits"}

        ok = client.post("/api/auth/verify-otp-signup", json={"sessionToken": token, "otp": "123456"})
        assert ok.status_code == 200
        account = ok.json()["account"]
        assert account["accountId"] == ACCOUNT_ID
        assert account["isVerified"] is True
        assert account["displayName"] == "Ravi Kumar"
        assert account["username"] == "ravikumar"

        replay = client.post("/api/auth/verify-otp-signup", json={"sessionToken": token, "otp": "123456"})
        assert replay.status_code == 400
        assert replay.json() == {"success": False, "message": "Invalid or expired session"}

    def test_weak_password(self, client: TestClient, directory_entry):
        response = _signup(client, password="password")
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_aadhaar_is_404(self, client: TestClient):
        response = _signup(client)
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_duplicate_account(self, client: TestClient, account):
        response = _signup(client)
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists with this Aadhar number"

    def test_missing_body_fields(self, client: TestClient, directory_entry):
        response = client.post("/api/auth/create-user-send-otp", json={"accountId": ACCOUNT_ID})
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "All fields are required"}

    def test_wrong_code_is_provider_rejection(self, client: TestClient, directory_entry):
        token = _signup(client).json()["sessionToken"]
        response = client.post("/api/auth/verify-otp-signup", json={"sessionToken": token, "otp": "654321"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_resend(self, client: TestClient, directory_entry, store):
        token = _signup(client).json()["sessionToken"]
        before = store.get(token)

        response = client.post("/api/auth/resend-otp", json={"sessionToken": token})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP resent successfully"}
        assert store.get(token) == before

    def test_resend_unknown_session(self, client: TestClient):
        response = client.post("/api/auth/resend-otp", json={"sessionToken": "nope"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired session"


class TestLoginEndpoints:

    def test_login_otp_round_trip(self, client: TestClient, account):
        started = client.post("/api/auth/login-otp", json={"accountId": ACCOUNT_ID})
        assert started.status_code == 200
        assert started.json()["phone"] == DIRECTORY_PHONE
        token = started.json()["sessionToken"]

        response = client.post("/api/auth/verify-login-otp", json={"sessionToken": token, "otp": "123456"})

        assert response.status_code == 200
        data = response.json()
        assert data["account"]["id"] == account.public_id
        assert data["tokens"]["accessToken"] == f"sim-access-{DIRECTORY_PHONE}"

    def test_login_otp_unknown_account(self, client: TestClient, directory_entry):
        response = client.post("/api/auth/login-otp", json={"accountId": ACCOUNT_ID})
        assert response.status_code == 404

    def test_login_otp_malformed_account_id(self, client: TestClient):
        response = client.post("/api/auth/login-otp", json={"accountId": "12345"})
        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid 12-digit Aadhar number"

    def test_login_password(self, client: TestClient, account):
        response = client.post("/api/auth/login-password", json={"accountId": ACCOUNT_ID, "password": "Password1"})

        assert response.status_code == 200
        assert response.json()["tokens"]["idToken"] == f"sim-id-{DIRECTORY_PHONE}"

    def test_login_password_rejected(self, client: TestClient, account, provider):
        from unittest.mock import AsyncMock
        from aadhaar_auth.core.errors import AuthError
        provider.password_authenticate = AsyncMock(side_effect=AuthError())

        response = client.post("/api/auth/login-password", json={"accountId": ACCOUNT_ID, "password": "Wrong1234"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Incorrect username or password"}


class TestProfileEndpoint:

    def test_profile(self, client: TestClient, account):
        response = client.get(f"/api/auth/profile/{account.public_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["account"]["accountId"] == ACCOUNT_ID
        assert data["identityStatus"] == "SIMULATED"

    def test_profile_not_found(self, client: TestClient):
        response = client.get("/api/auth/profile/does-not-exist")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestRateLimitedResponses:

    def test_too_many_starts_is_429_with_retry_after(self, client: TestClient, directory_entry):
        for _ in range(5):
            assert _signup(client).status_code == 200

        response = _signup(client)

        assert response.status_code == 429
        assert response.json()["success"] is False
        assert int(response.headers["Retry-After"]) > 0


class TestErrorShapes:

    def test_malformed_json_is_400(self, client: TestClient):
        response = client.post(
            "/api/auth/login-otp",
            content="not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_route_is_404(self, client: TestClient):
        response = client.get("/api/auth/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_unexpected_error_is_500(self, client: TestClient, account, provider):
        from unittest.mock import AsyncMock
        provider.password_authenticate = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/auth/login-password", json={"accountId": ACCOUNT_ID, "password": "Password1"})

        assert response.status_code == 500
        assert response.json()["success"] is False

    @pytest.mark.parametrize("path", ["/api/auth/verify-otp-signup", "/api/auth/verify-login-otp"])
    def test_missing_token_and_code(self, client: TestClient, path):
        response = client.post(path, json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Session token and OTP are required"
