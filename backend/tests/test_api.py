"""
HTTP tests for the auth, OTP and user routes
"""

from chat_identity.limiter import limiter

EMAIL = "ann@mailbox.org"
PHONE = "+15550001234"


def request_code(client, phone=PHONE):
    response = client.post("/api/otp/generate", json={"phone_number": phone})
    assert response.status_code == 200
    return response.json()["code"]


def bad_code(code):
    return "000000" if code != "000000" else "111111"


def otp_signup(client, phone=PHONE, full_name="Bob"):
    code = request_code(client, phone)
    response = client.post(
        "/api/auth/signup/otp",
        json={"phone_number": phone, "otp_code": code, "full_name": full_name},
    )
    assert response.status_code == 202
    return response.json()


def email_signup(client, email=EMAIL, password="s3cret"):
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "full_name": "Ann"},
    )
    assert response.status_code == 202
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestEmailAuth:

    def test_signup_and_signin(self, client):
        signup = email_signup(client)
        assert signup["is_authenticated"] is True
        assert signup["requires_otp_verification"] is False
        assert signup["token"]

        response = client.post("/api/auth/signin", json={"email": EMAIL, "password": "s3cret"})
        assert response.status_code == 202
        body = response.json()
        assert body["refresh_token"]
        assert body["is_profile_complete"] is False
        assert response.headers["Cache-Control"] == "no-store"

    def test_duplicate_signup_is_conflict(self, client):
        email_signup(client)
        response = client.post(
            "/api/auth/signup",
            json={"email": EMAIL, "password": "other", "full_name": "Ann"},
        )
        assert response.status_code == 409

    def test_bad_password_is_unauthorized(self, client):
        email_signup(client)
        response = client.post("/api/auth/signin", json={"email": EMAIL, "password": "wrong"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_malformed_email_is_rejected(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "not-an-email", "password": "pw", "full_name": "Ann"},
        )
        assert response.status_code == 422


class TestOtpRoutes:

    def test_generate_echoes_code_outside_production(self, client, fake_sms):
        response = client.post("/api/otp/generate", json={"phone_number": PHONE})

        body = response.json()
        assert body["success"] is True
        assert body["expires_in"] == 120
        assert body["code"] == fake_sms.last_code(PHONE)

    def test_invalid_phone_number(self, client):
        response = client.post("/api/otp/generate", json={"phone_number": "call me"})
        assert response.status_code == 422

    def test_verify(self, client):
        code = request_code(client)
        response = client.post("/api/otp/verify", json={"phone_number": PHONE, "otp_code": code})
        assert response.status_code == 200
        assert response.json()["status"] is True

    def test_verify_wrong_code(self, client):
        code = request_code(client)
        response = client.post(
            "/api/otp/verify", json={"phone_number": PHONE, "otp_code": bad_code(code)}
        )
        assert response.status_code == 400

    def test_verify_without_challenge(self, client):
        response = client.post("/api/otp/verify", json={"phone_number": PHONE, "otp_code": "123456"})
        assert response.status_code == 400

    def test_fifth_wrong_code_is_throttled(self, client):
        code = request_code(client)
        payload = {"phone_number": PHONE, "otp_code": bad_code(code)}

        statuses = [client.post("/api/otp/verify", json=payload).status_code for _ in range(5)]

        assert statuses == [400, 400, 400, 400, 429]

    def test_resend_replaces_code(self, client, fake_sms):
        first = request_code(client)
        response = client.post("/api/otp/resend", json={"phone_number": PHONE})
        assert response.status_code == 200
        assert response.json()["code"] == fake_sms.last_code(PHONE)
        assert [code for _, code in fake_sms.sent][0] == first
        assert len(fake_sms.sent) == 2

    def test_generate_is_rate_limited(self, client):
        limiter.reset()
        limiter.enabled = True

        statuses = [
            client.post("/api/otp/generate", json={"phone_number": PHONE}).status_code
            for _ in range(6)
        ]

        assert statuses[:5] == [200] * 5
        assert statuses[5] == 429


class TestOtpAuth:

    def test_signup_with_otp_then_login(self, client):
        signup = otp_signup(client)
        assert signup["is_profile_complete"] is False

        code = request_code(client)
        response = client.post("/api/auth/login/otp", json={"phone_number": PHONE, "otp_code": code})
        assert response.status_code == 202
        assert response.json()["token"]

    def test_signup_with_otp_needs_full_name(self, client):
        code = request_code(client)
        response = client.post("/api/auth/signup/otp", json={"phone_number": PHONE, "otp_code": code})
        assert response.status_code == 400

    def test_signup_with_wrong_code(self, client):
        code = request_code(client)
        response = client.post(
            "/api/auth/signup/otp",
            json={"phone_number": PHONE, "otp_code": bad_code(code), "full_name": "Bob"},
        )
        assert response.status_code == 401

    def test_login_unknown_phone(self, client):
        code = request_code(client)
        response = client.post("/api/auth/login/otp", json={"phone_number": PHONE, "otp_code": code})
        assert response.status_code == 404

    def test_second_signup_for_phone_conflicts(self, client):
        otp_signup(client)
        code = request_code(client)
        response = client.post(
            "/api/auth/signup/otp",
            json={"phone_number": PHONE, "otp_code": code, "full_name": "Bob"},
        )
        assert response.status_code == 409


class TestSession:

    def test_me_and_profile(self, client):
        signup = otp_signup(client)

        me = client.get("/api/auth/me", headers=bearer(signup["token"]))
        profile = client.get("/api/users/profile", headers=bearer(signup["token"]))

        assert me.status_code == 200
        assert me.json()["phone_number"] == PHONE
        assert me.json()["otp_verified"] is True
        assert profile.json() == me.json()

    def test_missing_or_bad_bearer(self, client):
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers=bearer("garbage")).status_code == 401

    def test_refresh(self, client):
        signup = otp_signup(client)

        response = client.post(
            "/api/auth/refresh", headers={"Refresh-Token": f"Bearer {signup['refresh_token']}"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["refresh_token"] == signup["refresh_token"]
        me = client.get("/api/auth/me", headers=bearer(body["token"]))
        assert me.json()["phone_number"] == PHONE

    def test_refresh_with_bad_token(self, client):
        response = client.post("/api/auth/refresh", headers={"Refresh-Token": "Bearer nope"})
        assert response.status_code == 401

    def test_verify_for_user_links_phone(self, client):
        signup = email_signup(client)
        code = request_code(client)

        response = client.post(
            "/api/otp/verify-for-user",
            json={"phone_number": PHONE, "otp_code": code},
            headers=bearer(signup["token"]),
        )

        assert response.status_code == 200
        me = client.get("/api/auth/me", headers=bearer(signup["token"])).json()
        assert me["email"] == EMAIL
        assert me["phone_number"] == PHONE

    def test_verify_for_user_requires_bearer(self, client):
        code = request_code(client)
        response = client.post("/api/otp/verify-for-user", json={"phone_number": PHONE, "otp_code": code})
        assert response.status_code == 401
