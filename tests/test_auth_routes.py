from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from menta.models.otp_verification import OtpVerification
from menta.services.otp import get_otp_record

EMAIL = "new.doctor@example.com"


async def _request_code(client, mailer, email=EMAIL):
    response = await client.post("/api/auth/request-otp", json={"email": email})
    assert response.status_code == 200, response.text
    return mailer.last_code(email)


async def _verified_email(client, mailer, email=EMAIL):
    code = await _request_code(client, mailer, email)
    response = await client.post("/api/auth/verify-otp", json={"email": email, "code": code})
    assert response.status_code == 200, response.text


async def test_request_otp_returns_expiry_only(client, mailer):
    before = datetime.now(timezone.utc)
    response = await client.post("/api/auth/request-otp", json={"email": EMAIL})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Verification code sent successfully"
    assert body["expires_in"] == 600
    expires_at = datetime.fromisoformat(body["expires_at"].replace("Z", "+00:00"))
    assert before + timedelta(minutes=9) < expires_at <= before + timedelta(minutes=11)
    assert set(body) == {"message", "expires_at", "expires_in"}
    assert mailer.last_code(EMAIL) is not None


async def test_request_otp_for_registered_email_conflicts(client, mailer, doctor):
    response = await client.post("/api/auth/request-otp", json={"email": doctor.email})

    assert response.status_code == 409
    assert response.json() == {"detail": "Email is already registered", "reason": "already registered"}
    assert mailer.sent == []


async def test_request_otp_delivery_failure(client, mailer, session_maker):
    mailer.fail = True
    response = await client.post("/api/auth/request-otp", json={"email": EMAIL})

    assert response.status_code == 502
    assert response.json()["reason"] == "delivery failed"
    async with session_maker() as session:
        assert await get_otp_record(session, EMAIL) is not None


async def test_request_otp_rejects_malformed_email(client):
    response = await client.post("/api/auth/request-otp", json={"email": "not-an-email"})
    assert response.status_code == 422


async def test_verify_otp_success(client, mailer, session_maker):
    code = await _request_code(client, mailer)

    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": code})

    assert response.status_code == 200
    assert response.json() == {"message": "Email verified successfully", "email": EMAIL, "verified": True}
    async with session_maker() as session:
        assert (await get_otp_record(session, EMAIL)).verified is True


async def test_verify_otp_without_request(client):
    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": "123456"})

    assert response.status_code == 404
    assert response.json()["reason"] == "no code requested"


async def test_verify_otp_missing_code_field(client):
    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL})
    assert response.status_code == 422


async def test_verify_otp_empty_code(client, mailer):
    await _request_code(client, mailer)
    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": ""})

    assert response.status_code == 400
    assert response.json()["reason"] == "validation error"


async def test_verify_otp_lockout_flow(client, mailer):
    code = await _request_code(client, mailer)
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(3):
        response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": wrong})
        assert response.status_code == 400
        assert response.json()["reason"] == "invalid code"

    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": code})
    assert response.status_code == 429
    assert response.json() == {
        "detail": "Too many failed attempts. Please request a new code.",
        "reason": "too many attempts",
    }

    new_code = await _request_code(client, mailer)
    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": new_code})
    assert response.status_code == 200


async def test_verify_otp_expired(client, mailer, session_maker):
    code = await _request_code(client, mailer)
    async with session_maker() as session:
        await session.execute(
            update(OtpVerification)
            .where(OtpVerification.email == EMAIL)
            .values(expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
        )
        await session.commit()

    response = await client.post("/api/auth/verify-otp", json={"email": EMAIL, "code": code})

    assert response.status_code == 400
    assert response.json()["reason"] == "expired"
    async with session_maker() as session:
        assert (await get_otp_record(session, EMAIL)).attempts == 0


async def test_register_requires_verified_email(client, mailer):
    await _request_code(client, mailer)

    response = await client.post(
        "/api/auth/register",
        json={"name": "Dr. New", "email": EMAIL, "password": "secret-pass"},
    )

    assert response.status_code == 400
    assert response.json()["reason"] == "email not verified"


async def test_register_consumes_otp_record(client, mailer, session_maker):
    await _verified_email(client, mailer)

    response = await client.post(
        "/api/auth/register",
        json={"name": "Dr. New", "email": EMAIL, "password": "secret-pass"},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == EMAIL
    assert body["user"]["name"] == "Dr. New"
    assert "hashed_password" not in body["user"]
    async with session_maker() as session:
        assert await get_otp_record(session, EMAIL) is None

    response = await client.post("/api/auth/request-otp", json={"email": EMAIL})
    assert response.status_code == 409


async def test_register_existing_email_conflicts(client, doctor):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Dr. Again", "email": doctor.email, "password": "secret-pass"},
    )
    assert response.status_code == 409


async def test_register_short_password(client):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Dr. New", "email": EMAIL, "password": "short"},
    )
    assert response.status_code == 422


async def test_login_and_me(client, doctor):
    response = await client.post(
        "/api/auth/login", json={"email": doctor.email, "password": "docpass123"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["token_type"] == "bearer"

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["email"] == doctor.email


async def test_login_wrong_password(client, doctor):
    response = await client.post(
        "/api/auth/login", json={"email": doctor.email, "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


async def test_me_requires_token(client):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401

    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_full_registration_flow_allows_login(client, mailer):
    await _verified_email(client, mailer)
    response = await client.post(
        "/api/auth/register",
        json={"name": "Dr. New", "email": EMAIL, "password": "secret-pass"},
    )
    assert response.status_code == 201

    response = await client.post("/api/auth/login", json={"email": EMAIL, "password": "secret-pass"})
    assert response.status_code == 200
