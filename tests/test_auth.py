"""
Tests for token issuing and the route gates.
"""
import time

import jwt
import pytest

import config
from auth import sign_token, verify_token

GATED_ROUTES = [
    "/users",
    "/admin/classes",
    "/classes/64b7f0c2a1b2c3d4e5f60718",
    "/users/admin/student@example.com",
    "/users/instructor/student@example.com",
    "/instructor/classes/coach@example.com",
    "/enrolledClasses/student@example.com",
]

UNAUTHORIZED = {"error": True, "message": "unauthorized access!"}


class TestTokens:
    def test_sign_and_verify(self):
        token = sign_token({"email": "student@example.com", "name": "Student"})
        result = verify_token(token)

        assert result.ok is True
        assert result.claims["email"] == "student@example.com"
        assert result.claims["name"] == "Student"
        assert "exp" in result.claims

    def test_expiry_follows_config(self, monkeypatch):
        monkeypatch.setattr(config, "JWT_EXPIRES_MINUTES", 90)
        claims = verify_token(sign_token({"email": "student@example.com"})).claims

        assert claims["exp"] - time.time() == pytest.approx(90 * 60, abs=30)

    def test_expired_token(self, monkeypatch):
        monkeypatch.setattr(config, "JWT_EXPIRES_MINUTES", -5)
        result = verify_token(sign_token({"email": "student@example.com"}))

        assert result.ok is False
        assert result.reason == "expired"

    def test_wrong_secret(self):
        token = jwt.encode(
            {"email": "student@example.com"},
            "some-other-secret-that-is-long-enough-0000",
            algorithm="HS256",
        )
        assert verify_token(token).ok is False

    def test_malformed_token(self):
        assert verify_token("not.a.token").ok is False

    def test_missing_email_claim(self):
        token = jwt.encode({"name": "nobody"}, config.JWT_SECRET, algorithm="HS256")
        result = verify_token(token)

        assert result.ok is False
        assert result.reason == "missing email claim"

    def test_jwt_endpoint(self, client):
        response = client.post("/jwt", json={"email": "student@example.com"})

        assert response.status_code == 200
        token = response.json()["token"]
        assert verify_token(token).claims["email"] == "student@example.com"

    def test_jwt_endpoint_requires_email(self, client):
        response = client.post("/jwt", json={"name": "no email"})
        assert response.status_code == 422


class TestTokenGate:
    @pytest.mark.parametrize("path", GATED_ROUTES)
    def test_missing_header(self, client, path):
        response = client.get(path)

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    @pytest.mark.parametrize("path", GATED_ROUTES)
    def test_wrong_secret(self, client, path):
        token = jwt.encode(
            {"email": "student@example.com"},
            "some-other-secret-that-is-long-enough-0000",
            algorithm="HS256",
        )
        response = client.get(path, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_expired(self, client, monkeypatch):
        monkeypatch.setattr(config, "JWT_EXPIRES_MINUTES", -1)
        token = sign_token({"email": "student@example.com"})

        response = client.get(
            "/enrolledClasses/student@example.com",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    def test_header_without_token(self, client):
        response = client.get(
            "/enrolledClasses/student@example.com", headers={"Authorization": "Bearer"}
        )
        assert response.status_code == 401

    def test_valid_token_proceeds(self, client, auth_header):
        response = client.get(
            "/enrolledClasses/student@example.com",
            headers=auth_header("student@example.com"),
        )
        assert response.status_code == 200
        assert response.json() == []


class TestRoleGates:
    def test_admin_proceeds(self, client, admin, auth_header):
        response = client.get("/users", headers=auth_header(admin))

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == [admin]

    def test_non_admin_forbidden(self, client, student, auth_header):
        response = client.get("/users", headers=auth_header(student))

        assert response.status_code == 403
        assert response.json() == {"error": True, "message": "forbidden message"}

    def test_unknown_user_forbidden(self, client, store, auth_header):
        response = client.get("/admin/classes", headers=auth_header("ghost@example.com"))
        assert response.status_code == 403

    def test_instructor_is_not_admin(self, client, instructor, auth_header):
        response = client.get("/users", headers=auth_header(instructor))
        assert response.status_code == 403

    def test_instructor_proceeds(self, client, instructor, auth_header):
        response = client.get(
            f"/instructor/classes/{instructor}", headers=auth_header(instructor)
        )
        assert response.status_code == 200

    def test_admin_is_not_instructor(self, client, admin, auth_header):
        response = client.get(
            "/instructor/classes/coach@example.com", headers=auth_header(admin)
        )

        assert response.status_code == 403
        assert response.json()["message"] == "forbidden message"

    def test_forbidden_request_has_no_side_effect(self, client, store, student, auth_header):
        class_id = store.classes.insert_one(
            {"name": "Swim", "instructorEmail": "coach@example.com", "status": "pending"}
        ).inserted_id

        response = client.put(
            f"/classes/{class_id}",
            json={"status": "approved"},
            headers=auth_header(student),
        )

        assert response.status_code == 403
        assert store.classes.find_one({"_id": class_id})["status"] == "pending"


class TestSelfGate:
    def test_other_email_rejected(self, client, student, auth_header):
        response = client.get("/users/admin/admin@example.com", headers=auth_header(student))

        assert response.status_code == 402
        assert response.json() == {"error": True, "message": "unauthorized Access"}

    def test_admin_check(self, client, admin, auth_header):
        response = client.get(f"/users/admin/{admin}", headers=auth_header(admin))

        assert response.status_code == 200
        assert response.json() == {"admin": True}

    def test_admin_check_for_student(self, client, student, auth_header):
        response = client.get(f"/users/admin/{student}", headers=auth_header(student))
        assert response.json() == {"admin": False}

    def test_instructor_check(self, client, instructor, auth_header):
        response = client.get(
            f"/users/instructor/{instructor}", headers=auth_header(instructor)
        )
        assert response.json() == {"instructor": True}

    def test_instructor_check_other_email(self, client, instructor, auth_header):
        response = client.get(
            "/users/instructor/student@example.com", headers=auth_header(instructor)
        )
        assert response.status_code == 402
