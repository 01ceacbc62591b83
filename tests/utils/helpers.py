from typing import Any

from app.core.security import create_access_token


def create_auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def admin_token(user_id: str = "admin-1", email: str = "admin@example.org") -> str:
    return create_access_token({"sub": user_id, "email": email, "role": "admin"})


def editor_token(user_id: str = "editor-1", email: str = "editor@example.org") -> str:
    return create_access_token({"sub": user_id, "email": email, "role": "editor"})


def assert_error_envelope(data: dict[str, Any], code: str) -> None:
    assert data["success"] is False
    assert data["error"]["code"] == code
    assert data["error"]["message"]
