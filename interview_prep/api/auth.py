from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from interview_prep.api.error_responses import AuthenticationError


class JWTService:
    """Issues and verifies bearer tokens whose ``sub`` claim is the user id.

    When ``audience`` is set (e.g. ``authenticated`` for Supabase-issued
    tokens) the ``aud`` claim must match it; otherwise it is not checked.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        audience: str | None = None,
        access_token_expire_minutes: int = 60,
    ):
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.audience = audience
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(
        self,
        user_id: str,
        email: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(UTC)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))
        to_encode: dict[str, Any] = {"sub": user_id, "exp": expire, "iat": now}
        if email:
            to_encode["email"] = email
        if self.audience:
            to_encode["aud"] = self.audience
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError:
            raise AuthenticationError("Invalid token")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token: missing user information")
        return {"user_id": str(user_id), "email": payload.get("email")}
