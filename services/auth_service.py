from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import ValidationError


OAUTH_PROVIDERS = ("google", "apple")


@dataclass
class AuthUser:
    id: str
    email: str | None


def _pick(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


class AuthService:
    def __init__(self, client: Any, app_base_url: str) -> None:
        self.client = client
        self.app_base_url = app_base_url

    def send_magic_link(self, email: str) -> None:
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required")
        self.client.auth.sign_in_with_otp(
            {
                "email": email,
                "options": {"email_redirect_to": self.app_base_url or None},
            }
        )

    def get_oauth_url(self, provider: str) -> str:
        provider = (provider or "").strip().lower()
        if provider not in OAUTH_PROVIDERS:
            raise ValidationError(f"Unsupported sign-in provider: {provider!r}")
        result = self.client.auth.sign_in_with_oauth(
            {
                "provider": provider,
                "options": {"redirect_to": self.app_base_url or None},
            }
        )
        direct = str(_pick(result, "url") or "").strip()
        if direct:
            return direct
        data = _pick(result, "data")
        if isinstance(data, dict):
            nested = str(data.get("url", "")).strip()
            if nested:
                return nested
        raise RuntimeError(f"Supabase did not return an OAuth URL for {provider} login.")

    def consume_magic_link(self, query_params: dict[str, Any]) -> dict[str, Any] | None:
        code = str(query_params.get("code", "")).strip()
        if code:
            result = self.client.auth.exchange_code_for_session({"auth_code": code})
            session = _pick(result, "session")
            if session is None:
                return None
            return self._persist_and_dump_session(session)

        token_hash = str(query_params.get("token_hash", "")).strip()
        otp_type = str(query_params.get("type", "")).strip()
        if not token_hash or not otp_type:
            return None
        if otp_type == "magiclink":
            otp_type = "email"

        result = self.client.auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        session = _pick(result, "session")
        if session is None:
            return None
        return self._persist_and_dump_session(session)

    def _persist_and_dump_session(self, session: Any) -> dict[str, Any]:
        access_token = _pick(session, "access_token")
        refresh_token = _pick(session, "refresh_token")
        if access_token and refresh_token:
            self.client.auth.set_session(access_token, refresh_token)
        return {"access_token": access_token, "refresh_token": refresh_token}

    def current_user(self) -> AuthUser | None:
        user = _pick(self.client.auth.get_user(), "user")
        if not user:
            return None
        uid = _pick(user, "id")
        if not uid:
            return None
        return AuthUser(id=str(uid), email=_pick(user, "email"))

    def set_session_tokens(self, access_token: str, refresh_token: str) -> None:
        self.client.auth.set_session(access_token, refresh_token)

    def sign_out(self) -> None:
        self.client.auth.sign_out()
