"""
Identity provider client

Admin accounts and bearer tokens are owned by an external GoTrue-compatible
auth service (Supabase Auth). This module only asks it who a token belongs
to and creates admin users; sessions never live here.
"""
import os
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException
from loguru import logger

load_dotenv()

AUTH_URL = os.getenv("AUTH_URL", "")
AUTH_SERVICE_KEY = os.getenv("AUTH_SERVICE_KEY", "")
AUTH_TIMEOUT = float(os.getenv("AUTH_TIMEOUT", "10"))


class AuthError(Exception):
    """Raised when the identity provider rejects a request"""
    pass


class IdentityProvider:
    def __init__(self, base_url: str, service_key: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {token}",
        }

    def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the user owning `token`, or None when it is not valid."""
        if not token:
            return None
        try:
            response = requests.get(
                f"{self.base_url}/auth/v1/user",
                headers=self._headers(token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Identity provider unreachable: {e}")
            return None
        if response.status_code != 200:
            return None
        try:
            user = response.json()
        except ValueError:
            logger.warning("Identity provider returned a non-JSON user payload")
            return None
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return user

    def create_admin_user(self, email: str, password: str, name: str) -> Dict[str, Any]:
        # No mail server is configured, so the address is confirmed up front.
        payload = {
            "email": email,
            "password": password,
            "user_metadata": {"name": name, "role": "admin"},
            "email_confirm": True,
        }
        response = requests.post(
            f"{self.base_url}/auth/v1/admin/users",
            json=payload,
            headers=self._headers(self.service_key),
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise AuthError(_error_message(response))
        return response.json()


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("msg", "message", "error_description", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


def get_identity_provider() -> IdentityProvider:
    return IdentityProvider(AUTH_URL, AUTH_SERVICE_KEY, timeout=AUTH_TIMEOUT)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def require_user(
    authorization: Optional[str] = Header(None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Dict[str, Any]:
    """Dependency guarding admin routes: 401 unless the bearer token is valid."""
    token = bearer_token(authorization)
    user = provider.get_user(token) if token else None
    if not user:
        logger.warning("Rejected request with missing or invalid bearer token")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
