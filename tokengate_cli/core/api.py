import requests
from typing import Optional, List

from .config import BASE_URL

TIMEOUT = 5


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def api_login(username: str, password: str) -> Optional[dict]:
    """
    Logs in and returns the token body ({access_token, token_type, expires_at}).
    """
    url = f"{BASE_URL}/auth/login"
    data = {"username": username, "password": password}

    try:
        resp = requests.post(url, json=data, timeout=TIMEOUT)
        if resp.status_code != 200:
            return None
        return resp.json()
    except requests.RequestException:
        return None

def api_logout(token: str) -> bool:
    """
    Revokes the session token on the backend.
    """
    url = f"{BASE_URL}/auth/logout"

    try:
        resp = requests.post(url, headers=_auth_headers(token), timeout=TIMEOUT)
        return resp.status_code == 200
    except requests.RequestException:
        return False

def api_register(user_data: dict) -> bool:
    url = f"{BASE_URL}/auth/register"
    try:
        resp = requests.post(url, json=user_data, timeout=TIMEOUT)
        return resp.status_code == 201
    except requests.RequestException:
        return False

def api_whoami(token: str) -> Optional[dict]:
    url = f"{BASE_URL}/auth/me"
    try:
        resp = requests.get(url, headers=_auth_headers(token), timeout=TIMEOUT)
        if resp.status_code != 200:
            return None
        return resp.json()
    except requests.RequestException:
        return None

def api_expired_tokens(token: str, as_of: Optional[str] = None) -> Optional[List[dict]]:
    """
    Expired-token report (Admin only).
    """
    url = f"{BASE_URL}/admin/tokens/expired"
    params = {"as_of": as_of} if as_of else None
    try:
        resp = requests.get(url, headers=_auth_headers(token), params=params, timeout=TIMEOUT)
        if resp.status_code != 200:
            return None
        return resp.json()
    except requests.RequestException:
        return None

def api_revoke_user_token(token: str, user_id: int) -> bool:
    """
    Revokes the latest token of a user (Admin only).
    """
    url = f"{BASE_URL}/admin/users/{user_id}/revoke"
    try:
        resp = requests.post(url, headers=_auth_headers(token), timeout=TIMEOUT)
        return resp.status_code == 200
    except requests.RequestException:
        return False
