"""
HTTP Client for the hosted auth provider with retry logic
"""
import httpx
import logging
from typing import Optional
from pydantic import BaseModel
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from bakery.config import settings

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Base exception for auth provider errors"""
    pass


class AuthServiceUnavailableError(AuthServiceError):
    """Auth provider is unavailable"""
    pass


class AuthUser(BaseModel):
    """Identity as reported by the auth provider"""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    user: AuthUser


def _user_from_payload(payload: dict) -> AuthUser:
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=payload["id"],
        email=payload.get("email"),
        full_name=metadata.get("full_name")
    )


class AuthClient:
    """Client for the auth provider's REST API"""
    
    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        self.base_url = (base_url or settings.AUTH_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AUTH_ANON_KEY
        self.timeout = settings.AUTH_TIMEOUT
    
    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers
    
    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type(AuthServiceUnavailableError),
        reraise=True
    )
    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """
        Resolve an access token to a user
        
        Returns:
            The user, or None if the token is invalid or expired
        
        Raises:
            AuthServiceUnavailableError: If the provider cannot be reached
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/auth/v1/user",
                    headers=self._headers(access_token)
                )
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            logger.warning("Error calling auth provider: %s", e)
            raise AuthServiceUnavailableError(f"Auth provider unavailable: {e}")
        
        if response.status_code == 200:
            return _user_from_payload(response.json())
        if response.status_code in (401, 403):
            return None
        raise AuthServiceError(f"Unexpected status code: {response.status_code}")
    
    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type(AuthServiceUnavailableError),
        reraise=True
    )
    async def sign_in_with_password(self, email: str, password: str) -> Optional[AuthSession]:
        """
        Password sign-in
        
        Returns:
            Session tokens and user, or None for bad credentials
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/auth/v1/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                    headers=self._headers()
                )
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            logger.warning("Error calling auth provider: %s", e)
            raise AuthServiceUnavailableError(f"Auth provider unavailable: {e}")
        
        if response.status_code == 200:
            payload = response.json()
            return AuthSession(
                access_token=payload["access_token"],
                refresh_token=payload.get("refresh_token"),
                user=_user_from_payload(payload["user"])
            )
        if response.status_code in (400, 401):
            return None
        raise AuthServiceError(f"Unexpected status code: {response.status_code}")
    
    async def sign_out(self, access_token: str) -> bool:
        """Revoke a session; failures are logged, not raised"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/auth/v1/logout",
                    headers=self._headers(access_token)
                )
            return response.status_code in (200, 204)
        except httpx.HTTPError as e:
            logger.warning("Error signing out: %s", e)
            return False
