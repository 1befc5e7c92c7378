"""
Authentication module for Todo Service.

The session provider is a black box that turns a token into a stable user
identifier. Tokens are verified locally (JWT) or through the Auth Service.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
import httpx
from fastapi import HTTPException, Request, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import Settings
from ..utils.security import decode_token

# Configure logging
logger = logging.getLogger(__name__)

# Security scheme; missing credentials are handled by get_current_user
security = HTTPBearer(
    scheme_name="Bearer Token",
    description="Session token from the authentication provider",
    auto_error=False,
)


class CurrentUser:
    """Represents the current authenticated user."""

    def __init__(self, user_id: str, email: Optional[str] = None, **kwargs):
        self.user_id = user_id
        self.email = email
        self.extra_data = kwargs

    def __str__(self):
        return f"User(id={self.user_id}, email={self.email})"

    def __repr__(self):
        return self.__str__()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CurrentUser":
        """Create CurrentUser from dictionary."""
        return cls(
            user_id=str(data.get("id")),
            email=data.get("email"),
            **{k: v for k, v in data.items() if k not in ["id", "email"]}
        )


class AuthProvider(ABC):
    """Resolves a session token to a user"""

    @abstractmethod
    async def authenticate(self, token: str) -> Optional[CurrentUser]:
        ...


class JWTAuthProvider(AuthProvider):
    """Verifies signed session tokens locally."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm

    async def authenticate(self, token: str) -> Optional[CurrentUser]:
        payload = decode_token(token, self.secret_key, self.algorithm)
        if not payload or not payload.get("sub"):
            logger.warning("Token verification failed: invalid token")
            return None
        return CurrentUser(user_id=str(payload["sub"]), email=payload.get("email"))


class RemoteAuthProvider(AuthProvider):
    """Service client for Auth Service integration."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.auth_service_url
        self.timeout = settings.auth_service_timeout
        self.retries = settings.auth_service_retries
        self.transport = transport

    async def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify token with Auth Service.

        Args:
            token: session token to verify

        Returns:
            dict: User information if token is valid, None otherwise
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json"
        }

        for attempt in range(self.retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    logger.debug(f"Verifying token with Auth Service (attempt {attempt + 1})")

                    response = await client.get(
                        f"{self.base_url}/auth/verify",
                        headers=headers
                    )

                    if response.status_code == 200:
                        try:
                            result = response.json()
                        except ValueError:
                            logger.warning("Auth Service returned a non-JSON verification response")
                            return None
                        logger.debug("Token verification successful")
                        return result
                    elif response.status_code == 401:
                        logger.warning("Token verification failed: invalid token")
                        return None
                    else:
                        logger.warning(f"Auth Service returned status {response.status_code}")

            except httpx.TimeoutException:
                logger.warning(f"Auth Service timeout (attempt {attempt + 1})")
            except httpx.ConnectError:
                logger.warning(f"Auth Service connection error (attempt {attempt + 1})")
            except httpx.HTTPError as e:
                logger.warning(f"Auth Service request error (attempt {attempt + 1}): {e}")

        logger.error("Auth Service verification failed after all retries")
        return None

    async def authenticate(self, token: str) -> Optional[CurrentUser]:
        user_info = await self.verify_token(token)
        if not isinstance(user_info, dict) or user_info.get("id") is None:
            return None
        return CurrentUser.from_dict(user_info)


def get_auth_provider(settings: Settings) -> AuthProvider:
    """Build the provider selected by AUTH_MODE"""
    if settings.auth_mode == "remote":
        return RemoteAuthProvider(settings)
    if settings.auth_mode != "jwt":
        raise ValueError(f"Unsupported AUTH_MODE: {settings.auth_mode}")
    return JWTAuthProvider(settings)


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    cookie_name = request.app.state.settings.session_cookie_name
    return request.cookies.get(cookie_name) or None


async def resolve_user(request: Request, token: Optional[str]) -> Optional[CurrentUser]:
    if not token:
        return None
    return await request.app.state.auth_provider.authenticate(token)


async def get_optional_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """
    Optional dependency to get current user.
    Returns None if no valid token is provided.
    """
    return await resolve_user(request, extract_token(request, credentials))


async def get_current_user(
    current_user: Optional[CurrentUser] = Depends(get_optional_current_user)
) -> CurrentUser:
    """
    Dependency to get current authenticated user.

    Raises:
        HTTPException: 401 with no detail about why authentication failed
    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.debug(f"Authenticated user: {current_user}")
    return current_user
