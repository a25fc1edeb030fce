"""Resolve bearer tokens to authenticated principals."""
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt

from src.sales.config import AuthSettings
from src.sales.core.domain.models import Principal, Role
from src.shared.exceptions import AuthServiceError, Forbidden, Unauthorized, UpstreamAuthError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
ROLE_REQUIRED_MESSAGE = "Access denied: Sales role required"
PRINCIPAL_ROLES = frozenset(role.value for role in Role)


@dataclass(frozen=True)
class RemoteOk:
    """The auth service accepted the token and returned the user it belongs to."""
    user: dict[str, Any] | None


@dataclass(frozen=True)
class RemoteRejected:
    """The auth service answered with an error response. Passed back to the caller as-is."""
    status_code: int
    body: Any = field(default=None)


@dataclass(frozen=True)
class RemoteUnavailable:
    """The auth service could not be reached in time. Local verification takes over."""
    reason: str


RemoteOutcome = RemoteOk | RemoteRejected | RemoteUnavailable


def extract_bearer_token(authorization: str | None) -> str:
    """
    Extract the token from an Authorization header value.

    Raises:
        Unauthorized: If the header is missing or is not a bearer credential
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("No token provided")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthorized("No token provided")
    return token


class AuthResolver:
    """
    Turns a bearer token into a Principal.

    Validation is delegated to the main backend when it is configured. Only
    connectivity failures (timeouts, network errors) fall back to verifying the
    token locally with the shared JWT secret; an error response from the main
    backend is final. Results are never cached.
    """

    def __init__(self, settings: AuthSettings, http_client: httpx.AsyncClient):
        """
        Initialize the resolver.

        Args:
            settings: Remote endpoint, shared secret and role settings
            http_client: Shared HTTP client used for remote validation
        """
        self.settings = settings
        self.http_client = http_client

    async def resolve(self, authorization: str | None) -> Principal:
        """
        Resolve the Authorization header of a request to a Principal.

        Args:
            authorization: Raw Authorization header value

        Returns:
            The authenticated principal

        Raises:
            Unauthorized: Missing, invalid or expired token
            Forbidden: Valid identity whose role is not permitted
            UpstreamAuthError: The main backend rejected the token
            AuthServiceError: The main backend failed for another reason
        """
        token = extract_bearer_token(authorization)

        if self.settings.remote_validation_url is None:
            principal = self.verify_locally(token)
            logger.info("Authenticated user (local): %s (ID: %s, Role: %s)",
                        principal.email, principal.id, principal.role)
            return principal

        outcome = await self.check_remote(token)

        if isinstance(outcome, RemoteOk):
            principal = self._principal_from_remote_user(outcome.user)
            logger.info("Authenticated user: %s (ID: %s, Role: %s)",
                        principal.email, principal.id, principal.role)
            return principal

        if isinstance(outcome, RemoteRejected):
            raise UpstreamAuthError(outcome.status_code, outcome.body)

        logger.warning(
            "Main backend auth service unavailable (%s), falling back to local token validation",
            outcome.reason,
        )
        principal = self.verify_locally(token)
        logger.info("Authenticated user (fallback): %s (ID: %s, Role: %s)",
                    principal.email, principal.id, principal.role)
        return principal

    async def check_remote(self, token: str) -> RemoteOutcome:
        """
        Ask the main backend to validate a token and classify the result.

        Args:
            token: Raw bearer token

        Returns:
            RemoteOk for a successful response, RemoteRejected for an error response,
            RemoteUnavailable for timeouts and network failures

        Raises:
            AuthServiceError: For any other failure of the HTTP call
        """
        url = self.settings.remote_validation_url
        if url is None:
            return RemoteUnavailable(reason="remote validation is not configured")

        try:
            response = await self.http_client.post(
                url,
                json={},
                headers={"Authorization": f"{BEARER_PREFIX}{token}"},
                timeout=self.settings.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            return RemoteUnavailable(reason=f"timeout: {type(e).__name__}")
        except httpx.NetworkError as e:
            return RemoteUnavailable(reason=f"network error: {type(e).__name__}")
        except httpx.HTTPError as e:
            logger.error("Auth service error: %s", e)
            raise AuthServiceError("Authentication service error") from e

        if response.is_success:
            return RemoteOk(user=self._user_from_body(_json_or_text(response)))
        return RemoteRejected(status_code=response.status_code, body=_json_or_text(response))

    def verify_locally(self, token: str) -> Principal:
        """
        Verify a token's signature with the shared secret and build a Principal from its claims.

        Raises:
            Unauthorized: Secret not configured, bad signature, malformed or expired token
            Forbidden: The token's role is not permitted
        """
        secret = self.settings.jwt_secret
        if not secret:
            logger.error("JWT secret not configured, local token validation is impossible")
            raise Unauthorized("Invalid token")

        try:
            claims = jwt.decode(token, secret, algorithms=[self.settings.jwt_algorithm])
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise Unauthorized("Invalid token") from e

        expires_at = claims.get("exp")
        if expires_at is not None and expires_at < time.time():
            raise Unauthorized("Token expired")

        if not self._is_permitted(claims.get("role")):
            raise Forbidden(ROLE_REQUIRED_MESSAGE)

        user_id = claims.get("userId", claims.get("sub"))
        if user_id is None or str(user_id) == "" or not claims.get("email"):
            raise Unauthorized("Invalid token")

        return Principal(id=str(user_id), email=str(claims["email"]), role=claims["role"])

    def _principal_from_remote_user(self, user: dict[str, Any] | None) -> Principal:
        if not user or not self._is_permitted(user.get("role")):
            raise Forbidden(ROLE_REQUIRED_MESSAGE)
        if user.get("id") is None or str(user["id"]) == "":
            raise AuthServiceError("Authentication service error")
        return Principal(id=str(user["id"]), email=str(user.get("email") or ""), role=user["role"])

    def _is_permitted(self, role: Any) -> bool:
        # Configured roles outside the Role enum cannot form a Principal
        return role in self.settings.allowed_roles and role in PRINCIPAL_ROLES

    @staticmethod
    def _user_from_body(body: Any) -> dict[str, Any] | None:
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            return body["user"]
        return None


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"success": False, "message": response.text}
