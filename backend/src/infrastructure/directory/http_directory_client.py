"""HTTP client for the platform's lesson catalog and user directory.

Implements LessonLookupPort and IdentityPort against the platform REST API:

    GET {base_url}/api/v1/lessons/{lesson_id}  -> 200 exists, 404 missing
    GET {base_url}/api/v1/users/{user_id}      -> {"role": "admin" | "tutor" | "student"}
"""

import logging
from typing import Optional
from uuid import UUID

import httpx

from domain.documents.models import ActorRole
from domain.documents.ports.directory_port import DirectoryError, IdentityPort, LessonLookupPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

# Platform role names -> review roles. Tutors review student documents.
PLATFORM_ROLES = {
    "admin": ActorRole.ADMIN,
    "tutor": ActorRole.REVIEWER,
    "reviewer": ActorRole.REVIEWER,
    "student": ActorRole.STUDENT,
}


class HttpDirectoryClient(LessonLookupPort, IdentityPort):
    """Async directory client over httpx.

    Args:
        base_url: Platform API base URL
        token: Optional bearer token sent with every request
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str) -> httpx.Response:
        try:
            return await self._client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"Directory request failed: path={path} error={e}")
            raise DirectoryError(f"Directory request failed: {path}") from e

    async def lesson_exists(self, lesson_id: UUID) -> bool:
        response = await self._get(f"/api/v1/lessons/{lesson_id}")
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise DirectoryError(
            f"Unexpected status {response.status_code} looking up lesson {lesson_id}"
        )

    async def role(self, actor_id: UUID) -> ActorRole:
        response = await self._get(f"/api/v1/users/{actor_id}")
        if response.status_code == 404:
            return ActorRole.STUDENT
        if response.status_code != 200:
            raise DirectoryError(
                f"Unexpected status {response.status_code} looking up user {actor_id}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DirectoryError(f"Invalid directory response for user {actor_id}") from e

        raw_role = str(payload.get("role") or "").strip().lower()
        role = PLATFORM_ROLES.get(raw_role)
        if role is None:
            logger.warning(f"Unknown platform role, treating as student: actor_id={actor_id} role={raw_role!r}")
            return ActorRole.STUDENT
        return role
