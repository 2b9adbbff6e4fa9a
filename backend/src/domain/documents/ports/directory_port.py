"""Directory ports - lesson catalog and identity lookups.

Both are owned by the surrounding platform; this service only asks yes/no
and role questions through them.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from ..models import ActorRole


class DirectoryError(Exception):
    """Lookup backend could not answer."""
    pass


class LessonLookupPort(ABC):

    @abstractmethod
    async def lesson_exists(self, lesson_id: UUID) -> bool:
        """Return True if the lesson exists.

        Raises:
            DirectoryError: If the catalog cannot be reached
        """
        pass


class IdentityPort(ABC):

    @abstractmethod
    async def role(self, actor_id: UUID) -> ActorRole:
        """Return the role of an actor.

        Unknown actors are reported as STUDENT (least privilege).

        Raises:
            DirectoryError: If the identity service cannot be reached
        """
        pass
