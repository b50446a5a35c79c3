"""
Persistence collaborator for the progression engine

The engine only talks to ProgressionStore. Implementations:
- InMemoryStore: process-local dicts (tests, local play)
- PostgresStore: JSONB documents over a psycopg pool (soloist.db.postgres_store)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple
import logging

from soloist.exceptions import RecordNotFoundError
from soloist.models.mission import MissionCompletion, PredefinedMission
from soloist.models.quest import Quest
from soloist.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ProgressSnapshot:
    """Everything one engine call writes, persisted in a single write"""
    user: User
    quests: List[Quest] = field(default_factory=list)
    mission_completions: List[MissionCompletion] = field(default_factory=list)


class ProgressionStore(Protocol):
    """Load/save capabilities consumed by the engine"""

    async def load_user(self, user_id: str) -> User:
        """Raises RecordNotFoundError when the user does not exist"""
        ...

    async def save_user(self, user: User) -> None:
        ...

    async def load_mission_catalog(self) -> List[PredefinedMission]:
        ...

    async def load_quest(self, user_id: str, quest_id: str) -> Quest:
        """Raises RecordNotFoundError when the quest does not exist"""
        ...

    async def list_quests(self, user_id: str) -> List[Quest]:
        ...

    async def load_mission_completions(self, user_id: str) -> List[MissionCompletion]:
        ...

    async def save_snapshot(self, snapshot: ProgressSnapshot) -> None:
        ...


class InMemoryStore:
    """Dict-backed store. Documents are copied in and out so callers never share state."""

    def __init__(self, catalog: Optional[List[PredefinedMission]] = None):
        self._users: Dict[str, User] = {}
        self._quests: Dict[Tuple[str, str], Quest] = {}
        self._completions: Dict[Tuple[str, str], MissionCompletion] = {}
        self._catalog: List[PredefinedMission] = list(catalog or [])

    async def load_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise RecordNotFoundError(
                message=f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id,
                operation="load_user",
            )
        return user.model_copy(deep=True)

    async def save_user(self, user: User) -> None:
        self._users[user.id] = user.model_copy(deep=True)

    async def load_mission_catalog(self) -> List[PredefinedMission]:
        return list(self._catalog)

    def set_catalog(self, catalog: List[PredefinedMission]) -> None:
        self._catalog = list(catalog)

    async def load_quest(self, user_id: str, quest_id: str) -> Quest:
        quest = self._quests.get((user_id, quest_id))
        if quest is None:
            raise RecordNotFoundError(
                message=f"Quest {quest_id} not found for user {user_id}",
                record_type="Quest",
                record_id=quest_id,
                user_id=user_id,
                operation="load_quest",
            )
        return quest.model_copy(deep=True)

    async def list_quests(self, user_id: str) -> List[Quest]:
        return [
            quest.model_copy(deep=True)
            for (owner, _), quest in self._quests.items()
            if owner == user_id
        ]

    async def save_quest(self, user_id: str, quest: Quest) -> None:
        self._quests[(user_id, quest.id)] = quest.model_copy(deep=True)

    async def load_mission_completions(self, user_id: str) -> List[MissionCompletion]:
        return [
            completion.model_copy()
            for (owner, _), completion in self._completions.items()
            if owner == user_id
        ]

    async def save_snapshot(self, snapshot: ProgressSnapshot) -> None:
        user_id = snapshot.user.id
        self._users[user_id] = snapshot.user.model_copy(deep=True)
        for quest in snapshot.quests:
            self._quests[(user_id, quest.id)] = quest.model_copy(deep=True)
        for completion in snapshot.mission_completions:
            self._completions[(completion.user_id, completion.mission_id)] = completion.model_copy()
        logger.debug(
            f"Saved snapshot for user {user_id}: "
            f"{len(snapshot.quests)} quests, {len(snapshot.mission_completions)} mission completions"
        )
