"""PostgreSQL-backed progression store (one JSONB document per hunter)"""
import logging
from typing import List

import psycopg
from psycopg.types.json import Jsonb

from soloist.db.connection import Database
from soloist.db.store import ProgressSnapshot
from soloist.exceptions import RecordNotFoundError, wrap_external_exception
from soloist.models.mission import MissionCompletion, PredefinedMission
from soloist.models.quest import Quest
from soloist.models.user import User

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS hunters (
    user_id TEXT PRIMARY KEY,
    document JSONB NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quests (
    user_id TEXT NOT NULL,
    quest_id TEXT NOT NULL,
    document JSONB NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (user_id, quest_id)
);

CREATE TABLE IF NOT EXISTS mission_catalog (
    mission_id TEXT PRIMARY KEY,
    document JSONB NOT NULL
);

CREATE TABLE IF NOT EXISTS mission_completions (
    user_id TEXT NOT NULL,
    mission_id TEXT NOT NULL,
    completed_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (user_id, mission_id)
);
"""

_UPSERT_HUNTER = """
    INSERT INTO hunters (user_id, document)
    VALUES (%s, %s)
    ON CONFLICT (user_id) DO UPDATE
    SET document = EXCLUDED.document,
        updated_at = CURRENT_TIMESTAMP
"""

_UPSERT_QUEST = """
    INSERT INTO quests (user_id, quest_id, document)
    VALUES (%s, %s, %s)
    ON CONFLICT (user_id, quest_id) DO UPDATE
    SET document = EXCLUDED.document,
        updated_at = CURRENT_TIMESTAMP
"""

_INSERT_COMPLETION = """
    INSERT INTO mission_completions (user_id, mission_id, completed_at)
    VALUES (%s, %s, %s)
    ON CONFLICT (user_id, mission_id) DO NOTHING
"""


class PostgresStore:
    """ProgressionStore over PostgreSQL; save_snapshot runs in one transaction"""

    def __init__(self, database: Database):
        self.db = database

    async def init_schema(self) -> None:
        """Create tables if they don't exist"""
        try:
            async with self.db.connection() as conn:
                await conn.execute(SCHEMA)
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="init_schema")
        logger.info("Progression schema ready")

    async def load_user(self, user_id: str) -> User:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT document FROM hunters WHERE user_id = %s",
                        (user_id,)
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="load_user", user_id=user_id)

        if not row:
            raise RecordNotFoundError(
                message=f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id,
                operation="load_user",
            )
        return User.model_validate(row["document"])

    async def save_user(self, user: User) -> None:
        try:
            async with self.db.connection() as conn:
                await conn.execute(_UPSERT_HUNTER, (user.id, Jsonb(user.model_dump(mode="json"))))
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="save_user", user_id=user.id)

    async def load_mission_catalog(self) -> List[PredefinedMission]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT document FROM mission_catalog ORDER BY mission_id")
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="load_mission_catalog")
        return [PredefinedMission.model_validate(row["document"]) for row in rows]

    async def replace_mission_catalog(self, missions: List[PredefinedMission]) -> None:
        """Swap the whole catalog (rarely changes; used by seeding)"""
        try:
            async with self.db.connection() as conn:
                async with conn.transaction():
                    await conn.execute("DELETE FROM mission_catalog")
                    async with conn.cursor() as cur:
                        await cur.executemany(
                            "INSERT INTO mission_catalog (mission_id, document) VALUES (%s, %s)",
                            [(m.id, Jsonb(m.model_dump(mode="json"))) for m in missions]
                        )
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="replace_mission_catalog")
        logger.info(f"Replaced mission catalog with {len(missions)} missions")

    async def load_quest(self, user_id: str, quest_id: str) -> Quest:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT document FROM quests WHERE user_id = %s AND quest_id = %s",
                        (user_id, quest_id)
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="load_quest", user_id=user_id)

        if not row:
            raise RecordNotFoundError(
                message=f"Quest {quest_id} not found for user {user_id}",
                record_type="Quest",
                record_id=quest_id,
                user_id=user_id,
                operation="load_quest",
            )
        return Quest.model_validate(row["document"])

    async def list_quests(self, user_id: str) -> List[Quest]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT document FROM quests WHERE user_id = %s ORDER BY quest_id",
                        (user_id,)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="list_quests", user_id=user_id)
        return [Quest.model_validate(row["document"]) for row in rows]

    async def load_mission_completions(self, user_id: str) -> List[MissionCompletion]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT user_id, mission_id, completed_at
                        FROM mission_completions
                        WHERE user_id = %s
                        ORDER BY completed_at
                        """,
                        (user_id,)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="load_mission_completions", user_id=user_id)
        return [MissionCompletion(**row) for row in rows]

    async def save_snapshot(self, snapshot: ProgressSnapshot) -> None:
        user = snapshot.user
        try:
            async with self.db.connection() as conn:
                async with conn.transaction():
                    await conn.execute(_UPSERT_HUNTER, (user.id, Jsonb(user.model_dump(mode="json"))))
                    for quest in snapshot.quests:
                        await conn.execute(
                            _UPSERT_QUEST,
                            (user.id, quest.id, Jsonb(quest.model_dump(mode="json")))
                        )
                    for completion in snapshot.mission_completions:
                        await conn.execute(
                            _INSERT_COMPLETION,
                            (completion.user_id, completion.mission_id, completion.completed_at)
                        )
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="save_snapshot", user_id=user.id)

        logger.debug(f"Persisted snapshot for user {user.id}")
