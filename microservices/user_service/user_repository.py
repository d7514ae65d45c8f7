"""
User Service Data Repository

Data access layer - PostgreSQL (asyncpg)
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import asyncpg

from core.config_manager import ConfigManager
from core.postgres_client import PostgresClientWrapper

from .models import AccountStatus, Role, User, UserSession
from .protocols import EmailAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE SCHEMA IF NOT EXISTS account;

CREATE TABLE IF NOT EXISTS account.users (
    id SERIAL PRIMARY KEY,
    user_id VARCHAR(64) NOT NULL UNIQUE,
    email VARCHAR(255) NOT NULL UNIQUE,
    password_hash VARCHAR(255) NOT NULL,
    first_name VARCHAR(100) NOT NULL,
    last_name VARCHAR(100) NOT NULL,
    phone_number VARCHAR(32),
    date_of_birth TIMESTAMPTZ,
    email_verified BOOLEAN NOT NULL DEFAULT FALSE,
    account_status VARCHAR(20) NOT NULL DEFAULT 'active',
    preferred_language VARCHAR(10) NOT NULL DEFAULT 'en',
    marketing_consent BOOLEAN NOT NULL DEFAULT FALSE,
    roles JSONB NOT NULL DEFAULT '["CUSTOMER"]'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS account.user_sessions (
    id SERIAL PRIMARY KEY,
    session_id VARCHAR(64) NOT NULL UNIQUE,
    user_id VARCHAR(64) NOT NULL REFERENCES account.users (user_id) ON DELETE CASCADE,
    refresh_token TEXT NOT NULL UNIQUE,
    device_info VARCHAR(512),
    expires_at TIMESTAMPTZ NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    last_accessed_at TIMESTAMPTZ
);

CREATE INDEX IF NOT EXISTS idx_user_sessions_user ON account.user_sessions (user_id);
CREATE INDEX IF NOT EXISTS idx_user_sessions_expires ON account.user_sessions (expires_at);
"""


class UserRepository:
    """User service data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[PostgresClientWrapper] = None):
        if config is None:
            config = ConfigManager("user_service")

        self.db = db or PostgresClientWrapper(config.service_name, config=config)
        self.schema = "account"
        self.users_table = "users"
        self.sessions_table = "user_sessions"

    async def initialize(self):
        async with self.db:
            await self.db.execute_script(SCHEMA_SQL)
        logger.info("User repository initialized with PostgreSQL")

    async def close(self):
        await self.db.close()
        logger.info("User repository database connection closed")

    async def health_check(self) -> bool:
        return await self.db.health_check()

    # ====================
    # Users
    # ====================

    async def create_user(self, user: User) -> User:
        query = f'''
            INSERT INTO {self.schema}.{self.users_table} (
                user_id, email, password_hash, first_name, last_name, phone_number,
                date_of_birth, email_verified, account_status, preferred_language,
                marketing_consent, roles
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12::jsonb)
            RETURNING *
        '''
        params = [
            user.user_id,
            user.email,
            user.password_hash,
            user.first_name,
            user.last_name,
            user.phone_number,
            user.date_of_birth,
            user.email_verified,
            user.account_status.value,
            user.preferred_language,
            user.marketing_consent,
            json.dumps(user.role_names),
        ]
        try:
            async with self.db:
                row = await self.db.query_row(query, params)
        except asyncpg.UniqueViolationError:
            raise EmailAlreadyExistsError(f"User with email {user.email} already exists")
        return self._row_to_user(row)

    async def get_user(self, user_id: str) -> Optional[User]:
        query = f"SELECT * FROM {self.schema}.{self.users_table} WHERE user_id = $1"
        async with self.db:
            row = await self.db.query_row(query, [user_id])
        return self._row_to_user(row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        query = f"SELECT * FROM {self.schema}.{self.users_table} WHERE email = $1"
        async with self.db:
            row = await self.db.query_row(query, [email])
        return self._row_to_user(row) if row else None

    async def update_user(self, user: User) -> User:
        query = f'''
            UPDATE {self.schema}.{self.users_table} SET
                password_hash = $2, first_name = $3, last_name = $4, phone_number = $5,
                date_of_birth = $6, email_verified = $7, account_status = $8,
                preferred_language = $9, marketing_consent = $10, roles = $11::jsonb,
                updated_at = NOW()
            WHERE user_id = $1
            RETURNING *
        '''
        params = [
            user.user_id,
            user.password_hash,
            user.first_name,
            user.last_name,
            user.phone_number,
            user.date_of_birth,
            user.email_verified,
            user.account_status.value,
            user.preferred_language,
            user.marketing_consent,
            json.dumps(user.role_names),
        ]
        async with self.db:
            row = await self.db.query_row(query, params)
        if row is None:
            raise UserNotFoundError(f"User not found with ID: {user.user_id}")
        return self._row_to_user(row)

    # ====================
    # Sessions
    # ====================

    async def create_session(self, session: UserSession) -> UserSession:
        query = f'''
            INSERT INTO {self.schema}.{self.sessions_table} (
                session_id, user_id, refresh_token, device_info, expires_at, last_accessed_at
            ) VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *
        '''
        params = [
            session.session_id,
            session.user_id,
            session.refresh_token,
            session.device_info,
            session.expires_at,
            session.last_accessed_at,
        ]
        async with self.db:
            row = await self.db.query_row(query, params)
        return self._row_to_session(row)

    async def get_session_by_token(self, refresh_token: str) -> Optional[UserSession]:
        query = f"SELECT * FROM {self.schema}.{self.sessions_table} WHERE refresh_token = $1"
        async with self.db:
            row = await self.db.query_row(query, [refresh_token])
        return self._row_to_session(row) if row else None

    async def get_session_by_device(self, user_id: str, device_info: str) -> Optional[UserSession]:
        query = f'''
            SELECT * FROM {self.schema}.{self.sessions_table}
            WHERE user_id = $1 AND device_info = $2
            ORDER BY created_at DESC
            LIMIT 1
        '''
        async with self.db:
            row = await self.db.query_row(query, [user_id, device_info])
        return self._row_to_session(row) if row else None

    async def rotate_session(
        self,
        session_id: str,
        old_refresh_token: str,
        new_refresh_token: str,
        expires_at: datetime,
    ) -> Optional[UserSession]:
        """Compare-and-swap on the stored token; None if it no longer matches"""
        query = f'''
            UPDATE {self.schema}.{self.sessions_table} SET
                refresh_token = $3, expires_at = $4, last_accessed_at = NOW()
            WHERE session_id = $1 AND refresh_token = $2
            RETURNING *
        '''
        async with self.db:
            row = await self.db.query_row(query, [session_id, old_refresh_token, new_refresh_token, expires_at])
        return self._row_to_session(row) if row else None

    async def delete_session(self, session_id: str) -> bool:
        query = f"DELETE FROM {self.schema}.{self.sessions_table} WHERE session_id = $1"
        async with self.db:
            count = await self.db.execute(query, [session_id])
        return count > 0

    async def delete_user_sessions(self, user_id: str) -> int:
        query = f"DELETE FROM {self.schema}.{self.sessions_table} WHERE user_id = $1"
        async with self.db:
            return await self.db.execute(query, [user_id])

    async def delete_expired_sessions(self, now: datetime) -> int:
        query = f"DELETE FROM {self.schema}.{self.sessions_table} WHERE expires_at <= $1"
        async with self.db:
            return await self.db.execute(query, [now])

    async def list_user_sessions(self, user_id: str) -> List[UserSession]:
        query = f'''
            SELECT * FROM {self.schema}.{self.sessions_table}
            WHERE user_id = $1
            ORDER BY created_at DESC
        '''
        async with self.db:
            rows = await self.db.query(query, [user_id])
        return [self._row_to_session(r) for r in rows]

    # ====================
    # Row mapping
    # ====================

    @staticmethod
    def _row_to_user(row: Dict[str, Any]) -> User:
        roles = row.get("roles") or []
        if isinstance(roles, str):
            roles = json.loads(roles)
        return User(
            user_id=row["user_id"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone_number=row.get("phone_number"),
            date_of_birth=row.get("date_of_birth"),
            email_verified=row.get("email_verified", False),
            account_status=AccountStatus(row.get("account_status") or "active"),
            preferred_language=row.get("preferred_language") or "en",
            marketing_consent=row.get("marketing_consent", False),
            roles=[Role(r) for r in roles] or [Role.CUSTOMER],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _row_to_session(row: Dict[str, Any]) -> UserSession:
        return UserSession(
            session_id=row["session_id"],
            user_id=row["user_id"],
            refresh_token=row["refresh_token"],
            device_info=row.get("device_info"),
            expires_at=row["expires_at"],
            created_at=row.get("created_at"),
            last_accessed_at=row.get("last_accessed_at"),
        )


__all__ = ["UserRepository", "SCHEMA_SQL"]
