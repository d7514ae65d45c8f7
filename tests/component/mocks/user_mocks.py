"""
In-memory user repository for tests
"""
from datetime import datetime
from typing import Dict, List, Optional

from microservices.user_service.models import User, UserSession
from microservices.user_service.protocols import EmailAlreadyExistsError, UserNotFoundError


class MockUserRepository:
    """Users and sessions in dicts; rotation is compare-and-swap like the SQL version"""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.sessions: Dict[str, UserSession] = {}

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return True

    async def create_user(self, user: User) -> User:
        if any(u.email == user.email for u in self.users.values()):
            raise EmailAlreadyExistsError(f"User with email {user.email} already exists")
        self.users[user.user_id] = user.model_copy(deep=True)
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def update_user(self, user: User) -> User:
        if user.user_id not in self.users:
            raise UserNotFoundError(f"User not found with ID: {user.user_id}")
        self.users[user.user_id] = user.model_copy(deep=True)
        return user

    async def create_session(self, session: UserSession) -> UserSession:
        self.sessions[session.session_id] = session.model_copy(deep=True)
        return session

    async def get_session_by_token(self, refresh_token: str) -> Optional[UserSession]:
        for session in self.sessions.values():
            if session.refresh_token == refresh_token:
                return session.model_copy(deep=True)
        return None

    async def get_session_by_device(self, user_id: str, device_info: str) -> Optional[UserSession]:
        for session in self.sessions.values():
            if session.user_id == user_id and session.device_info == device_info:
                return session.model_copy(deep=True)
        return None

    async def rotate_session(
        self,
        session_id: str,
        old_refresh_token: str,
        new_refresh_token: str,
        expires_at: datetime,
    ) -> Optional[UserSession]:
        session = self.sessions.get(session_id)
        if session is None or session.refresh_token != old_refresh_token:
            return None
        rotated = session.model_copy(update={"refresh_token": new_refresh_token, "expires_at": expires_at})
        self.sessions[session_id] = rotated
        return rotated

    async def delete_session(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    async def delete_user_sessions(self, user_id: str) -> int:
        doomed = [sid for sid, s in self.sessions.items() if s.user_id == user_id]
        for sid in doomed:
            del self.sessions[sid]
        return len(doomed)

    async def delete_expired_sessions(self, now: datetime) -> int:
        doomed = [sid for sid, s in self.sessions.items() if s.expires_at <= now]
        for sid in doomed:
            del self.sessions[sid]
        return len(doomed)

    async def list_user_sessions(self, user_id: str) -> List[UserSession]:
        return [s for s in self.sessions.values() if s.user_id == user_id]
