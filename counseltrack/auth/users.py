"""
Mock user directory

Two fixed accounts stand in for a real identity provider: one admin and one
counselor. Passwords are kept only as bcrypt hashes.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional

from counseltrack.auth.utils import hash_password

ROLE_ADMIN = "admin"
ROLE_COUNSELOR = "counselor"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    role: str
    first_name: str
    last_name: str
    password_hash: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_counselor(self) -> bool:
        return self.role == ROLE_COUNSELOR


# (id, email, password, role, first name, last name)
MOCK_ACCOUNTS = [
    ("1", "counselor@example.com", "counselor", ROLE_COUNSELOR, "Eleanor", "Jones"),
    ("2", "admin@example.com", "admin", ROLE_ADMIN, "Admin", "User"),
]


@lru_cache
def _directory() -> Dict[str, User]:
    return {
        email: User(
            id=user_id,
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password),
        )
        for user_id, email, password, role, first_name, last_name in MOCK_ACCOUNTS
    }


def get_user_by_email(email: str) -> Optional[User]:
    return _directory().get(email.lower())


def get_user_by_id(user_id: str) -> Optional[User]:
    for user in _directory().values():
        if user.id == user_id:
            return user
    return None


def list_users() -> List[User]:
    return list(_directory().values())


def counselor_names() -> Dict[str, str]:
    """User id -> display name, used by the admin report's Counselor column"""
    return {user.id: user.full_name for user in list_users()}


def list_counselors() -> List[User]:
    """Accounts with the counselor role, the rows of the admin performance table"""
    return [user for user in list_users() if user.is_counselor]
