# backend/services/identity.py
from dataclasses import dataclass
from typing import Optional, Union

from services.errors import Unauthorized


# Anonymous visitor, identified by the id stored in the signed session cookie
@dataclass(frozen=True)
class Guest:
    session_id: str


# Visitor holding a valid bearer token
@dataclass(frozen=True)
class Authenticated:
    user_id: int
    is_admin: bool = False


Identity = Union[Guest, Authenticated]


def user_id_of(identity: Identity) -> Optional[int]:
    return identity.user_id if isinstance(identity, Authenticated) else None


def is_admin(identity: Identity) -> bool:
    return isinstance(identity, Authenticated) and identity.is_admin


def require_admin(identity: Identity) -> Authenticated:
    # Guests get 401 (log in first), customers get 403
    if not isinstance(identity, Authenticated):
        raise Unauthorized("Authentication required", status_code=401)
    if not identity.is_admin:
        raise Unauthorized("Admin access required", status_code=403)
    return identity
