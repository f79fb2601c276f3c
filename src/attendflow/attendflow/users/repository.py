from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Directory Store interface. The engine only reads from it.

    Note (DIP): the service layer depends on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def find_by_logical_id(self, logical_id: str) -> Optional[User]:
        raise NotImplementedError
