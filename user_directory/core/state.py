"""Observable state holding the local mirror of the remote user collection."""

import logging
from copy import deepcopy
from typing import Any, Callable, Dict, List, Optional

from user_directory.models.user import User

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class SortKey:
    """Columns the directory can be sorted by."""

    NAME = "name"
    EMAIL = "email"
    CREATED_AT = "createdAt"
    ID = "id"


def _numeric_id(user: User) -> float:
    try:
        return int(user.id)
    except ValueError:
        return float('inf')


_SORT_KEYS: Dict[str, Callable[[User], Any]] = {
    SortKey.NAME: lambda user: user.name.lower(),
    SortKey.EMAIL: lambda user: user.email.lower(),
    SortKey.CREATED_AT: lambda user: user.created_at or '',
    SortKey.ID: _numeric_id,
}


class UserState:
    """
    Local mirror of the remote user collection.

    All mutations go through the methods below; each one bumps the data
    version and notifies subscribers with a change message.
    """

    def __init__(self, initial_users: Optional[List[User]] = None):
        """
        Initialize state with optional initial users.

        Args:
            initial_users: Users to seed the mirror with
        """
        self.data_version = 1
        self.users: List[User] = list(initial_users or [])
        self.loading = False
        self.initialized = False
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for change messages.

        Args:
            listener: Called with every change message

        Returns:
            Callable removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, message: Dict[str, Any]) -> None:
        self.data_version += 1
        message["version"] = self.data_version
        for listener in list(self._listeners):
            listener(message)

    def reset(self, users: List[User]) -> None:
        """Replace the whole mirror with freshly fetched users."""
        self.users = list(users)
        self._notify({"type": "reset", "data": self.snapshot()})

    def append(self, user: User) -> None:
        self.users.append(user)
        self._notify({"type": "add", "key": user.id, "data": user.to_dict()})

    def replace(self, user: User) -> bool:
        """
        Replace the entry with the same id.

        Returns:
            False when no entry matches; the mirror is left untouched
        """
        for index, existing in enumerate(self.users):
            if existing.id == user.id:
                self.users[index] = user
                self._notify({"type": "edit", "key": user.id, "data": user.to_dict()})
                return True
        logger.debug(f"No user with id {user.id} in mirror, skipping replace")
        return False

    def remove(self, user_id: str) -> bool:
        remaining = [user for user in self.users if user.id != user_id]
        if len(remaining) == len(self.users):
            return False
        self.users = remaining
        self._notify({"type": "delete", "key": user_id})
        return True

    def set_loading(self, loading: bool) -> None:
        if self.loading == loading:
            return
        self.loading = loading
        self._notify({"type": "loading", "loading": loading})

    def mark_initialized(self) -> None:
        self.initialized = True

    def find(self, user_id: str) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def snapshot(self) -> List[Dict[str, Any]]:
        """Get a copy of all users in wire form."""
        return [deepcopy(user.to_dict()) for user in self.users]

    def visible_users(self, query: Optional[str] = None, sort_by: str = SortKey.NAME,
                      descending: bool = False) -> List[User]:
        """
        Filter and sort the mirror for display.

        Args:
            query: Case-insensitive text matched against name, username, email and city
            sort_by: One of the SortKey values
            descending: Reverse the order

        Returns:
            Matching users in display order
        """
        if sort_by not in _SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_by}")

        users = self.users
        if query and query.strip():
            needle = query.strip().lower()
            users = [
                user for user in users
                if any(needle in value.lower()
                       for value in (user.name, user.username, user.email, user.address.city))
            ]
        return sorted(users, key=_SORT_KEYS[sort_by], reverse=descending)
