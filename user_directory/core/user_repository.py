"""Repository for CRUD operations over the remote user collection."""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from user_directory.core.cancellation import CancellationToken
from user_directory.core.exceptions import DirectoryError, NetworkError, RequestCancelledError
from user_directory.core.helpers import utc_timestamp
from user_directory.core.http_client import HttpClient
from user_directory.core.state import UserState
from user_directory.core.validators import validate_user_form
from user_directory.models.user import Geo, User, UserForm

logger = logging.getLogger(__name__)

# Coordinates are not geocoded from the address
PLACEHOLDER_GEO = Geo(lat="-37.3159", lng="81.1496")


class UserRepository:
    """
    CRUD operations over the remote `/users` collection.

    Every successful mutation is reflected into the UserState mirror using
    the server's response.
    """

    def __init__(self, client: HttpClient, state: Optional[UserState] = None,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        """
        Initialize the repository.

        Args:
            client: HTTP client whose base URL points at the backend
            state: Mirror to keep in sync; a fresh one is created when omitted
            clock: Source of creation timestamps
        """
        self.client = client
        self.state = state or UserState()
        self.clock = clock
        self._in_flight = 0

    @property
    def users(self) -> List[User]:
        return self.state.users

    def next_user_id(self) -> str:
        """Next id as max(numeric ids in the mirror) + 1, "1" for an empty mirror."""
        numeric_ids = [int(user.id) for user in self.state.users if user.id.isdigit()]
        return str(max(numeric_ids, default=0) + 1)

    async def _call(self, action: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Run an operation with the loading flag set and consistent error handling."""
        # Loading stays set until every overlapping operation has finished
        self._in_flight += 1
        self.state.set_loading(True)
        try:
            return await operation()
        except RequestCancelledError:
            logger.info(f"Cancelled while trying to {action}")
            raise
        except DirectoryError as e:
            logger.error(f"Failed to {action}: {str(e)}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Failed to {action}: {str(e)}")
            raise NetworkError(f"Network failure while trying to {action}: {str(e)}") from e
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self.state.set_loading(False)

    async def list_users(self, token: Optional[CancellationToken] = None) -> List[User]:
        """
        Fetch all users and reset the mirror.

        Args:
            token: Optional cancellation token

        Returns:
            The fetched users
        """
        async def operation() -> List[User]:
            data = await self.client.fetch_resource("/users", "fetch users", token)
            users = [User.from_dict(item) for item in data or []]
            self.state.reset(users)
            self.state.mark_initialized()
            logger.info(f"Fetched {len(users)} users")
            return users

        return await self._call("fetch users", operation)

    async def get_user(self, user_id: str, token: Optional[CancellationToken] = None) -> User:
        async def operation() -> User:
            data = await self.client.fetch_resource(f"/users/{user_id}", "fetch the user", token)
            return User.from_dict(data)

        return await self._call("fetch the user", operation)

    async def create_user(self, form: UserForm, token: Optional[CancellationToken] = None) -> User:
        """
        Validate the form, create the user remotely and append it to the mirror.

        Raises:
            ValidationError: If the form is invalid; no request is made
        """
        validate_user_form(form)
        user = form.to_user(self.next_user_id(), PLACEHOLDER_GEO, utc_timestamp(self.clock()))

        async def operation() -> User:
            data = await self.client.fetch_resource("/users", "create the user", token,
                                                    method="POST", payload=user.to_dict())
            created = User.from_dict(data) if data else user
            self.state.append(created)
            logger.info(f"Created user {created.id}")
            return created

        return await self._call("create the user", operation)

    async def update_user(self, user_id: str, form: UserForm,
                          token: Optional[CancellationToken] = None) -> User:
        """
        Validate the form, replace the user remotely and in the mirror.

        A response for an id the mirror does not hold leaves the mirror untouched.
        """
        validate_user_form(form)
        user = form.to_user(user_id, PLACEHOLDER_GEO, utc_timestamp(self.clock()))

        async def operation() -> User:
            data = await self.client.fetch_resource(f"/users/{user_id}", "update the user", token,
                                                    method="PUT", payload=user.to_dict())
            updated = User.from_dict(data) if data else user
            self.state.replace(updated)
            logger.info(f"Updated user {updated.id}")
            return updated

        return await self._call("update the user", operation)

    async def delete_user(self, user_id: str, token: Optional[CancellationToken] = None) -> None:
        async def operation() -> None:
            await self.client.fetch_resource(f"/users/{user_id}", "delete the user", token, method="DELETE")
            self.state.remove(user_id)
            logger.info(f"Deleted user {user_id}")

        await self._call("delete the user", operation)
