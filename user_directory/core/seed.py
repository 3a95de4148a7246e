"""One-time setup seeding db.json with users from the public demo collection."""

import asyncio
import json
import logging
import os
from typing import Optional

from user_directory.core import config
from user_directory.core.exceptions import DirectoryError
from user_directory.core.helpers import utc_timestamp
from user_directory.core.http_client import HttpClient
from user_directory.models.user import User

logger = logging.getLogger(__name__)


async def setup_database(path: str = config.DB_PATH, client: Optional[HttpClient] = None) -> bool:
    """
    Create the backend database file if it does not exist yet.

    Every user is stamped with the same creation timestamp.

    Args:
        path: Location of the json-server database file
        client: HTTP client for the demo collection

    Returns:
        True if the file was written
    """
    if os.path.exists(path):
        logger.info(f"{path} already exists, skipping setup")
        return False

    owns_client = client is None
    client = client or HttpClient(config.JSON_PLACEHOLDER_ENDPOINT, timeout=config.REQUEST_TIMEOUT)
    try:
        data = await client.fetch_resource("/users", "fetch seed users")
    except DirectoryError as e:
        logger.error(f"Error seeding {path}: {str(e)}")
        return False
    finally:
        if owns_client:
            await client.aclose()

    created_at = utc_timestamp()
    users = []
    for item in data or []:
        user = User.from_dict(item)
        user.created_at = created_at
        users.append(user.to_dict())

    with open(path, "w", encoding="utf-8") as f:
        json.dump({"users": users}, f, indent=2)
    logger.info(f"{path} created with {len(users)} users")
    return True


def main() -> None:
    config.configure_logging()
    asyncio.run(setup_database())


if __name__ == "__main__":
    main()
