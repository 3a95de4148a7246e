"""Synthesizes nested demo comment threads from flat JSONPlaceholder data."""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Callable, Dict, Iterator, List, Optional

from user_directory.core.cancellation import CancellationToken
from user_directory.core.exceptions import DirectoryError, RequestCancelledError
from user_directory.core.http_client import HttpClient
from user_directory.core.helpers import utc_timestamp
from user_directory.models.comment import Comment, CommentAuthor, UserData
from user_directory.models.placeholder import PlaceholderComment, PlaceholderPost, PlaceholderUser

logger = logging.getLogger(__name__)

AVATAR_URL = "https://i.pravatar.cc/150?u={id}"


@dataclass
class SynthesisConfig:
    """Tunables for thread synthesis."""

    max_depth: int = 4
    target_author_probability: float = 0.3
    reply_base_probability: Optional[float] = None
    reply_probability_decay: float = 0.1
    max_replies: int = 3
    reply_target_bias: float = 0.2
    reply_target_bias_step: float = 0.1
    max_post_age_days: int = 365
    max_comment_delay_hours: int = 72
    max_reply_delay_minutes: int = 720
    max_votes: int = 250

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")


def to_single_decimal(value: float) -> float:
    """Scale a small count into a probability with one decimal, e.g. 4 -> 0.4."""
    return min(1.0, round(value / 10, 1))


def name_from_email(email: str) -> str:
    """
    Guess a display name from an email address.

    `jayne_kuhic@sydney.com` becomes "Jayne Kuhic"; a single-word local part
    borrows the first domain label as surname, so `Eliseo@gardner.biz`
    becomes "Eliseo Gardner".
    """
    local, _, domain = email.strip().partition("@")
    parts = [part for part in local.replace("_", ".").split(".") if part]
    if len(parts) < 2 and domain:
        surname = domain.split(".")[0]
        if surname:
            parts.append(surname)
    return " ".join(part[:1].upper() + part[1:].lower() for part in parts)


def build_author_pool(users: List[PlaceholderUser], comments: List[PlaceholderComment]) -> List[UserData]:
    """
    Build the candidate author pool.

    Real users come first, followed by pseudo-users derived from comment
    emails; entries are de-duplicated by name, first occurrence wins.
    """
    candidates = [UserData(id=user.id, name=user.name) for user in users]
    offset = len(users)
    for index, comment in enumerate(comments, start=1):
        candidates.append(UserData(id=offset + index, name=name_from_email(comment.email)))

    seen = set()
    pool = []
    for candidate in candidates:
        if not candidate.name or candidate.name in seen:
            continue
        seen.add(candidate.name)
        pool.append(candidate)
    return pool


class CommentSynthesizer:
    """
    Generates a randomized nested comment thread for a demo user.

    Random numbers and the current time are injected so threads can be
    reproduced in tests.
    """

    def __init__(self, client: HttpClient, config: Optional[SynthesisConfig] = None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        """
        Initialize the synthesizer.

        Args:
            client: HTTP client pointed at the demo collection
            config: Synthesis tunables
            rng: Random source
            clock: Source of the current time
        """
        self.client = client
        self.config = config or SynthesisConfig()
        self.rng = rng or random.Random()
        self.clock = clock

    async def synthesize(self, user_id: Any, token: Optional[CancellationToken] = None) -> Optional[List[Comment]]:
        """
        Build top-level comments (with nested replies) for every post of a user.

        Args:
            user_id: Demo user id
            token: Optional cancellation token

        Returns:
            Top-level comments across the user's posts, or None if any of the
            initial fetches failed

        Raises:
            RequestCancelledError: If the token fires during any fetch
        """
        results = await asyncio.gather(
            self.client.fetch_resource("/posts", "fetch posts", token, params={"userId": user_id}),
            self.client.fetch_resource(f"/users/{user_id}", "fetch the user", token),
            self.client.fetch_resource("/users", "fetch users", token),
            self.client.fetch_resource("/comments", "fetch comments", token),
            return_exceptions=True,
        )
        self._raise_if_cancelled(results)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            logger.error(f"Failed to synthesize comments for user {user_id}: {str(failures[0])}")
            return None

        posts_data, user_data, users_data, comments_data = results
        posts = [PlaceholderPost.from_dict(item) for item in posts_data or []]
        target = PlaceholderUser.from_dict(user_data)
        users = [PlaceholderUser.from_dict(item) for item in users_data or []]
        all_comments = [PlaceholderComment.from_dict(item) for item in comments_data or []]

        pool = build_author_pool(users, all_comments)
        post_comments = await self._fetch_post_comments(posts, token)

        # Reply ids start past every id a top-level comment can carry
        highest_id = max((comment.id for comment in all_comments), default=0)
        for comments in post_comments:
            highest_id = max([highest_id] + [comment.id for comment in comments])
        first_id = highest_id + len(pool) + 1
        ids = count(first_id)
        bodies = [comment.body for comment in all_comments]
        target_author = UserData(id=target.id, name=target.name)
        others = [candidate for candidate in pool if candidate.id != target.id and candidate.name != target.name]

        thread: List[Comment] = []
        for post, comments in zip(posts, post_comments):
            thread.extend(self._synthesize_post(post, comments, target_author, others, bodies, ids))

        logger.info(f"Synthesized {len(thread)} top-level comments for user {user_id} across {len(posts)} posts")
        return thread

    @staticmethod
    def _raise_if_cancelled(results: List[Any]) -> None:
        for result in results:
            if isinstance(result, (RequestCancelledError, asyncio.CancelledError)):
                raise RequestCancelledError(str(result) or "Operation cancelled") from result

    async def _fetch_post_comments(self, posts: List[PlaceholderPost],
                                   token: Optional[CancellationToken]) -> List[List[PlaceholderComment]]:
        """Fetch each post's comments concurrently; a failed post yields an empty list."""
        results = await asyncio.gather(
            *(self.client.fetch_resource("/comments", "fetch post comments", token, params={"postId": post.id})
              for post in posts),
            return_exceptions=True,
        )
        self._raise_if_cancelled(results)

        post_comments = []
        for post, result in zip(posts, results):
            if isinstance(result, DirectoryError):
                logger.warning(f"Could not fetch comments for post {post.id}: {str(result)}")
                post_comments.append([])
            elif isinstance(result, BaseException):
                raise result
            else:
                post_comments.append([PlaceholderComment.from_dict(item) for item in result or []])
        return post_comments

    def _synthesize_post(self, post: PlaceholderPost, comments: List[PlaceholderComment],
                         target: UserData, others: List[UserData], bodies: List[str],
                         ids: Iterator[int]) -> List[Comment]:
        if not comments:
            return []

        post_date = self.clock() - timedelta(
            days=self.rng.randint(1, self.config.max_post_age_days),
            minutes=self.rng.randint(0, 24 * 60),
        )
        selected = list(comments)
        self.rng.shuffle(selected)
        selected = selected[:self.rng.randint(1, len(selected))]

        top_level = []
        for source in selected:
            author = self._pick_author(target, others, self.config.target_author_probability)
            created = post_date + timedelta(hours=self.rng.randint(1, self.config.max_comment_delay_hours))
            comment = self._make_comment(source.id, post.id, source.body, author, created)
            comment.add_replies(self.create_nested_replies(comment, created, 0, target, others, bodies, ids))
            top_level.append(comment)
        return top_level

    def create_nested_replies(self, parent: Comment, parent_time: datetime, depth: int,
                              target: UserData, others: List[UserData], bodies: List[str],
                              ids: Iterator[int]) -> List[Comment]:
        """
        Recursively generate replies under a comment at the given depth.

        Top-level comments sit at depth 0; no reply is generated once the
        children would exceed max_depth levels.
        """
        config = self.config
        if depth + 1 >= config.max_depth or not bodies:
            return []

        base = config.reply_base_probability
        if base is None:
            base = to_single_decimal(config.max_depth)
        probability = base - depth * config.reply_probability_decay
        if self.rng.random() >= probability:
            return []

        reply_count = self.rng.randint(1, max(1, config.max_replies - depth))
        bias = min(1.0, config.reply_target_bias + depth * config.reply_target_bias_step)
        replies = []
        reply_time = parent_time
        for _ in range(reply_count):
            author = self._pick_author(target, others, bias)
            reply_time = reply_time + timedelta(minutes=self.rng.randint(1, config.max_reply_delay_minutes))
            reply = self._make_comment(next(ids), parent.post_id, self.rng.choice(bodies), author, reply_time)
            reply.add_replies(self.create_nested_replies(reply, reply_time, depth + 1, target, others, bodies, ids))
            replies.append(reply)
        return replies

    def _pick_author(self, target: UserData, others: List[UserData], target_probability: float) -> UserData:
        if not others or self.rng.random() < target_probability:
            return target
        return others[self.rng.randrange(len(others))]

    def _make_comment(self, comment_id: int, post_id: int, body: str, author: UserData,
                      created: datetime) -> Comment:
        return Comment(
            id=comment_id,
            post_id=post_id,
            body=body,
            author=CommentAuthor(id=author.id, name=author.name, avatar=AVATAR_URL.format(id=author.id)),
            created_at=utc_timestamp(created),
            upvotes=self.rng.randint(0, self.config.max_votes),
            downvotes=self.rng.randint(0, self.config.max_votes // 5),
        )

    @staticmethod
    def thread_to_dict(thread: List[Comment]) -> List[Dict[str, Any]]:
        return [comment.to_dict() for comment in thread]
