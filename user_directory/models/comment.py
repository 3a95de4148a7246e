"""Synthesized comment models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class UserData:
    """Candidate author for synthesized comments."""

    id: int
    name: str


@dataclass
class CommentAuthor:
    """Author shown next to a comment."""

    id: int
    name: str
    avatar: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'avatar': self.avatar}


@dataclass
class Comment:
    """A node of a synthesized comment thread."""

    id: int
    post_id: int
    body: str
    author: CommentAuthor
    created_at: str
    upvotes: int = 0
    downvotes: int = 0
    upvoted: bool = False
    downvoted: bool = False
    commented: bool = False
    comments: int = 0
    replies: List['Comment'] = field(default_factory=list)

    def add_replies(self, replies: List['Comment']) -> None:
        """Attach direct replies and keep the reply count in step."""
        self.replies = list(replies)
        self.comments = len(self.replies)

    def depth(self) -> int:
        """Number of nodes on the longest path starting at this comment."""
        return 1 + max((reply.depth() for reply in self.replies), default=0)

    def walk(self):
        """Yield this comment and every descendant, depth first."""
        yield self
        for reply in self.replies:
            yield from reply.walk()

    def to_dict(self) -> Dict[str, Any]:
        """Convert comment (and its replies) to the shape the UI consumes."""
        return {
            'id': self.id,
            'postId': self.post_id,
            'body': self.body,
            'author': self.author.to_dict(),
            'createdAt': self.created_at,
            'upvotes': self.upvotes,
            'downvotes': self.downvotes,
            'upvoted': self.upvoted,
            'downvoted': self.downvoted,
            'commented': self.commented,
            'comments': self.comments,
            'replies': [reply.to_dict() for reply in self.replies]
        }

    def __repr__(self) -> str:
        return f"Comment(id={self.id!r}, author={self.author.name!r}, comments={self.comments!r})"
