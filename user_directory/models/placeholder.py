"""Records served by the public JSONPlaceholder demo collection."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class PlaceholderUser:
    """Demo user; only identity and name matter for synthesis."""

    id: int
    name: str
    username: str = ''
    email: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaceholderUser':
        return cls(
            id=int(data['id']),
            name=data.get('name', ''),
            username=data.get('username', ''),
            email=data.get('email', '')
        )


@dataclass
class PlaceholderPost:
    """Demo post."""

    user_id: int
    id: int
    title: str
    body: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaceholderPost':
        return cls(
            user_id=int(data['userId']),
            id=int(data['id']),
            title=data.get('title', ''),
            body=data.get('body', '')
        )


@dataclass
class PlaceholderComment:
    """Flat demo comment."""

    post_id: int
    id: int
    name: str
    email: str
    body: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaceholderComment':
        return cls(
            post_id=int(data['postId']),
            id=int(data['id']),
            name=data.get('name', ''),
            email=data.get('email', ''),
            body=data.get('body', '')
        )
