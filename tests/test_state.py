"""Unit tests for the UserState mirror."""

import pytest

from user_directory.core.state import SortKey, UserState
from user_directory.models.user import Address, Geo, User


def make_user(user_id, name, email=None, city="Springfield", created_at=None):
    return User(
        id=user_id,
        name=name,
        username=name.lower().replace(" ", "."),
        email=email or f"{name.split()[0].lower()}@example.com",
        address=Address("Main St", "Apt. 1", city, "12345", Geo("0", "0")),
        created_at=created_at
    )


@pytest.fixture
def sample_users():
    """Sample users for testing."""
    return [
        make_user("1", "Alice Smith", city="Gwenborough", created_at="2024-02-01T00:00:00.000Z"),
        make_user("2", "bob Jones", created_at="2024-01-01T00:00:00.000Z"),
        make_user("10", "Carol White", created_at="2024-03-01T00:00:00.000Z"),
    ]


@pytest.fixture
def state(sample_users):
    """State instance for testing."""
    return UserState(sample_users)


@pytest.fixture
def messages(state):
    received = []
    state.subscribe(received.append)
    return received


def test_state_initialization(state):
    """Test state initialization."""
    assert len(state.users) == 3
    assert state.data_version == 1
    assert state.loading is False
    assert state.initialized is False


def test_append(state, messages):
    """Test appending a user notifies subscribers."""
    state.append(make_user("11", "Dave Brown"))

    assert state.find("11").name == "Dave Brown"
    assert messages[-1]["type"] == "add"
    assert messages[-1]["key"] == "11"
    assert messages[-1]["version"] == state.data_version == 2


def test_replace(state, messages):
    """Test replacing an existing user."""
    assert state.replace(make_user("2", "Bob Jones Jr")) is True
    assert state.find("2").name == "Bob Jones Jr"
    assert [user.id for user in state.users] == ["1", "2", "10"]
    assert messages[-1]["type"] == "edit"


def test_replace_unknown_id_is_noop(state, messages):
    """Test replacing a user the mirror does not hold leaves it untouched."""
    before = state.snapshot()
    assert state.replace(make_user("99", "Nobody")) is False
    assert state.snapshot() == before
    assert messages == []
    assert state.data_version == 1


def test_remove(state, messages):
    """Test removing a user."""
    assert state.remove("1") is True
    assert state.find("1") is None
    assert messages[-1] == {"type": "delete", "key": "1", "version": 2}
    assert state.remove("1") is False


def test_reset_and_loading(state, messages):
    """Test reset and loading messages."""
    state.set_loading(True)
    state.set_loading(True)
    state.reset([make_user("5", "Eve Black")])
    state.set_loading(False)

    assert [message["type"] for message in messages] == ["loading", "reset", "loading"]
    assert messages[1]["data"][0]["id"] == "5"
    assert state.data_version == 4


def test_unsubscribe(state):
    received = []
    unsubscribe = state.subscribe(received.append)
    unsubscribe()
    state.remove("1")
    assert received == []


def test_visible_users_filters_case_insensitively(state):
    """Test filtering across name, email and city."""
    assert [user.id for user in state.visible_users("ALICE")] == ["1"]
    assert [user.id for user in state.visible_users("gwenborough")] == ["1"]
    assert [user.id for user in state.visible_users("  ")] == ["1", "2", "10"]


def test_visible_users_sorting(state):
    """Test sorting by each supported column."""
    assert [user.id for user in state.visible_users(sort_by=SortKey.NAME)] == ["1", "2", "10"]
    assert [user.id for user in state.visible_users(sort_by=SortKey.ID, descending=True)] == ["10", "2", "1"]
    assert [user.id for user in state.visible_users(sort_by=SortKey.CREATED_AT)] == ["2", "1", "10"]

    with pytest.raises(ValueError):
        state.visible_users(sort_by="age")
