"""pytest fixtures for canvas chat tests."""

import pytest
import tempfile
from pathlib import Path

from canvas_chat.core.client import MockClient
from canvas_chat.core.models import Connection, Node, NodeKind
from canvas_chat.core.store import CanvasStore


@pytest.fixture
def temp_dir():
    """temporary directory that cleans up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    """fresh store with the default input node."""
    return CanvasStore()


@pytest.fixture
def chat_store():
    """prompt -> reply -> follow-up chain, plus a side branch off the reply."""
    prompt = Node(id="p", kind=NodeKind.INPUT, x=0, y=0, content="what is a monad?",
                  agent_id="agent-1", agent_color="#3b82f6", model="Agent 1")
    reply = Node(id="r", kind=NodeKind.RESPONSE, x=0, y=300, content="a monoid in the category of endofunctors",
                 agent_id="agent-1", agent_color="#3b82f6", model="Agent 1", source_id="p")
    follow = Node(id="f", kind=NodeKind.INPUT, x=0, y=600, content="", source_id="r")
    side = Node(id="s", kind=NodeKind.INPUT, x=600, y=300, content="", source_id="r",
                context_quote="endofunctors")
    return CanvasStore(
        nodes=[prompt, reply, follow, side],
        connections=[
            Connection(id="c1", from_id="p", to_id="r"),
            Connection(id="c2", from_id="r", to_id="f"),
            Connection(id="c3", from_id="r", to_id="s", from_anchor="right", to_anchor="left"),
        ],
    )


@pytest.fixture
def mock_client():
    """mock client with no simulated delay."""
    return MockClient(delay=0)
