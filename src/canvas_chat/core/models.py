"""core data model for canvas chat.

nodes and connections on an infinite canvas, not a linear chat log.
"""

from __future__ import annotations

import math
import random
import string
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Literal, NamedTuple, Optional


# --- configuration ---

DEFAULT_RESPONSE_SIZE = (450.0, 200.0)  # response + loading nodes
DEFAULT_INPUT_SIZE = (400.0, 200.0)
DEFAULT_NODE_POSITION = (600.0, 400.0)  # where reset puts the first node
DEFAULT_NODE_ID = "1"
NEUTRAL_CONNECTION_COLOR = "#444"
ERROR_RESPONSE_TEXT = "Error generating response. Please try again."

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 9

Anchor = Literal["top", "right", "bottom", "left"]


class NodeKind(Enum):
    INPUT = "input"        # prompt the user is writing
    RESPONSE = "response"  # assistant reply (or the error text)
    LOADING = "loading"    # placeholder while the reply is in flight


class Point(NamedTuple):
    x: float
    y: float


class Size(NamedTuple):
    width: float
    height: float


class Rect(NamedTuple):
    """axis-aligned box in canvas space, top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class Agent:
    """a persona nodes are created for."""

    id: str
    name: str
    color: str
    description: Optional[str] = None
    system_prompt: Optional[str] = None  # overrides the global prompt when set

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> Agent:
        return cls(
            id=d["id"],
            name=d["name"],
            color=d["color"],
            description=d.get("description"),
            system_prompt=d.get("system_prompt"),
        )


PREDEFINED_AGENTS: tuple[Agent, ...] = (
    Agent(id="agent-1", name="Agent 1", color="#3b82f6"),  # blue
    Agent(id="agent-2", name="Agent 2", color="#8b5cf6"),  # purple
    Agent(id="agent-3", name="Agent 3", color="#10b981"),  # green
    Agent(id="agent-4", name="Agent 4", color="#f59e0b"),  # amber
    Agent(id="agent-5", name="Agent 5", color="#ef4444"),  # red
    Agent(id="agent-6", name="Agent 6", color="#ec4899"),  # pink
)


@dataclass(frozen=True)
class Node:
    """single turn on the canvas.

    width/height are whatever the renderer last measured; until then
    the kind default applies (see `size`).
    """

    id: str
    kind: NodeKind
    x: float
    y: float
    content: str = ""
    model: Optional[str] = None        # agent display name at creation
    agent_id: Optional[str] = None
    agent_color: Optional[str] = None  # copied, not live
    source_id: Optional[str] = None    # node this was branched/replied from
    context_quote: Optional[str] = None
    is_streaming: bool = False
    expanded: bool = False
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_measured(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def size(self) -> Size:
        """measured size, falling back per axis to the kind default."""
        default = default_size(self.kind)
        return Size(
            self.width if self.width else default.width,
            self.height if self.height else default.height,
        )

    @property
    def bounds(self) -> Rect:
        w, h = self.size
        return Rect(self.x, self.y, w, h)

    @classmethod
    def create_input(
        cls,
        x: float,
        y: float,
        agent: Optional[Agent] = None,
        content: str = "",
        **extra,
    ) -> Node:
        """create an input node, optionally owned by an agent."""
        if agent is not None:
            extra.setdefault("model", agent.name)
            extra.setdefault("agent_id", agent.id)
            extra.setdefault("agent_color", agent.color)
        return cls(id=generate_id(), kind=NodeKind.INPUT, x=x, y=y, content=content, **extra)

    def to_dict(self) -> dict:
        """serialize to dict for json."""
        d = asdict(self)
        d["kind"] = self.kind.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Node:
        """deserialize from dict, tolerating missing optional keys."""
        d = {k: v for k, v in d.items() if k in _NODE_FIELDS}
        d["kind"] = NodeKind(d["kind"])
        d["x"], d["y"] = float(d["x"]), float(d["y"])
        for key in ("width", "height"):
            if d.get(key) is not None:
                d[key] = float(d[key])
        return cls(**d)


@dataclass(frozen=True)
class Connection:
    """directed edge between two nodes."""

    id: str
    from_id: str
    to_id: str
    from_anchor: Anchor = "bottom"
    to_anchor: Anchor = "top"
    color: Optional[str] = None

    @classmethod
    def link(cls, source: Node, target: Node, from_anchor: Anchor, to_anchor: Anchor) -> Connection:
        """connect two nodes using the source's agent color."""
        return cls(
            id=generate_id(),
            from_id=source.id,
            to_id=target.id,
            from_anchor=from_anchor,
            to_anchor=to_anchor,
            color=source.agent_color,
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> Connection:
        return cls(
            id=d["id"],
            from_id=d["from_id"],
            to_id=d["to_id"],
            from_anchor=d.get("from_anchor") or "bottom",
            to_anchor=d.get("to_anchor") or "top",
            color=d.get("color"),
        )


_NODE_FIELDS = set(Node.__dataclass_fields__)


def default_size(kind: NodeKind) -> Size:
    """size to assume for a node that has not been measured yet."""
    if kind == NodeKind.INPUT:
        return Size(*DEFAULT_INPUT_SIZE)
    return Size(*DEFAULT_RESPONSE_SIZE)


def default_node() -> Node:
    """the single input node an empty canvas starts with."""
    agent = PREDEFINED_AGENTS[0]
    x, y = DEFAULT_NODE_POSITION
    return Node(
        id=DEFAULT_NODE_ID,
        kind=NodeKind.INPUT,
        x=x,
        y=y,
        model=agent.name,
        agent_id=agent.id,
        agent_color=agent.color,
        width=DEFAULT_INPUT_SIZE[0],
    )


def is_finite(*values: Optional[float]) -> bool:
    """True when every given number is finite (None is allowed)."""
    return all(v is None or math.isfinite(v) for v in values)


def valid_geometry(
    x: Optional[float],
    y: Optional[float],
    width: Optional[float] = None,
    height: Optional[float] = None,
) -> bool:
    """position must be finite numbers; a size may also be unmeasured (None)."""
    return x is not None and y is not None and is_finite(x, y, width, height)


def generate_id() -> str:
    """generate a short random base-36 id.

    collisions are possible in principle and never checked.
    """
    return "".join(random.choices(ID_ALPHABET, k=ID_LENGTH))
