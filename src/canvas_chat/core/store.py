"""canvas store: the single owner of nodes, connections and agents.

every mutation swaps in a new tuple (copy-on-write), so a reader that
grabbed `store.nodes` before a change keeps a consistent snapshot.
lookups that miss are no-ops or return None; nothing here raises on a
missing id.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Optional

from .models import (
    PREDEFINED_AGENTS,
    Agent,
    Connection,
    Node,
    NodeKind,
    default_node,
    generate_id,
    valid_geometry,
)


class CanvasStore:
    """the canvas graph plus the agent roster and global system prompt."""

    def __init__(
        self,
        nodes: Optional[Iterable[Node]] = None,
        connections: Optional[Iterable[Connection]] = None,
        agents: Optional[Iterable[Agent]] = None,
        system_prompt: str = "",
    ):
        self.nodes: tuple[Node, ...] = tuple(nodes) if nodes is not None else (default_node(),)
        self.connections: tuple[Connection, ...] = tuple(connections or ())
        self.agents: tuple[Agent, ...] = tuple(agents) if agents is not None else PREDEFINED_AGENTS
        self.system_prompt = system_prompt
        self.selected_node_id: Optional[str] = None

    # --- lookups ---

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_agent(self, agent_id: Optional[str]) -> Optional[Agent]:
        for agent in self.agents:
            if agent.id == agent_id:
                return agent
        return None

    @property
    def selected_node(self) -> Optional[Node]:
        if self.selected_node_id is None:
            return None
        return self.get_node(self.selected_node_id)

    def connections_for(self, node_id: str) -> list[Connection]:
        """connections touching a node in either direction."""
        return [c for c in self.connections if c.from_id == node_id or c.to_id == node_id]

    def system_prompt_for(self, agent_id: Optional[str]) -> str:
        """agent-scoped prompt if it has one, else the global prompt."""
        agent = self.get_agent(agent_id)
        if agent and agent.system_prompt:
            return agent.system_prompt
        return self.system_prompt

    def is_pristine(self) -> bool:
        """True for the untouched default canvas (nothing worth saving)."""
        if not self.nodes:
            return True
        return len(self.nodes) == 1 and self.nodes[0].content == "" and not self.connections

    # --- node mutations ---

    def add_node(self, node: Node) -> None:
        """append a node. the caller guarantees the id is unused."""
        if not valid_geometry(node.x, node.y, node.width, node.height):
            logging.warning(f"refusing node {node.id} with non-finite geometry")
            return
        self.nodes = self.nodes + (node,)

    def update_node(self, node_id: str, **fields) -> None:
        """merge fields into a node. no-op if the id is absent."""
        fields.pop("id", None)
        node = self.get_node(node_id)
        if node is None:
            return
        geometry = {k: fields.get(k, getattr(node, k)) for k in ("x", "y", "width", "height")}
        if not valid_geometry(**geometry):
            logging.warning(f"ignoring non-finite geometry for node {node_id}: {fields}")
            return
        self.nodes = tuple(
            dataclasses.replace(n, **fields) if n.id == node_id else n
            for n in self.nodes
        )

    def update_node_content(self, node_id: str, content: str) -> None:
        self.update_node(node_id, content=content)

    def update_node_position(self, node_id: str, x: float, y: float) -> None:
        self.update_node(node_id, x=x, y=y)

    def toggle_node_expanded(self, node_id: str) -> None:
        self.nodes = tuple(
            dataclasses.replace(n, expanded=not n.expanded) if n.id == node_id else n
            for n in self.nodes
        )

    def remove_node(self, node_id: str) -> None:
        """delete a node and every connection into or out of it."""
        self.nodes = tuple(n for n in self.nodes if n.id != node_id)
        self.connections = tuple(
            c for c in self.connections if c.from_id != node_id and c.to_id != node_id
        )
        if self.selected_node_id == node_id:
            self.selected_node_id = None

    def select_node(self, node_id: Optional[str]) -> None:
        self.selected_node_id = node_id

    # --- connections ---

    def add_connection(self, connection: Connection) -> None:
        """append a connection. endpoints are not validated."""
        self.connections = self.connections + (connection,)

    # --- whole-canvas ---

    def set_canvas(self, nodes: Iterable[Node], connections: Iterable[Connection]) -> None:
        """replace the whole graph at once (loading a snapshot).

        nodes with a missing or non-finite position or size are dropped.
        """
        kept = []
        for node in nodes:
            if valid_geometry(node.x, node.y, node.width, node.height):
                kept.append(node)
            else:
                logging.warning(f"dropping node {node.id} with invalid geometry")
        self.nodes, self.connections = tuple(kept), tuple(connections)

    def reset_canvas(self) -> None:
        """back to one empty input node and no connections."""
        self.nodes = (default_node(),)
        self.connections = ()
        self.selected_node_id = None

    # --- agents / settings ---

    def add_agent(self, agent: Agent) -> None:
        self.agents = self.agents + (agent,)

    def create_agent(
        self,
        name: str,
        color: str,
        description: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> Agent:
        """create and register a custom agent."""
        agent = Agent(
            id=f"custom-{generate_id()}",
            name=name,
            color=color,
            description=description or None,
            system_prompt=system_prompt or None,
        )
        self.add_agent(agent)
        return agent

    def update_agent(self, agent_id: str, **fields) -> None:
        """edit an agent in place.

        nodes keep the color they were created with.
        """
        fields.pop("id", None)
        self.agents = tuple(
            dataclasses.replace(a, **fields) if a.id == agent_id else a
            for a in self.agents
        )

    def set_system_prompt(self, prompt: str) -> None:
        self.system_prompt = prompt

    # --- serialization ---

    def to_dict(self) -> dict:
        """the graph as a snapshot payload (no viewport, no agents)."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": [c.to_dict() for c in self.connections],
        }


def nodes_from_dicts(items: Iterable[dict]) -> list[Node]:
    return [Node.from_dict(d) for d in items]


def connections_from_dicts(items: Iterable[dict]) -> list[Connection]:
    return [Connection.from_dict(d) for d in items]


def count_loading(store: CanvasStore) -> int:
    """number of nodes still waiting on a reply."""
    return sum(1 for n in store.nodes if n.kind == NodeKind.LOADING)
