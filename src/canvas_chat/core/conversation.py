"""conversation actions: the ways new nodes get onto the canvas.

every action picks a preferred spot relative to the node it grows
from, asks the placement search for a free one, then inserts the node
and its connection.

asking for a reply is two-phase. `begin_response` inserts a loading
node and captures the prompt as sent; `finish_response` later
rewrites that same node in place. the id from phase one is the only
link between them, so replies resolving out of order never touch
each other's nodes, and a reply whose node was deleted in the
meantime is dropped.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from .client import ClientProtocol, ServiceError
from .models import (
    DEFAULT_INPUT_SIZE,
    DEFAULT_RESPONSE_SIZE,
    ERROR_RESPONSE_TEXT,
    Connection,
    Node,
    NodeKind,
    Point,
    Size,
    generate_id,
)
from .placement import place
from .store import CanvasStore


# --- configuration ---

BRANCH_OFFSET_X = 600.0      # branches open this far to the right
RESPONSE_GAP = 100.0         # gap between a prompt and its reply
CONTINUE_GAP = 50.0          # gap between a reply and a follow-up prompt
TOOLBAR_ORIGIN = (500.0, 300.0)
TOOLBAR_JITTER = 200.0


def _inherit(node: Node) -> dict:
    """agent fields a child copies from its parent."""
    return {"model": node.model, "agent_id": node.agent_id, "agent_color": node.agent_color}


def branch(store: CanvasStore, node_id: str, quote: Optional[str] = None) -> Optional[str]:
    """open a new input node to the right, optionally quoting a selection.

    returns the new node id, or None if the source node is gone.
    """
    source = store.get_node(node_id)
    if source is None:
        return None

    x, y = place(
        Point(source.x + BRANCH_OFFSET_X, source.y),
        Size(*DEFAULT_RESPONSE_SIZE),
        store.nodes,
        "right",
    )
    node = Node(
        id=generate_id(),
        kind=NodeKind.INPUT,
        x=x,
        y=y,
        source_id=source.id,
        context_quote=quote or None,
        **_inherit(source),
    )
    store.add_node(node)
    store.add_connection(Connection.link(source, node, "right", "left"))
    store.select_node(None)
    return node.id


@dataclass(frozen=True)
class PendingReply:
    """everything phase two needs, captured when the prompt was sent.

    later edits to (or deletion of) the prompt node do not change what
    gets asked.
    """

    response_id: str
    prompt: str
    context: Optional[str] = None
    system_prompt: Optional[str] = None


def begin_response(store: CanvasStore, node_id: str, content: Optional[str] = None) -> Optional[PendingReply]:
    """phase one: record the prompt and drop a loading node below it.

    `content` overrides the node's own text (e.g. a follow-up typed
    elsewhere); otherwise the node's current content is submitted.
    returns the captured request, or None when there is nothing to send.
    """
    source = store.get_node(node_id)
    if source is None:
        return None

    text = content if content is not None else source.content
    if not text.strip():
        return None

    store.update_node_content(source.id, text)

    x, y = place(
        Point(source.x, source.y + source.size.height + RESPONSE_GAP),
        Size(*DEFAULT_RESPONSE_SIZE),
        store.nodes,
        "bottom",
    )
    loading = Node(
        id=generate_id(),
        kind=NodeKind.LOADING,
        x=x,
        y=y,
        source_id=source.id,
        is_streaming=True,
        **_inherit(source),
    )
    store.add_node(loading)
    store.add_connection(Connection.link(source, loading, "bottom", "top"))
    return PendingReply(
        response_id=loading.id,
        prompt=text,
        context=source.context_quote,
        system_prompt=store.system_prompt_for(source.agent_id) or None,
    )


def finish_response(store: CanvasStore, response_id: str, text: str) -> None:
    """phase two: turn the loading node into a response."""
    if store.get_node(response_id) is None:
        logging.debug(f"reply for deleted node {response_id} dropped")
        return
    store.update_node(response_id, kind=NodeKind.RESPONSE, content=text, is_streaming=False)


async def request_reply(store: CanvasStore, client: ClientProtocol, pending: PendingReply) -> None:
    """call the service with the captured prompt and fill in the reply node."""
    try:
        text = await client.generate(
            pending.prompt,
            context=pending.context,
            system_prompt=pending.system_prompt,
        )
    except ServiceError as e:
        logging.warning(f"generation failed for {pending.response_id}: {e}")
        text = ERROR_RESPONSE_TEXT

    finish_response(store, pending.response_id, text)


async def submit(
    store: CanvasStore,
    client: ClientProtocol,
    node_id: str,
    content: Optional[str] = None,
) -> Optional[str]:
    """ask for a reply to an input node. returns the response node id."""
    pending = begin_response(store, node_id, content)
    if pending is None:
        return None
    await request_reply(store, client, pending)
    return pending.response_id


def continue_chat(store: CanvasStore, node_id: str, text: str) -> Optional[str]:
    """add a follow-up input node under a response."""
    source = store.get_node(node_id)
    if source is None:
        return None

    x, y = place(
        Point(source.x, source.y + source.size.height + CONTINUE_GAP),
        Size(*DEFAULT_RESPONSE_SIZE),
        store.nodes,
        "bottom",
    )
    node = Node(
        id=generate_id(),
        kind=NodeKind.INPUT,
        x=x,
        y=y,
        content=text,
        source_id=source.id,
        **_inherit(source),
    )
    store.add_node(node)
    store.add_connection(Connection.link(source, node, "bottom", "top"))
    return node.id


def add_agent_node(store: CanvasStore, agent_id: str, rng: Optional[random.Random] = None) -> Optional[str]:
    """drop a fresh input node for an agent somewhere near the middle."""
    agent = store.get_agent(agent_id)
    if agent is None:
        return None

    rng = rng or random.Random()
    ox, oy = TOOLBAR_ORIGIN
    preferred = Point(ox + rng.random() * TOOLBAR_JITTER, oy + rng.random() * TOOLBAR_JITTER)
    x, y = place(preferred, Size(*DEFAULT_INPUT_SIZE), store.nodes, "any")

    node = Node.create_input(x, y, agent=agent, width=DEFAULT_INPUT_SIZE[0])
    store.add_node(node)
    return node.id
