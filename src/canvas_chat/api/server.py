"""fastapi server for canvas chat.

exposes the canvas store, viewport and snapshot library as REST
endpoints for a browser frontend. the store never raises on a missing
id; this layer is where that becomes a 404.
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..core import conversation
from ..core.client import ClaudeClient, ClientProtocol, MockClient
from ..core.history import SnapshotLibrary, Snapshot
from ..core.interaction import InteractionController
from ..core.models import Agent, Connection, Node, Point, generate_id
from ..core.router import route_all
from ..core.store import CanvasStore, connections_from_dicts, count_loading, nodes_from_dicts
from ..core.viewport import MinimapLayout, ViewportTransform


# --- configuration ---

MOCK_DELAY = 0.5  # seconds

AnchorName = Literal["top", "right", "bottom", "left"]


# --- pydantic models for api ---

class SubmitRequest(BaseModel):
    """request to ask for a reply to an input node."""
    content: Optional[str] = None  # defaults to the node's current text


class BranchRequest(BaseModel):
    """request to branch from a node, optionally quoting a selection."""
    quote: Optional[str] = None


class ContinueRequest(BaseModel):
    """request to add a follow-up prompt under a response."""
    text: str = ""


class NodeUpdate(BaseModel):
    """partial node update; only the fields sent are applied."""
    content: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    expanded: Optional[bool] = None


class PositionUpdate(BaseModel):
    x: float
    y: float


class ConnectionCreate(BaseModel):
    from_id: str
    to_id: str
    from_anchor: AnchorName = "bottom"
    to_anchor: AnchorName = "top"
    color: Optional[str] = None


class CanvasReplace(BaseModel):
    """full graph replacement (e.g. an imported snapshot)."""
    nodes: list[dict]
    connections: list[dict] = []


class AgentCreate(BaseModel):
    name: str
    color: str
    description: Optional[str] = None
    system_prompt: Optional[str] = None


class AgentUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None


class SystemPromptUpdate(BaseModel):
    prompt: str


class PanRequest(BaseModel):
    dx: float
    dy: float


class ZoomRequest(BaseModel):
    x: float
    y: float
    delta_scale: float


class ZoomToRequest(BaseModel):
    x: float
    y: float
    scale: float


class WheelRequest(BaseModel):
    x: float
    y: float
    delta_x: float = 0.0
    delta_y: float = 0.0
    modifier: bool = False


class ViewportResize(BaseModel):
    width: float
    height: float


class RenameRequest(BaseModel):
    name: str


class NodeResponse(BaseModel):
    """node in api response."""
    id: str
    kind: str
    x: float
    y: float
    content: str
    model: Optional[str] = None
    agent_id: Optional[str] = None
    agent_color: Optional[str] = None
    source_id: Optional[str] = None
    context_quote: Optional[str] = None
    is_streaming: bool = False
    expanded: bool = False
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_node(cls, node: Node) -> "NodeResponse":
        return cls(**node.to_dict())


class ConnectionResponse(BaseModel):
    id: str
    from_id: str
    to_id: str
    from_anchor: str
    to_anchor: str
    color: Optional[str] = None

    @classmethod
    def from_connection(cls, conn: Connection) -> "ConnectionResponse":
        return cls(**conn.to_dict())


class AgentResponse(BaseModel):
    id: str
    name: str
    color: str
    description: Optional[str] = None
    system_prompt: Optional[str] = None

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentResponse":
        return cls(**agent.to_dict())


class CanvasResponse(BaseModel):
    """canvas in api response."""
    nodes: list[NodeResponse]
    connections: list[ConnectionResponse]
    selected_node_id: Optional[str] = None
    current_snapshot_id: Optional[str] = None
    pending_replies: int = 0

    @classmethod
    def from_store(cls, store: CanvasStore, current_snapshot_id: Optional[str] = None) -> "CanvasResponse":
        return cls(
            nodes=[NodeResponse.from_node(n) for n in store.nodes],
            connections=[ConnectionResponse.from_connection(c) for c in store.connections],
            selected_node_id=store.selected_node_id,
            current_snapshot_id=current_snapshot_id,
            pending_replies=count_loading(store),
        )


class CurveResponse(BaseModel):
    """routed connection, ready to stroke."""
    id: str
    path: str
    color: str


class ViewportResponse(BaseModel):
    x: float
    y: float
    scale: float
    width: float
    height: float


class RectResponse(BaseModel):
    x: float
    y: float
    width: float
    height: float


class MinimapResponse(BaseModel):
    """node boxes and the visible area in minimap space."""
    nodes: dict[str, RectResponse]
    viewport: RectResponse

    @classmethod
    def from_layout(cls, layout: MinimapLayout) -> "MinimapResponse":
        return cls(
            nodes={nid: RectResponse(**r._asdict()) for nid, r in layout.nodes.items()},
            viewport=RectResponse(**layout.viewport._asdict()),
        )


class SnapshotInfo(BaseModel):
    """snapshot summary for listing."""
    id: str
    name: str
    created_at: int
    node_count: int

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotInfo":
        return cls(
            id=snapshot.id,
            name=snapshot.name,
            created_at=snapshot.created_at,
            node_count=len(snapshot.nodes),
        )


# --- app state ---

class AppState:
    """shared application state: one store, one viewport, one client."""

    def __init__(self, mock: bool = False, history_path=None):
        self.store = CanvasStore()
        self.viewport = ViewportTransform()
        self.interaction = InteractionController(self.store, self.viewport)
        self.mock = mock
        self.history_path = history_path
        self.current_snapshot_id: Optional[str] = None
        self._client: Optional[ClientProtocol] = None
        self._library: Optional[SnapshotLibrary] = None

    @property
    def client(self) -> ClientProtocol:
        if self._client is None:
            if self.mock:
                self._client = MockClient(delay=MOCK_DELAY)
            else:
                self._client = ClaudeClient()
        return self._client

    @property
    def library(self) -> SnapshotLibrary:
        if self._library is None:
            self._library = SnapshotLibrary(self.history_path)
        return self._library


state = AppState()


def _canvas_response() -> CanvasResponse:
    return CanvasResponse.from_store(state.store, state.current_snapshot_id)


def _require_node(node_id: str) -> Node:
    node = state.store.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"node not found: {node_id}")
    return node


def _viewport_response() -> ViewportResponse:
    return ViewportResponse(**state.viewport.to_dict())


# --- app ---

app = FastAPI(
    title="canvas chat api",
    description="REST API for branching conversations on an infinite canvas",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- endpoints: canvas ---

@app.get("/health")
async def health():
    """health check."""
    return {"status": "ok"}


@app.get("/canvas", response_model=CanvasResponse)
async def get_canvas():
    return _canvas_response()


@app.put("/canvas", response_model=CanvasResponse)
async def replace_canvas(req: CanvasReplace):
    """replace the whole graph."""
    try:
        nodes = nodes_from_dicts(req.nodes)
        connections = connections_from_dicts(req.connections)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"invalid canvas: {e}")
    state.store.set_canvas(nodes, connections)
    return _canvas_response()


@app.post("/canvas/reset", response_model=CanvasResponse)
async def reset_canvas():
    state.store.reset_canvas()
    return _canvas_response()


@app.get("/canvas/curves", response_model=list[CurveResponse])
async def get_curves():
    """every drawable connection as an svg path. dangling ones are skipped."""
    curves = route_all(state.store.connections, state.store.nodes)
    return [CurveResponse(id=cid, path=c.to_svg_path(), color=c.color) for cid, c in curves.items()]


# --- endpoints: nodes ---

@app.post("/node/{node_id}/submit", response_model=NodeResponse)
async def submit_node(node_id: str, req: SubmitRequest, background_tasks: BackgroundTasks):
    """ask for a reply. returns the loading node; it fills in later."""
    _require_node(node_id)
    pending = conversation.begin_response(state.store, node_id, req.content)
    if pending is None:
        raise HTTPException(status_code=400, detail="nothing to submit")

    background_tasks.add_task(conversation.request_reply, state.store, state.client, pending)
    return NodeResponse.from_node(state.store.get_node(pending.response_id))


@app.post("/node/{node_id}/branch", response_model=NodeResponse)
async def branch_node(node_id: str, req: BranchRequest):
    _require_node(node_id)
    new_id = conversation.branch(state.store, node_id, req.quote)
    return NodeResponse.from_node(state.store.get_node(new_id))


@app.post("/node/{node_id}/continue", response_model=NodeResponse)
async def continue_node(node_id: str, req: ContinueRequest):
    _require_node(node_id)
    new_id = conversation.continue_chat(state.store, node_id, req.text)
    return NodeResponse.from_node(state.store.get_node(new_id))


@app.put("/node/{node_id}", response_model=NodeResponse)
async def update_node(node_id: str, req: NodeUpdate):
    """merge fields, e.g. edited text or a freshly measured size."""
    _require_node(node_id)
    state.store.update_node(node_id, **req.model_dump(exclude_unset=True, exclude_none=True))
    return NodeResponse.from_node(state.store.get_node(node_id))


@app.put("/node/{node_id}/position", response_model=NodeResponse)
async def move_node(node_id: str, req: PositionUpdate):
    _require_node(node_id)
    state.store.update_node_position(node_id, req.x, req.y)
    return NodeResponse.from_node(state.store.get_node(node_id))


@app.post("/node/{node_id}/toggle-expanded", response_model=NodeResponse)
async def toggle_expanded(node_id: str):
    _require_node(node_id)
    state.store.toggle_node_expanded(node_id)
    return NodeResponse.from_node(state.store.get_node(node_id))


@app.post("/node/{node_id}/select")
async def select_node(node_id: str):
    _require_node(node_id)
    state.store.select_node(node_id)
    return {"selected_node_id": node_id}


@app.post("/node/{node_id}/center", response_model=ViewportResponse)
async def center_on_node(node_id: str):
    """pan so the node sits in the middle of the viewport."""
    state.viewport.center_on(_require_node(node_id))
    return _viewport_response()


@app.delete("/node/{node_id}")
async def delete_node(node_id: str):
    """delete a node and its connections."""
    _require_node(node_id)
    state.store.remove_node(node_id)
    return {"deleted": node_id}


@app.post("/connection", response_model=ConnectionResponse)
async def add_connection(req: ConnectionCreate):
    conn = Connection(id=generate_id(), **req.model_dump())
    state.store.add_connection(conn)
    return ConnectionResponse.from_connection(conn)


# --- endpoints: agents ---

@app.get("/agents", response_model=list[AgentResponse])
async def list_agents():
    return [AgentResponse.from_agent(a) for a in state.store.agents]


@app.post("/agents", response_model=AgentResponse)
async def create_agent(req: AgentCreate):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="agent name is required")
    agent = state.store.create_agent(req.name.strip(), req.color, req.description, req.system_prompt)
    return AgentResponse.from_agent(agent)


@app.put("/agents/{agent_id}", response_model=AgentResponse)
async def update_agent(agent_id: str, req: AgentUpdate):
    if state.store.get_agent(agent_id) is None:
        raise HTTPException(status_code=404, detail=f"agent not found: {agent_id}")
    state.store.update_agent(agent_id, **req.model_dump(exclude_unset=True, exclude_none=True))
    return AgentResponse.from_agent(state.store.get_agent(agent_id))


@app.post("/agents/{agent_id}/node", response_model=NodeResponse)
async def add_agent_node(agent_id: str):
    """add a new input node for an agent (toolbar button)."""
    new_id = conversation.add_agent_node(state.store, agent_id)
    if new_id is None:
        raise HTTPException(status_code=404, detail=f"agent not found: {agent_id}")
    return NodeResponse.from_node(state.store.get_node(new_id))


@app.put("/settings/system-prompt")
async def set_system_prompt(req: SystemPromptUpdate):
    state.store.set_system_prompt(req.prompt)
    return {"system_prompt": state.store.system_prompt}


# --- endpoints: viewport ---

@app.get("/viewport", response_model=ViewportResponse)
async def get_viewport():
    return _viewport_response()


@app.put("/viewport/size", response_model=ViewportResponse)
async def resize_viewport(req: ViewportResize):
    state.viewport.resize(req.width, req.height)
    return _viewport_response()


@app.post("/viewport/pan", response_model=ViewportResponse)
async def pan_viewport(req: PanRequest):
    state.viewport.pan_by(req.dx, req.dy)
    return _viewport_response()


@app.post("/viewport/zoom", response_model=ViewportResponse)
async def zoom_viewport(req: ZoomRequest):
    state.viewport.zoom_at(Point(req.x, req.y), req.delta_scale)
    return _viewport_response()


@app.post("/viewport/zoom-to", response_model=ViewportResponse)
async def zoom_viewport_to(req: ZoomToRequest):
    """zoom to an absolute scale (e.g. reset to 100%) around a screen point."""
    state.viewport.zoom_to(Point(req.x, req.y), req.scale)
    return _viewport_response()


@app.get("/viewport/minimap", response_model=MinimapResponse)
async def get_minimap():
    """every node and the visible area, projected into the overview."""
    return MinimapResponse.from_layout(state.viewport.minimap(state.store.nodes))


@app.post("/viewport/wheel", response_model=ViewportResponse)
async def wheel_viewport(req: WheelRequest):
    """raw wheel event: modifier zooms at the cursor, otherwise pans."""
    state.interaction.wheel(Point(req.x, req.y), req.delta_x, req.delta_y, req.modifier)
    return _viewport_response()


# --- endpoints: history ---

@app.get("/history", response_model=list[SnapshotInfo])
async def list_history():
    return [SnapshotInfo.from_snapshot(s) for s in state.library.list()]


@app.post("/history")
async def save_history():
    """save the live canvas into the current snapshot (or a new one)."""
    state.current_snapshot_id = state.library.save_current(state.store, state.current_snapshot_id)
    return {"current_snapshot_id": state.current_snapshot_id}


@app.post("/history/new", response_model=CanvasResponse)
async def new_canvas():
    """save what is there, then start over."""
    state.library.save_current(state.store, state.current_snapshot_id)
    state.store.reset_canvas()
    state.current_snapshot_id = None
    return _canvas_response()


@app.post("/history/{snapshot_id}/load", response_model=CanvasResponse)
async def load_history(snapshot_id: str):
    """switch snapshots. edits to the current one are saved first."""
    if state.library.get(snapshot_id) is None:
        raise HTTPException(status_code=404, detail=f"snapshot not found: {snapshot_id}")
    if state.current_snapshot_id:
        state.library.save_current(state.store, state.current_snapshot_id)
    state.library.load_into(snapshot_id, state.store)
    state.current_snapshot_id = snapshot_id
    return _canvas_response()


@app.put("/history/{snapshot_id}", response_model=SnapshotInfo)
async def rename_history(snapshot_id: str, req: RenameRequest):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="name is required")
    if not state.library.rename(snapshot_id, req.name):
        raise HTTPException(status_code=404, detail=f"snapshot not found: {snapshot_id}")
    return SnapshotInfo.from_snapshot(state.library.get(snapshot_id))


@app.delete("/history/{snapshot_id}")
async def delete_history(snapshot_id: str):
    if not state.library.delete(snapshot_id):
        raise HTTPException(status_code=404, detail=f"snapshot not found: {snapshot_id}")
    if state.current_snapshot_id == snapshot_id:
        state.current_snapshot_id = None
    return {"deleted": snapshot_id}
