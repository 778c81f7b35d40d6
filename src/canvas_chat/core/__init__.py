"""core primitives shared between frontends."""

from .models import (
    Agent,
    Connection,
    Node,
    NodeKind,
    Point,
    Rect,
    Size,
    PREDEFINED_AGENTS,
    DEFAULT_INPUT_SIZE,
    DEFAULT_RESPONSE_SIZE,
    ERROR_RESPONSE_TEXT,
    default_size,
    generate_id,
)
from .store import CanvasStore
from .placement import place, check_collision
from .viewport import ViewportTransform, MIN_SCALE, MAX_SCALE
from .router import Curve, route, route_all
from .interaction import InteractionController
from .client import ClaudeClient, MockClient, ClientProtocol, ServiceError
from .history import Snapshot, SnapshotLibrary, get_canvas_dir

__all__ = [
    # models
    "Agent",
    "Connection",
    "Node",
    "NodeKind",
    "Point",
    "Rect",
    "Size",
    "PREDEFINED_AGENTS",
    "DEFAULT_INPUT_SIZE",
    "DEFAULT_RESPONSE_SIZE",
    "ERROR_RESPONSE_TEXT",
    "default_size",
    "generate_id",
    # graph engine
    "CanvasStore",
    "place",
    "check_collision",
    "ViewportTransform",
    "MIN_SCALE",
    "MAX_SCALE",
    "Curve",
    "route",
    "route_all",
    "InteractionController",
    # client
    "ClaudeClient",
    "MockClient",
    "ClientProtocol",
    "ServiceError",
    # history
    "Snapshot",
    "SnapshotLibrary",
    "get_canvas_dir",
]
