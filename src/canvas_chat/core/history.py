"""named canvas snapshots kept in a single json file.

a snapshot is just nodes + connections; the viewport and agents are
not part of it.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import Connection, Node
from .store import CanvasStore


# --- configuration ---

HISTORY_FILE = "canvas-history.json"


def get_canvas_dir() -> Path:
    """get the canvas storage directory (CANVAS_CHAT_HOME or ~/.canvas-chat)."""
    override = os.environ.get("CANVAS_CHAT_HOME")
    canvas_dir = Path(override) if override else Path.home() / ".canvas-chat"
    canvas_dir.mkdir(parents=True, exist_ok=True)
    return canvas_dir


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Snapshot:
    """a saved canvas."""

    id: str
    name: str
    created_at: int  # epoch ms of the last save
    nodes: list[Node] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": [c.to_dict() for c in self.connections],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Snapshot:
        return cls(
            id=d["id"],
            name=d.get("name", "untitled"),
            created_at=d.get("created_at", 0),
            nodes=[Node.from_dict(n) for n in d.get("nodes", [])],
            connections=[Connection.from_dict(c) for c in d.get("connections", [])],
        )


class SnapshotLibrary:
    """list of saved canvases, newest first, persisted on every change."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_canvas_dir() / HISTORY_FILE
        self._items: list[Snapshot] = self._read()

    def _read(self) -> list[Snapshot]:
        if not self.path.exists():
            return []
        try:
            with open(self.path) as f:
                return [Snapshot.from_dict(d) for d in json.load(f)]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logging.error(f"failed to parse canvas history {self.path}: {e}")
            return []

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump([s.to_dict() for s in self._items], f, indent=2)

    def list(self) -> list[Snapshot]:
        return list(self._items)

    def get(self, snapshot_id: str) -> Optional[Snapshot]:
        for item in self._items:
            if item.id == snapshot_id:
                return item
        return None

    def create(self, name: str, nodes, connections) -> Snapshot:
        snapshot = Snapshot(
            id=str(uuid.uuid4()),
            name=name,
            created_at=_now_ms(),
            nodes=list(nodes),
            connections=list(connections),
        )
        self._items.insert(0, snapshot)
        self._write()
        return snapshot

    def update(self, snapshot_id: str, nodes, connections) -> bool:
        """overwrite a snapshot's graph. returns False if it is gone."""
        item = self.get(snapshot_id)
        if item is None:
            return False
        item.nodes = list(nodes)
        item.connections = list(connections)
        item.created_at = _now_ms()
        self._write()
        return True

    def rename(self, snapshot_id: str, name: str) -> bool:
        item = self.get(snapshot_id)
        if item is None or not name.strip():
            return False
        item.name = name.strip()
        self._write()
        return True

    def delete(self, snapshot_id: str) -> bool:
        before = len(self._items)
        self._items = [s for s in self._items if s.id != snapshot_id]
        if len(self._items) == before:
            return False
        self._write()
        return True

    def load_into(self, snapshot_id: str, store: CanvasStore) -> bool:
        """replace the store's graph with a snapshot."""
        item = self.get(snapshot_id)
        if item is None:
            return False
        store.set_canvas(item.nodes, item.connections)
        return True

    def save_current(self, store: CanvasStore, current_id: Optional[str] = None) -> Optional[str]:
        """save the live canvas, updating `current_id` if it still exists.

        an untouched default canvas is not saved. returns the snapshot id.
        """
        if store.is_pristine():
            return current_id

        if current_id and self.update(current_id, store.nodes, store.connections):
            return current_id

        now = datetime.now()
        name = f"Canvas {now.strftime('%x')} {now.strftime('%X')}"
        return self.create(name, store.nodes, store.connections).id
