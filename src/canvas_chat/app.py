"""canvas chat: terminal frontend.

draws the canvas as a character map and drives it from the keyboard
and mouse. replies are requested in a worker so the ui keeps running
while the loading node waits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Input, Static

from .core import conversation
from .core.client import ClaudeClient, ClientProtocol, MockClient
from .core.history import SnapshotLibrary
from .core.models import NodeKind, Point
from .core.store import CanvasStore, count_loading
from .core.viewport import ViewportTransform
from .widgets.canvas_view import CanvasView, NodeClicked
from .widgets.minimap import Minimap, MinimapClicked


class CanvasChatApp(App):
    """main application."""

    TITLE = "canvas chat"

    CSS = """
    Screen {
        layout: vertical;
    }

    #status {
        height: 1;
        padding: 0 1;
        background: $surface;
    }

    #main {
        height: 1fr;
    }

    #prompt {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "quit"),
        Binding("left", "pan(80, 0)", "pan", show=False),
        Binding("right", "pan(-80, 0)", "pan", show=False),
        Binding("up", "pan(0, 80)", "pan", show=False),
        Binding("down", "pan(0, -80)", "pan", show=False),
        Binding("plus,equals_sign", "zoom(0.1)", "zoom in"),
        Binding("minus", "zoom(-0.1)", "zoom out"),
        Binding("0", "zoom_reset", "100%"),
        Binding("a", "add_agent_node", "agent"),
        Binding("b", "branch", "branch"),
        Binding("c", "center", "center"),
        Binding("s", "cycle_selection", "select"),
        Binding("x", "delete", "delete"),
        Binding("r", "reset", "reset"),
        Binding("ctrl+s", "save", "save"),
        Binding("enter", "focus_prompt", "prompt", show=False),
        Binding("escape", "focus_canvas", "canvas", show=False),
    ]

    def __init__(
        self,
        client: Optional[ClientProtocol] = None,
        history_path: Optional[Path] = None,
    ):
        super().__init__()
        self.store = CanvasStore()
        self.viewport = ViewportTransform()
        self.client = client or ClaudeClient()
        self.library = SnapshotLibrary(history_path)
        self.snapshot_id: Optional[str] = None
        self._next_agent = 0

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            with Horizontal(id="main"):
                yield CanvasView(self.store, self.viewport, id="canvas")
                yield Minimap(self.store, self.viewport, id="minimap")
            yield Static("", id="status")
            yield Input(placeholder="ask something (enter to send, esc to go back)...", id="prompt")
        yield Footer()

    def on_mount(self) -> None:
        self.store.select_node(self.store.nodes[0].id if self.store.nodes else None)
        self._refresh_all()

    # --- helpers ---

    def _refresh_all(self) -> None:
        self.query_one("#canvas", CanvasView).refresh_canvas(self.store)
        self.query_one("#minimap", Minimap).refresh_canvas(self.store)
        node = self.store.selected_node
        selected = f"{node.kind.value} {node.id}" if node else "none"
        loading = count_loading(self.store)
        self.query_one("#status", Static).update(
            f"nodes {len(self.store.nodes)}  edges {len(self.store.connections)}  "
            f"zoom {self.viewport.scale:.2f}  selected {selected}"
            + (f"  waiting on {loading}" if loading else "")
        )

    def _viewport_center(self) -> Point:
        return Point(self.viewport.width / 2, self.viewport.height / 2)

    # --- events ---

    def on_node_clicked(self, event: NodeClicked) -> None:
        self.store.select_node(event.node_id)
        self._refresh_all()

    def on_minimap_clicked(self, event: MinimapClicked) -> None:
        self.viewport.center_at(event.canvas_point)
        self._refresh_all()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "prompt":
            return
        node = self.store.selected_node
        text = event.value.strip()
        if not node or not text:
            return

        if node.kind == NodeKind.INPUT:
            pending = conversation.begin_response(self.store, node.id, text)
            if pending:
                self.run_worker(self._await_reply(pending), exclusive=False)
        else:
            new_id = conversation.continue_chat(self.store, node.id, text)
            self.store.select_node(new_id)

        event.input.value = ""
        self._refresh_all()

    async def _await_reply(self, pending: conversation.PendingReply) -> None:
        await conversation.request_reply(self.store, self.client, pending)
        self._refresh_all()

    # --- actions ---

    def action_pan(self, dx: float, dy: float) -> None:
        self.viewport.pan_by(dx, dy)
        self._refresh_all()

    def action_zoom(self, delta: float) -> None:
        self.viewport.zoom_at(self._viewport_center(), delta)
        self._refresh_all()

    def action_zoom_reset(self) -> None:
        self.viewport.zoom_to(self._viewport_center(), 1.0)
        self._refresh_all()

    def action_add_agent_node(self) -> None:
        agents = self.store.agents
        if not agents:
            return
        agent = agents[self._next_agent % len(agents)]
        self._next_agent += 1
        new_id = conversation.add_agent_node(self.store, agent.id)
        self.store.select_node(new_id)
        self._refresh_all()

    def action_branch(self) -> None:
        node = self.store.selected_node
        if not node:
            self.notify("no node selected", severity="warning")
            return
        new_id = conversation.branch(self.store, node.id)
        self.store.select_node(new_id)
        self._refresh_all()

    def action_center(self) -> None:
        node = self.store.selected_node
        if node:
            self.viewport.center_on(node)
            self._refresh_all()

    def action_cycle_selection(self) -> None:
        ids = [n.id for n in self.store.nodes]
        if not ids:
            return
        current = self.store.selected_node_id
        idx = (ids.index(current) + 1) % len(ids) if current in ids else 0
        self.store.select_node(ids[idx])
        self._refresh_all()

    def action_delete(self) -> None:
        node = self.store.selected_node
        if node:
            self.store.remove_node(node.id)
            self._refresh_all()

    def action_reset(self) -> None:
        self.store.reset_canvas()
        self.snapshot_id = None
        self._refresh_all()

    def action_save(self) -> None:
        try:
            self.snapshot_id = self.library.save_current(self.store, self.snapshot_id)
        except OSError as e:
            self.notify(f"save failed: {e}", severity="error")
            return
        self.notify(f"saved to {self.library.path}")

    def action_focus_prompt(self) -> None:
        self.query_one("#prompt", Input).focus()

    def action_focus_canvas(self) -> None:
        self.query_one("#canvas", CanvasView).focus()


def run(mock: bool = False, history_path: Optional[str] = None) -> None:
    """run the canvas chat app."""
    app = CanvasChatApp(
        client=MockClient() if mock else None,
        history_path=Path(history_path) if history_path else None,
    )
    app.run()


if __name__ == "__main__":
    run()
