"""FastAPI application serving the captive portal screen."""

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from captive_portal.config import ConfigManager
from captive_portal.portal.list_view import NetworkListView
from captive_portal.portal.notifications import Notification
from captive_portal.portal.orchestrator import ConnectionOrchestrator
from captive_portal.portal.state import PortalSnapshot
from captive_portal.web.models import (
    ActionResponse,
    CredentialsRequest,
    HiddenNetworkRequest,
    SelectNetworkRequest,
)
from captive_portal.web.websocket import (
    AccessPointStartedEvent,
    BroadcastManager,
    ConnectedEvent,
    NotificationEvent,
    PortalStateChangedEvent,
)

logger = logging.getLogger(__name__)


def create_app(  # pylint: disable=too-many-statements,too-many-locals
    orchestrator: ConnectionOrchestrator,
    config_manager: Optional[ConfigManager] = None,
    on_connected: Optional[Callable[[str], None]] = None,
    on_access_point_started: Optional[Callable[[], None]] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    The orchestrator's event loop runs as a task of the application, so
    HTTP handlers, WebSocket pushes and service completions all share one
    loop.

    Args:
        orchestrator: ConnectionOrchestrator instance
        config_manager: ConfigManager instance (optional)
        on_connected: Host callback run after clients are told about a connect
        on_access_point_started: Host callback run after clients are told about the AP

    Returns:
        Configured FastAPI application
    """
    manager = BroadcastManager()
    view = NetworkListView(orchestrator)

    def handle_snapshot(_snapshot: PortalSnapshot) -> None:
        manager.publish(PortalStateChangedEvent(screen=view.render()))

    def handle_notification(notification: Notification) -> None:
        manager.publish(
            NotificationEvent(
                message=notification.message,
                intent=notification.intent.value,
                timeout=notification.timeout,
            )
        )

    def handle_connected(essid: str) -> None:
        manager.publish(ConnectedEvent(essid=essid))
        if on_connected:
            on_connected(essid)

    def handle_access_point_started() -> None:
        manager.publish(AccessPointStartedEvent())
        if on_access_point_started:
            on_access_point_started()

    orchestrator.add_listener(handle_snapshot)
    orchestrator.set_callbacks(
        on_connected=handle_connected,
        on_access_point_started=handle_access_point_started,
        notify=handle_notification,
    )

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        task = asyncio.create_task(orchestrator.run())
        orchestrator.activate()
        try:
            yield
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    app = FastAPI(
        title="Captive Portal",
        description="Network setup screen for headless devices",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.orchestrator = orchestrator
    app.state.config_manager = config_manager
    app.state.broadcast_manager = manager
    app.state.view = view

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    def ensure_idle() -> None:
        if orchestrator.is_connecting():
            raise HTTPException(status_code=409, detail="A connection attempt is in progress")

    def ensure_interactive() -> None:
        ensure_idle()
        snapshot = orchestrator.snapshot()
        if not snapshot.interactive:
            raise HTTPException(
                status_code=409, detail=f"Already connected to {snapshot.connected_essid}"
            )

    @app.get("/")
    async def root() -> FileResponse:
        """Serve the portal page."""
        return FileResponse(static_dir / "index.html")

    @app.get("/api/portal")
    async def get_portal() -> Dict[str, Any]:
        """Get the rendered portal screen."""
        screen: Dict[str, Any] = view.render()
        return screen

    @app.post("/api/portal/refresh", status_code=202)
    async def refresh() -> ActionResponse:
        """Scan again."""
        ensure_interactive()
        view.refresh()
        return ActionResponse(message="Scanning for networks")

    @app.post("/api/portal/networks/select", status_code=202)
    async def select_network(body: SelectNetworkRequest) -> ActionResponse:
        """Pick a listed network. Open networks are joined right away."""
        ensure_interactive()
        entry = next((e for e in view.entries() if e.essid == body.essid), None)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Network '{body.essid}' not found")
        if entry.is_protected:
            raise HTTPException(status_code=409, detail="Password required")

        view.select(entry)
        return ActionResponse(message=f"Connecting to {body.essid}")

    @app.post("/api/portal/connect", status_code=202)
    async def connect(body: CredentialsRequest) -> ActionResponse:
        """Join a listed protected network with a password."""
        ensure_interactive()
        orchestrator.select_protected_network(body.essid, body.password)
        return ActionResponse(message=f"Connecting to {body.essid}")

    @app.post("/api/portal/hidden", status_code=202)
    async def connect_hidden(body: HiddenNetworkRequest) -> ActionResponse:
        """Join a hidden network."""
        ensure_interactive()
        orchestrator.select_protected_network(body.essid, body.password)
        return ActionResponse(message=f"Connecting to {body.essid}")

    @app.post("/api/portal/access-point", status_code=202)
    async def use_access_point() -> ActionResponse:
        """Switch the device to its own access point."""
        ensure_idle()
        view.use_access_point()
        return ActionResponse(message="Starting access point")

    @app.get("/api/config")
    async def get_config() -> Dict[str, Any]:
        """Get current configuration (with sensitive data masked)."""
        if app.state.config_manager is None:
            raise HTTPException(status_code=503, detail="Configuration not loaded")
        result: Dict[str, Any] = app.state.config_manager.to_dict_safe()
        return result

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """Push portal state and notifications to the page."""
        await manager.connect(websocket)
        await manager.send(PortalStateChangedEvent(screen=view.render()), websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    logger.info("FastAPI application created")
    return app
