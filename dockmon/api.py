"""
FastAPI routes and endpoints for the Dockmon service.

The HTTP routes cover login, container listing and health; ``/ws`` hands
every WebSocket to its own ``Session``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .auth import TokenAuthority, require_user
from .config import Config, config as default_config
from .directory import ContainerDirectory
from .errors import AuthError, DockmonError, RuntimeUnavailableError
from .gateway import StreamGateway
from .models import ContainerListResponse, HealthResponse, LoginRequest, LoginResponse, utc_timestamp
from .runtime import DockerRuntime
from .session import Session
from .session_manager import SessionManager
from .ui import get_monitor_ui_html

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008
TRY_AGAIN_LATER = 1013


def create_app(app_config: Optional[Config] = None, runtime: Optional[DockerRuntime] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_config: Settings to use instead of the global configuration
        runtime: Runtime client to use instead of one built from the settings

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app_config = app_config or default_config
    runtime = runtime or DockerRuntime(app_config.docker)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not await runtime.ping():
            logger.warning("Docker features will be disabled until the daemon becomes reachable")
        yield
        await app.state.sessions.close_all()
        await runtime.aclose()

    app = FastAPI(
        title="Dockmon - Docker Log Monitor",
        description="Live container log streaming over WebSocket",
        version="0.1.0",
        lifespan=lifespan
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = app_config
    app.state.runtime = runtime
    app.state.directory = ContainerDirectory(runtime, app_config.filters)
    app.state.gateway = StreamGateway(runtime, tail=app_config.stream.tail)
    app.state.authority = TokenAuthority(app_config.auth)
    app.state.sessions = SessionManager(app_config.stream.max_connections)

    @app.exception_handler(DockmonError)
    async def dockmon_error_handler(request: Request, exc: DockmonError) -> JSONResponse:
        """Map service errors to JSON responses."""
        content: Dict[str, Any] = {"error": exc.message}
        if isinstance(exc, RuntimeUnavailableError):
            content["containers"] = []
        return JSONResponse(status_code=exc.status_code, content=content)

    _add_routes(app)

    return app


def _add_routes(app: FastAPI) -> None:
    """Add all routes to the FastAPI application."""

    @app.get("/", response_class=HTMLResponse)
    async def get_monitor_ui():
        """Serve the log monitor UI."""
        return HTMLResponse(content=get_monitor_ui_html(app.state.config))

    @app.post("/api/login", response_model=LoginResponse)
    async def login(credentials: LoginRequest):
        """Exchange username and password for a token."""
        authority: TokenAuthority = app.state.authority
        token = authority.login(credentials.username, credentials.password)
        return LoginResponse(
            token=token,
            user=credentials.username,
            expires_in=authority.config.token_ttl
        )

    @app.get("/api/verify")
    async def verify(claims: Dict[str, Any] = Depends(require_user)):
        """Check a bearer token."""
        return {"valid": True, "user": {"username": claims["username"], "timestamp": claims.get("iat")}}

    @app.post("/api/logout")
    async def logout():
        """Tokens are stateless; the client drops its copy."""
        return {"status": "ok"}

    @app.get("/api/containers", response_model=ContainerListResponse)
    async def list_containers(
        include_all: bool = Query(False, alias="all"),
        claims: Dict[str, Any] = Depends(require_user)
    ):
        """List monitorable containers with the active filters."""
        snapshot = await app.state.directory.snapshot(include_all=include_all)
        return ContainerListResponse(
            containers=snapshot.containers,
            filter=snapshot.filters.describe_names(),
            state_filter=snapshot.filters.describe_states(),
            total=snapshot.total,
            filtered=snapshot.filtered
        )

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            timestamp=utc_timestamp(),
            docker="connected" if app.state.runtime.available else "unavailable",
            active_sessions=app.state.sessions.get_session_count()
        )

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """WebSocket endpoint for live log streaming."""
        sessions: SessionManager = app.state.sessions
        if sessions.is_connection_limit_reached():
            await websocket.close(code=TRY_AGAIN_LATER, reason="Server overloaded")
            return

        await websocket.accept()
        session = Session(app.state.directory, app.state.gateway, app.state.authority, websocket.send_json)
        sessions.add_session(session)

        try:
            while True:
                await session.handle_message(await _receive_message(websocket))
        except WebSocketDisconnect:
            logger.info("WebSocket closed by client")
        except AuthError:
            await websocket.close(code=POLICY_VIOLATION, reason="Authentication failed")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            await session.close()
            sessions.remove_session(session)


async def _receive_message(websocket: WebSocket) -> str:
    """
    Wait for the next client message as text.

    Binary frames are decoded as UTF-8 so that garbage reaches the message
    parser and is rejected there instead of ending the connection.

    Raises:
        WebSocketDisconnect: If the client went away
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")
