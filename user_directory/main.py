"""Main FastAPI application exposing the user directory to the UI."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import Body, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from user_directory.core import config
from user_directory.core.cancellation import CancellationToken
from user_directory.core.comment_synthesizer import CommentSynthesizer, SynthesisConfig
from user_directory.core.exceptions import (
    DirectoryError,
    HttpStatusError,
    NetworkError,
    RequestCancelledError,
    ValidationError,
)
from user_directory.core.http_client import HttpClient
from user_directory.core.postal_codes import PostalCodeSearch
from user_directory.core.state import UserState
from user_directory.core.user_repository import UserRepository
from user_directory.core.websocket_manager import WebSocketManager
from user_directory.models.user import UserForm

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def status_for_error(error: DirectoryError) -> int:
    """Map an application error onto the HTTP status returned to the UI."""
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, RequestCancelledError):
        return 499
    if isinstance(error, NetworkError):
        return 503
    if isinstance(error, HttpStatusError):
        if error.status_code in (403, 404, 409):
            return error.status_code
        return 502
    return 500


def create_app(backend_transport: Optional[httpx.AsyncBaseTransport] = None,
               demo_transport: Optional[httpx.AsyncBaseTransport] = None,
               postal_transport: Optional[httpx.AsyncBaseTransport] = None,
               synthesizer_config: Optional[SynthesisConfig] = None) -> FastAPI:
    """
    Build the application.

    Args:
        backend_transport: Transport for the user backend, used by tests
        demo_transport: Transport for the demo collection, used by tests
        postal_transport: Transport for the postal-code dataset, used by tests
        synthesizer_config: Comment synthesis tunables
    """
    state = UserState()
    websocket_manager = WebSocketManager(state)
    shutdown_token = CancellationToken("Application shutting down")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        backend = HttpClient(config.BASE_ENDPOINT, timeout=config.REQUEST_TIMEOUT, transport=backend_transport)
        demo = HttpClient(config.JSON_PLACEHOLDER_ENDPOINT, timeout=config.REQUEST_TIMEOUT, transport=demo_transport)
        postal = HttpClient(timeout=config.REQUEST_TIMEOUT, transport=postal_transport)

        app.state.repository = UserRepository(backend, state)
        app.state.synthesizer = CommentSynthesizer(demo, synthesizer_config or SynthesisConfig(
            max_depth=config.SYNTH_MAX_DEPTH,
            target_author_probability=config.SYNTH_TARGET_AUTHOR_PROBABILITY,
        ))
        app.state.postal_codes = PostalCodeSearch(postal)

        try:
            await app.state.repository.list_users(shutdown_token)
        except DirectoryError as e:
            logger.warning(f"Initial user fetch failed, starting with an empty directory: {str(e)}")

        yield

        shutdown_token.cancel()
        websocket_manager.close()
        for client in (backend, demo, postal):
            await client.aclose()

    app = FastAPI(title="User Directory API", version=VERSION, lifespan=lifespan)
    app.state.user_state = state
    app.state.websocket_manager = websocket_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DirectoryError)
    async def directory_error_handler(request: Request, error: DirectoryError):
        content: Dict[str, Any] = {"detail": str(error)}
        if isinstance(error, ValidationError):
            content["errors"] = error.errors
        return JSONResponse(status_code=status_for_error(error), content=content)

    @app.get("/")
    async def root():
        """Root endpoint returning API information."""
        return {
            "message": "User Directory API",
            "version": VERSION,
            "endpoints": {
                "users": "/users",
                "comments": "/users/{user_id}/comments",
                "postal_codes": "/postal-codes",
                "websocket": "/ws/{client_id}"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "initialized": state.initialized,
            "data_version": state.data_version,
            "connected_clients": len(websocket_manager.clients)
        }

    @app.get("/users")
    async def list_users(q: Optional[str] = None, sort: str = "name", desc: bool = False,
                         refresh: bool = False):
        if refresh or not state.initialized:
            await app.state.repository.list_users(shutdown_token)
            await websocket_manager.flush()
        try:
            users = state.visible_users(q, sort, desc)
        except ValueError as e:
            return JSONResponse(status_code=400, content={"detail": str(e)})
        return [user.to_display().to_dict() for user in users]

    @app.get("/users/{user_id}")
    async def get_user(user_id: str):
        user = state.find(user_id)
        if user is None:
            user = await app.state.repository.get_user(user_id, shutdown_token)
        return user.to_dict()

    @app.post("/users", status_code=201)
    async def create_user(form: Dict[str, Any] = Body(...)):
        user = await app.state.repository.create_user(UserForm.from_dict(form), shutdown_token)
        await websocket_manager.flush()
        return user.to_dict()

    @app.put("/users/{user_id}")
    async def update_user(user_id: str, form: Dict[str, Any] = Body(...)):
        user = await app.state.repository.update_user(user_id, UserForm.from_dict(form), shutdown_token)
        await websocket_manager.flush()
        return user.to_dict()

    @app.delete("/users/{user_id}", status_code=204)
    async def delete_user(user_id: str):
        await app.state.repository.delete_user(user_id, shutdown_token)
        await websocket_manager.flush()
        return Response(status_code=204)

    @app.get("/users/{user_id}/comments")
    async def user_comments(user_id: int):
        thread = await app.state.synthesizer.synthesize(user_id, shutdown_token)
        if thread is None:
            return JSONResponse(status_code=502, content={"detail": "Could not load comments for this user."})
        return CommentSynthesizer.thread_to_dict(thread)

    @app.get("/postal-codes")
    async def postal_codes(city: str = ""):
        results = await app.state.postal_codes.search(city, shutdown_token)
        return [result.to_dict() for result in results]

    @app.websocket("/ws/{client_id}")
    async def websocket_endpoint(websocket: WebSocket, client_id: str):
        """
        WebSocket endpoint streaming user-state changes to a UI client.

        Args:
            websocket: WebSocket connection
            client_id: Unique identifier for the client
        """
        try:
            await websocket_manager.connect(websocket, client_id)

            while True:
                message = await websocket.receive_text()
                try:
                    await websocket_manager.handle_message(client_id, message)
                except DirectoryError as e:
                    await websocket.send_json({"type": "error", "detail": str(e)})

        except WebSocketDisconnect:
            logger.info(f"Client {client_id} disconnected")
        finally:
            websocket_manager.disconnect(client_id)

    return app


app = create_app()


def run() -> None:
    import uvicorn
    config.configure_logging()
    uvicorn.run(
        "user_directory.main:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
