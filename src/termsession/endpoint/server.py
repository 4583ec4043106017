"""FastAPI HTTP control surface for termsession.

Exposes the controller's programmatic surface so that a remote host can
drive named sessions::

    GET    /health                      -> {"status": "ok", "sessions": 1}
    GET    /sessions                    -> {"sessions": ["main"]}
    POST   /sessions                    <- {"name": "main"}
    DELETE /sessions/{name}
    GET    /sessions/{name}/state       -> mode, input, question, flash...
    GET    /sessions/{name}/log?since=0 -> {"entries": [...], "size": n}
    POST   /sessions/{name}/messages    <- {"entries": [{"type": "plain", ...}]}
    POST   /sessions/{name}/execute     <- {"command": "help"}
    POST   /sessions/{name}/answer      <- {"text": "yes"}
    GET    /sessions/{name}/metrics     -> LayoutMetrics
    POST   /sessions/{name}/control     <- {"type": "fullscreen", "payload": null}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from termsession import __version__
from termsession.domain.models import FlashMode, LayoutMetrics, PromptMode
from termsession.session.base import DuplicateSessionError
from termsession.session.controller import TerminalController
from termsession.session.engine import Session

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    name: str | None = Field(default=None, description="Unique session name; generated if omitted")


class ExecuteRequest(BaseModel):
    command: str = Field(description="Command line to inject and submit")


class AnswerRequest(BaseModel):
    text: str = Field(description="Answer to the open prompt question")


class PushRequest(BaseModel):
    entries: list[dict[str, Any]] = Field(description="Log entries in wire shape")


class ControlRequest(BaseModel):
    type: str = Field(description="Control message type")
    payload: Any = None


class HealthResponse(BaseModel):
    status: str = "ok"
    sessions: int = 0


class SessionStateResponse(BaseModel):
    name: str
    state: str
    input: str
    question: str | None = None
    secret: bool = False
    flash: str | None = None
    fullscreen: bool = False
    log_size: int = 0
    hint: str | None = None


class LogResponse(BaseModel):
    entries: list[dict[str, Any]]
    size: int


def describe(session: Session) -> SessionStateResponse:
    mode = session.mode
    return SessionStateResponse(
        name=session.name,
        state=session.state.value,
        input=session.input,
        question=mode.question if isinstance(mode, PromptMode) else None,
        secret=mode.secret if isinstance(mode, PromptMode) else False,
        flash=mode.content if isinstance(mode, FlashMode) else None,
        fullscreen=session.is_fullscreen,
        log_size=len(session.log),
        hint=session.hint.key if session.hint else None,
    )


def create_app(controller: TerminalController | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Control endpoint started")
        yield
        app.state.controller.shutdown()
        logger.info("Control endpoint stopped")

    app = FastAPI(
        title="termsession Control Endpoint",
        description="HTTP control surface for embedded terminal sessions",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.controller = controller or TerminalController()

    def _get_session(name: str) -> Session:
        session = app.state.controller.directory.get(name)
        if session is None:
            raise HTTPException(status_code=404, detail=f"No session named {name!r}")
        return session

    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", sessions=len(app.state.controller.directory))

    @app.get("/sessions")
    async def list_sessions() -> dict[str, list[str]]:
        return {"sessions": app.state.controller.names()}

    @app.post("/sessions", status_code=201)
    async def create_session(request: CreateSessionRequest) -> SessionStateResponse:
        try:
            session = app.state.controller.create_session(request.name)
        except DuplicateSessionError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return describe(session)

    @app.delete("/sessions/{name}")
    async def destroy_session(name: str) -> dict[str, str]:
        _get_session(name)
        app.state.controller.destroy_session(name)
        return {"status": "ok", "name": name}

    @app.get("/sessions/{name}/state")
    async def session_state(name: str) -> SessionStateResponse:
        return describe(_get_session(name))

    @app.get("/sessions/{name}/log")
    async def session_log(name: str, since: int = 0) -> LogResponse:
        session = _get_session(name)
        entries = [entry.to_wire() for entry in session.log.since(since)]
        return LogResponse(entries=entries, size=len(session.log))

    @app.post("/sessions/{name}/messages")
    async def push_messages(name: str, request: PushRequest) -> dict[str, Any]:
        session = _get_session(name)
        session.push(request.entries)
        return {"status": "ok", "size": len(session.log)}

    @app.post("/sessions/{name}/execute")
    async def execute_command(name: str, request: ExecuteRequest) -> dict[str, Any]:
        session = _get_session(name)
        if not session.execute(request.command):
            raise HTTPException(
                status_code=409,
                detail=f"Session {name!r} is not accepting input ({session.state.value})",
            )
        return {"status": "ok", "state": session.state.value}

    @app.post("/sessions/{name}/answer")
    async def answer_prompt(name: str, request: AnswerRequest) -> dict[str, Any]:
        session = _get_session(name)
        mode = session.mode
        if not isinstance(mode, PromptMode) or mode.question is None:
            raise HTTPException(status_code=409, detail="No open question")
        session.answer(request.text)
        return {"status": "ok", "state": session.state.value}

    @app.get("/sessions/{name}/metrics")
    async def layout_metrics(name: str) -> LayoutMetrics:
        return _get_session(name).layout_metrics()

    @app.post("/sessions/{name}/control")
    async def control(name: str, request: ControlRequest) -> dict[str, Any]:
        _get_session(name)
        result = app.state.controller.control(name, request.type, request.payload)
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json")
        return {"status": "ok", "result": result}

    return app


def main(host: str = "127.0.0.1", port: int = 8765) -> None:
    """Entry point for running the endpoint server standalone."""
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
