"""REST API adapter for tabdb.

This module exposes the CommandEngine over HTTP with FastAPI. Commands
use exactly the line protocol's syntax; the response carries the tagged
protocol text plus the result set in structured form.

Endpoints:
    POST /execute - Execute one command
    POST /session - Open a session
    DELETE /session/{session_id} - Close a session
    GET /health - Health check
    GET /stats - Engine statistics

Usage:
    from tabdb.adapters.inbound.rest_api import create_app
    from tabdb.infrastructure.container import build_container

    engine = build_container(config).resolve(CommandEngine)
    app = create_app(engine)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from tabdb import __version__
from tabdb.application import CommandEngine, CommandOutcome
from tabdb.domain.errors import UnknownSessionError


class CommandRequest(BaseModel):
    """Request model for command execution."""

    command: str = Field(..., description="Command line, ';' terminator included")
    session_id: str | None = Field(None, description="Optional session ID")


class CommandResponse(BaseModel):
    """Response model for command execution."""

    success: bool = Field(..., description="Whether the command succeeded")
    response: str = Field(..., description="Tagged protocol response")
    message: str = Field("", description="Status message")
    columns: list[str] = Field(default_factory=list, description="Column names")
    rows: list[list[str]] = Field(default_factory=list, description="Result rows")
    affected_rows: int = Field(0, description="Number of affected rows")


class SessionResponse(BaseModel):
    """Response model for session creation."""

    session_id: str = Field(..., description="The created session ID")


class StatsResponse(BaseModel):
    """Response model for engine statistics."""

    databases: list[str] = Field(default_factory=list, description="Databases on disk")
    databases_resident: list[str] = Field(default_factory=list, description="Databases in memory")
    sessions: int = Field(..., description="Number of open sessions")
    commands: dict[str, int] = Field(default_factory=dict, description="Command counters")
    insert_mode: str = Field(..., description="Insert persistence mode")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def _outcome_to_response(outcome: CommandOutcome) -> CommandResponse:
    """Convert a CommandOutcome to a CommandResponse."""
    result = outcome.result
    if result is None:
        return CommandResponse(success=False, response=outcome.response)
    return CommandResponse(
        success=outcome.success,
        response=outcome.response,
        message=result.message,
        columns=result.columns,
        rows=result.row_texts(),
        affected_rows=result.affected_rows,
    )


def create_app(engine: CommandEngine) -> FastAPI:
    """Create a FastAPI application for the command engine.

    Args:
        engine: The command engine to use.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="tabdb API",
        description="HTTP access to the tabdb command protocol",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/stats", response_model=StatsResponse, tags=["Stats"])
    def get_stats() -> StatsResponse:
        """Get engine statistics."""
        return StatsResponse(**engine.get_stats())

    @app.post("/execute", response_model=CommandResponse, tags=["Commands"])
    def execute_command(request: CommandRequest) -> CommandResponse:
        """Execute one command.

        Domain errors come back as ``success: false`` with the ``[ERROR]``
        response, the same as on the line protocol. An unknown session is
        a 404.
        """
        if request.session_id is not None:
            try:
                engine.get_session(request.session_id)
            except UnknownSessionError as e:
                raise HTTPException(status_code=404, detail=str(e)) from e

        outcome = engine.execute(request.command, request.session_id)
        return _outcome_to_response(outcome)

    @app.post("/session", response_model=SessionResponse, tags=["Sessions"])
    def create_session() -> SessionResponse:
        """Open a new session."""
        return SessionResponse(session_id=engine.create_session())

    @app.delete("/session/{session_id}", tags=["Sessions"])
    def close_session(session_id: str) -> dict[str, str]:
        """Close a session."""
        if not engine.close_session(session_id):
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        return {"message": f"Session {session_id} closed"}

    return app


def run_server(
    engine: CommandEngine,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        engine: The command engine.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(engine)
    uvicorn.run(app, host=host, port=port, log_config=None)
