from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from casual_tools.logging import configure_logging, get_logger
from casual_tools.models.selection import ToolSelection
from casual_tools.selection_store import SelectionStore, SessionExistsError, SessionNotFoundError
from casual_tools.status_tree import SelectionStatus, build_status_tree
from casual_tools.toggles import ToggleRequest, build_update
from casual_tools.utils import default_config_path

# Load environment variables
load_dotenv()

# Configure logging
configure_logging()
logger = get_logger("main")


class AppState:
    """Holds application-wide state initialised during the lifespan."""

    store: SelectionStore


state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the selection store on startup."""
    state.store = SelectionStore(default_config_path())
    logger.info(f"Application started with config {state.store.config_path}")
    yield
    logger.info("Application shut down")


app = FastAPI(lifespan=lifespan)


@app.exception_handler(FileNotFoundError)
@app.exception_handler(ValidationError)
async def config_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report a missing or invalid configuration document."""
    logger.error(f"Could not load configuration for {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Configuration could not be loaded"})


class CreateSessionRequest(BaseModel):
    name: str = Field(title="Session name")
    description: str = Field(default="", title="Session description")


class ImportSelectionRequest(BaseModel):
    tool_selection: list[str] | None = Field(
        title="Persisted tool selection: null for every tool, or a list of tool ids"
    )


def _session_selection(name: str) -> ToolSelection:
    try:
        return state.store.get_selection(name)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/catalog")
async def get_catalog() -> dict[str, Any]:
    """List every tool currently available for selection."""
    catalog = await state.store.catalog()
    return {
        "plugins": [
            {"name": p.name, "multi": p.multi, "tool_ids": list(p.tool_ids)}
            for p in catalog.plugins
        ],
        "servers": [
            {
                "id": s.id,
                "label": s.display_name,
                "enabled": s.enabled,
                "tools": [t.model_dump() for t in s.tools],
            }
            for s in catalog.servers
        ],
        "tool_ids": list(catalog.all_tool_ids),
    }


@app.get("/sessions")
async def list_sessions() -> dict[str, dict[str, Any]]:
    """List all sessions with their persisted tool selection."""
    return {
        name: session.model_dump(mode="json") for name, session in state.store.sessions().items()
    }


@app.post("/sessions", status_code=201)
async def create_session(req: CreateSessionRequest) -> dict[str, Any]:
    try:
        session = await state.store.create_session(req.name, req.description)
    except SessionExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {req.name: session.model_dump(mode="json")}


@app.delete("/sessions/{name}", status_code=204)
async def delete_session(name: str) -> None:
    try:
        await state.store.delete_session(name)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/sessions/{name}/tools")
async def get_session_tools(name: str) -> SelectionStatus:
    """Return a session's selection and the status of every checkbox."""
    selection = _session_selection(name)
    catalog = await state.store.catalog()
    return build_status_tree(selection, catalog)


@app.post("/sessions/{name}/toggle")
async def toggle(name: str, req: ToggleRequest) -> SelectionStatus:
    try:
        selection, catalog = await state.store.update(name, build_update(req))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (FileNotFoundError, ValidationError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error in /sessions/{name}/toggle: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return build_status_tree(selection, catalog)


@app.put("/sessions/{name}/tools")
async def import_tools(name: str, req: ImportSelectionRequest) -> SelectionStatus:
    """Replace a session's selection, canonicalized against the current catalog."""
    try:
        selection, catalog = await state.store.import_selection(name, req.tool_selection)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return build_status_tree(selection, catalog)
