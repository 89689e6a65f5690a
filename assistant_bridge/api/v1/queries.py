"""Claude query and session REST API routes - V1"""

import asyncio
import json
from typing import AsyncIterator, Optional
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import StreamingResponse

from ...errors import BridgeError
from ...models.api import QueryRequest, SessionListResponse, SessionResponse
from ...models.message import CallerContext
from ...models.session import ConversationSession
from ...services.directory_store import DirectoryStore
from ...services.session_registry import DEFAULT_MAX_AGE_SECONDS, SessionRegistry
from ...workers.claude import ClaudeStreamer
from .directories import get_directory_store

router = APIRouter(prefix="/api/v1", tags=["queries-v1"])

# Global instances (will be set by main.py)
streamer: Optional[ClaudeStreamer] = None
session_registry: Optional[SessionRegistry] = None


def get_streamer() -> ClaudeStreamer:
    """Dependency to get Claude streamer instance."""
    if streamer is None:
        raise HTTPException(status_code=500, detail="Claude streamer not initialized")
    return streamer


def get_session_registry() -> SessionRegistry:
    """Dependency to get session registry instance."""
    if session_registry is None:
        raise HTTPException(status_code=500, detail="Session registry not initialized")
    return session_registry


def _session_response(session: ConversationSession) -> SessionResponse:
    return SessionResponse(
        user_id=session.user_id,
        channel_id=session.channel_id,
        thread_ts=session.thread_ts,
        session_id=session.session_id,
        last_activity=session.last_activity
    )


@router.post("/query")
async def run_query(
    request: QueryRequest,
    claude: ClaudeStreamer = Depends(get_streamer),
    registry: SessionRegistry = Depends(get_session_registry),
    store: DirectoryStore = Depends(get_directory_store)
):
    """
    Run a prompt through Claude and stream the protocol messages.

    The response is NDJSON, one protocol message per line. A failed
    query ends with a {"type": "error"} line. Disconnecting cancels the
    query.

    Raises:
        HTTPException: 400 if an interactive query is requested but no
            permission prompt server is configured
    """
    if request.interactive and not claude.supports_interactive:
        raise HTTPException(
            status_code=400,
            detail="Interactive queries need PERMISSION_SERVER_COMMAND to be configured"
        )

    session = registry.get_session(request.user_id, request.channel_id, request.thread_ts)
    if session is None:
        session = registry.create_session(request.user_id, request.channel_id, request.thread_ts)
    else:
        registry.touch(session)

    working_directory = store.get_working_directory(
        request.channel_id,
        request.thread_ts,
        request.user_id,
        request.is_direct_message
    )

    caller_context = None
    if request.interactive:
        caller_context = CallerContext(
            channel=request.channel_id,
            thread_ts=request.thread_ts,
            user=request.user_id
        )

    cancel_event = asyncio.Event()

    async def body() -> AsyncIterator[str]:
        try:
            async for message in claude.stream_query(
                request.prompt,
                session=session,
                cancel_event=cancel_event,
                working_directory=working_directory,
                caller_context=caller_context
            ):
                yield json.dumps(message.to_dict(), ensure_ascii=False) + "\n"
        except BridgeError as e:
            yield json.dumps({"type": "error", "error": str(e), "error_kind": type(e).__name__}) + "\n"
        finally:
            cancel_event.set()

    return StreamingResponse(body(), media_type="application/x-ndjson")


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(registry: SessionRegistry = Depends(get_session_registry)):
    """List active conversation sessions."""
    sessions = registry.list_sessions()
    return SessionListResponse(
        sessions=[_session_response(session) for session in sessions],
        total=len(sessions)
    )


@router.post("/sessions/cleanup", response_model=dict)
async def cleanup_sessions(
    max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Remove sessions idle for longer than max_age_seconds."""
    return {"removed": registry.cleanup_inactive_sessions(max_age_seconds)}
