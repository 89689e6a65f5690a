"""Working directory REST API routes - V1"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ...models.api import (
    DirectoryCommandRequest,
    DirectoryCommandResponse,
    DirectoryConfigResponse,
    DirectoryListResponse,
    DirectoryResponse,
    SetDirectoryRequest,
    SetDirectoryResponse,
)
from ...services.directory_resolver import DirectoryResolver
from ...services.directory_store import DirectoryStore

router = APIRouter(prefix="/api/v1", tags=["directories-v1"])

# Global directory store instance (will be set by main.py)
directory_store: Optional[DirectoryStore] = None


def get_directory_store() -> DirectoryStore:
    """Dependency to get directory store instance."""
    if directory_store is None:
        raise HTTPException(status_code=500, detail="Directory store not initialized")
    return directory_store


@router.get("/directories", response_model=DirectoryResponse)
async def get_directory(
    channel_id: str,
    thread_ts: Optional[str] = None,
    user_id: Optional[str] = None,
    is_direct_message: Optional[bool] = None,
    store: DirectoryStore = Depends(get_directory_store)
):
    """
    Get the effective working directory of a conversation.

    Returns:
        The thread directory if set, else the channel or DM directory
    """
    directory = store.get_working_directory(channel_id, thread_ts, user_id, is_direct_message)
    return DirectoryResponse(directory=directory, base_directory=store.resolver.base_directory)


@router.put("/directories", response_model=SetDirectoryResponse)
async def set_directory(
    request: SetDirectoryRequest,
    store: DirectoryStore = Depends(get_directory_store)
):
    """
    Assign a working directory to a channel, DM or thread.

    Raises:
        HTTPException: 400 if the path does not exist or is not a directory
    """
    result = store.set_working_directory(
        request.channel_id,
        request.directory,
        thread_ts=request.thread_ts,
        user_id=request.user_id,
        is_direct_message=request.is_direct_message
    )
    if not result.success:
        raise HTTPException(
            status_code=400,
            detail={"error": result.error, "error_kind": result.error_kind.value if result.error_kind else None}
        )
    return SetDirectoryResponse(directory=result.resolved_path)


@router.delete("/directories", response_model=dict)
async def remove_directory(
    channel_id: str,
    thread_ts: Optional[str] = None,
    user_id: Optional[str] = None,
    is_direct_message: Optional[bool] = None,
    store: DirectoryStore = Depends(get_directory_store)
):
    """Remove the assignment of exactly the given scope."""
    removed = store.remove_working_directory(
        channel_id,
        thread_ts=thread_ts,
        user_id=user_id,
        is_direct_message=is_direct_message
    )
    return {"removed": removed}


@router.get("/directories/all", response_model=DirectoryListResponse)
async def list_directories(store: DirectoryStore = Depends(get_directory_store)):
    """List every stored assignment."""
    configs = store.list_configurations()
    return DirectoryListResponse(
        directories=[
            DirectoryConfigResponse(
                scope=config.scope,
                channel_id=config.channel_id,
                thread_ts=config.thread_ts,
                user_id=config.user_id,
                directory=config.directory,
                set_at=config.set_at
            )
            for config in configs
        ],
        total=len(configs)
    )


@router.post("/directories/command", response_model=DirectoryCommandResponse)
async def directory_command(
    request: DirectoryCommandRequest,
    store: DirectoryStore = Depends(get_directory_store)
):
    """
    Interpret directory command text.

    `cwd <path>` / `set directory <path>` assign a directory; `cwd?` /
    `get dir` read it. Any other text yields command=None.
    """
    base_directory = store.resolver.base_directory

    path = DirectoryResolver.parse_set_command(request.text)
    if path is not None:
        result = store.set_working_directory(
            request.channel_id,
            path,
            thread_ts=request.thread_ts,
            user_id=request.user_id,
            is_direct_message=request.is_direct_message
        )
        return DirectoryCommandResponse(
            command="set",
            success=result.success,
            directory=result.resolved_path,
            base_directory=base_directory,
            error=result.error,
            error_kind=result.error_kind
        )

    if DirectoryResolver.is_get_command(request.text):
        directory = store.get_working_directory(
            request.channel_id,
            request.thread_ts,
            request.user_id,
            request.is_direct_message
        )
        return DirectoryCommandResponse(command="get", directory=directory, base_directory=base_directory)

    return DirectoryCommandResponse(command=None)
