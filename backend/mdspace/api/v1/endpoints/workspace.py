"""Workspace API endpoints.

Each route resolves the user's workspace through the WorkspaceManager
before touching any file.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from mdspace.api.deps import get_workspace_manager
from mdspace.components.workspace import WorkspaceManager
from mdspace.exceptions import RequestValidationError
from mdspace.models import InitWorkspaceRequest

router = APIRouter(tags=["Workspace"])

ANONYMOUS_USER_ID = "anonymous"


def parse_tags(tags: str | None) -> list[str]:
    """Split a comma-separated tag list, dropping blanks."""
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


@router.post("/init")
async def init_workspace(
    request: InitWorkspaceRequest,
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """Create (or confirm) a user's workspace.

    Args:
        request: Body with userId

    Returns:
        Workspace path
    """
    if not request.userId:
        raise RequestValidationError("userId is required")

    workspace = await manager.ensure(request.userId)
    return {
        "success": True,
        "workspace": str(workspace),
        "message": "Workspace initialized",
    }


@router.post("/upload")
async def upload_file(
    file: UploadFile | None = File(None),
    userId: str = Form(ANONYMOUS_USER_ID),
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """Store a file under the user's uploads/ folder.

    The stored name is prefixed with the upload time in milliseconds.
    """
    if file is None or not file.filename:
        raise RequestValidationError("No file uploaded")

    try:
        data = await file.read()
    finally:
        await file.close()

    uploaded = await manager.save_upload(userId or ANONYMOUS_USER_ID, file.filename, data)
    return {"success": True, "file": uploaded.model_dump()}


@router.get("/{user_id}/files")
async def list_files(
    user_id: str,
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """List every file of a workspace (hidden directories skipped)."""
    files = await manager.list_files(user_id)
    return {
        "success": True,
        "files": [f.model_dump() for f in files],
        "workspace": str(manager.workspace_root(user_id)),
    }


@router.get("/{user_id}/file")
async def get_file(
    user_id: str,
    path: str | None = Query(None),
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """Read one file of a workspace.

    Raises:
        AccessDeniedError: path escapes the workspace (403)
        WorkspaceFileNotFoundError: no such file (404)
    """
    content = await manager.read_file(user_id, path)
    return {"success": True, "content": content, "path": path}


@router.get("/{user_id}/search")
async def search_workspace(
    user_id: str,
    query: str | None = Query(None),
    tags: str | None = Query(None),
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """Search indexed files by tags and/or free text (case-insensitive).

    Args:
        query: Substring matched against content and title
        tags: Comma-separated tags; files with any of them match
    """
    results = await manager.search(user_id, query=query, tags=parse_tags(tags))
    return {
        "success": True,
        "results": [r.model_dump() for r in results],
        "query": query,
        "tags": tags,
    }


@router.get("/{user_id}/tags")
async def list_tags(
    user_id: str,
    manager: WorkspaceManager = Depends(get_workspace_manager),
):
    """Tags used in a workspace's markdown files."""
    tags = await manager.list_tags(user_id)
    return {"success": True, "tags": tags}
