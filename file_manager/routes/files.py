# file_manager/routes/files.py
from __future__ import annotations
"""
Admin file manager endpoints.

GET /files/disks                      configured disks and the default one
GET /files/{disk}/browse?path=...     records of the direct children of a directory
GET /files/{disk}/entity?path=...     record of a single file or directory

Records are produced by file_manager.entities; a missing path still answers 200
with {"exists": false}.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from file_manager.config import settings
from file_manager.manager import FileManager, UrlResolver
from file_manager.security.deps import RequestContext, admin_guard
from file_manager.storage.base import UnknownDisk
from file_manager.storage.registry import available_disks

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/files", tags=["admin.files"])


class DisksResponse(BaseModel):
    default: str
    disks: List[str]


class BrowseResponse(BaseModel):
    disk: str
    path: str
    directories: List[Dict[str, Any]]
    files: List[Dict[str, Any]]


def register_url_resolver(app, resolver: Optional[UrlResolver]) -> None:
    """
    Install an application wide url resolver, called as resolver(request, path, disk, driver)
    for every entity url instead of the driver's own url building.
    """
    app.state.url_resolver = resolver


def get_file_manager(disk: str, request: Request) -> FileManager:
    resolver = getattr(request.app.state, "url_resolver", None)
    try:
        return FileManager.for_disk(disk, url_resolver=resolver, request=request)
    except UnknownDisk as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/disks", response_model=DisksResponse)
def list_disks(_ctx: RequestContext = Depends(admin_guard)) -> DisksResponse:
    return DisksResponse(default=settings.default_disk, disks=available_disks())


@router.get("/{disk}/browse", response_model=BrowseResponse)
def browse(
    disk: str,
    path: str = Query("", description="directory path relative to the disk root"),
    _ctx: RequestContext = Depends(admin_guard),
    manager: FileManager = Depends(get_file_manager),
) -> BrowseResponse:
    path = path.strip("/")
    try:
        if path and not manager.filesystem().is_directory(path):
            raise HTTPException(status_code=404, detail="directory not found")
        directories = [d.to_dict() for d in manager.directories(path)]
        files = [f.to_dict() for f in manager.files(path)]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("[FILES] browse disk=%s path=%r dirs=%d files=%d", disk, path, len(directories), len(files))
    return BrowseResponse(disk=disk, path=path, directories=directories, files=files)


@router.get("/{disk}/entity")
def describe(
    disk: str,
    path: str = Query(..., min_length=1),
    _ctx: RequestContext = Depends(admin_guard),
    manager: FileManager = Depends(get_file_manager),
) -> Dict[str, Any]:
    try:
        return manager.entity(path.strip("/")).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def register(app) -> None:
    """
    Attach this feature's router:
        from file_manager.routes.files import register as register_files
        register_files(app)
    """
    app.include_router(router)
