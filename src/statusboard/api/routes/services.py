"""Service row endpoints: list, check, reorder, delete, restore and edit mode."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from statusboard.api.auth import require_api_key
from statusboard.dashboard import Dashboard, DashboardError, ServiceStatusRow, Success, UnknownServiceError

router = APIRouter(tags=["services"])


class EditModeRequest(BaseModel):
    enabled: bool


class MoveRequest(BaseModel):
    index: int


def _get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def _get_row(dashboard: Dashboard, key: str) -> ServiceStatusRow:
    try:
        return dashboard.get_row(key)
    except UnknownServiceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _row_payload(row: ServiceStatusRow) -> Dict[str, Any]:
    payload = row.render().to_dict()
    service = row.service
    payload["url"] = service.url
    payload["last_online_date"] = service.last_online_date.isoformat() if service.has_been_online else None
    response_time = row.state.last_response_time
    payload["response_time_ms"] = int(response_time * 1000) if response_time is not None else None
    payload["status_code"] = row.status.status_code if isinstance(row.status, Success) else None
    return payload


@router.get("/services")
async def list_services(request: Request, wait: bool = False) -> List[Dict[str, Any]]:
    """Display every row. The first listing starts each row's initial check."""
    dashboard = _get_dashboard(request)
    dashboard.appear_all()
    if wait:
        await dashboard.wait_idle()
    return [_row_payload(row) for row in dashboard.rows]


@router.get("/services/{key}")
async def get_service(request: Request, key: str, wait: bool = False) -> Dict[str, Any]:
    row = _get_row(_get_dashboard(request), key)
    row.on_appear()
    if wait:
        await row.wait_idle()
    return _row_payload(row)


@router.post("/services/{key}/check", status_code=202, dependencies=[Depends(require_api_key)])
async def check_service(request: Request, key: str, wait: bool = False) -> Dict[str, Any]:
    dashboard = _get_dashboard(request)
    row = _get_row(dashboard, key)
    if row.on_activate() is None:
        raise HTTPException(status_code=409, detail="Status checks are suspended in edit mode")
    if wait:
        await row.wait_idle()
    return _row_payload(row)


@router.get("/edit-mode")
async def get_edit_mode(request: Request) -> Dict[str, bool]:
    return {"enabled": _get_dashboard(request).edit_mode}


@router.put("/edit-mode", dependencies=[Depends(require_api_key)])
async def set_edit_mode(request: Request, body: EditModeRequest) -> Dict[str, bool]:
    dashboard = _get_dashboard(request)
    dashboard.set_edit_mode(body.enabled)
    return {"enabled": dashboard.edit_mode}


@router.post("/services/{key}/move", dependencies=[Depends(require_api_key)])
async def move_service(request: Request, key: str, body: MoveRequest) -> Dict[str, List[str]]:
    dashboard = _get_dashboard(request)
    _get_row(dashboard, key)
    try:
        await dashboard.move(key, body.index)
    except DashboardError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"order": dashboard.keys}


@router.delete("/services/{key}", dependencies=[Depends(require_api_key)])
async def delete_service(request: Request, key: str) -> Dict[str, List[str]]:
    dashboard = _get_dashboard(request)
    _get_row(dashboard, key)
    try:
        await dashboard.delete(key)
    except DashboardError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"order": dashboard.keys}


@router.post("/services/{key}/restore", dependencies=[Depends(require_api_key)])
async def restore_service(request: Request, key: str) -> Dict[str, List[str]]:
    dashboard = _get_dashboard(request)
    if key not in dashboard.deleted_keys:
        raise HTTPException(status_code=404, detail=f"No deleted service: {key}")
    try:
        await dashboard.restore(key)
    except DashboardError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"order": dashboard.keys}
