"""pf_conflict REST API — list, resolve and delete import conflicts."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.enums import ConflictStatus
from src.pf_common.response import ApiResponse, success_response
from src.pf_conflict.application.schemas import ResolveConflictRequest
from src.pf_conflict.application.service import ConflictService
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel

router = APIRouter(prefix="/conflicts", tags=["conflicts"])

_service = ConflictService()


@router.get("")
async def list_conflicts(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: int | None = Query(None, description="Filter by account"),
    status: ConflictStatus = Query(ConflictStatus.PENDING, description="Filter by status"),
) -> ApiResponse:
    data = await _service.list_conflicts(db, str(current_user.id), account_id, status)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{conflict_id}/resolve")
async def resolve_conflict(
    conflict_id: int,
    body: ResolveConflictRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.resolve(
        db, str(current_user.id), conflict_id, body.action, body.edited_data
    )
    resp = success_response(data.model_dump(), message="Conflict resolved successfully")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{conflict_id}")
async def delete_conflict(
    conflict_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete(db, str(current_user.id), conflict_id)
    resp = success_response({"conflict_id": conflict_id}, message="Conflict deleted successfully")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
