"""pf_trade REST API — manual trade entry, edits and bulk maintenance."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel
from src.pf_trade.application.schemas import BulkUpdateRequest, CreateTradeRequest, TradeEdit
from src.pf_trade.application.service import TradeService

router = APIRouter(prefix="/trades", tags=["trades"])

_service = TradeService()


@router.post("")
async def create_trade(
    body: CreateTradeRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_trade(db, str(current_user.id), body)
    resp = success_response(data.model_dump(), message="Trade added successfully")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/bulk-update")
async def bulk_update(
    body: BulkUpdateRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.bulk_update(db, str(current_user.id), body)
    resp = success_response(data.model_dump(), message=f"Updated {data.affected_rows} trade(s)")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{trade_id}")
async def get_trade(
    trade_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_trade(db, str(current_user.id), trade_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{trade_id}")
async def update_trade(
    trade_id: int,
    body: TradeEdit,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_trade(db, str(current_user.id), trade_id, body)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{trade_id}")
async def delete_trade(
    trade_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete_trade(db, str(current_user.id), trade_id)
    resp = success_response({"trade_id": trade_id}, message="Trade deleted successfully")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
