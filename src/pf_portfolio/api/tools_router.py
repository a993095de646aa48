"""Portfolio maintenance tools — stock split adjustment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel
from src.pf_portfolio.application.schemas import SplitRequest
from src.pf_portfolio.application.split_service import SplitService

router = APIRouter(prefix="/tools", tags=["tools"])

_service = SplitService()


@router.post("/split")
async def apply_split(
    body: SplitRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.apply_split(
        db,
        str(current_user.id),
        body.account_id,
        body.symbol,
        body.split_date,
        body.ratio,
        preview=body.preview,
    )
    if data.preview:
        message = f"Preview: {data.affected_count} trades would be adjusted"
    else:
        message = f"Split applied to {data.affected_count} trades"
    resp = success_response(data.model_dump(), message=message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/split/symbols")
async def list_symbols(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: int | None = Query(None, description="Restrict to one account"),
) -> ApiResponse:
    data = await _service.list_symbols(db, str(current_user.id), account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
