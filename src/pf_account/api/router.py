"""pf_account REST API — 5 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.schemas import CreateAccountRequest, UpdateAccountRequest
from src.pf_account.application.service import AccountApplicationService
from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel

router = APIRouter(prefix="/accounts", tags=["accounts"])

_service = AccountApplicationService()


@router.get("")
async def list_accounts(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_accounts(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("")
async def create_account(
    body: CreateAccountRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_account(db, str(current_user.id), body.name, body.broker_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{account_id}")
async def get_account(
    account_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_account(db, str(current_user.id), account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{account_id}")
async def update_account(
    account_id: int,
    body: UpdateAccountRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_account(
        db, str(current_user.id), account_id, body.name, body.broker_id
    )
    resp = success_response(data.model_dump(), message="Account updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{account_id}")
async def delete_account(
    account_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete_account(db, str(current_user.id), account_id)
    resp = success_response({"account_id": account_id}, message="Account deleted")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
