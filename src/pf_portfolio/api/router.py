"""pf_portfolio REST API — valuation stats and ledger summary."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel
from src.pf_portfolio.application.service import PortfolioService, parse_account_scope

router = APIRouter(tags=["portfolio"])


def get_portfolio_service(request: Request) -> PortfolioService:
    """Bind the service to the price provider owned by the app lifespan."""
    return PortfolioService(request.app.state.price_provider)


@router.get("/stats")
async def get_stats(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
    request: Request,
    account_id: str = Query("consolidated", description="Account ID or 'consolidated'"),
) -> ApiResponse:
    data = await service.get_stats(db, str(current_user.id), parse_account_scope(account_id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/ledger/summary")
async def get_ledger_summary(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
    request: Request,
    account_id: str = Query("consolidated", description="Account ID or 'consolidated'"),
    from_date: date | None = Query(None, description="Inclusive lower posting date"),
    to_date: date | None = Query(None, description="Inclusive upper posting date"),
) -> ApiResponse:
    data = await service.get_ledger_summary(
        db, str(current_user.id), parse_account_scope(account_id), from_date, to_date
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
