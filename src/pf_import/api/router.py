"""pf_import REST API — multipart CSV upload for tradebook and ledger files."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pf_common.database import get_db_session
from src.pf_common.errors import InvalidCsvError
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user
from src.pf_gateway.user.db_models import UserModel
from src.pf_import.application.service import ImportService

router = APIRouter(prefix="/import", tags=["import"])

_service = ImportService()


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise InvalidCsvError(f"file exceeds {settings.MAX_UPLOAD_BYTES} bytes")
    return content


@router.post("/tradebook")
async def import_tradebook(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: int = Form(..., description="Target account"),
    file: UploadFile = File(..., description="Broker tradebook CSV"),
) -> ApiResponse:
    content = await _read_upload(file)
    data = await _service.import_trades(db, str(current_user.id), account_id, content)
    resp = success_response(data.model_dump(), message=data.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/ledger")
async def import_ledger(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: int = Form(..., description="Target account"),
    file: UploadFile = File(..., description="Broker ledger CSV"),
) -> ApiResponse:
    content = await _read_upload(file)
    data = await _service.import_ledger(db, str(current_user.id), account_id, content)
    resp = success_response(data.model_dump(), message=data.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
