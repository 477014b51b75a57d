"""
Work request API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.services.request_service import RequestService
from tasktrail.schemas.request import (
    RequestCreate, RequestDecision, RequestResponse, RequestDecisionResponse
)
from tasktrail.schemas.common import MessageResponse
from tasktrail.api.deps import get_current_user
from tasktrail.models.user import User

router = APIRouter(prefix="/api/requests", tags=["requests"])


@router.get("/", response_model=List[RequestResponse])
async def list_requests(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Managers see all requests, members their own."""
    request_service = RequestService(session)
    return await request_service.list(current_user)


@router.post("/", response_model=RequestResponse, status_code=201)
async def create_request(
    request_data: RequestCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Raise a request for the managers."""
    request_service = RequestService(session)
    return await request_service.create(current_user, request_data)


@router.post("/{request_id}/decision", response_model=RequestDecisionResponse)
async def decide_request(
    request_id: uuid.UUID,
    decision: RequestDecision,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Approve or reject a pending request."""
    request_service = RequestService(session)
    request, task_id = await request_service.decide(current_user, request_id, decision)
    return {"request": request, "task_id": task_id}


@router.delete("/{request_id}", response_model=MessageResponse)
async def cancel_request(
    request_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Cancel one's own pending request."""
    request_service = RequestService(session)
    await request_service.cancel(current_user, request_id)
    return {"message": "Request cancelled"}
