"""
History API routes - audit trail, statistics and CSV export.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.database import get_session
from tasktrail.core.pagination import PaginatedResponse, paginate_list
from tasktrail.core.timeutils import utcnow
from tasktrail.services.history_service import HistoryService
from tasktrail.services.history_grouping import export_filename
from tasktrail.schemas.activity import HistoryStats, LogGroup
from tasktrail.api.deps import get_current_user, get_current_manager
from tasktrail.models.user import User

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("/", response_model=PaginatedResponse[LogGroup])
async def list_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Grouped timeline of the log entries visible to the current user."""
    history_service = HistoryService(session)
    groups = await history_service.grouped(current_user, search=search, user_id=user_id)
    return paginate_list(groups, page, limit)


@router.get("/stats", response_model=HistoryStats)
async def history_stats(
    days: Optional[int] = Query(None, ge=1, le=365),
    current_user: User = Depends(get_current_manager),
    session: AsyncSession = Depends(get_session)
):
    """Activity totals, top contributors and late completions for the window."""
    history_service = HistoryService(session)
    return await history_service.compute_stats(window_days=days)


@router.get("/export")
async def export_history(
    search: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Export the filtered log to CSV, one row per entry."""
    history_service = HistoryService(session)
    csv_content = await history_service.export(current_user, search=search, user_id=user_id)

    filename = export_filename(utcnow().date())
    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
