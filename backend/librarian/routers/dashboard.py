from fastapi import APIRouter, Depends

from ..analytics import DashboardSummary, dashboard_summary
from ..models import UserRole
from ..state import SessionContext
from .auth import require_role

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/analytics", response_model=DashboardSummary)
async def analytics(ctx: SessionContext = Depends(require_role(UserRole.TEACHER))):
	# Recomputed on every request from the session's log and store
	return dashboard_summary(ctx.state.activity_log, ctx.state.resources)
