from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..catalog import SCHEDULE
from ..models import Resource, ResourceType, ScheduleItem, UserRole
from ..state import SessionContext
from .auth import get_current_session, require_role

router = APIRouter(tags=["resources"])

teacher_session = require_role(UserRole.TEACHER)


class UploadRequest(BaseModel):
	title: str = Field(..., min_length=1)
	topic: str = Field(..., min_length=1)
	type: ResourceType = ResourceType.PDF
	content: Optional[str] = Field(default=None, description="Text the summarizer works from")
	url: Optional[str] = None


@router.get("/resources", response_model=List[Resource])
async def list_resources(ctx: SessionContext = Depends(get_current_session)):
	return ctx.state.resources


@router.post("/resources", response_model=Resource, status_code=201)
async def upload_resource(req: UploadRequest, ctx: SessionContext = Depends(teacher_session)):
	title = req.title.strip()
	topic = req.topic.strip()
	if not title or not topic:
		raise HTTPException(status_code=400, detail="title and topic are required")
	return ctx.state.add_resource(title=title, topic=topic, type=req.type, content=req.content, url=req.url)


@router.post("/resources/{resource_id}/download", response_model=Resource)
async def download_resource(resource_id: str, ctx: SessionContext = Depends(get_current_session)):
	resource = ctx.state.record_download(resource_id)
	if resource is None:
		raise HTTPException(status_code=404, detail="resource not found")
	return resource


@router.get("/schedule", response_model=List[ScheduleItem])
async def get_schedule(ctx: SessionContext = Depends(get_current_session)):
	return SCHEDULE
