from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from ..conversation import ConversationBusy, send_message
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import CamelModel, Message, UserRole
from ..state import SessionContext
from .auth import require_role

router = APIRouter(prefix="/chat", tags=["chat"])

student_session = require_role(UserRole.STUDENT)


class SendMessageRequest(BaseModel):
	text: str


class Transcript(CamelModel):
	messages: List[Message]
	is_processing: bool


@router.get("/messages", response_model=Transcript)
async def get_messages(ctx: SessionContext = Depends(student_session)):
	return Transcript(messages=ctx.state.messages, is_processing=ctx.state.is_processing)


@router.post("/messages", response_model=Message)
async def post_message(
	req: SendMessageRequest,
	ctx: SessionContext = Depends(student_session),
	client: GeminiClient = Depends(get_gemini_client),
):
	text = (req.text or "").strip()
	if not text:
		raise HTTPException(status_code=400, detail="text is required")
	try:
		return await send_message(client, ctx.state, text)
	except ConversationBusy:
		raise HTTPException(status_code=409, detail="Still working on your previous question")


@router.delete("/messages", status_code=204)
async def clear_messages(ctx: SessionContext = Depends(student_session)):
	ctx.state.clear_messages()
	return Response(status_code=204)
