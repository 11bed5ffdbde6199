from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from .assistant import classify_query, generate_cheat_sheet
from .catalog import SCHEDULE
from .gemini_client import GeminiClient
from .models import Intent, Message, Resource, Role, ScheduleItem
from .state import LibraryState, new_id

logger = logging.getLogger(__name__)


SYSTEM_ERROR_MESSAGE = "I encountered a system error. Please try again."


class ConversationBusy(RuntimeError):
	pass


async def _answer(
	client: GeminiClient,
	state: LibraryState,
	text: str,
	schedule: List[ScheduleItem],
	today: Optional[date],
) -> Message:
	result = await classify_query(client, text, state.resources, schedule, today=today)
	related: Optional[Resource] = None
	generated: Optional[str] = None
	if result.found and result.resource_id:
		# Resolve against the current store; a stale id counts as not found
		related = state.find_resource(result.resource_id)
		if related is None:
			logger.info("Classifier returned unknown resource id %r", result.resource_id)
		else:
			state.record_activity(related, text)
			if result.intent == Intent.SUMMARY:
				generated = await generate_cheat_sheet(client, related)
	return Message(
		id=new_id("msg"),
		role=Role.ASSISTANT,
		text=result.message,
		related_resource=related,
		generated_content=generated,
		intent=result.intent,
	)


async def send_message(
	client: GeminiClient,
	state: LibraryState,
	text: str,
	*,
	schedule: Optional[List[ScheduleItem]] = None,
	today: Optional[date] = None,
) -> Message:
	"""Run one student query through classification and, if asked, summarization.

	The user message is appended before any model call. Returns the assistant
	message, which is appended to the transcript as well.
	"""
	if state.is_processing:
		raise ConversationBusy("a query is already being processed")
	state.append_message(Message(id=new_id("msg"), role=Role.USER, text=text))
	state.is_processing = True
	try:
		try:
			reply = await _answer(client, state, text, SCHEDULE if schedule is None else schedule, today)
		except Exception:
			logger.exception("Failed to process query %r", text)
			reply = Message(id=new_id("msg"), role=Role.ASSISTANT, text=SYSTEM_ERROR_MESSAGE, intent=Intent.UNKNOWN)
		return state.append_message(reply)
	finally:
		state.is_processing = False
