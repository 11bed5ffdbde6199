from __future__ import annotations
import json
import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .gemini_client import GeminiClient, GeminiError
from .models import ClassificationResult, Intent, Resource, ScheduleItem
from .settings import settings

logger = logging.getLogger(__name__)


CLASSIFIER_FALLBACK_MESSAGE = "I'm having trouble connecting to the library archives right now. Please try again."
SUMMARY_EMPTY_MESSAGE = "Could not generate summary."
SUMMARY_FALLBACK_MESSAGE = "Sorry, I couldn't generate the cheat sheet at this moment."


INTENT_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"found": {"type": "BOOLEAN", "description": "Whether a relevant resource was found in the provided list."},
		"resourceId": {"type": "STRING", "description": "The ID of the matching resource, if found.", "nullable": True},
		"intent": {
			"type": "STRING",
			"enum": [i.value for i in Intent],
			"description": "Whether the user wants the file itself ('download') or a summary/cheat-sheet ('summary').",
		},
		"message": {"type": "STRING", "description": "A friendly, natural language response to the student."},
	},
	"required": ["found", "intent", "message"],
}


def _resource_summaries(resources: List[Resource]) -> List[Dict[str, Any]]:
	# Content stays out of the classifier prompt
	return [
		{"id": r.id, "title": r.title, "type": r.type.value, "tags": r.tags, "topic": r.topic, "date": r.date_str}
		for r in resources
	]


def _build_classifier_prompt(query: str, resources: List[Resource], schedule: List[ScheduleItem], today: date) -> str:
	schedule_json = json.dumps([s.model_dump() for s in schedule])
	resources_json = json.dumps(_resource_summaries(resources))
	return (
		"You are 'The Smart Librarian', an AI assistant for university students.\n\n"
		f"Current Date: {today.isoformat()}\n\n"
		"Class Schedule (to map dates like 'last Tuesday' to topics):\n"
		f"{schedule_json}\n\n"
		"Available Resources (Database):\n"
		f"{resources_json}\n\n"
		f"User Query: \"{query}\"\n\n"
		"Instructions:\n"
		"1. Analyze the user's query to understand what topic or date they are referring to.\n"
		"2. Match this to the most relevant resource in the Available Resources list. Only use an id from that list.\n"
		"3. Determine if they want the file (e.g., \"send me\", \"give me the pdf\") or a summary (e.g., \"explain\", \"summarize\", \"cheat sheet\").\n"
		"4. If the query implies a date (e.g., \"lecture from last week\"), use the Schedule to find the topic, then find the resource.\n"
		"5. Return a JSON object matching the schema."
	)


def _build_cheat_sheet_prompt(resource: Resource) -> str:
	return (
		"Create a \"One-Page Cheat Sheet\" based on the following academic resource content.\n"
		"The output should be formatted in Markdown.\n"
		"Focus on key definitions, formulas, and important bullet points.\n\n"
		f"Resource Title: {resource.title}\n"
		f"Topic: {resource.topic}\n"
		"Content:\n"
		f"{resource.content}"
	)


def _extract_json_object(text: str) -> Dict[str, Any]:
	try:
		return json.loads(text)
	except ValueError:
		pass
	code_block = re.search(r"```json\s*([\s\S]*?)\s*```", text)
	if code_block:
		try:
			return json.loads(code_block.group(1))
		except ValueError:
			pass
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last != -1 and last > first:
		try:
			return json.loads(text[first : last + 1])
		except ValueError:
			pass
	raise ValueError("model did not return a JSON object")


def classifier_fallback() -> ClassificationResult:
	return ClassificationResult(found=False, intent=Intent.UNKNOWN, message=CLASSIFIER_FALLBACK_MESSAGE)


async def classify_query(
	client: GeminiClient,
	query: str,
	resources: List[Resource],
	schedule: List[ScheduleItem],
	*,
	today: Optional[date] = None,
) -> ClassificationResult:
	"""Ask the model which resource (if any) the query is after and why.

	Never raises: every failure becomes the apology result.
	"""
	try:
		prompt = _build_classifier_prompt(query, resources, schedule, today or date.today())
		text = await client.generate(
			prompt,
			response_schema=INTENT_SCHEMA,
			temperature=settings.classifier_temperature,
		)
		if not text or not text.strip():
			raise GeminiError("No response from AI")
		result = ClassificationResult.model_validate(_extract_json_object(text))
	except (GeminiError, ValueError, ValidationError):
		logger.exception("Gemini search error for query %r", query)
		return classifier_fallback()
	if not result.found:
		result.resource_id = None
	return result


async def generate_cheat_sheet(client: GeminiClient, resource: Resource) -> str:
	try:
		text = await client.generate(_build_cheat_sheet_prompt(resource))
	except GeminiError:
		logger.exception("Gemini summary error for resource %s", resource.id)
		return SUMMARY_FALLBACK_MESSAGE
	return text if text and text.strip() else SUMMARY_EMPTY_MESSAGE
