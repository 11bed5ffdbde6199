"""
Domain models for the Smart Librarian.

Everything lives in memory for the lifetime of a login session. Field names
are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


class ResourceType(str, Enum):
	PDF = "PDF"
	PPT = "PPT"
	RECORDING = "Recording"
	ASSIGNMENT = "Assignment"
	IMAGE = "Image"
	VIDEO = "Video"


class Intent(str, Enum):
	DOWNLOAD = "download"
	SUMMARY = "summary"
	UNKNOWN = "unknown"


class Role(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"


class UserRole(str, Enum):
	STUDENT = "STUDENT"
	TEACHER = "TEACHER"


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Resource(CamelModel):
	id: str
	title: str
	type: ResourceType
	topic: str
	date_str: str = Field(..., description="ISO date YYYY-MM-DD")
	tags: List[str] = Field(default_factory=list)
	content: str = Field(..., description="Plain text used for summarization")
	downloads: int = Field(default=0, ge=0)
	url: Optional[str] = None


class ScheduleItem(CamelModel):
	date: str
	topic: str


class Message(CamelModel):
	id: str
	role: Role
	text: str
	# Shares the store's Resource instance rather than copying it
	related_resource: Optional[Resource] = None
	generated_content: Optional[str] = None
	intent: Optional[Intent] = None
	timestamp: datetime = Field(default_factory=utcnow)


class ActivityLog(CamelModel):
	id: str
	resource_title: str
	topic: str
	query: str
	timestamp: datetime = Field(default_factory=utcnow)


class User(CamelModel):
	id: str
	name: str
	email: str
	role: UserRole


class ClassificationResult(CamelModel):
	found: bool
	resource_id: Optional[str] = None
	intent: Intent
	message: str


class TopicScore(CamelModel):
	name: str
	full_name: str
	queries: int
