from __future__ import annotations
import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional

from .catalog import demo_activity, initial_resources
from .models import ActivityLog, Message, Resource, ResourceType, User, utcnow
from .settings import settings


logger = logging.getLogger(__name__)


NO_CONTENT_PLACEHOLDER = "No content description provided."


def new_id(prefix: str) -> str:
	return f"{prefix}-{uuid.uuid4().hex}"


class LibraryState:
	"""Resources, activity log and chat transcript owned by one session."""

	def __init__(self, resources: List[Resource], activity_log: Optional[List[ActivityLog]] = None) -> None:
		self.resources = resources
		self.activity_log: List[ActivityLog] = list(activity_log or [])  # newest first
		self.messages: List[Message] = []
		self.is_processing = False

	def find_resource(self, resource_id: Optional[str]) -> Optional[Resource]:
		if not resource_id:
			return None
		for resource in self.resources:
			if resource.id == resource_id:
				return resource
		return None

	def add_resource(
		self,
		*,
		title: str,
		topic: str,
		type: ResourceType,
		content: Optional[str] = None,
		url: Optional[str] = None,
		today: Optional[date] = None,
	) -> Resource:
		existing = {r.id for r in self.resources}
		resource_id = new_id("res")
		while resource_id in existing:
			resource_id = new_id("res")
		resource = Resource(
			id=resource_id,
			title=title,
			type=type,
			topic=topic,
			date_str=(today or date.today()).isoformat(),
			tags=[topic.lower(), type.value.lower()],
			content=(content or "").strip() or NO_CONTENT_PLACEHOLDER,
			downloads=0,
			url=url or None,
		)
		self.resources.append(resource)
		return resource

	def record_activity(self, resource: Resource, query: str) -> ActivityLog:
		entry = ActivityLog(
			id=new_id("log"),
			resource_title=resource.title,
			topic=resource.topic,
			query=query,
			timestamp=utcnow(),
		)
		self.activity_log.insert(0, entry)
		return entry

	def record_download(self, resource_id: str) -> Optional[Resource]:
		resource = self.find_resource(resource_id)
		if resource is not None:
			resource.downloads += 1
		return resource

	def append_message(self, message: Message) -> Message:
		self.messages.append(message)
		return message

	def clear_messages(self) -> None:
		self.messages.clear()


class SessionContext:
	def __init__(self, session_id: str, user: User, state: LibraryState, expires_at: datetime) -> None:
		self.session_id = session_id
		self.user = user
		self.state = state
		self.created_at = utcnow()
		self.expires_at = expires_at

	def expired(self, now: Optional[datetime] = None) -> bool:
		return (now or utcnow()) >= self.expires_at


class SessionRegistry:
	def __init__(self) -> None:
		self._sessions: Dict[str, SessionContext] = {}

	def open(self, user: User, *, expires_at: datetime) -> SessionContext:
		self.purge_expired()
		session_id = uuid.uuid4().hex
		activity = demo_activity() if settings.seed_demo_activity else []
		ctx = SessionContext(session_id, user, LibraryState(initial_resources(), activity), expires_at)
		self._sessions[session_id] = ctx
		return ctx

	def get(self, session_id: str) -> Optional[SessionContext]:
		self.purge_expired()
		return self._sessions.get(session_id)

	def close(self, session_id: str) -> bool:
		return self._sessions.pop(session_id, None) is not None

	def purge_expired(self, now: Optional[datetime] = None) -> int:
		"""Drop sessions whose token lifetime has passed. Returns how many were removed."""
		now = now or utcnow()
		stale = [sid for sid, ctx in self._sessions.items() if ctx.expired(now)]
		for sid in stale:
			del self._sessions[sid]
		if stale:
			logger.info("Purged %d expired sessions", len(stale))
		return len(stale)

	def clear(self) -> None:
		self._sessions.clear()

	def __len__(self) -> int:
		return len(self._sessions)


sessions = SessionRegistry()
