import json
from typing import Any, Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from librarian.catalog import initial_resources
from librarian.gemini_client import get_gemini_client
from librarian.main import app
from librarian.routers import auth as auth_router
from librarian.state import LibraryState, sessions


class FakeGemini:
	"""Stands in for GeminiClient; replies are consumed in order."""

	def __init__(self) -> None:
		self.replies: List[Union[str, Exception]] = []
		self.calls: List[Dict[str, Any]] = []

	def queue(self, *replies: Union[str, Exception]) -> None:
		self.replies.extend(replies)

	def queue_classification(self, found: bool, intent: str, message: str, resource_id: Optional[str] = None) -> None:
		self.queue(json.dumps({"found": found, "resourceId": resource_id, "intent": intent, "message": message}))

	async def generate(self, prompt: str, *, response_schema=None, temperature=None) -> str:
		self.calls.append({"prompt": prompt, "response_schema": response_schema, "temperature": temperature})
		reply = self.replies.pop(0)
		if isinstance(reply, Exception):
			raise reply
		return reply

	async def aclose(self) -> None:
		pass


@pytest.fixture
def gemini() -> FakeGemini:
	return FakeGemini()


@pytest.fixture
def state() -> LibraryState:
	return LibraryState(initial_resources())


@pytest.fixture
def client(gemini):
	app.dependency_overrides[get_gemini_client] = lambda: gemini
	with TestClient(app) as c:
		yield c
	app.dependency_overrides.clear()
	sessions.clear()
	auth_router._accounts.clear()


def _login(client: TestClient, email: str, role: str) -> Dict[str, str]:
	r = client.post("/auth/login", json={"email": email, "password": "pw", "role": role})
	assert r.status_code == 200, r.text
	return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def student_headers(client) -> Dict[str, str]:
	return _login(client, "sam@uni.edu", "STUDENT")


@pytest.fixture
def teacher_headers(client) -> Dict[str, str]:
	return _login(client, "prof@uni.edu", "TEACHER")
