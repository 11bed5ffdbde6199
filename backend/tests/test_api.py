import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx

from librarian.assistant import CLASSIFIER_FALLBACK_MESSAGE
from librarian.gemini_client import GeminiError, get_gemini_client
from librarian.main import app
from librarian.routers import auth as auth_router
from librarian.state import sessions


def test_info(client):
	r = client.get("/info")
	assert r.status_code == 200
	assert r.json()["status"] == "ok"


def test_demo_login_derives_name_from_email(client):
	r = client.post("/auth/login", json={"email": "jane.doe@uni.edu", "password": "x", "role": "STUDENT"})
	assert r.status_code == 200
	body = r.json()
	assert body["token_type"] == "bearer"
	assert body["user"]["name"] == "Jane.doe"
	assert body["user"]["role"] == "STUDENT"
	me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
	assert me.json()["email"] == "jane.doe@uni.edu"


def test_signup_then_login_checks_password(client):
	r = client.post("/auth/signup", json={"name": "Dr. Rao", "email": "rao@uni.edu", "password": "secret", "role": "TEACHER"})
	assert r.status_code == 201
	assert r.json()["user"]["name"] == "Dr. Rao"
	assert client.post("/auth/signup", json={"name": "Again", "email": "RAO@uni.edu", "password": "x", "role": "TEACHER"}).status_code == 409
	assert client.post("/auth/login", json={"email": "rao@uni.edu", "password": "wrong", "role": "TEACHER"}).status_code == 401
	ok = client.post("/auth/login", json={"email": "rao@uni.edu", "password": "secret", "role": "TEACHER"})
	assert ok.status_code == 200
	assert ok.json()["user"]["id"] == r.json()["user"]["id"]


def test_requests_without_token_are_rejected(client):
	assert client.get("/resources").status_code == 401
	assert client.get("/resources", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_logout_destroys_session(client, student_headers):
	assert len(sessions) == 1
	assert client.post("/auth/logout", headers=student_headers).status_code == 204
	assert len(sessions) == 0
	assert client.get("/chat/messages", headers=student_headers).status_code == 401


def test_roles_gate_chat_and_dashboard(client, student_headers, teacher_headers):
	assert client.get("/dashboard/analytics", headers=student_headers).status_code == 403
	assert client.get("/chat/messages", headers=teacher_headers).status_code == 403
	assert client.post("/resources", json={"title": "t", "topic": "x"}, headers=student_headers).status_code == 403


def test_chat_download_flow(client, gemini, student_headers):
	gemini.queue_classification(True, "download", "Here's Unit 2 notes.", "res-2")
	r = client.post("/chat/messages", json={"text": "send unit 2 pdf"}, headers=student_headers)
	assert r.status_code == 200
	reply = r.json()
	assert reply["role"] == "assistant"
	assert reply["relatedResource"]["id"] == "res-2"
	assert reply["relatedResource"]["dateStr"] == "2025-02-17"
	assert reply["generatedContent"] is None

	transcript = client.get("/chat/messages", headers=student_headers).json()
	assert [m["role"] for m in transcript["messages"]] == ["user", "assistant"]
	assert transcript["isProcessing"] is False

	assert client.delete("/chat/messages", headers=student_headers).status_code == 204
	assert client.get("/chat/messages", headers=student_headers).json()["messages"] == []


def test_chat_summary_flow(client, gemini, student_headers):
	gemini.queue_classification(True, "summary", "Cheat sheet coming up.", "res-2")
	gemini.queue("# Normalization\n- 1NF")
	reply = client.post("/chat/messages", json={"text": "explain normalization"}, headers=student_headers).json()
	assert reply["generatedContent"] == "# Normalization\n- 1NF"
	assert reply["intent"] == "summary"


def test_chat_classifier_failure(client, gemini, student_headers):
	gemini.queue(GeminiError("down"))
	reply = client.post("/chat/messages", json={"text": "anything"}, headers=student_headers).json()
	assert reply["text"] == CLASSIFIER_FALLBACK_MESSAGE
	assert reply["relatedResource"] is None


def test_blank_chat_text_rejected(client, student_headers):
	assert client.post("/chat/messages", json={"text": "   "}, headers=student_headers).status_code == 400


def test_upload_appends_new_resource(client, teacher_headers):
	before = client.get("/resources", headers=teacher_headers).json()
	r = client.post(
		"/resources",
		json={"title": "Unit 3 Notes", "topic": "SQL Joins", "type": "Recording", "content": "Inner and outer joins."},
		headers=teacher_headers,
	)
	assert r.status_code == 201
	created = r.json()
	assert created["downloads"] == 0
	assert created["tags"] == ["sql joins", "recording"]
	assert created["id"] not in {res["id"] for res in before}

	after = client.get("/resources", headers=teacher_headers).json()
	assert len(after) == len(before) + 1
	assert after[:-1] == before
	assert after[-1]["id"] == created["id"]


def test_upload_requires_title_and_topic(client, teacher_headers):
	assert client.post("/resources", json={"title": " ", "topic": "SQL"}, headers=teacher_headers).status_code == 400
	assert client.post("/resources", json={"topic": "SQL"}, headers=teacher_headers).status_code == 422


def test_upload_blank_content_gets_placeholder(client, teacher_headers):
	created = client.post("/resources", json={"title": "Slides", "topic": "ER"}, headers=teacher_headers).json()
	assert created["content"] == "No content description provided."
	assert created["type"] == "PDF"


def test_download_increments_counter(client, student_headers):
	r = client.post("/resources/res-4/download", headers=student_headers)
	assert r.status_code == 200
	assert r.json()["downloads"] == 13
	assert client.post("/resources/res-nope/download", headers=student_headers).status_code == 404


def test_sessions_do_not_share_state(client, student_headers, teacher_headers):
	client.post("/resources", json={"title": "Extra", "topic": "Extra"}, headers=teacher_headers)
	assert len(client.get("/resources", headers=student_headers).json()) == 6


def test_schedule(client, student_headers):
	schedule = client.get("/schedule", headers=student_headers).json()
	assert schedule[2] == {"date": "2025-02-17", "topic": "DBMS Normalization"}


def test_dashboard_summary_for_teacher(client, teacher_headers):
	summary = client.get("/dashboard/analytics", headers=teacher_headers).json()
	assert summary["totalQueries"] == 3
	assert len(summary["topics"]) <= 5
	assert summary["topics"][0]["fullName"] == summary["topLearningGap"]
	assert summary["recentActivity"][0]["resourceTitle"] == "Unit 2: Normalization Notes"


def test_expired_logins_do_not_accumulate(client, monkeypatch):
	past = datetime.now(timezone.utc) - timedelta(minutes=1)
	monkeypatch.setattr(auth_router, "_resolve_expiry", lambda expires_delta: past)
	for i in range(50):
		token = client.post("/auth/login", json={"email": f"s{i}@uni.edu", "password": "x", "role": "STUDENT"}).json()["access_token"]
		assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
	assert len(sessions) == 0


def test_second_query_while_busy_gets_409(client, student_headers):
	class GatedGemini:
		def __init__(self):
			self.entered = asyncio.Event()
			self.release = asyncio.Event()

		async def generate(self, prompt, **kwargs):
			self.entered.set()
			await self.release.wait()
			return json.dumps({"found": True, "resourceId": "res-2", "intent": "download", "message": "Here."})

	async def run():
		gated = GatedGemini()
		app.dependency_overrides[get_gemini_client] = lambda: gated
		transport = httpx.ASGITransport(app=app)
		async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
			first = asyncio.create_task(ac.post("/chat/messages", json={"text": "send unit 2 pdf"}, headers=student_headers))
			await gated.entered.wait()
			second = await ac.post("/chat/messages", json={"text": "and unit 1?"}, headers=student_headers)
			gated.release.set()
			return (await first).status_code, second.status_code

	assert asyncio.run(run()) == (200, 409)
	transcript = client.get("/chat/messages", headers=student_headers).json()
	assert [m["text"] for m in transcript["messages"]] == ["send unit 2 pdf", "Here."]
	assert transcript["isProcessing"] is False


def test_password_check_runs_in_worker_thread(client, monkeypatch):
	client.post("/auth/signup", json={"name": "Dr. Rao", "email": "rao@uni.edu", "password": "secret", "role": "TEACHER"})
	seen = []

	def fake_verify(plain, hashed):
		try:
			asyncio.get_running_loop()
			seen.append("event loop")
		except RuntimeError:
			seen.append("worker")
		return True

	monkeypatch.setattr(auth_router, "verify_password", fake_verify)
	r = client.post("/auth/login", json={"email": "rao@uni.edu", "password": "secret", "role": "TEACHER"})
	assert r.status_code == 200
	assert seen == ["worker"]
