"""End-to-end tests for the HTTP API with fake Codeforces and chat backends."""

import httpx
import pytest
from fastapi.testclient import TestClient

from cfcoach.codeforces_client import CodeforcesClient, get_codeforces_client
from cfcoach.db import Base, engine
from cfcoach.llm_client import ChatClient, get_chat_client
from cfcoach.main import app
from cfcoach.settings import settings


USER_INFO = {"handle": "alice", "rating": 1400, "rank": "specialist", "maxRating": 1450}
SUBMISSIONS = [
	{"id": 1, "creationTimeSeconds": 100, "programmingLanguage": "Python 3", "verdict": "WRONG_ANSWER",
	 "problem": {"contestId": 1, "index": "A", "rating": 1200, "tags": ["graphs"]}},
	{"id": 2, "creationTimeSeconds": 200, "programmingLanguage": "Python 3", "verdict": "OK",
	 "problem": {"contestId": 1, "index": "A", "rating": 1200, "tags": ["graphs"]}},
	{"id": 3, "creationTimeSeconds": 300, "programmingLanguage": "Python 3", "verdict": "OK",
	 "problem": {"contestId": 2, "index": "B", "rating": 1300, "tags": ["dp", "graphs"]}},
	{"id": 4, "creationTimeSeconds": "soon", "programmingLanguage": "Python 3", "verdict": "OK",
	 "problem": {"contestId": "gym", "index": "A", "rating": 1200, "tags": ["graphs"]}},
]
PROBLEMSET = [
	{"contestId": 1, "index": "A", "name": "Solved already", "rating": 1300, "tags": ["dp"]},
	{"contestId": 7, "index": "C", "name": "Paths", "rating": 1400, "tags": ["dp"]},
]


def codeforces_handler(request: httpx.Request) -> httpx.Response:
	method = request.url.path.rsplit("/", 1)[-1]
	if method == "user.info":
		if request.url.params["handles"] != "alice":
			return httpx.Response(400, json={"status": "FAILED", "comment": "handles: User with handle x not found"})
		return httpx.Response(200, json={"status": "OK", "result": [USER_INFO]})
	if method == "user.status":
		return httpx.Response(200, json={"status": "OK", "result": SUBMISSIONS})
	if method == "problemset.problems":
		return httpx.Response(200, json={"status": "OK", "result": {"problems": PROBLEMSET}})
	return httpx.Response(404, json={"status": "FAILED", "comment": "unknown method"})


def chat_ok(request: httpx.Request) -> httpx.Response:
	return httpx.Response(200, json={
		"choices": [{"message": {"role": "assistant", "content": "Solve more dp problems."}}],
		"usage": {"total_tokens": 120},
	})


def chat_down(request: httpx.Request) -> httpx.Response:
	return httpx.Response(503, text="overloaded")


def use_chat(handler, api_key="sk-test"):
	async def override():
		client = ChatClient(api_key, transport=httpx.MockTransport(handler))
		try:
			yield client
		finally:
			await client.aclose()
	app.dependency_overrides[get_chat_client] = override


@pytest.fixture
def client():
	Base.metadata.drop_all(bind=engine)

	async def fake_codeforces():
		cf = CodeforcesClient(base_url="https://cf.test/api", transport=httpx.MockTransport(codeforces_handler))
		try:
			yield cf
		finally:
			await cf.aclose()

	app.dependency_overrides[get_codeforces_client] = fake_codeforces
	use_chat(chat_ok)
	with TestClient(app) as test_client:
		yield test_client
	app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
	r = client.post("/auth/register", json={"username": "alice", "password": "secret123", "email": "a@example.com"})
	assert r.status_code == 201
	r = client.post("/auth/token", data={"username": "alice", "password": "secret123"})
	assert r.status_code == 200
	return {"Authorization": f"Bearer {r.json()['access_token']}"}


class TestAuth:
	def test_register_login_and_me(self, client, auth_headers):
		r = client.get("/auth/me", headers=auth_headers)

		assert r.status_code == 200
		assert r.json()["username"] == "alice"

	def test_duplicate_registration(self, client, auth_headers):
		r = client.post("/auth/register", json={"username": "alice", "password": "another1"})

		assert r.status_code == 409

	def test_wrong_password(self, client, auth_headers):
		r = client.post("/auth/token", data={"username": "alice", "password": "nope-nope"})

		assert r.status_code == 401

	def test_missing_token_rejected(self, client):
		assert client.get("/assistant/prompts").status_code == 401

	def test_garbage_token_rejected(self, client):
		r = client.get("/assistant/prompts", headers={"Authorization": "Bearer not-a-jwt"})

		assert r.status_code == 401

	def test_demo_mode_accepts_anonymous(self, client, monkeypatch):
		monkeypatch.setattr(settings, "demo_mode", True)
		r = client.get("/auth/me")

		assert r.status_code == 200
		assert r.json() == {"username": settings.demo_username, "demo": True}


def test_health_and_info(client):
	assert client.get("/health").json() == {"status": "ok"}
	info = client.get("/info").json()
	assert info["status"] == "ok"
	assert info["llm_configured"] is False


class TestPrompts:
	def test_assistant_test_endpoint_is_public(self, client):
		body = client.get("/assistant/test").json()

		assert body["success"] is True
		assert "codeforces_analysis" in body["available_prompts"]

	def test_list_prompts(self, client, auth_headers):
		body = client.get("/assistant/prompts", headers=auth_headers).json()

		ids = [prompt["id"] for prompt in body["prompts"]]
		assert "code_review" in ids
		review = next(prompt for prompt in body["prompts"] if prompt["id"] == "code_review")
		assert review["name"] == "Code Review"
		assert review["category"] == "Development"
		assert len(review["description"]) <= 150

	def test_prompt_by_id(self, client, auth_headers):
		body = client.get("/assistant/prompts/codeforces_analysis", headers=auth_headers).json()

		assert body["prompt"]["color"] == "#9c27b0"
		assert body["prompt"]["name"] == "Codeforces Analysis"

	def test_unknown_prompt(self, client, auth_headers):
		assert client.get("/assistant/prompts/nope", headers=auth_headers).status_code == 404


class TestGenerate:
	def test_generate_saves_history_and_usage(self, client, auth_headers):
		r = client.post(
			"/assistant/generate",
			json={"prompt_type": "code_review", "user_input": "print('hi')"},
			headers=auth_headers,
		)

		assert r.status_code == 200
		body = r.json()
		assert body["data"] == "Solve more dp problems."
		assert body["mode"] == "ai"
		assert body["tokens"] == 120
		assert body["generation_id"]

		item = client.get(f"/assistant/history/{body['generation_id']}", headers=auth_headers).json()
		assert item["generation"]["prompt_name"] == "Code Review"
		assert item["generation"]["user_input"] == "print('hi')"

	def test_invalid_prompt_type(self, client, auth_headers):
		r = client.post("/assistant/generate", json={"prompt_type": "poetry", "user_input": "x"}, headers=auth_headers)

		assert r.status_code == 400
		assert "Available types" in r.json()["detail"]

	def test_blank_input(self, client, auth_headers):
		r = client.post("/assistant/generate", json={"prompt_type": "general_chat", "user_input": "  "}, headers=auth_headers)

		assert r.status_code == 400

	def test_backend_not_configured(self, client, auth_headers):
		use_chat(chat_ok, api_key="")
		r = client.post("/assistant/generate", json={"prompt_type": "general_chat", "user_input": "hi"}, headers=auth_headers)

		assert r.status_code == 503

	def test_backend_failure(self, client, auth_headers):
		use_chat(chat_down)
		r = client.post("/assistant/generate", json={"prompt_type": "general_chat", "user_input": "hi"}, headers=auth_headers)

		assert r.status_code == 502

	def test_request_limit(self, client, auth_headers):
		from cfcoach.db import SessionLocal
		from cfcoach.models import AuthUser

		with SessionLocal() as db:
			row = db.get(AuthUser, "alice")
			row.requests_limit = 1
			db.commit()
		payload = {"prompt_type": "general_chat", "user_input": "hi"}

		assert client.post("/assistant/generate", json=payload, headers=auth_headers).status_code == 200
		assert client.post("/assistant/generate", json=payload, headers=auth_headers).status_code == 429


class TestCodeforcesAnalysis:
	def test_ai_mode(self, client, auth_headers):
		r = client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers)

		assert r.status_code == 200
		body = r.json()
		assert body["mode"] == "ai"
		assert body["data"] == "Solve more dp problems."
		assert body["analysis"]["total_problems_solved"] == 2
		assert body["analysis"]["solved_by_tag"] == {"graphs": 2, "dp": 1}
		assert body["analysis"]["weak_tags"] == ["dp", "graphs"]
		assert body["profile"]["rating"] == 1400

	def test_fallback_mode_when_backend_fails(self, client, auth_headers):
		use_chat(chat_down)
		r = client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers)

		assert r.status_code == 200
		body = r.json()
		assert body["mode"] == "fallback"
		assert body["tokens"] == 0
		assert "Practice problems rated 1300-1500" in body["data"]
		assert "- **Immediate Focus**: dp problems" in body["data"]

	def test_fallback_mode_when_backend_not_configured(self, client, auth_headers):
		use_chat(chat_ok, api_key="")
		body = client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers).json()

		assert body["mode"] == "fallback"

	def test_unknown_handle(self, client, auth_headers):
		r = client.post("/assistant/codeforces", json={"handle": "ghost"}, headers=auth_headers)

		assert r.status_code == 404

	def test_history_and_stats(self, client, auth_headers):
		client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers)
		use_chat(chat_down)
		client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers)
		use_chat(chat_ok)
		client.post("/assistant/generate", json={"prompt_type": "general_chat", "user_input": "hi"}, headers=auth_headers)

		history = client.get("/assistant/history", params={"limit": 2}, headers=auth_headers).json()
		assert history["total"] == 3
		assert len(history["generations"]) == 2
		assert history["has_more"] is True

		filtered = client.get(
			"/assistant/history", params={"prompt_type": "codeforces_analysis"}, headers=auth_headers
		).json()
		assert filtered["total"] == 2
		assert {g["mode"] for g in filtered["generations"]} == {"ai", "fallback"}
		assert filtered["generations"][0]["metadata"]["handle"] == "alice"

		stats = client.get("/assistant/stats", headers=auth_headers).json()["stats"]
		assert stats["total_generations"] == 3
		assert stats["total_tokens"] == 240
		assert stats["by_prompt_type"] == {"codeforces_analysis": 2, "general_chat": 1}
		assert len(stats["recent_activity"]) == 3

	def test_history_is_private(self, client, auth_headers):
		body = client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers).json()
		client.post("/auth/register", json={"username": "mallory", "password": "secret123"})
		token = client.post("/auth/token", data={"username": "mallory", "password": "secret123"}).json()["access_token"]

		r = client.get(f"/assistant/history/{body['generation_id']}", headers={"Authorization": f"Bearer {token}"})
		assert r.status_code == 404


class TestCodeforcesRoutes:
	def test_handle_analysis(self, client, auth_headers):
		body = client.get("/codeforces/alice", headers=auth_headers).json()

		assert body["profile"]["rank"] == "specialist"
		assert body["analysis"]["total_submissions"] == 3
		assert body["analysis"]["rating_distribution"] == [[1200, 1], [1300, 1]]

	def test_recommendations_exclude_solved(self, client, auth_headers):
		body = client.get("/codeforces/alice/recommendations", headers=auth_headers).json()

		assert body["weak_tags"] == ["dp", "graphs"]
		assert [problem["id"] for problem in body["problems"]] == ["7C"]
		assert body["problems"][0]["url"] == "https://codeforces.com/problemset/problem/7/C"

	def test_malformed_records_are_skipped(self, client, auth_headers):
		r = client.get("/codeforces/alice", headers=auth_headers)

		assert r.status_code == 200
		assert r.json()["analysis"]["total_submissions"] == 3

	def test_unexpected_payload_is_bad_gateway(self, client, auth_headers):
		async def broken_codeforces():
			cf = CodeforcesClient(
				base_url="https://cf.test/api",
				transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["unexpected"])),
			)
			try:
				yield cf
			finally:
				await cf.aclose()

		app.dependency_overrides[get_codeforces_client] = broken_codeforces

		assert client.get("/codeforces/alice", headers=auth_headers).status_code == 502
		assert client.post("/assistant/codeforces", json={"handle": "alice"}, headers=auth_headers).status_code == 502
