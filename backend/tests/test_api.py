"""HTTP-level tests against the FastAPI app with fakes behind the dependencies."""

import asyncio
import io
import json

import httpx
import pytest
import pytest_asyncio
from docx import Document as DocxDocument

from focusflow.api.deps import get_db, get_session_factory
from focusflow.main import app
from focusflow.models import Journey
from focusflow.services.chat_service import InMemorySessionStore
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import SqlContentStore
from focusflow.services.generation_queue import GenerationQueue
from focusflow.services.resume_service import DOCX_CONTENT_TYPE


def _roadmap_json(days: int) -> str:
    return json.dumps(
        {
            "title": "SQL Basics",
            "timeline": f"{days} days",
            "prepType": "Data Skills",
            "roadmap": [
                {
                    "title": f"Day {d}",
                    "summary": f"Day {d} summary",
                    "topics": [{"title": f"Topic {d}.1", "description": "d"}],
                }
                for d in range(1, days + 1)
            ],
        }
    )


class ScriptedLLM:
    """Returns the scripted response for every prompt."""

    def __init__(self, response: str = "# Content") -> None:
        self.response = response

    async def generate(self, prompt: str) -> str:
        return self.response

    async def chat(self, messages) -> str:
        return "chat reply"


@pytest_asyncio.fixture
async def client(session_factory):
    llm = ScriptedLLM()
    store = SqlContentStore(session_factory)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.state.llm_client = llm
    app.state.generation_queue = GenerationQueue(ContentGenerator(llm), store)
    app.state.chat_sessions = InMemorySessionStore()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await app.state.generation_queue.join()
    app.dependency_overrides.clear()


class TestRoadmapRoutes:
    @pytest.mark.asyncio
    async def test_generate_save_and_fetch(self, client: httpx.AsyncClient):
        app.state.llm_client.response = _roadmap_json(2)
        resp = await client.post(
            "/api/roadmap/generate", json={"goal": "Learn SQL", "timelineInDays": 2}
        )
        assert resp.status_code == 200
        roadmap = resp.json()
        assert roadmap["prepType"] == "Data Skills"

        resp = await client.post(
            "/api/roadmap/save",
            json={"goal": "Learn SQL", "timelineInDays": 2, "roadmap": roadmap},
            headers={"X-User-Id": "alice"},
        )
        assert resp.status_code == 201
        journey_id = resp.json()["journeyId"]

        resp = await client.get(f"/api/roadmap/{journey_id}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["duration"] == 2
        assert [d["dayNumber"] for d in body["days"]] == [1, 2]

        resp = await client.get("/api/roadmap/user/journeys", headers={"X-User-Id": "alice"})
        assert [j["id"] for j in resp.json()] == [journey_id]

    @pytest.mark.asyncio
    async def test_generate_bad_llm_output_is_502(self, client: httpx.AsyncClient):
        app.state.llm_client.response = "no json here"
        resp = await client.post("/api/roadmap/generate", json={"goal": "Learn SQL", "timelineInDays": 2})
        assert resp.status_code == 502

    @pytest.mark.asyncio
    async def test_generate_invalid_timeline_is_400(self, client: httpx.AsyncClient):
        resp = await client.post("/api/roadmap/generate", json={"goal": "Learn SQL", "timelineInDays": 500})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_journey_is_404(self, client: httpx.AsyncClient):
        resp = await client.get("/api/roadmap/does-not-exist")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_topic_completion(self, client: httpx.AsyncClient, seed_journey: Journey):
        topic_id = seed_journey.days[0].topics[0].id
        resp = await client.patch(
            f"/api/roadmap/{seed_journey.id}/topic/{topic_id}", json={"isCompleted": True}
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "isCompleted": True,
            "progress": 17,
            "allTopicsCompleted": False,
        }

    @pytest.mark.asyncio
    async def test_topic_completion_requires_boolean(self, client: httpx.AsyncClient, seed_journey: Journey):
        topic_id = seed_journey.days[0].topics[0].id
        resp = await client.patch(
            f"/api/roadmap/{seed_journey.id}/topic/{topic_id}", json={"isCompleted": "yes"}
        )
        assert resp.status_code == 422


class TestTopicContentRoutes:
    @pytest.mark.asyncio
    async def test_generate_initial_then_queue_drains(self, client: httpx.AsyncClient, seed_journey: Journey):
        resp = await client.post(f"/api/topic-content/generate-initial/{seed_journey.id}")
        assert resp.status_code == 200
        assert resp.json()["dayOneGenerated"] == 2
        assert resp.json()["queued"] == 4

        await asyncio.wait_for(app.state.generation_queue.join(), timeout=5)

        resp = await client.get(f"/api/topic-content/status/{seed_journey.id}")
        assert resp.json()["isComplete"] is True
        assert resp.json()["percentComplete"] == 100

    @pytest.mark.asyncio
    async def test_topic_content_on_demand(self, client: httpx.AsyncClient, seed_journey: Journey):
        topic = seed_journey.days[2].topics[0]
        resp = await client.get(f"/api/topic-content/topic/{topic.id}")
        assert resp.status_code == 200
        assert resp.json() == {
            "id": topic.id,
            "name": topic.name,
            "content": "# Content",
            "isGenerating": False,
        }

    @pytest.mark.asyncio
    async def test_unknown_topic_is_404(self, client: httpx.AsyncClient):
        resp = await client.get("/api/topic-content/topic/missing")
        assert resp.status_code == 404


class TestAIRoutes:
    @pytest.mark.asyncio
    async def test_chat_and_history(self, client: httpx.AsyncClient, seed_journey: Journey):
        resp = await client.post(
            "/api/ai/chat", json={"message": "Help me", "journeyId": seed_journey.id}
        )
        assert resp.status_code == 200
        session_id = resp.json()["sessionId"]
        assert resp.json()["reply"] == "chat reply"

        resp = await client.get(f"/api/ai/chat/{session_id}/history")
        assert [m["role"] for m in resp.json()] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_empty_chat_message_is_400(self, client: httpx.AsyncClient):
        resp = await client.post("/api/ai/chat", json={"message": ""})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_simplify(self, client: httpx.AsyncClient):
        app.state.llm_client.response = "  Simple words.  "
        resp = await client.post("/api/ai/simplify", json={"text": "Obfuscated prose"})
        assert resp.json() == {"simplified": "Simple words."}


class TestMiscRoutes:
    @pytest.mark.asyncio
    async def test_resume_wrong_type_is_400(self, client: httpx.AsyncClient):
        resp = await client.post(
            "/api/resume-parser/parse",
            files={"file": ("resume.txt", b"hello", "text/plain")},
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_resume_docx_upload(self, client: httpx.AsyncClient):
        doc = DocxDocument()
        doc.add_paragraph("Jane Doe, Data Engineer")
        buf = io.BytesIO()
        doc.save(buf)

        resp = await client.post(
            "/api/resume-parser/parse",
            files={"file": ("resume.docx", buf.getvalue(), DOCX_CONTENT_TYPE)},
        )
        assert resp.status_code == 200
        assert resp.json() == {"rawText": "Jane Doe, Data Engineer"}

    @pytest.mark.asyncio
    async def test_health(self, client: httpx.AsyncClient):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
