"""Tests for roadmap generation, persistence and progress."""

import json

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from focusflow.core.errors import GenerationError, StorageError, ValidationError
from focusflow.models import Journey, JourneyProgress, Topic
from focusflow.schemas.roadmap import GeneratedRoadmap
from focusflow.services import roadmap_service


def _roadmap_payload(days: int, topics_per_day: int = 2) -> dict:
    return {
        "title": "Rust in a Month",
        "timeline": f"{days} days",
        "prepType": "Systems Programming",
        "roadmap": [
            {
                "id": f"day-{d}",
                "title": f"Day {d}: Focus {d}",
                "summary": f"Covers area {d}",
                "topics": [
                    {"id": f"topic-{d}-{i}", "title": f"Topic {d}.{i}", "description": "desc"}
                    for i in range(1, topics_per_day + 1)
                ],
            }
            for d in range(1, days + 1)
        ],
    }


class FakeLLM:
    def __init__(self, response: str) -> None:
        self.response = response
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


class TestRoadmapBuild:
    """LLM output -> validated roadmap."""

    @pytest.mark.asyncio
    async def test_build_parses_fenced_json(self):
        llm = FakeLLM(f"```json\n{json.dumps(_roadmap_payload(3))}\n```")
        roadmap = await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", None, 3)

        assert roadmap.title == "Rust in a Month"
        assert roadmap.prep_type == "Systems Programming"
        assert len(roadmap.roadmap) == 3
        assert roadmap.roadmap[0].topics[1].title == "Topic 1.2"
        assert "exactly 3 days" in llm.prompts[0]
        assert "has not provided a resume" in llm.prompts[0]

    @pytest.mark.asyncio
    async def test_resume_is_truncated_in_prompt(self):
        llm = FakeLLM(json.dumps(_roadmap_payload(1)))
        resume = "x" * 5000
        await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", resume, 1)

        prompt = llm.prompts[0]
        assert "x" * 2000 + "..." in prompt
        assert "x" * 2001 not in prompt

    @pytest.mark.asyncio
    async def test_wrong_day_count(self):
        llm = FakeLLM(json.dumps(_roadmap_payload(2)))
        with pytest.raises(GenerationError, match="expected 3"):
            await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", None, 3)

    @pytest.mark.asyncio
    async def test_invalid_structure(self):
        llm = FakeLLM('{"title": "No roadmap key"}')
        with pytest.raises(GenerationError, match="Invalid roadmap structure"):
            await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", None, 1)

    @pytest.mark.asyncio
    async def test_unparseable_response(self):
        llm = FakeLLM("Sorry, I cannot help with that.")
        with pytest.raises(GenerationError):
            await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", None, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("days", [0, -1, 121])
    async def test_timeline_out_of_range(self, days):
        llm = FakeLLM("{}")
        with pytest.raises(ValidationError):
            await roadmap_service.RoadmapBuildOrchestrator(llm).build("Learn Rust", None, days)
        assert llm.prompts == []

    @pytest.mark.asyncio
    async def test_blank_goal(self):
        with pytest.raises(ValidationError, match="Goal"):
            await roadmap_service.RoadmapBuildOrchestrator(FakeLLM("{}")).build("  ", None, 3)


class TestSaveAndLoad:
    @pytest.mark.asyncio
    async def test_save_creates_journey_days_and_topics(self, test_session: AsyncSession):
        roadmap = GeneratedRoadmap.model_validate(_roadmap_payload(3, topics_per_day=3))
        journey_id = await roadmap_service.save_roadmap(
            test_session,
            user_id="user-7",
            goal="  Learn Rust  ",
            roadmap=roadmap,
            timeline_days=3,
            resume="resume text",
        )

        data = await roadmap_service.get_journey_roadmap(test_session, journey_id)
        assert data["goal"] == "Learn Rust"
        assert data["title"] == "Rust in a Month"
        assert data["duration"] == 3
        assert data["progress"] == 1
        assert data["progress_percentage"] == 0
        assert [d["day_number"] for d in data["days"]] == [1, 2, 3]
        assert data["days"][0]["summary"] == "Covers area 1"
        assert [t["name"] for t in data["days"][2]["topics"]] == ["Topic 3.1", "Topic 3.2", "Topic 3.3"]
        assert all(t["content"] == "" for d in data["days"] for t in d["topics"])

    @pytest.mark.asyncio
    async def test_save_falls_back_to_description_for_summary(self, test_session: AsyncSession):
        payload = _roadmap_payload(1)
        del payload["roadmap"][0]["summary"]
        payload["roadmap"][0]["description"] = "From description"
        journey_id = await roadmap_service.save_roadmap(
            test_session,
            user_id="u",
            goal="g",
            roadmap=GeneratedRoadmap.model_validate(payload),
            timeline_days=1,
        )
        data = await roadmap_service.get_journey_roadmap(test_session, journey_id)
        assert data["days"][0]["summary"] == "From description"

    @pytest.mark.asyncio
    async def test_save_rejects_mismatched_timeline(self, test_session: AsyncSession):
        with pytest.raises(ValidationError):
            await roadmap_service.save_roadmap(
                test_session,
                user_id="u",
                goal="g",
                roadmap=GeneratedRoadmap.model_validate(_roadmap_payload(2)),
                timeline_days=3,
            )

    @pytest.mark.asyncio
    async def test_get_missing_journey(self, test_session: AsyncSession):
        with pytest.raises(StorageError) as exc_info:
            await roadmap_service.get_journey_roadmap(test_session, "missing")
        assert exc_info.value.not_found

    @pytest.mark.asyncio
    async def test_list_user_journeys(self, test_session: AsyncSession, seed_journey: Journey):
        mine = await roadmap_service.list_user_journeys(test_session, "user-1")
        others = await roadmap_service.list_user_journeys(test_session, "someone-else")
        assert [j.id for j in mine] == [seed_journey.id]
        assert others == []


class TestTopicCompletion:
    """Progress roll-up from topic to day to journey."""

    @pytest.mark.asyncio
    async def test_single_topic_updates_progress(self, test_session: AsyncSession, seed_journey: Journey):
        topic = seed_journey.days[1].topics[0]
        result = await roadmap_service.update_topic_completion(
            test_session, journey_id=seed_journey.id, topic_id=topic.id, is_completed=True
        )

        assert result == {"is_completed": True, "progress": 17, "all_topics_completed": False}
        progress = (
            await test_session.execute(
                select(JourneyProgress).where(JourneyProgress.journey_id == seed_journey.id)
            )
        ).scalar_one()
        assert progress.progress_percentage == 17
        assert progress.last_visited_day == 2

    @pytest.mark.asyncio
    async def test_day_completes_when_all_its_topics_do(
        self, test_session: AsyncSession, seed_journey: Journey
    ):
        for topic in seed_journey.days[0].topics:
            await roadmap_service.update_topic_completion(
                test_session, journey_id=seed_journey.id, topic_id=topic.id, is_completed=True
            )
        data = await roadmap_service.get_journey_roadmap(test_session, seed_journey.id)
        assert data["days"][0]["is_completed"] is True
        assert data["days"][1]["is_completed"] is False
        assert data["progress_percentage"] == 33

    @pytest.mark.asyncio
    async def test_journey_completion_sticks(self, test_session: AsyncSession, seed_journey: Journey):
        all_topics = [t for d in seed_journey.days for t in d.topics]
        result = None
        for topic in all_topics:
            result = await roadmap_service.update_topic_completion(
                test_session, journey_id=seed_journey.id, topic_id=topic.id, is_completed=True
            )
        assert result["all_topics_completed"] is True
        assert result["progress"] == 100

        result = await roadmap_service.update_topic_completion(
            test_session, journey_id=seed_journey.id, topic_id=all_topics[0].id, is_completed=False
        )
        assert result["all_topics_completed"] is False
        assert result["progress"] == 83

        data = await roadmap_service.get_journey_roadmap(test_session, seed_journey.id)
        assert data["is_completed"] is True
        assert data["days"][0]["is_completed"] is False

    @pytest.mark.asyncio
    async def test_unknown_topic(self, test_session: AsyncSession, seed_journey: Journey):
        with pytest.raises(StorageError) as exc_info:
            await roadmap_service.update_topic_completion(
                test_session, journey_id=seed_journey.id, topic_id="missing", is_completed=True
            )
        assert exc_info.value.not_found

    @pytest.mark.asyncio
    async def test_topic_flag_persisted(self, test_session: AsyncSession, seed_journey: Journey):
        topic_id = seed_journey.days[2].topics[1].id
        await roadmap_service.update_topic_completion(
            test_session, journey_id=seed_journey.id, topic_id=topic_id, is_completed=True
        )
        assert (await test_session.get(Topic, topic_id)).is_completed is True
