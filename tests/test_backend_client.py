"""
Backend client tests with mocked HTTP responses.
"""
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from jobcoach.core.errors import BackendError
from jobcoach.models.interview import GuideRequest, QuestionRequest, QuestionSet
from jobcoach.models.jobs import JobSearchParams
from jobcoach.models.scoring import LearningPlanRequest, ScoredReport
from jobcoach.providers.backend import BackendClient

BASE = "http://backend.test"


def make_response(status_code=200, method="POST", path="/", **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request(method, f"{BASE}{path}"), **kwargs)


@pytest.fixture
def client():
    return BackendClient(base_url=BASE + "/", timeout=5)


class TestBackendClient:

    def test_initialization(self, client):
        assert client.base_url == BASE
        assert client.timeout == 5

    @pytest.mark.asyncio
    async def test_search_jobs(self, client):
        rows = [
            {"job_id": "1", "job_title": "Dev", "employer_name": "Acme", "job_description": "Python"},
            "not-a-row",
        ]
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json=rows, method="GET", path="/jobs")
            jobs = await client.search_jobs(JobSearchParams(query="python"))

            assert len(jobs) == 1
            assert jobs[0].job_title == "Dev"
            method, url = mock_request.await_args.args
            assert (method, url) == ("GET", f"{BASE}/jobs")
            params = mock_request.await_args.kwargs["params"]
            assert params["query"] == "python"
            assert params["date_posted"] == "today"
            assert params["country"] == "us"

    @pytest.mark.asyncio
    async def test_search_jobs_non_list_body(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json={"error": "x"}, method="GET")
            assert await client.search_jobs() == []

    @pytest.mark.asyncio
    async def test_fetch_question_set(self, client, question_set):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json=question_set.model_dump())
            request = QuestionRequest(
                job_description="JD", resume="CV", job_title="Dev", difficulty="hard"
            )
            result = await client.fetch_question_set(request)

            assert isinstance(result, QuestionSet)
            assert [q.question_id for q in result.questions] == ["q1", "q2"]
            assert mock_request.await_args.kwargs["json"] == {
                "job_description": "JD",
                "resume": "CV",
                "job_title": "Dev",
                "difficulty": "hard",
            }

    @pytest.mark.asyncio
    async def test_fetch_question_set_loosely_typed(self, client):
        body = {
            "job_title": None,
            "summary": "Role",
            "questions": [
                {"question_id": 1, "kind": "behavioral", "text": "Why us?", "rationale": None, "rubric": None},
                {"question_id": 2, "kind": "coding", "text": "Sum a list.", "rubric": ["Correct", None]},
            ],
        }
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json=body)
            result = await client.fetch_question_set(
                QuestionRequest(job_description="JD", resume="CV", job_title="Dev", difficulty="easy")
            )

        assert result.job_title == ""
        assert [q.question_id for q in result.questions] == ["1", "2"]
        assert result.questions[0].rationale == ""
        assert result.questions[0].rubric == []
        assert result.questions[1].rubric == ["Correct"]
        assert result.questions[1].is_coding

    @pytest.mark.asyncio
    async def test_non_2xx_raises_backend_error(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(500, text="boom", path="/scores")
            with pytest.raises(BackendError) as exc_info:
                await client.submit_scores({"question_set": {}})
            assert exc_info.value.status_code == 500
            assert exc_info.value.endpoint == "POST /scores"

    @pytest.mark.asyncio
    async def test_connection_error_raises_backend_error(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("refused")
            with pytest.raises(BackendError) as exc_info:
                await client.analyze_job("JD")
            assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_submit_scores_non_json_body(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(text="ok")
            assert await client.submit_scores({}) is None

    @pytest.mark.asyncio
    async def test_learning_plan_payload(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json={"plan": []})
            request = LearningPlanRequest(scored_report=ScoredReport(job_title="Dev"))
            assert await client.request_learning_plan(request) == {"plan": []}

            body = mock_request.await_args.kwargs["json"]
            assert body["threshold"] == 70.0
            assert body["budget_hours"] == 20.0
            assert body["max_resources"] == 6
            assert body["scored_report"]["job_title"] == "Dev"

    @pytest.mark.asyncio
    async def test_guide_json_and_text(self, client):
        request = GuideRequest(main_question="Q", history_str="[]", new_user_query="?")
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json={"answer": "A"})
            assert await client.guide(request) == {"answer": "A"}

            mock_request.return_value = make_response(text="plain guidance")
            assert await client.guide(request) == "plain guidance"

    @pytest.mark.asyncio
    async def test_speak_returns_audio(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(
                content=b"\xff\xfbmp3", headers={"content-type": "audio/mpeg"}
            )
            assert await client.speak("Hello") == b"\xff\xfbmp3"
            kwargs = mock_request.await_args.kwargs
            assert kwargs["json"] == {"text": "Hello"}
            assert kwargs["headers"]["Accept"] == "audio/mpeg"

    @pytest.mark.asyncio
    async def test_transcribe_uploads_recording(self, client):
        with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_response(json={"transcription": "hi there"})
            assert await client.transcribe(b"webm-bytes") == "hi there"

            name, data, content_type = mock_request.await_args.kwargs["files"]["file"]
            assert name == "recording.webm"
            assert data == b"webm-bytes"
            assert content_type == "audio/webm"

    @pytest.mark.asyncio
    async def test_close(self, client):
        await client.close()
        assert client._client.is_closed
