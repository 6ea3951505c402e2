"""
HTTP client for the job/interview backend.

The backend hosts job search, job analysis, question generation, scoring,
learning plans, follow-up coaching and the speech endpoints. All calls are
async; any non-2xx response or transport failure raises BackendError.
"""
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from jobcoach.core.config import get_settings
from jobcoach.core.errors import BackendError
from jobcoach.models.interview import GuideRequest, QuestionRequest, QuestionSet
from jobcoach.models.jobs import JobAnalysis, JobListing, JobSearchParams
from jobcoach.models.scoring import LearningPlanRequest

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Async client for the job/interview backend.

    Holds one httpx.AsyncClient for its lifetime; call close() when done.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.backend_base_url).rstrip("/")
        self.timeout = timeout or settings.backend_timeout_seconds
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        endpoint = f"{method} {path}"
        try:
            response = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Backend connection error on {endpoint}: {e}")
            raise BackendError(endpoint, detail=str(e)) from e

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(f"Backend error on {endpoint}: HTTP {response.status_code}")
            raise BackendError(endpoint, response.status_code, response.text)
        return response

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Optional[Any]:
        try:
            return response.json()
        except ValueError:
            return None

    # ==================== Jobs ====================

    async def search_jobs(self, params: Optional[JobSearchParams] = None) -> List[JobListing]:
        """Search job listings. A non-list body yields no jobs."""
        params = params or JobSearchParams()
        response = await self._request("GET", "/jobs", params=params.model_dump())
        data = self._json_or_none(response)
        if not isinstance(data, list):
            return []
        return [JobListing.model_validate(row) for row in data if isinstance(row, dict)]

    async def analyze_job(self, job_description: str) -> JobAnalysis:
        """Summarise a job description into requirements and skills."""
        response = await self._request(
            "POST", "/analysis/job", json={"job_description": job_description}
        )
        return JobAnalysis.model_validate(response.json())

    # ==================== Interview ====================

    async def fetch_question_set(self, request: QuestionRequest) -> QuestionSet:
        """Generate the interview question set for a job and resume."""
        response = await self._request("POST", "/questions", json=request.model_dump())
        return QuestionSet.model_validate(response.json())

    async def submit_scores(self, payload: Dict[str, Any]) -> Optional[Any]:
        """Score a completed question set. Returns None for a non-JSON body."""
        response = await self._request("POST", "/scores", json=payload)
        return self._json_or_none(response)

    async def request_learning_plan(self, request: LearningPlanRequest) -> Optional[Any]:
        """Generate a learning plan from a weighted report."""
        response = await self._request(
            "POST", "/learning", json=request.model_dump(exclude_none=True)
        )
        return self._json_or_none(response)

    async def guide(self, request: GuideRequest) -> Union[Dict[str, Any], str]:
        """
        Ask the coaching service about the current question.

        Returns the decoded JSON object when the response is JSON, else the
        raw body text.
        """
        response = await self._request("POST", "/coach/guide", json=request.model_dump())
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            data = self._json_or_none(response)
            if isinstance(data, dict):
                return data
            return "" if data is None else str(data)
        return response.text or ""

    # ==================== Speech ====================

    async def speak(self, text: str) -> bytes:
        """Synthesize speech; returns audio/mpeg bytes."""
        response = await self._request(
            "POST",
            "/tts/speak",
            json={"text": text},
            headers={"Accept": "audio/mpeg"},
        )
        return response.content

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """Transcribe a whole recording; returns the transcription text."""
        response = await self._request(
            "POST",
            "/tts/transcribe",
            files={"file": (filename, audio, content_type)},
        )
        data = self._json_or_none(response) or {}
        return str(data.get("transcription") or "") if isinstance(data, dict) else ""

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()


# Global instance (lazy loaded)
_backend_client: Optional[BackendClient] = None


def get_backend_client() -> BackendClient:
    """Get or create the shared backend client."""
    global _backend_client
    if _backend_client is None:
        _backend_client = BackendClient()
    return _backend_client
