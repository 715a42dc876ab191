from __future__ import annotations
import json
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from .gemini_client import GeminiClient, GeminiReplyError


logger = logging.getLogger(__name__)


FOUNDATIONAL_FALLBACK: Dict[str, Any] = {
    "recommendedStream": "Science",
    "aiInsights": (
        "Based on your responses, the Science stream offers diverse opportunities in engineering, "
        "medicine, and research. Consider your interests in mathematics and problem-solving. Take time "
        "to explore different career paths and speak with professionals in fields that interest you."
    ),
}

STREAM_FALLBACK: Dict[str, Any] = {
    "recommendedStream": "Engineering",
    "topCourses": [
        "Computer Science Engineering",
        "Information Technology",
        "Mechanical Engineering",
        "Electronics Engineering",
        "Business Administration",
    ],
    "aiInsights": (
        "AI insights are not available at the moment. Consider exploring engineering and technology "
        "fields, which offer excellent career prospects. Focus on developing both technical and "
        "communication skills for better opportunities."
    ),
}


class Recommendation(BaseModel):
    recommended_stream: Optional[str] = None
    top_courses: List[str] = Field(default_factory=list)
    ai_insights: str = ""
    # Raw engine text when a reply was obtained; None when the call itself failed
    raw_response: Optional[str] = None
    used_fallback: bool = False

    def as_payload(self) -> Dict[str, Any]:
        return {
            "recommendedStream": self.recommended_stream,
            "topCourses": list(self.top_courses),
            "aiInsights": self.ai_insights,
        }


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the JSON object embedded in free text, or None.

    Tries the whole text first, then the span from the first ``{`` to the
    last ``}``. Never raises.
    """
    if not text:
        return None
    candidates = [text.strip()]
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        candidates.append(text[first : last + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None


def foundational_prompt(answers: List[str]) -> str:
    return (
        "You are an educational counselor analyzing Class 10 student responses to recommend the best "
        "stream for Class 11 and 12.\n\n"
        f"Student's quiz answers: {json.dumps(answers)}\n\n"
        "Consider the following streams:\n"
        "- Science: mathematics, physics, chemistry, biology, engineering, medicine\n"
        "- Commerce: business, economics, accounting, entrepreneurship\n"
        "- Arts/Humanities: languages, social sciences, psychology, history, literature\n\n"
        "Return ONLY a JSON object, no markdown, with exactly these keys:\n"
        "{\n"
        '  "recommendedStream": "Science" | "Commerce" | "Arts",\n'
        '  "aiInsights": string (why this stream fits, strengths identified, career prospects, encouraging guidance)\n'
        "}"
    )


def stream_prompt(answers: List[str], current_stream: str) -> str:
    return (
        "You are an educational counselor analyzing Class 12 student responses to recommend courses "
        "and career paths.\n\n"
        f"Student's current stream: {current_stream}\n"
        f"Student's quiz answers: {json.dumps(answers)}\n\n"
        "Consider popular options such as Engineering (Computer Science, Mechanical, Electrical, Civil), "
        "Medical (MBBS, BDS, Nursing, Pharmacy), Commerce (B.Com, BBA, CA, CS), Arts (BA, Psychology, "
        "Journalism, Design), Law and Management.\n\n"
        "Return ONLY a JSON object, no markdown, with exactly these keys:\n"
        "{\n"
        '  "recommendedStream": string (specific stream or specialization),\n'
        '  "topCourses": [string, string, string, string, string],\n'
        '  "aiInsights": string (course reasoning, career prospects, skills identified, concrete next steps)\n'
        "}"
    )


class RecommendationEngine:
    """Wraps the generative engine behind two typed calls.

    Unusable output and transport failures both degrade to a fixed fallback
    per category. Only a missing API key (``ConfigurationError``) or an
    unexpected error escapes.
    """

    def __init__(self, client_factory: Callable[[], GeminiClient] = GeminiClient) -> None:
        self._client_factory = client_factory

    async def recommend_foundational(self, answers: List[str]) -> Recommendation:
        return await self._recommend(foundational_prompt(answers), FOUNDATIONAL_FALLBACK, with_courses=False)

    async def recommend_stream(self, answers: List[str], current_stream: str) -> Recommendation:
        return await self._recommend(stream_prompt(answers, current_stream), STREAM_FALLBACK, with_courses=True)

    async def _recommend(self, prompt: str, fallback: Dict[str, Any], *, with_courses: bool) -> Recommendation:
        client = self._client_factory()
        try:
            raw = await client.generate(prompt)
        except (httpx.HTTPError, GeminiReplyError) as e:
            logger.warning("Recommendation engine call failed, using fallback: %s", e)
            return _fallback(fallback, raw_response=None)
        finally:
            await client.aclose()

        data = extract_json_object(raw)
        if data is None or not data.get("recommendedStream") or not data.get("aiInsights"):
            logger.warning("Recommendation engine reply was not usable JSON, using fallback")
            return _fallback(fallback, raw_response=raw)

        courses: List[str] = []
        if with_courses:
            listed = data.get("topCourses")
            if isinstance(listed, list):
                courses = [str(c) for c in listed]
        return Recommendation(
            recommended_stream=str(data["recommendedStream"]),
            top_courses=courses,
            ai_insights=str(data["aiInsights"]),
            raw_response=raw,
        )


def _fallback(values: Dict[str, Any], *, raw_response: Optional[str]) -> Recommendation:
    return Recommendation(
        recommended_stream=values["recommendedStream"],
        top_courses=list(values.get("topCourses", [])),
        ai_insights=values["aiInsights"],
        raw_response=raw_response,
        used_fallback=True,
    )


def get_recommendation_engine() -> RecommendationEngine:
    return RecommendationEngine()

