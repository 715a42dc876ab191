from __future__ import annotations
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from prometheus_client import REGISTRY
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..cache import QuestionCache
from ..categories import QuizCategory, parse_category
from ..db import get_db
from ..models import QuizAttempt, QuizQuestion
from ..recommender import RecommendationEngine, get_recommendation_engine
from ..submission import QuizSubmissionPipeline
from .users import User, get_current_user


router = APIRouter(prefix="/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)

MAX_ATTEMPTS_PAGE = 50


def get_question_cache(request: Request) -> QuestionCache:
    return request.app.state.question_cache


def get_submission_pipeline(
    db: Session = Depends(get_db),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> QuizSubmissionPipeline:
    return QuizSubmissionPipeline(db, engine)


class SubmitRequest(BaseModel):
    category: Optional[str] = Field(default=None, validation_alias=AliasChoices("category", "quizType"))
    responses: List[str] = Field(default_factory=list)
    stream: Optional[str] = None


class Class10SubmitRequest(BaseModel):
    answers: List[str] = Field(default_factory=list)


class Class12SubmitRequest(BaseModel):
    answers: List[str] = Field(default_factory=list)
    stream: Optional[str] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_questions(db: Session, category: QuizCategory) -> List[Dict[str, Any]]:
    rows = (
        db.query(QuizQuestion)
        .filter(QuizQuestion.category == category.value)
        .order_by(QuizQuestion.created_at.asc(), QuizQuestion.id.asc())
        .all()
    )
    return [{"id": r.id, "question": r.question, "options": list(r.options or []), "category": r.category} for r in rows]


@router.get("/health")
def quiz_health(db: Session = Depends(get_db), cache: QuestionCache = Depends(get_question_cache)):
    started = time.perf_counter()
    total = db.query(func.count(QuizQuestion.id)).scalar() or 0
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    failures = REGISTRY.get_sample_value("pathways_attempt_reconcile_failures_total") or 0
    return {
        "success": True,
        "message": "Quiz service is healthy",
        "database": {"connected": True, "totalQuestions": total, "responseTimeMs": elapsed_ms},
        "cache": {"size": cache.size(), "keys": cache.keys(), "ttlSeconds": cache.ttl_seconds},
        "reconcileFailures": int(failures),
    }


@router.get("/attempts")
def list_attempts(
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_ATTEMPTS_PAGE)
    query = db.query(QuizAttempt).filter(QuizAttempt.account_id == user.id)
    total = query.count()
    rows = (
        query.order_by(QuizAttempt.timestamp.desc(), QuizAttempt.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    attempts = [
        {
            "id": r.id,
            "category": r.category,
            "recommendedStream": r.recommended_stream,
            "timestamp": r.timestamp.isoformat(),
        }
        for r in rows
    ]
    return {
        "success": True,
        "message": "Quiz attempts retrieved successfully",
        "attempts": attempts,
        "pagination": {"page": page, "limit": limit, "count": len(attempts), "total": total},
    }


@router.delete("/cache")
def clear_cache(user: User = Depends(get_current_user), cache: QuestionCache = Depends(get_question_cache)):
    cache.invalidate()
    return {"success": True, "message": "Cleared all quiz cache"}


@router.delete("/cache/{category}")
def clear_category_cache(
    category: str,
    user: User = Depends(get_current_user),
    cache: QuestionCache = Depends(get_question_cache),
):
    quiz_category = parse_category(category)
    cache.invalidate(quiz_category.value)
    return {"success": True, "message": f"Cleared cache for quiz category: {quiz_category.value}"}


@router.post("/submit")
async def submit_quiz(
    req: SubmitRequest,
    user: User = Depends(get_current_user),
    pipeline: QuizSubmissionPipeline = Depends(get_submission_pipeline),
):
    result = await pipeline.submit(user.id, req.category, req.responses, req.stream)
    label = "Class 10" if result.category is QuizCategory.CLASS10 else "Career"
    return {
        "success": True,
        "message": f"{label} quiz processed successfully",
        "attemptId": result.attempt_id,
        "suggestions": result.suggestions(),
    }


@router.post("/class10/submit")
async def submit_class10(
    req: Class10SubmitRequest,
    user: User = Depends(get_current_user),
    pipeline: QuizSubmissionPipeline = Depends(get_submission_pipeline),
):
    result = await pipeline.submit(user.id, QuizCategory.CLASS10.value, req.answers)
    return {"success": True, "message": "Class 10 quiz processed successfully", **result.suggestions()}


@router.post("/class12/submit")
async def submit_class12(
    req: Class12SubmitRequest,
    user: User = Depends(get_current_user),
    pipeline: QuizSubmissionPipeline = Depends(get_submission_pipeline),
):
    result = await pipeline.submit(user.id, QuizCategory.CLASS12.value, req.answers, req.stream)
    return {"success": True, "message": "Class 12 quiz processed successfully", **result.suggestions()}


@router.get("/{category}")
def get_questions(category: str, db: Session = Depends(get_db), cache: QuestionCache = Depends(get_question_cache)):
    started = time.perf_counter()
    quiz_category = parse_category(category)
    key = quiz_category.value

    cached = cache.get(key)
    if cached is not None:
        logger.info("Cache hit: quiz %s served from cache", key)
        return {
            "success": True,
            "message": f"{key} quiz questions retrieved successfully",
            "category": key,
            "count": len(cached),
            "questions": cached,
            "cached": True,
            "timestamp": _now_iso(),
        }

    logger.info("Cache miss: fetching quiz %s from database", key)
    questions = _load_questions(db, quiz_category)
    if not questions:
        # Empty results are not cached; the bank may be seeded later
        logger.warning("No questions found for %s", key)
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "message": f"No questions found for {key} quiz",
                "category": key,
                "count": 0,
                "questions": [],
            },
        )
    cache.put(key, questions)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info("Quiz %s fetched from database in %sms", key, elapsed_ms)
    return {
        "success": True,
        "message": f"{key} quiz questions retrieved successfully",
        "category": key,
        "count": len(questions),
        "questions": questions,
        "cached": False,
        "responseTimeMs": elapsed_ms,
        "timestamp": _now_iso(),
    }
