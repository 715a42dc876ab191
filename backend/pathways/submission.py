"""Quiz submission pipeline.

validate -> persist placeholder -> call engine -> reconcile record -> respond

The attempt is written twice: once as a placeholder before the engine call
and once with the result afterwards. The two writes are not atomic. A crash
between them leaves a record whose insights stay "Processing...", and no job
repairs it. Deferring a single write until the engine returns would keep every
record consistent, but a crash mid-call would then leave no trace of the
submission at all. We keep the placeholder so every engine call has a record.
"""
from __future__ import annotations
import json
import logging
from typing import List, Optional

from prometheus_client import Counter
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .categories import QuizCategory, parse_category
from .errors import PathwaysError, PersistenceError, UpstreamTransportError, ValidationError
from .models import QuizAttempt
from .recommender import Recommendation, RecommendationEngine

logger = logging.getLogger(__name__)

PROCESSING_PLACEHOLDER = "Processing..."

ATTEMPT_RECONCILE_FAILURES = Counter(
	"pathways_attempt_reconcile_failures_total",
	"Quiz attempts whose result could not be written back after the engine call",
)


class SubmissionResult(BaseModel):
	attempt_id: int
	category: QuizCategory
	recommendation: Recommendation

	def suggestions(self) -> dict:
		payload = self.recommendation.as_payload()
		if self.category is QuizCategory.CLASS10:
			payload["topCourses"] = []
		return payload


class QuizSubmissionPipeline:
	def __init__(self, db: Session, engine: RecommendationEngine) -> None:
		self.db = db
		self.engine = engine

	async def submit(
		self,
		account_id: int,
		category: Optional[str],
		responses: Optional[List[str]],
		stream: Optional[str] = None,
	) -> SubmissionResult:
		quiz_category, answers, current_stream = self._validate(category, responses, stream)
		logger.info("Quiz submission: account=%s category=%s answers=%d", account_id, quiz_category.value, len(answers))

		attempt = self._persist_placeholder(account_id, quiz_category, answers)
		# Read once; the instance expires if the reconcile write rolls back
		attempt_id = attempt.id
		recommendation = await self._invoke_engine(attempt_id, quiz_category, answers, current_stream)
		self._reconcile(attempt, attempt_id, recommendation)
		return SubmissionResult(attempt_id=attempt_id, category=quiz_category, recommendation=recommendation)

	def _validate(self, category, responses, stream):
		quiz_category = parse_category(category)
		if not responses:
			raise ValidationError("At least one response is required")
		if any(not isinstance(r, str) for r in responses):
			raise ValidationError("Responses must be strings")
		current_stream = (stream or "").strip()
		if quiz_category is QuizCategory.CLASS12 and not current_stream:
			raise ValidationError("Stream is required for career quiz")
		return quiz_category, list(responses), current_stream

	def _persist_placeholder(self, account_id: int, category: QuizCategory, answers: List[str]) -> QuizAttempt:
		attempt = QuizAttempt(
			account_id=account_id,
			category=category.value,
			answers=answers,
			recommended_stream=None,
			top_courses=[],
			ai_insights=PROCESSING_PLACEHOLDER,
			engine_response=None,
		)
		try:
			self.db.add(attempt)
			self.db.commit()
			self.db.refresh(attempt)
		except SQLAlchemyError:
			self.db.rollback()
			logger.exception("Database error while saving quiz attempt")
			raise PersistenceError("Database error")
		logger.info("Quiz attempt %s saved", attempt.id)
		return attempt

	async def _invoke_engine(
		self,
		attempt_id: int,
		category: QuizCategory,
		answers: List[str],
		current_stream: str,
	) -> Recommendation:
		try:
			if category is QuizCategory.CLASS10:
				recommendation = await self.engine.recommend_foundational(answers)
			else:
				recommendation = await self.engine.recommend_stream(answers, current_stream)
		except PathwaysError:
			# ConfigurationError and friends keep their own status
			raise
		except Exception:
			logger.exception("Recommendation engine failed for attempt %s; record left in placeholder state", attempt_id)
			raise UpstreamTransportError("Recommendation engine error")
		if recommendation.used_fallback:
			logger.info("Attempt %s answered with fallback recommendation", attempt_id)
		return recommendation

	def _reconcile(self, attempt: QuizAttempt, attempt_id: int, recommendation: Recommendation) -> None:
		payload = recommendation.as_payload()
		try:
			attempt.recommended_stream = recommendation.recommended_stream
			attempt.top_courses = list(recommendation.top_courses)
			attempt.ai_insights = recommendation.ai_insights
			attempt.engine_response = recommendation.raw_response if recommendation.raw_response is not None else json.dumps(payload)
			self.db.add(attempt)
			self.db.commit()
		except SQLAlchemyError:
			self.db.rollback()
			ATTEMPT_RECONCILE_FAILURES.inc()
			logger.warning("Could not store engine result for attempt %s; record keeps placeholder", attempt_id, exc_info=True)
