from __future__ import annotations
from enum import Enum
from typing import Dict

from .errors import ValidationError


class QuizCategory(str, Enum):
	# Foundational guidance, before the student has picked a stream
	CLASS10 = "class10"
	# Stream/career guidance, after the stream choice
	CLASS12 = "class12"


# Older clients send "10th"/"career"; the question bank uses "class10"/"class12".
CATEGORY_ALIASES: Dict[str, QuizCategory] = {
	"class10": QuizCategory.CLASS10,
	"10th": QuizCategory.CLASS10,
	"class12": QuizCategory.CLASS12,
	"12th": QuizCategory.CLASS12,
	"career": QuizCategory.CLASS12,
}


def parse_category(value: str | None) -> QuizCategory:
	key = (value or "").strip().lower()
	category = CATEGORY_ALIASES.get(key)
	if category is None:
		raise ValidationError("Invalid quiz category. Must be one of: " + ", ".join(sorted(CATEGORY_ALIASES)))
	return category
