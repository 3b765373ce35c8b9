"""Field-level validation of extracted survey candidates.

Unlike schema validation, nothing here raises: a value outside its domain
becomes None, and a candidate left without meaningful content is dropped.
"""

import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from app.extraction.models import (
    CONTACT_FIELDS,
    LIKERT_BOUNDS,
    METHOD_PLACEHOLDER,
    RATING_FIELDS,
    RECOMMENDATION_BOUNDS,
    RECOMMENDATION_FIELD,
    TEXT_FIELDS,
    SurveyResponse,
)

MAX_TEXT_LENGTH = 1000
MEANINGFUL_TEXT_LENGTH = 5

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATE_FORMATS = ("%Y/%m/%d", "%d/%m/%Y", "%m/%d/%Y", "%d/%m/%y", "%m/%d/%y")
_DATE_SEPARATORS_RE = re.compile(r"[.\-]")


def validate_rating(value: Any, minimum: int, maximum: int) -> int | None:
    """Return the rating as an int if it lies in [minimum, maximum], else None.

    Numeric strings are coerced exactly like numbers. Booleans, NaN and
    non-integral values are rejected: an in-range 3.5 comes back as None
    rather than unchanged, because every scale on the form is integral.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    elif isinstance(value, int):
        return value if minimum <= value <= maximum else None
    elif isinstance(value, float):
        number = value
    else:
        return None
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        return None
    rating = int(number)
    if rating < minimum or rating > maximum:
        return None
    return rating


def validate_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned or len(cleaned) > MAX_TEXT_LENGTH:
        return None
    return cleaned


def validate_email(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not _EMAIL_RE.match(cleaned):
        return None
    return cleaned.lower()


def validate_date(value: Any) -> str | None:
    """Return an ISO ``YYYY-MM-DD`` string, or None if the value is not a date.

    Slash dates are read year-first, then day-first, then month-first.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        return None
    cleaned = value.strip()
    try:
        return date.fromisoformat(cleaned[:10]).isoformat()
    except ValueError:
        pass
    slashed = _DATE_SEPARATORS_RE.sub("/", cleaned.split()[0])
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(slashed, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def _rating_bounds(field_name: str) -> tuple[int, int]:
    return RECOMMENDATION_BOUNDS if field_name == RECOMMENDATION_FIELD else LIKERT_BOUNDS


def build_response(
    candidate: Mapping[str, Any],
    course_name: str,
    method: str,
) -> SurveyResponse:
    """Map an arbitrary candidate dict onto a SurveyResponse.

    The course name always comes from the upload, never from the candidate.
    """
    values: dict[str, Any] = {
        "course_name": course_name,
        "response_date": validate_date(candidate.get("response_date")),
        "extraction_method": method,
    }
    for name in RATING_FIELDS:
        low, high = _rating_bounds(name)
        values[name] = validate_rating(candidate.get(name), low, high)
    for name in TEXT_FIELDS:
        values[name] = validate_text(candidate.get(name))
    for name in CONTACT_FIELDS:
        if name == "email":
            values[name] = validate_email(candidate.get(name))
        else:
            values[name] = validate_text(candidate.get(name))
    return SurveyResponse(**values)


def has_meaningful_survey_data(response: SurveyResponse) -> bool:
    """True if the response has a rating, substantive text, or contact info."""
    if any(rating is not None for rating in response.ratings()):
        return True
    for name in TEXT_FIELDS:
        text = getattr(response, name)
        if text and len(text.strip()) > MEANINGFUL_TEXT_LENGTH:
            return True
    for name in CONTACT_FIELDS:
        value = getattr(response, name)
        if value and value.strip():
            return True
    return False


def clean_candidates(
    candidates: Iterable[Any],
    course_name: str,
    method: str,
) -> list[SurveyResponse]:
    """Validate candidates and keep only those with meaningful data."""
    responses: list[SurveyResponse] = []
    for candidate in candidates:
        if not isinstance(candidate, Mapping):
            continue
        response = build_response(candidate, course_name, method)
        if has_meaningful_survey_data(response):
            responses.append(response)
    return responses


def placeholder_response(course_name: str, today: date | None = None) -> SurveyResponse:
    """Marks an upload as processed with no extractable data."""
    return SurveyResponse(
        course_name=course_name,
        response_date=(today or date.today()).isoformat(),
        extraction_method=METHOD_PLACEHOLDER,
    )

