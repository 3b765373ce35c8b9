"""Keyword and label driven field extraction for one form section.

This is the last-resort path when no LLM is configured or the LLM call
fails. It only reads markers local to the section:

- labelled values ("Name: ...", "Email: ...", "Suggestions: ..."), each
  running up to the next label or question marker;
- Q-numbered ratings ("Q3: 4", "Question 3 ... Agree");
- numbered question lists ("3. The content was relevant 4");
- rating keywords ("well prepared ... 5", "recommend ... 9").

Values are returned raw; range checks happen in the validator.
"""

import re
from typing import Any

from app.extraction.models import LIKERT_FIELDS, RECOMMENDATION_FIELD

_LIKERT_WORDS: dict[str, int] = {
    "strongly disagree": 1,
    "disagree": 2,
    "neutral": 3,
    "agree": 4,
    "strongly agree": 5,
    "poor": 1,
    "fair": 2,
    "good": 3,
    "very good": 4,
    "excellent": 5,
}
_LIKERT_WORD_RE = r"strongly\s+disagree|strongly\s+agree|very\s+good|disagree|neutral|agree|excellent|poor|fair|good"

_LABELS: tuple[tuple[str, str], ...] = (
    ("participant_name", r"participant\s+name|full\s+name|(?<!course )(?<!company )(?<!file )name"),
    ("company", r"company(?:\s+name)?|organi[sz]ation"),
    ("email", r"e-?mail(?:\s+address)?"),
    ("phone", r"phone(?:\s+number)?|telephone|tel|mobile"),
    ("response_date", r"(?:response\s+)?date"),
    ("q11_expectations", r"q\s*11|expectations(?:\s+met)?"),
    ("q12_overall_rating", r"q\s*12|overall\s+rating"),
    ("learned_numbered", r"(?:key\s+)?learn(?:ed|ing|t)?(?:\s+point)?\s*#?\s*(?P<learned_no>[1-3])"),
    ("learned_any", r"what\s+(?:did\s+)?you\s+learn(?:ed|t)?|key\s+learnings?"),
    ("suggestions", r"suggestions?"),
    ("comments", r"(?:additional\s+|other\s+)?comments?"),
    ("interested_more", r"interested(?:\s+in\s+more(?:\s+\w+)?)?"),
)
_LABEL_RE = re.compile(
    r"\b(?:" + "|".join(f"(?P<{name}>{expr})" for name, expr in _LABELS) + r")\s*(?:[:=]|\?)\s*",
    re.IGNORECASE,
)
_QUESTION_MARKER_RE = re.compile(r"\b(?:Q|Question)\s*\d{1,2}\b|(?<![\w/])\d{1,2}\.\s", re.IGNORECASE)

_SCALE_HINT_RE = re.compile(
    r"\(\s*\d{1,2}\s*(?:-|to)\s*\d{1,2}\s*\)"
    r"|\bscale\s+of\s+\d{1,2}\s*(?:-|to)\s*\d{1,2}"
    r"|\b\d{1,2}\s*=\s*(?:strongly\s+)?[A-Za-z]+",
    re.IGNORECASE,
)
_Q_NUMERIC_RE = re.compile(
    r"\b(?:Q|Question)\s*(?P<number>\d{1,2})\b"
    r"(?:(?!\b(?:Q|Question)\s*\d)[^0-9]){0,160}?"
    r"\b(?P<value>\d{1,2})\b",
    re.IGNORECASE,
)
_Q_WORD_RE = re.compile(
    r"\b(?:Q|Question)\s*(?P<number>\d{1,2})\b"
    r"(?:(?!\b(?:Q|Question)\s*\d)[^0-9]){0,160}?"
    r"\b(?P<word>" + _LIKERT_WORD_RE + r")\b",
    re.IGNORECASE,
)
_NUMBERED_RE = re.compile(
    r"(?<![\w/])(?P<number>[1-9]|10)\.\s+[A-Za-z]"
    r"(?:(?!(?<![\w/])\d{1,2}\.\s)[^0-9]){2,160}?"
    r"\b(?P<value>\d{1,2})\b"
)
_KEYWORD_RATINGS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (field, re.compile(rf"\b(?:{expr})[^0-9]{{0,60}}?\b(?P<value>\d{{1,2}})\b", re.IGNORECASE))
    for field, expr in (
        ("q1_rating", r"prepar\w*"),
        ("q2_rating", r"participat\w*|engag\w*"),
        ("q3_rating", r"relevan\w*"),
        ("q4_rating", r"objectives?"),
        ("q5_rating", r"time\s+allocat\w*|timing|duration"),
        ("q6_rating", r"venue|facilit(?:y|ies)"),
        ("q7_rating", r"(?:training\s+)?methods?"),
        ("q8_rating", r"q\s*&\s*a|questions?\s+(?:and|&)\s+answers?"),
        ("q9_rating", r"satisf\w*"),
    )
)
_RECOMMEND_RE = re.compile(r"\brecommend\w*[^0-9]{0,80}?\b(?P<value>\d{1,2})\b", re.IGNORECASE)

_EMAIL_RE = re.compile(r"[^\s@:;,<>()]+@[^\s@;,<>()]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"\+?\(?\d{2,4}\)?[\s.-]\d{3,4}[\s.-]\d{3,4}")
_LABELLED_PHONE_RE = re.compile(r"\+?[\d(][\d\s().-]{5,}\d")
_DATE_RE = re.compile(r"\b\d{1,4}/\d{1,2}/\d{2,4}\b")
_NAME_STOP_RE = re.compile(r"[\d@]")
_TRAILING_PUNCT = " .,;:-"
_MAX_NAME_LENGTH = 80


def _question_field(number: int) -> str | None:
    if 1 <= number <= 9:
        return LIKERT_FIELDS[number - 1]
    if number == 10:
        return RECOMMENDATION_FIELD
    return None


class HeuristicFieldExtractor:
    """Extracts at most one survey candidate from a section of normalized text."""

    def extract(self, text: str) -> dict[str, Any] | None:
        """Return a raw candidate dict, or None if no survey marker was found."""
        candidate: dict[str, Any] = {}
        self._extract_labelled(text, candidate)
        self._extract_ratings(_SCALE_HINT_RE.sub(" ", text), candidate)
        self._extract_unlabelled_contacts(text, candidate)
        return candidate or None

    def _extract_labelled(self, text: str, candidate: dict[str, Any]) -> None:
        matches = list(_LABEL_RE.finditer(text))
        free_learned = ["learned_1", "learned_2", "learned_3"]
        for match in matches:
            field = match.lastgroup
            value = self._value_after(text, match, matches)
            if not value:
                continue

            if field == "learned_numbered":
                target = f"learned_{match.group('learned_no')}"
            elif field == "learned_any":
                target = next((f for f in free_learned if f not in candidate), "")
            else:
                target = field or ""
            if not target or target in candidate:
                continue

            cleaned = self._clean_value(target, value)
            if cleaned:
                candidate[target] = cleaned
                if target in free_learned:
                    free_learned.remove(target)

    @staticmethod
    def _value_after(text: str, match: re.Match[str], matches: list[re.Match[str]]) -> str:
        end = len(text)
        for other in matches:
            if other.start() >= match.end():
                end = other.start()
                break
        marker = _QUESTION_MARKER_RE.search(text, match.end(), end)
        if marker is not None:
            end = marker.start()
        return text[match.end():end].strip(_TRAILING_PUNCT)

    @staticmethod
    def _clean_value(field: str, value: str) -> str | None:
        if field == "participant_name":
            name = _NAME_STOP_RE.split(value, maxsplit=1)[0].strip(_TRAILING_PUNCT)
            return name[:_MAX_NAME_LENGTH].strip() or None
        if field == "email":
            email = _EMAIL_RE.search(value)
            return email.group(0).rstrip(".") if email else None
        if field == "phone":
            phone = _LABELLED_PHONE_RE.search(value)
            return phone.group(0).strip() if phone else None
        if field == "response_date":
            date_match = _DATE_RE.search(value)
            return date_match.group(0) if date_match else value.split(" ")[0]
        return value

    def _extract_ratings(self, text: str, candidate: dict[str, Any]) -> None:
        found = self._apply_numbered(_Q_NUMERIC_RE, text, candidate)
        for match in _Q_WORD_RE.finditer(text):
            field = _question_field(int(match.group("number")))
            if field is not None and field not in candidate:
                word = re.sub(r"\s+", " ", match.group("word").lower())
                candidate[field] = _LIKERT_WORDS[word]
                found = True
        if not found:
            found = self._apply_numbered(_NUMBERED_RE, text, candidate)
        if not found:
            for field, pattern in _KEYWORD_RATINGS:
                keyword_match = pattern.search(text)
                if keyword_match is not None and field not in candidate:
                    candidate[field] = int(keyword_match.group("value"))
        if RECOMMENDATION_FIELD not in candidate:
            recommend = _RECOMMEND_RE.search(text)
            if recommend is not None:
                candidate[RECOMMENDATION_FIELD] = int(recommend.group("value"))

    @staticmethod
    def _apply_numbered(pattern: re.Pattern[str], text: str, candidate: dict[str, Any]) -> bool:
        found = False
        for match in pattern.finditer(text):
            field = _question_field(int(match.group("number")))
            if field is None or field in candidate:
                continue
            candidate[field] = int(match.group("value"))
            found = True
        return found

    @staticmethod
    def _extract_unlabelled_contacts(text: str, candidate: dict[str, Any]) -> None:
        if "email" not in candidate:
            email = _EMAIL_RE.search(text)
            if email is not None:
                candidate["email"] = email.group(0).rstrip(".")
        if "phone" not in candidate:
            phone = _PHONE_RE.search(text)
            if phone is not None:
                candidate["phone"] = phone.group(0)
        if "response_date" not in candidate:
            found_date = _DATE_RE.search(text)
            if found_date is not None:
                candidate["response_date"] = found_date.group(0)
