"""Splits normalized document text into per-participant sections.

Boundary rules are applied one at a time as a fold over an immutable
tuple of sections. A rule's split is kept only when it increases the
section count without exceeding MAX_SECTIONS. Splits happen just before
each boundary match, so a marker such as "Name:" stays with the section
it introduces.

The heuristic leans towards over-segmentation: empty or noise fragments
are removed later by the meaningful-data filter, while an under-split
would silently merge two participants.
"""

import re
from dataclasses import dataclass
from functools import reduce

from app.extraction.models import FormSection

MIN_FRAGMENT_CHARS = 50
MAX_SECTIONS = 50
MERGE_TRIGGER_SECTIONS = 15
MERGE_TARGET_CHARS = 1500


@dataclass(frozen=True)
class BoundaryRule:
    name: str
    pattern: re.Pattern[str]

    @classmethod
    def of(cls, name: str, expression: str) -> "BoundaryRule":
        return cls(name, re.compile(f"(?={expression})", re.IGNORECASE))


BOUNDARY_RULES: tuple[BoundaryRule, ...] = (
    BoundaryRule.of("form-header", r"course\s+evaluation|survey\s+form|feedback\s+form|evaluation\s+survey"),
    BoundaryRule.of("participant-number", r"participant\s+\d+|respondent\s+\d+"),
    BoundaryRule.of("name-label", r"participant\s*name\s*:|(?<!participant )(?<!course )(?<!company )name\s*:"),
    BoundaryRule.of("page-or-form-number", r"\bpage\s+\d+|\bform\s+\d+"),
    BoundaryRule.of("dated-header", r"date\s*:\s*\d+/\d+/\d+"),
    BoundaryRule.of("first-question", r"(?:^|\n)\s*1\.\s*(?:the\s+trainer|trainer)"),
    BoundaryRule.of("respondent-label", r"(?:^|\n)\s*(?:name|participant|respondent|student)\s*[:=]\s*[A-Za-z]"),
    BoundaryRule.of("company-label", r"(?:^|\n)\s*(?:company|organization|dept|department)\s*[:=]"),
    BoundaryRule.of("email-label", r"(?:^|\n)\s*(?:email|e-mail)\s*[:=]\s*\S+@\S+"),
    BoundaryRule.of("phone-label", r"(?:^|\n)\s*(?:phone|tel|telephone|mobile)\s*[:=]"),
    BoundaryRule.of("signature-label", r"(?:^|\n)\s*(?:signature|signed|date signed)\s*[:=]"),
    BoundaryRule.of("question-one", r"(?:^|\n)\s*Q1[.:\s]|(?:^|\n)\s*1[.:\s].*(?:trainer|instructor)"),
    BoundaryRule.of("agreement-scale", r"(?:^|\n)\s*(?:strongly disagree|disagree|neutral|agree|strongly agree)"),
    BoundaryRule.of("quality-scale", r"(?:^|\n)\s*(?:poor|fair|good|very good|excellent)"),
    BoundaryRule.of("rating-label", r"(?:^|\n)\s*(?:rating|score|evaluation)\s*[:=]"),
    BoundaryRule.of("recommendation-label", r"(?:^|\n)\s*(?:overall|recommendation|recommend)\s*[:=]"),
    BoundaryRule.of("instructions", r"(?:^|\n)\s*(?:please|kindly|we would|your feedback)"),
    BoundaryRule.of("courtesy", r"(?:^|\n)\s*(?:thank you|thanks|appreciate)"),
)

Sections = tuple[str, ...]


def apply_rule(sections: Sections, rule: BoundaryRule) -> Sections:
    """Split every section on one rule; keep the split only if it helps."""
    fragments = tuple(
        part.strip()
        for section in sections
        for part in rule.pattern.split(section)
        if len(part.strip()) > MIN_FRAGMENT_CHARS
    )
    if len(sections) < len(fragments) <= MAX_SECTIONS:
        return fragments
    return sections


def merge_small_sections(sections: Sections) -> Sections:
    """Greedily join neighbours until each block reaches MERGE_TARGET_CHARS.

    A short trailing remainder is folded into the previous block rather
    than dropped.
    """
    merged: list[str] = []
    current = ""
    for section in sections:
        current = f"{current} {section}".strip()
        if len(current) >= MERGE_TARGET_CHARS:
            merged.append(current)
            current = ""
    if current:
        if merged and len(current) <= MIN_FRAGMENT_CHARS:
            merged[-1] = f"{merged[-1]} {current}"
        else:
            merged.append(current)
    return tuple(merged)


class FormSegmenter:
    """Turns normalized text into ordered FormSection objects."""

    def __init__(self, rules: tuple[BoundaryRule, ...] = BOUNDARY_RULES) -> None:
        self._rules = rules

    def split(self, text: str) -> Sections:
        """Split into at least one section.

        Whitespace-only input counts as empty and yields no sections.
        """
        stripped = text.strip()
        if not stripped:
            return ()
        sections = reduce(apply_rule, self._rules, (stripped,))
        if len(sections) > MERGE_TRIGGER_SECTIONS:
            sections = merge_small_sections(sections)
        return sections[:MAX_SECTIONS] or (stripped,)

    def segment(self, text: str) -> list[FormSection]:
        return [FormSection(index=i, text=part) for i, part in enumerate(self.split(text))]
