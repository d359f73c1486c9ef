"""Posting section classifier: tag each skill mention as must-have or optional.

Resolution order per mention:
    1. Header zones ("Requirements", "Nice to have", ...) up to the next header
    2. Inline modal keywords in the clause, then the sentence
    3. Title line and opening paragraph default to must-have
    4. Frequency fallback: >=2 mentions in the posting -> must-have, else optional
Conflicting tags for one skill resolve by policy (must-have wins by default).
"""

import logging
import re
from collections import Counter

from models.schemas.document import Document, Segment
from models.schemas.skill import RequirementLevel, SkillMention

logger = logging.getLogger(__name__)

MUST, OPTIONAL, NEUTRAL = "must", "optional", "neutral"

# Header lexicon: zone kind -> header patterns (matched on normalized text)
HEADER_PATTERNS: dict[str, list[str]] = {
    OPTIONAL: [
        r"nice[\s-]to[\s-]haves?",
        r"preferred(?:\s+(?:qualifications|skills|experience|requirements))?",
        r"bonus(?:\s+points)?(?:\s+if\s+you\s+have)?",
        r"desirable(?:\s+(?:skills|qualifications|experience))?",
        r"desired\s+(?:skills|qualifications|experience)",
        r"good[\s-]to[\s-]haves?",
        r"(?:it'?s\s+)?a\s+plus|pluses",
        r"additional\s+(?:qualifications|skills)",
    ],
    MUST: [
        r"(?:minimum|basic|required|key|job)?\s*(?:requirements?|qualifications)",
        r"required\s+(?:skills|experience)",
        r"must[\s-]haves?",
        r"what\s+you(?:'ll|\s+will)?\s+need",
        r"what\s+we(?:'re|\s+are)\s+looking\s+for",
        r"you\s+(?:have|bring|should\s+have)",
        r"who\s+you\s+are",
        r"essential(?:\s+(?:skills|requirements|criteria))?",
        r"(?:technical|core|key)?\s*skills",
    ],
    NEUTRAL: [
        r"(?:key\s+)?(?:responsibilities|duties)",
        r"what\s+you(?:'ll|\s+will)\s+do",
        r"(?:the|your)\s+role",
        r"about\s+(?:us|the\s+(?:role|team|company|job|position))",
        r"(?:job\s+)?(?:description|overview|summary)",
        r"benefits|perks|what\s+we\s+offer|compensation",
        r"who\s+we\s+are",
        r"equal\s+(?:opportunity|employment)[\w\s]*",
        r"how\s+to\s+apply",
        r"location",
    ],
}

_HEADER_COMPILED: list[tuple[str, re.Pattern, re.Pattern]] = []
for _kind, _patterns in HEADER_PATTERNS.items():
    _combined = "|".join(_patterns)
    _HEADER_COMPILED.append((
        _kind,
        re.compile(rf"^(?:#+\s*)?(?:{_combined})\s*:?$"),
        re.compile(rf"^(?:#+\s*)?(?:{_combined})\s*:\s*\S"),
    ))

MANDATORY_RE = re.compile(r"\b(?:required|requires|must|essential|mandatory|minimum)\b")
OPTIONAL_RE = re.compile(
    r"\b(?:preferred|preferably|nice[\s-]to[\s-]have|plus|bonus|desirable|ideally)\b"
)
_CLAUSE_BREAK_RE = re.compile(r"[,;:()]")


def detect_header(segment: Segment) -> tuple[str, bool] | None:
    """Return (zone kind, has_inline_content) when a segment opens a section."""
    text = segment.normalized.rstrip(".")
    for kind, full_re, inline_re in _HEADER_COMPILED:
        if full_re.match(text):
            return kind, False
        if inline_re.match(text):
            return kind, True
    return None


def _modal_level(text: str) -> str | None:
    lowered = text.lower()
    must = MANDATORY_RE.search(lowered) is not None
    optional = OPTIONAL_RE.search(lowered) is not None
    if must:
        return MUST
    if optional:
        return OPTIONAL
    return None


def _clause_around(text: str, pos: int) -> str:
    start = 0
    for m in _CLAUSE_BREAK_RE.finditer(text):
        if m.start() >= pos:
            return text[start:m.start()]
        start = m.end()
    return text[start:]


def inline_level(segment_text: str, rel_offset: int) -> str | None:
    """Modal-keyword tag for a mention: its clause first, then the whole sentence."""
    clause = _clause_around(segment_text, rel_offset)
    level = _modal_level(clause)
    if level is not None:
        return level
    return _modal_level(segment_text)


def _segment_context(posting: Document) -> list[tuple[str | None, bool]]:
    """For every segment: (header zone kind or None, is title/opening text)."""
    context: list[tuple[str | None, bool]] = []
    if posting.is_empty:
        return context

    segments = posting.segments
    title_line = segments[0].line
    first_paragraph = segments[0].paragraph
    # A title standing alone is followed by the real opening paragraph
    title_only = all(
        s.line == title_line for s in segments if s.paragraph == first_paragraph
    )
    opening = {first_paragraph, first_paragraph + 1} if title_only else {first_paragraph}

    zone: str | None = None
    header_seen = False
    current_line = -1
    for seg in segments:
        header = detect_header(seg) if seg.line != current_line else None
        current_line = seg.line
        if header is not None:
            zone, _ = header
            header_seen = True

        is_title = seg.line == title_line and header is None and not header_seen
        is_opening = not header_seen and seg.paragraph in opening
        context.append((zone, is_title or is_opening))
    return context


def tag_mentions(
    posting: Document, mentions: list[SkillMention]
) -> list[RequirementLevel | None]:
    """Rule 1-3 tag per posting mention; None where no rule applies."""
    context = _segment_context(posting)
    tags: list[RequirementLevel | None] = []
    for mention in mentions:
        zone, is_opening = context[mention.segment_index]
        if zone in (MUST, OPTIONAL):
            level = zone
        else:
            seg = posting.segments[mention.segment_index]
            level = inline_level(seg.text, mention.offset - seg.offset)
            if level is None and is_opening:
                level = MUST
        tags.append(_to_enum(level))
    return tags


def _to_enum(level: str | None) -> RequirementLevel | None:
    if level == MUST:
        return RequirementLevel.MUST_HAVE
    if level == OPTIONAL:
        return RequirementLevel.OPTIONAL
    return None


def classify(
    posting: Document,
    mentions: list[SkillMention],
    conflict_policy: str = "must_have",
) -> dict[str, RequirementLevel]:
    """Resolve one RequirementLevel per canonical skill mentioned in the posting."""
    tags = tag_mentions(posting, mentions)
    counts = Counter(m.skill for m in mentions)

    per_skill: dict[str, set[RequirementLevel]] = {}
    for mention, tag in zip(mentions, tags):
        if tag is None:
            # Frequency fallback for mentions no section or keyword rule resolves
            tag = (
                RequirementLevel.MUST_HAVE if counts[mention.skill] >= 2
                else RequirementLevel.OPTIONAL
            )
        per_skill.setdefault(mention.skill, set()).add(tag)

    winner = (
        RequirementLevel.OPTIONAL if conflict_policy == "optional"
        else RequirementLevel.MUST_HAVE
    )
    levels: dict[str, RequirementLevel] = {}
    for skill, found in per_skill.items():
        levels[skill] = winner if len(found) > 1 else next(iter(found))

    logger.debug(
        "Posting classification: %d must-have, %d optional",
        sum(1 for lv in levels.values() if lv is RequirementLevel.MUST_HAVE),
        sum(1 for lv in levels.values() if lv is RequirementLevel.OPTIONAL),
    )
    return levels
