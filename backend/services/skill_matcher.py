"""Skill matcher: decide presence, confidence and evidence strength per posting skill.

For every distinct posting skill (in first-appearance order):
    - absent from the résumé            -> MissingRecord with the posting level
    - present                           -> MatchRecord with confidence + weakness

Confidence:
    high    exact literal form, sentence carries numbers/metrics/outcomes
    medium  alias, misspelling or other letter case, or a plain exact mention
    low     only implied by a related skill (e.g. Django -> Python)
"""

import logging
import re
from dataclasses import dataclass

from rapidfuzz import fuzz

from models.schemas.document import Document
from models.schemas.match import MatchRecord, MissingRecord
from models.schemas.skill import RequirementLevel, SkillMention
from services.resume_sections import label_lines
from services.skill_vocabulary import SkillVocabulary

logger = logging.getLogger(__name__)

# Regex for quantified metrics
METRICS_RE = re.compile(
    r"\$\s?\d[\d,.]*\s?[kmb]?\b"
    r"|\b\d[\d,.]*\s?(?:%|percent\b|x\b|k\b|m\b|ms\b|million\b|billion\b|thousand\b)"
    r"|\b\d[\d,.]*\+?\s*(?:users|clients|requests|customers|endpoints|services|teams?|"
    r"members?|engineers|developers|people|projects|apps|applications|servers|nodes|"
    r"events|transactions|records|hours|days|weeks|tests|deployments)\b",
    re.IGNORECASE,
)

# Named outcomes: verbs that report a result rather than an activity
OUTCOME_RE = re.compile(
    r"\b(?:increas|reduc|improv|decreas|sav|grew|boost|accelerat|doubl|tripl|"
    r"cut\b|halv|eliminat|optimi[sz])\w*",
    re.IGNORECASE,
)

_NUMBER_RE = re.compile(r"\b\d+(?:[.,]\d+)?\b")
_LIST_SPLIT_RE = re.compile(r"[,|;•·]")
_FUZZY_TOKEN_RE = re.compile(r"(?<![\w.#+])[A-Za-z][A-Za-z0-9.+#-]{4,}")

MIN_NARRATIVE_WORDS = 5
MIN_FUZZY_LEN = 5

_CONFIDENCE_RANK = {"low": 0, "medium": 1, "high": 2}


# ---------------------------------------------------------------------------
# Evidence formatting
# ---------------------------------------------------------------------------

def make_snippet(text: str, start: int, end: int, max_chars: int = 100) -> str:
    """Cut a verbatim window of ``text`` around [start, end) of at most max_chars.

    The window is trimmed to word boundaries and always keeps the mention.
    """
    if len(text) <= max_chars:
        return text.strip()
    if end - start >= max_chars:
        return text[start:start + max_chars]

    slack = max_chars - (end - start)
    lo = max(0, start - slack // 2)
    hi = min(len(text), lo + max_chars)
    lo = max(0, hi - max_chars)

    # Snap inward to word boundaries without cutting into the mention
    if lo > 0 and not text[lo - 1].isspace():
        space = text.find(" ", lo, start)
        if space != -1:
            lo = space + 1
    if hi < len(text) and not text[hi].isspace():
        space = text.rfind(" ", end, hi)
        if space != -1:
            hi = space
    return text[lo:hi].strip()


# ---------------------------------------------------------------------------
# Evidence signals
# ---------------------------------------------------------------------------

def _masked(text: str, spans: list[tuple[int, int]]) -> str:
    """Blank out skill names so version numbers ("Python 3") don't read as metrics."""
    chars = list(text)
    for start, end in spans:
        for i in range(max(0, start), min(len(chars), end)):
            chars[i] = " "
    return "".join(chars)


def has_quantified_context(text: str) -> bool:
    """True when a sentence carries a metric, a non-year number, or a named outcome."""
    if METRICS_RE.search(text) or OUTCOME_RE.search(text):
        return True
    for m in _NUMBER_RE.finditer(text):
        token = m.group()
        if len(token) == 4 and token.isdigit() and 1950 <= int(token) <= 2100:
            continue
        return True
    return False


def is_list_like(text: str) -> bool:
    """A flat enumeration such as 'Python, Docker, AWS, PostgreSQL'."""
    items = [item.strip() for item in _LIST_SPLIT_RE.split(text) if item.strip()]
    if len(items) < 3:
        return False
    return max(len(item.split()) for item in items) <= 3


@dataclass
class _Evidence:
    mention: SkillMention
    rel: int  # mention offset within its segment
    confidence: str
    in_list: bool
    narrative: bool
    quantified: bool

    def rank(self) -> tuple:
        return (
            _CONFIDENCE_RANK[self.confidence],
            self.quantified and self.narrative,
            self.narrative,
            -self.mention.offset,
        )


class _ResumeIndex:
    """Per-call lookup structures over the résumé mentions."""

    def __init__(self, resume: Document, mentions: list[SkillMention]) -> None:
        self.resume = resume
        self.sections = label_lines(resume)
        self.by_skill: dict[str, list[SkillMention]] = {}
        self.spans_by_segment: dict[int, list[tuple[int, int]]] = {}
        for m in mentions:
            self.by_skill.setdefault(m.skill, []).append(m)
            seg = resume.segments[m.segment_index]
            rel = m.offset - seg.offset
            self.spans_by_segment.setdefault(m.segment_index, []).append(
                (rel, rel + len(m.surface))
            )

    def evidence(self, mention: SkillMention, confidence_if_exact: bool) -> _Evidence:
        seg = self.resume.segments[mention.segment_index]
        text = _masked(seg.text, self.spans_by_segment.get(mention.segment_index, []))
        in_list = self.sections.get(seg.line) == "skills" or is_list_like(seg.text)
        narrative = not in_list and len(seg.text.split()) >= MIN_NARRATIVE_WORDS
        quantified = has_quantified_context(text)
        if confidence_if_exact:
            confidence = "high" if quantified else "medium"
        else:
            confidence = "medium"
        rel = mention.offset - seg.offset
        return _Evidence(mention, rel, confidence, in_list, narrative, quantified)

    def unclaimed(self, mentions: list[SkillMention]) -> list[SkillMention]:
        """Drop mentions overlapping a span the vocabulary scan already assigned."""
        kept: list[SkillMention] = []
        for m in mentions:
            rel = m.offset - self.resume.segments[m.segment_index].offset
            taken = self.spans_by_segment.get(m.segment_index, [])
            if not any(rel < end and start < rel + len(m.surface) for start, end in taken):
                kept.append(m)
        return kept

    def fuzzy_mentions(
        self, vocabulary: SkillVocabulary, skill: str, threshold: int
    ) -> list[SkillMention]:
        """Unrecognized résumé tokens that look like a misspelling of ``skill``."""
        entry = vocabulary.get(skill)
        if entry is None or entry.case_sensitive:
            return []
        forms = [f for f in vocabulary.surface_forms(skill) if len(f) >= MIN_FUZZY_LEN]
        if not forms:
            return []

        found: list[SkillMention] = []
        for idx, seg in enumerate(self.resume.segments):
            taken = self.spans_by_segment.get(idx, [])
            for m in _FUZZY_TOKEN_RE.finditer(seg.text):
                if any(m.start() < end and start < m.end() for start, end in taken):
                    continue
                token = m.group().rstrip(".-")
                lowered = token.lower()
                if vocabulary.resolve(token) is not None:
                    continue
                if any(
                    lowered != form and fuzz.ratio(lowered, form) >= threshold
                    for form in forms
                ):
                    found.append(SkillMention(
                        skill=skill,
                        surface=token,
                        source="resume",
                        offset=seg.offset + m.start(),
                        segment_index=idx,
                        segment_text=seg.text,
                    ))
        return found


def _weakness_reason(evidence: list[_Evidence]) -> str | None:
    narrative = [e for e in evidence if e.narrative]
    if any(e.quantified for e in narrative):
        return None
    if not narrative:
        if all(e.in_list for e in evidence):
            return "listed in skills section only; add a bullet showing how you used it"
        return "mentioned briefly without context; describe what you built with it"
    if len(evidence) == 1:
        return "mentioned once without measurable outcome"
    return f"mentioned {len(evidence)} times without measurable outcome"


def match_skills(
    posting_mentions: list[SkillMention],
    resume_mentions: list[SkillMention],
    resume: Document,
    levels: dict[str, RequirementLevel],
    vocabulary: SkillVocabulary,
    *,
    strict: bool = False,
    fuzzy_threshold: int = 90,
    evidence_max_chars: int = 100,
) -> tuple[list[MatchRecord], list[MissingRecord]]:
    """Match every distinct posting skill against the résumé."""
    first_offset: dict[str, int] = {}
    posting_forms: dict[str, set[str]] = {}
    for m in posting_mentions:
        first_offset.setdefault(m.skill, m.offset)
        posting_forms.setdefault(m.skill, set()).add(m.surface.lower())

    index = _ResumeIndex(resume, resume_mentions)
    matched: list[MatchRecord] = []
    missing: list[MissingRecord] = []

    for skill in sorted(first_offset, key=lambda s: first_offset[s]):
        position = first_offset[skill]
        exact_forms = posting_forms[skill] | {skill.lower()}
        direct = index.by_skill.get(skill, [])
        if strict:
            direct = [m for m in direct if m.surface.lower() in posting_forms[skill]]

        evidence = [
            index.evidence(m, confidence_if_exact=m.surface.lower() in exact_forms)
            for m in direct
        ]
        if not evidence:
            # Exact hit in another letter case ("swift" for Swift)
            folded = vocabulary.find_case_folded(
                index.resume, skill, "resume", posting_forms[skill] if strict else None
            )
            evidence = [
                index.evidence(m, confidence_if_exact=False) for m in index.unclaimed(folded)
            ]
        if not evidence and not strict:
            evidence = [
                index.evidence(m, confidence_if_exact=False)
                for m in index.fuzzy_mentions(vocabulary, skill, fuzzy_threshold)
            ]

        if evidence:
            best = max(evidence, key=_Evidence.rank)
            reason = _weakness_reason(evidence)
            matched.append(_record(
                skill, best, reason, position, evidence_max_chars, confidence=best.confidence,
            ))
            continue

        implied = _implied_evidence(skill, index, vocabulary) if not strict else None
        if implied is not None:
            implier = implied.mention.skill
            matched.append(_record(
                skill, implied,
                f"only implied by {implier}; name {skill} explicitly",
                position, evidence_max_chars, confidence="low",
            ))
            continue

        missing.append(MissingRecord(
            skill=skill,
            level=levels.get(skill, RequirementLevel.OPTIONAL),
            position=position,
        ))

    logger.debug("Matcher: %d present, %d missing", len(matched), len(missing))
    return matched, missing


def _implied_evidence(
    skill: str, index: _ResumeIndex, vocabulary: SkillVocabulary
) -> _Evidence | None:
    candidates: list[_Evidence] = []
    for resume_skill, mentions in index.by_skill.items():
        if skill in vocabulary.implied_by(resume_skill) and not vocabulary.are_distinct(skill, resume_skill):
            candidates.extend(index.evidence(m, confidence_if_exact=False) for m in mentions)
    if not candidates:
        return None
    return max(candidates, key=_Evidence.rank)


def _record(
    skill: str,
    evidence: _Evidence,
    reason: str | None,
    position: int,
    max_chars: int,
    confidence: str,
) -> MatchRecord:
    mention = evidence.mention
    snippet = make_snippet(
        mention.segment_text, evidence.rel, evidence.rel + len(mention.surface), max_chars
    )
    return MatchRecord(
        skill=skill,
        confidence=confidence,
        evidence=snippet,
        is_weak=reason is not None,
        weakness_reason=reason,
        position=position,
    )
