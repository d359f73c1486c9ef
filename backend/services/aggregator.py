"""Aggregator: assemble the final AnalysisResult.

Responsibilities:
    - dedupe by canonical name (case-insensitive)
    - one category per skill: matched > weak > must-have > optional
    - inject "<N>+ years experience" into must-have on an experience gap
    - stable ordering by first appearance in the posting
    - summary counts as plain list cardinalities

``coerce_result`` applies the same rules to an untrusted payload (e.g. JSON
produced by an external generator) and backfills any missing list.
"""

import logging
from typing import Any

from pydantic import ValidationError

from models.responses import AnalysisResult, AnalysisSummary, MatchedSkill, MissingSkills
from models.schemas.experience import ExperienceFinding
from models.schemas.match import MatchRecord, MissingRecord
from models.schemas.skill import RequirementLevel
from services.skill_matcher import make_snippet

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return " ".join(name.lower().split())


def _to_public(record: MatchRecord) -> MatchedSkill:
    return MatchedSkill(
        skill=record.skill,
        confidence=record.confidence,
        evidence=record.evidence,
        is_weak=record.is_weak,
        weakness_reason=record.weakness_reason if record.is_weak else None,
    )


def aggregate(
    matches: list[MatchRecord],
    missing: list[MissingRecord],
    experience: ExperienceFinding | None = None,
) -> AnalysisResult:
    """Build the public result from matcher output and the experience finding."""
    placed: set[str] = set()
    strong: list[MatchRecord] = []
    weak: list[MatchRecord] = []

    ordered_matches = sorted(matches, key=lambda r: r.position)
    for record in (r for r in ordered_matches if not r.is_weak):
        if _key(record.skill) not in placed:
            placed.add(_key(record.skill))
            strong.append(record)
    for record in (r for r in ordered_matches if r.is_weak):
        if _key(record.skill) not in placed:
            placed.add(_key(record.skill))
            weak.append(record)

    missing_items = list(missing)
    if experience is not None and experience.gap_flag:
        missing_items.append(MissingRecord(
            skill=experience.label,
            level=RequirementLevel.MUST_HAVE,
            position=experience.position,
        ))

    must_have: list[MissingRecord] = []
    optional: list[MissingRecord] = []
    ordered_missing = sorted(missing_items, key=lambda r: r.position)
    for level, bucket in (
        (RequirementLevel.MUST_HAVE, must_have),
        (RequirementLevel.OPTIONAL, optional),
    ):
        for record in ordered_missing:
            if record.level is not level:
                continue
            # Re-check: a skill placed in matched/weak never reappears as missing
            if _key(record.skill) in placed:
                continue
            placed.add(_key(record.skill))
            bucket.append(record)

    return _build(
        [_to_public(r) for r in strong],
        [_to_public(r) for r in weak],
        [r.skill for r in must_have],
        [r.skill for r in optional],
    )


def _build(
    matched: list[MatchedSkill],
    weak: list[MatchedSkill],
    must_have: list[str],
    optional: list[str],
) -> AnalysisResult:
    return AnalysisResult(
        matched_skills=matched,
        weak_skills=weak,
        missing_skills=MissingSkills(must_have=must_have, optional=optional),
        summary=AnalysisSummary(
            total_matched=len(matched),
            total_weak=len(weak),
            total_missing_must_have=len(must_have),
            total_missing_optional=len(optional),
        ),
    )


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _trim_evidence(evidence: str, skill: str, max_chars: int) -> str:
    """Word-boundary trim of upstream evidence, kept around the skill name when present."""
    start = evidence.lower().find(skill.lower())
    if start == -1:
        start, end = 0, 0
    else:
        end = start + len(skill)
    return make_snippet(evidence, start, end, max_chars)


def _coerce_skill(item: Any, weak: bool, max_chars: int = 100) -> MatchedSkill | None:
    if isinstance(item, str):
        item = {"skill": item}
    if not isinstance(item, dict) or not str(item.get("skill", "")).strip():
        return None
    confidence = str(item.get("confidence", "medium")).lower()
    if confidence not in ("high", "medium", "low"):
        confidence = "medium"
    reason = item.get("weaknessReason") or item.get("weakness_reason")
    if weak and not reason:
        reason = "weakly evidenced in resume"
    name = str(item["skill"]).strip()
    try:
        return MatchedSkill(
            skill=name,
            confidence=confidence,
            evidence=_trim_evidence(str(item.get("evidence") or ""), name, max_chars),
            is_weak=weak,
            weakness_reason=str(reason) if weak else None,
        )
    except ValidationError as e:
        logger.warning("Dropping malformed skill entry %r: %s", item, e)
        return None


def coerce_result(
    payload: Any,
    experience: ExperienceFinding | None = None,
    evidence_max_chars: int = 100,
) -> AnalysisResult:
    """Validate an untrusted result payload and repair it instead of failing.

    Missing or non-list fields become empty lists, entries without a skill
    name are dropped, category exclusivity is re-applied and the summary
    is recomputed from the repaired lists.
    """
    if not isinstance(payload, dict):
        logger.warning("Upstream result is not an object (%s); using empty result",
                       type(payload).__name__)
        payload = {}

    missing_raw = payload.get("missingSkills")
    if isinstance(missing_raw, list):
        # Older generator shape: a flat list of missing skill names
        missing_raw = {"mustHave": missing_raw}
    if not isinstance(missing_raw, dict):
        missing_raw = {}

    placed: set[str] = set()
    matched: list[MatchedSkill] = []
    weak: list[MatchedSkill] = []
    for source, bucket, is_weak in (
        (payload.get("matchedSkills"), matched, False),
        (payload.get("weakSkills"), weak, True),
    ):
        for item in _as_list(source):
            skill = _coerce_skill(item, weak=is_weak, max_chars=evidence_max_chars)
            if skill is None:
                continue
            if isinstance(item, dict) and item.get("isWeak") is True and not is_weak:
                skill = _coerce_skill(item, weak=True, max_chars=evidence_max_chars)
                if _key(skill.skill) not in placed:
                    placed.add(_key(skill.skill))
                    weak.append(skill)
                continue
            if _key(skill.skill) not in placed:
                placed.add(_key(skill.skill))
                bucket.append(skill)

    must_have_raw = [str(s) for s in _as_list(missing_raw.get("mustHave")) if str(s).strip()]
    if experience is not None and experience.gap_flag:
        must_have_raw.append(experience.label)

    must_have: list[str] = []
    optional: list[str] = []
    for names, bucket in (
        (must_have_raw, must_have),
        ([str(s) for s in _as_list(missing_raw.get("optional")) if str(s).strip()], optional),
    ):
        for name in names:
            name = name.strip()
            if _key(name) in placed:
                continue
            placed.add(_key(name))
            bucket.append(name)

    return _build(matched, weak, must_have, optional)
