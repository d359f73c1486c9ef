"""Years-of-experience requirement (posting) vs. total experience (résumé)."""

import logging
import re
from datetime import date

from models.schemas.document import Document
from models.schemas.experience import ExperienceFinding
from services.resume_sections import label_lines

logger = logging.getLogger(__name__)

_NUMBER_WORDS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
}
_NUM = rf"(?:\d{{1,2}}(?:\.\d)?|{'|'.join(_NUMBER_WORDS)})"

# Standalone: "5+ years", "minimum 3 years", "at least 4 yrs", "3-5 years" (lower bound wins).
# A bare "N years" counts only with experience wording close behind it.
REQUIRED_YEARS_RE = re.compile(
    r"(?P<min>\b(?:minimum|at\s+least|min\.?)\s*(?:of\s+)?)?"
    rf"\b(?P<low>{_NUM})\s*(?:(?:-|–|—|to)\s*(?P<high>{_NUM})\s*)?(?P<plus>\+)?\s*"
    r"(?:years?|yrs?)\b'?"
    r"(?!\s+(?:ago|old))"
    r"(?P<context>\s+(?:of\s+)?(?:[A-Za-z/+#.-]+\s+){0,3}?(?:experience|exp)\b)?",
    re.IGNORECASE,
)

# "5+ years of experience", "3 years of professional software experience"
SELF_YEARS_RE = re.compile(
    rf"\b(?P<n>{_NUM})\s*\+?\s*(?:years?|yrs?)\s+(?:of\s+)?"
    r"(?:[A-Za-z/+#.-]+\s+){0,3}?(?:experience|exp\b)",
    re.IGNORECASE,
)

# Date ranges: "Jan 2019 - Present", "2020 - 2023", "03/2018 to 11/2022"
_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|"
    r"Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_DATE = rf"(?:\b{_MONTHS}\.?,?\s*\d{{4}}|\b\d{{1,2}}/\d{{4}}|\b\d{{4}})"
DATE_RANGE_RE = re.compile(
    rf"(?P<start>{_DATE})\s*(?:-|–|—|to|until)\s*"
    rf"(?P<end>{_DATE}|present|current|now|today)\b",
    re.IGNORECASE,
)

_MONTH_MAP = {
    "jan": 1, "january": 1, "feb": 2, "february": 2, "mar": 3, "march": 3,
    "apr": 4, "april": 4, "may": 5, "jun": 6, "june": 6,
    "jul": 7, "july": 7, "aug": 8, "august": 8, "sep": 9, "sept": 9,
    "september": 9, "oct": 10, "october": 10, "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

# Lines that describe schooling rather than employment
EDUCATION_HINT_RE = re.compile(
    r"\b(?:university|college|school|institute|academy|bachelor|master|degree|"
    r"gpa|diploma|ph\.?d|mba)\b|\b[bm]\.(?:sc?|a)\.?",
    re.IGNORECASE,
)


def _to_number(token: str) -> float:
    token = token.lower()
    if token in _NUMBER_WORDS:
        return float(_NUMBER_WORDS[token])
    return float(token)


def _is_requirement(match: re.Match) -> bool:
    return any(match.group(g) for g in ("min", "high", "plus", "context"))


def extract_required_years(posting: Document) -> tuple[float | None, int]:
    """Largest years-of-experience requirement in the posting and its offset.

    Returns (None, 0) when the posting states no numeric requirement.
    """
    best: float | None = None
    position = 0
    for seg in posting.segments:
        for match in REQUIRED_YEARS_RE.finditer(seg.text):
            if not _is_requirement(match):
                continue
            years = _to_number(match.group("low"))
            if years <= 0 or years > 50:
                continue
            if best is None or years > best:
                best = years
                position = seg.offset + match.start()
    return best, position


def _parse_date(date_str: str, today: date) -> tuple[int, int]:
    """Parse a date string into (year, month). Returns (0, 0) if unparseable."""
    date_str = date_str.strip().rstrip(".,")
    if date_str.lower() in ("present", "current", "now", "today"):
        return today.year, today.month

    if "/" in date_str:
        month_str, _, year_str = date_str.partition("/")
        try:
            month, year = int(month_str), int(year_str)
        except ValueError:
            return 0, 0
        if 1 <= month <= 12 and 1950 <= year <= 2100:
            return year, month
        return 0, 0

    parts = re.split(r"[\s.,]+", date_str)
    parts = [p for p in parts if p]
    if len(parts) == 2:
        month_str = parts[0].lower()
        if month_str in _MONTH_MAP:
            try:
                return int(parts[1]), _MONTH_MAP[month_str]
            except ValueError:
                return 0, 0

    try:
        year = int(date_str)
    except ValueError:
        return 0, 0
    if 1950 <= year <= 2100:
        return year, 1
    return 0, 0


def _merged_months(intervals: list[tuple[int, int]]) -> int:
    """Total months covered by month-index intervals, overlaps counted once."""
    total = 0
    current_start, current_end = None, None
    for start, end in sorted(intervals):
        if current_end is None or start > current_end:
            if current_end is not None:
                total += current_end - current_start
            current_start, current_end = start, end
        else:
            current_end = max(current_end, end)
    if current_end is not None:
        total += current_end - current_start
    return total


def extract_candidate_years(resume: Document, today: date | None = None) -> float | None:
    """Total years of experience from the résumé, or None with no usable signal.

    Combines two strategies and returns the larger:
    1. Employment date ranges, merged so overlapping roles count once
    2. Explicit claims: "5+ years of experience"
    """
    today = today or date.today()
    sections = label_lines(resume)

    intervals: list[tuple[int, int]] = []
    explicit: float | None = None

    for seg in resume.segments:
        for match in SELF_YEARS_RE.finditer(seg.text):
            years = _to_number(match.group("n"))
            if 0 < years < 60 and (explicit is None or years > explicit):
                explicit = years

        if sections.get(seg.line) == "education" or EDUCATION_HINT_RE.search(seg.text):
            continue
        for match in DATE_RANGE_RE.finditer(seg.text):
            start_year, start_month = _parse_date(match.group("start"), today)
            end_year, end_month = _parse_date(match.group("end"), today)
            if start_year <= 0 or end_year <= 0:
                continue
            start = start_year * 12 + (start_month - 1)
            end = end_year * 12 + (end_month - 1)
            if 0 < end - start < 600:  # Sanity: < 50 years
                intervals.append((start, end))

    date_years = round(_merged_months(intervals) / 12, 1) if intervals else None

    candidates = [y for y in (date_years, explicit) if y is not None]
    return max(candidates) if candidates else None


def compare_experience(
    posting: Document, resume: Document, today: date | None = None
) -> ExperienceFinding:
    """Flag a gap when a requirement exists and the résumé does not clearly meet it."""
    required, position = extract_required_years(posting)
    candidate = extract_candidate_years(resume, today=today)
    gap = required is not None and (candidate is None or candidate < required)
    if gap:
        logger.debug("Experience gap: required=%s candidate=%s", required, candidate)
    return ExperienceFinding(
        required_years=required,
        candidate_years=candidate,
        gap_flag=gap,
        position=position,
    )
