"""Résumé section segmentation.

Labels every line of a normalized résumé with the section it belongs to
("experience", "skills", "education", ...). The matcher uses the labels to
tell narrative evidence from flat skills lists, and the experience extractor
uses them to keep education dates out of the employment total.
"""

import re

from models.schemas.document import Document, Segment

# Section header patterns and their canonical names
SECTION_PATTERNS: dict[str, list[str]] = {
    "experience": [
        r"(?:work|professional|employment|relevant)\s*(?:experience|history)",
        r"experience",
        r"career\s*(?:history|summary|path)",
        r"(?:positions?\s*held|roles)",
    ],
    "education": [
        r"education(?:al)?\s*(?:background|qualifications|history)?",
        r"academic\s*(?:background|qualifications)",
    ],
    "skills": [
        r"(?:technical|core|key|professional)?\s*skills(?:\s*(?:&|and)\s*(?:tools|technologies))?",
        r"(?:technical|core)?\s*(?:competencies|proficiencies|expertise)",
        r"technologies",
        r"(?:technical\s+)?(?:stack|toolkit|tooling)",
        r"tools",
        r"(?:programming\s+)?languages",
    ],
    "summary": [
        r"(?:professional|executive|career)?\s*summary",
        r"(?:career|professional)?\s*objective",
        r"profile",
        r"about\s*me",
    ],
    "projects": [
        r"(?:key|notable|selected|personal)?\s*projects",
        r"portfolio",
    ],
    "certifications": [
        r"certific(?:ations?|ates?)",
        r"licen[sc]es?\s*(?:&|and)?\s*certific(?:ations?|ates?)",
    ],
    "achievements": [
        r"(?:key\s+)?achievements?",
        r"(?:awards?|honors?|accomplishments)",
    ],
}

# Compile all patterns into a full-line and an inline ("Skills: a, b") regex per section
_COMPILED: dict[str, tuple[re.Pattern, re.Pattern]] = {}
for section, patterns in SECTION_PATTERNS.items():
    combined = "|".join(patterns)
    _COMPILED[section] = (
        re.compile(rf"^(?:#+\s*)?(?:{combined})\s*:?$"),
        re.compile(rf"^(?:#+\s*)?(?:{combined})\s*:\s*\S"),
    )


def detect_section_header(segment: Segment) -> str | None:
    """Return the section name if the segment is a résumé section header."""
    text = segment.normalized.rstrip(".")
    for section_name, (full_re, inline_re) in _COMPILED.items():
        if full_re.match(text) or inline_re.match(text):
            return section_name
    return None


def label_lines(document: Document) -> dict[int, str]:
    """Map each line index to its section name; text before any header is 'header'."""
    labels: dict[int, str] = {}
    current = "header"
    for line_no, segments in document.lines().items():
        matched = detect_section_header(segments[0])
        if matched:
            current = matched
        labels[line_no] = current
    return labels
