"""Text normalization: split a raw document into offset-preserving segments.

Each segment is a sentence (or a sentence-less line such as a header or a
skills list). The segment text is an exact slice of the original string so
downstream stages can quote evidence verbatim; a lower-cased, markup-free
``normalized`` copy is kept alongside for keyword heuristics.
"""

import re

from models.schemas.document import Document, Segment

# Bullet markers: standard + expanded unicode set
BULLET_MARKERS = "•-–—►▪✓*○◆⚫→▸▹◇■□●·>#"

_LEADING_NOISE_RE = re.compile(
    rf"^(?:[\s{re.escape(BULLET_MARKERS)}]+|\d{{1,2}}[.)]\s+)+"
)
_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?;])\s+")
_MARKUP_RE = re.compile(r"\*\*|__|`")
_WS_RE = re.compile(r"\s+")


def normalize_segment_text(text: str) -> str:
    """Case-fold, drop markdown emphasis, and collapse whitespace."""
    cleaned = _MARKUP_RE.sub("", text.lower()).replace("\u2019", "'")
    return _WS_RE.sub(" ", cleaned).strip()


def _split_sentences(line: str) -> list[tuple[int, str]]:
    """Return (start, chunk) pairs for each sentence in a single line."""
    chunks: list[tuple[int, str]] = []
    start = 0
    for match in _SENTENCE_BREAK_RE.finditer(line):
        chunks.append((start, line[start:match.start()]))
        start = match.end()
    chunks.append((start, line[start:]))
    return chunks


def normalize(raw: str) -> Document:
    """Build a Document from raw text. Never raises; empty text gives no segments."""
    if not raw or not raw.strip():
        return Document(raw=raw or "", segments=())

    segments: list[Segment] = []
    pos = 0
    paragraph = 0
    seen_content = False
    blank_run = False

    for line_no, line in enumerate(raw.split("\n")):
        line_start = pos
        pos += len(line) + 1
        line = line.rstrip("\r")

        if not line.strip():
            blank_run = seen_content
            continue
        if blank_run:
            paragraph += 1
            blank_run = False
        seen_content = True

        # Bullets and list numbering ("1.") go before sentence splitting
        lead = _LEADING_NOISE_RE.match(line)
        body_start = lead.end() if lead else 0

        for chunk_start, chunk in _split_sentences(line[body_start:]):
            text = chunk.rstrip()
            if not text:
                continue
            normalized = normalize_segment_text(text)
            if not normalized:
                continue
            segments.append(Segment(
                offset=line_start + body_start + chunk_start,
                text=text,
                normalized=normalized,
                line=line_no,
                paragraph=paragraph,
            ))

    return Document(raw=raw, segments=tuple(segments))
