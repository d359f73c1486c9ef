"""Normalized document: the raw text plus its ordered segments."""

from pydantic import BaseModel


class Segment(BaseModel):
    """A sentence or line of a document.

    ``text`` is always a verbatim slice of the raw document starting at
    ``offset``, so evidence can be quoted from it directly.
    """
    model_config = {"frozen": True}

    offset: int
    text: str
    normalized: str
    line: int = 0  # 0-based line index in the raw text
    paragraph: int = 0  # 0-based block index, blocks are separated by blank lines


class Document(BaseModel):
    model_config = {"frozen": True}

    raw: str = ""
    segments: tuple[Segment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def lines(self) -> dict[int, list[Segment]]:
        """Group segments by their source line, preserving order."""
        grouped: dict[int, list[Segment]] = {}
        for seg in self.segments:
            grouped.setdefault(seg.line, []).append(seg)
        return grouped
