"""Years-of-experience comparison between posting and résumé."""

from pydantic import BaseModel


class ExperienceFinding(BaseModel):
    required_years: float | None = None  # None when the posting states no requirement
    candidate_years: float | None = None  # None when the résumé has no usable signal
    gap_flag: bool = False
    position: int = 0  # offset of the requirement phrase in the posting

    @property
    def label(self) -> str:
        """Missing-list entry used when the gap flag is set, e.g. '5+ years experience'."""
        years = self.required_years or 0
        shown = int(years) if float(years).is_integer() else years
        return f"{shown}+ years experience"
