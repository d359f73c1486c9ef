"""Template suggestions built from an AnalysisResult.

Auxiliary output only: the company hint flavors the wording here and never
influences matching.
"""

import re

from models.responses import AnalysisResult

_EXPERIENCE_ENTRY_RE = re.compile(r"^\d+(?:\.\d+)?\+ years experience$")

MAX_SKILL_SUGGESTIONS = 5


def _target(company_name: str | None) -> str:
    name = (company_name or "").strip()
    return f"the {name} role" if name else "this role"


def build_suggestions(result: AnalysisResult, company_name: str | None = None) -> list[str]:
    """One actionable line per missing must-have, weak skill and experience gap."""
    target = _target(company_name)
    recs: list[str] = []

    must_have = result.missing_skills.must_have
    experience = [s for s in must_have if _EXPERIENCE_ENTRY_RE.match(s)]
    skills = [s for s in must_have if not _EXPERIENCE_ENTRY_RE.match(s)]

    for skill in skills[:MAX_SKILL_SUGGESTIONS]:
        recs.append(
            f"{skill} is a must-have for {target}; add it if you have used it, "
            f"with a concrete project or result"
        )

    for entry in experience:
        years = entry.split("+", 1)[0]
        recs.append(
            f"The posting for {target} asks for {years}+ years of experience; "
            f"make employment dates explicit or state your total years"
        )

    for weak in result.weak_skills[:MAX_SKILL_SUGGESTIONS]:
        recs.append(f"Strengthen {weak.skill}: {weak.weakness_reason}")

    if result.missing_skills.optional:
        top = result.missing_skills.optional[:3]
        recs.append(f"Nice-to-haves you could mention if applicable: {', '.join(top)}")

    if not recs and result.matched_skills:
        recs.append(f"Your resume covers {target} well; keep the strongest metrics near the top")

    return recs
