"""Prompt templates for the Gemini match generator."""

_STRICT_RULES = """SKILL MATCHING RULES (STRICT):
- A skill counts as matched ONLY when it is written verbatim in BOTH the resume and the job description.
- Do NOT infer, assume, or semantically guess skills.
- Do NOT fold different spellings together; a skill not written exactly as in the job description is missing.
- Do NOT include implied, related, or weakly suggested skills."""

_NUANCED_RULES = """SKILL MATCHING RULES:
- Treat alias spellings of the same technology as one skill ("React.js", "ReactJS" -> "React"; "Node.js" -> "Node").
- NEVER fold genuinely different technologies: C vs C++ vs C#, Java vs JavaScript, React vs React Native, Python 2 vs Python 3.
- A skill only loosely implied by a related one (e.g. Django implies Python) is matched with "low" confidence and is weak.
- confidence "high": written exactly as in the job description AND the sentence shows numbers, metrics or outcomes.
- confidence "medium": alias/variant spelling, or a brief mention without metrics.
- A matched skill is weak when it appears only in a skills list, or without a measurable outcome; give a short actionable weaknessReason."""

_CLASSIFICATION_RULES = """REQUIREMENT LEVEL RULES:
- Skills under headers like "Requirements", "Must have", "Qualifications" are mustHave.
- Skills under headers like "Nice to have", "Preferred", "Bonus", "Desirable" are optional.
- Outside those sections, "required/must/essential/mandatory/minimum" means mustHave; "preferred/plus/bonus/desirable" means optional.
- Skills in the job title or opening paragraph are mustHave.
- Otherwise a skill mentioned two or more times is mustHave, once is optional.
- If the job description requires N years of experience, do NOT list it; it is handled separately."""


def build_matching_prompt(
    resume_text: str,
    job_description: str,
    company_name: str | None = None,
    strict: bool = False,
) -> str:
    """Single-call prompt returning the full AnalysisResult JSON shape."""
    rules = _STRICT_RULES if strict else _NUANCED_RULES
    company_line = f"\nTarget Company: {company_name}\n" if company_name else ""

    return f"""You are an Expert Resume Reviewer.

Compare the resume against the job description and report which job description skills are
matched (strongly evidenced), weak (present but weakly evidenced), or missing (split by
mustHave vs optional).

{rules}

{_CLASSIFICATION_RULES}

A skill must appear in ONLY ONE list. Deduplicate skills. Use consistent canonical casing.
evidence must be a verbatim resume substring of at most 100 characters containing the skill.

RESUME:
---
{resume_text}
---

JOB DESCRIPTION:
---
{job_description}
---
{company_line}
Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "matchedSkills": [{{"skill": "<name>", "confidence": "high|medium|low", "evidence": "<resume quote>", "isWeak": false}}],
  "weakSkills": [{{"skill": "<name>", "confidence": "high|medium|low", "evidence": "<resume quote>", "isWeak": true, "weaknessReason": "<short actionable reason>"}}],
  "missingSkills": {{"mustHave": ["<name>"], "optional": ["<name>"]}}
}}"""
