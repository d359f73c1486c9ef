"""Skill vocabulary and aliaser.

Maps surface forms ("React.js", "ReactJS", "k8s") to one canonical skill while
keeping configured-distinct technologies apart (React vs React Native, C vs
C++, Java vs JavaScript, Python 2 vs Python 3). The table is immutable: an
engine run that needs extra skills gets a new table from ``extend()``.
"""

import logging
import re
from functools import lru_cache
from typing import Iterable

from models.schemas.document import Document
from models.schemas.skill import Skill, SkillMention

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Default reference data: canonical name -> known variant spellings
# ---------------------------------------------------------------------------
DEFAULT_SKILLS: dict[str, tuple[str, ...]] = {
    # Programming languages
    "Python": (),
    "Python 2": ("python2", "python 2.7", "python 2.x", "py2"),
    "Python 3": ("python3", "python 3.x", "py3"),
    "JavaScript": ("JS", "ES6", "ES2015", "ECMAScript"),
    "TypeScript": ("TS",),
    "Java": (),
    "C": (),
    "C++": ("cpp", "c plus plus"),
    "C#": ("c sharp", "csharp"),
    "Go": ("golang",),
    "Rust": (),
    "Ruby": (),
    "PHP": (),
    "Swift": (),
    "Kotlin": (),
    "Scala": (),
    "R": (),
    "MATLAB": (),
    "SQL": (),
    "Perl": (),
    "Haskell": (),
    "Elixir": (),
    "Dart": (),
    "Objective-C": ("objective c", "objc"),
    "Bash": ("shell scripting",),
    "PowerShell": (),
    # Frontend
    "React": ("React.js", "ReactJS", "React JS"),
    "React Native": ("react-native",),
    "Angular": ("angular.js", "angularjs"),
    "Vue": ("vue.js", "vuejs"),
    "Svelte": (),
    "Next.js": ("nextjs", "next js"),
    "Nuxt": ("nuxt.js", "nuxtjs"),
    "Redux": (),
    "HTML": ("html5",),
    "CSS": ("css3",),
    "Tailwind CSS": ("tailwind", "tailwindcss"),
    "Bootstrap": (),
    "Sass": ("scss",),
    "Webpack": (),
    "jQuery": (),
    # Backend
    "Node": ("Node.js", "NodeJS", "node js"),
    "Express": ("express.js", "expressjs"),
    "FastAPI": ("fast api",),
    "Django": (),
    "Flask": (),
    "Spring": (),
    "Spring Boot": ("springboot",),
    "Ruby on Rails": ("rails", "ror"),
    "Laravel": (),
    ".NET": ("dotnet", ".net core"),
    "ASP.NET": ("asp.net core",),
    "GraphQL": ("graph ql",),
    "REST": ("REST API", "REST APIs", "RESTful", "RESTful APIs"),
    "gRPC": (),
    "Microservices": ("microservice", "micro-services"),
    # Cloud & DevOps
    "AWS": ("Amazon Web Services",),
    "Azure": ("Microsoft Azure",),
    "GCP": ("Google Cloud", "Google Cloud Platform"),
    "Docker": ("docker compose",),
    "Kubernetes": ("k8s",),
    "Terraform": (),
    "Ansible": (),
    "Jenkins": (),
    "GitHub Actions": (),
    "GitLab CI": (),
    "CI/CD": ("cicd", "ci / cd", "continuous integration"),
    "Linux": (),
    "Nginx": (),
    "Helm": (),
    "Prometheus": (),
    "Grafana": (),
    "Datadog": (),
    "Serverless": (),
    # Databases & data
    "PostgreSQL": ("postgres", "psql"),
    "MySQL": (),
    "MongoDB": ("mongo",),
    "Redis": (),
    "Elasticsearch": ("elastic search",),
    "Kafka": ("apache kafka",),
    "RabbitMQ": (),
    "SQLite": (),
    "Oracle": (),
    "SQL Server": ("mssql", "ms sql", "microsoft sql server"),
    "DynamoDB": ("dynamo db",),
    "Cassandra": (),
    "Snowflake": (),
    "BigQuery": (),
    "Redshift": (),
    "Spark": ("apache spark", "pyspark"),
    "Hadoop": (),
    "Airflow": ("apache airflow",),
    "dbt": (),
    # Data science & ML
    "Pandas": (),
    "NumPy": (),
    "SciPy": (),
    "scikit-learn": ("sklearn", "scikit learn"),
    "TensorFlow": ("tensor flow",),
    "PyTorch": ("torch",),
    "Keras": (),
    "Tableau": (),
    "Power BI": ("powerbi",),
    "Looker": (),
    "Machine Learning": ("ML",),
    "Deep Learning": (),
    "NLP": ("natural language processing",),
    "Computer Vision": (),
    "LLM": ("LLMs", "large language model", "large language models"),
    "Generative AI": ("GenAI", "gen ai"),
    "LangChain": (),
    "Hugging Face": ("huggingface",),
    # Tools
    "Git": (),
    "GitHub": (),
    "GitLab": (),
    "Jira": (),
    "Confluence": (),
    "Figma": (),
    "Postman": (),
    # Security
    "OAuth": ("oauth2", "oauth 2.0"),
    "JWT": (),
    # Methodologies
    "Agile": ("agile methodology",),
    "Scrum": (),
    "Kanban": (),
    "TDD": ("test-driven development", "test driven development"),
    "Unit Testing": ("unit tests",),
    # Mobile
    "Android": (),
    "iOS": (),
    "Flutter": (),
    "SwiftUI": (),
    # Testing
    "Jest": (),
    "Cypress": (),
    "Selenium": (),
    "Playwright": (),
    "pytest": (),
    "JUnit": (),
    # Soft skills & practices
    "Leadership": (),
    "Communication": ("communication skills",),
    "Project Management": ("project mgmt",),
}

# Canonical names that are also everyday English words; matched with exact casing
CASE_SENSITIVE_NAMES: frozenset[str] = frozenset({
    "Go", "Swift", "Rust", "Ruby", "Express", "Spring", "Node", "Oracle",
    "Helm", "Flask", "Spark", "REST", "Dart", "Looker", "Snowflake",
})

# Pairs that must never be folded together, however similar they look
DEFAULT_DISTINCT_PAIRS: frozenset[frozenset[str]] = frozenset({
    frozenset({"C", "C++"}),
    frozenset({"C", "C#"}),
    frozenset({"C++", "C#"}),
    frozenset({"Java", "JavaScript"}),
    frozenset({"React", "React Native"}),
    frozenset({"Python 2", "Python 3"}),
})

# Skill hierarchy: child skill implies parent skills
SKILL_IMPLICATIONS: dict[str, tuple[str, ...]] = {
    "React": ("JavaScript",),
    "Next.js": ("React", "JavaScript"),
    "Redux": ("React", "JavaScript"),
    "Angular": ("TypeScript", "JavaScript"),
    "Vue": ("JavaScript",),
    "Svelte": ("JavaScript",),
    "Nuxt": ("Vue", "JavaScript"),
    "React Native": ("JavaScript",),
    "Express": ("Node", "JavaScript"),
    "Django": ("Python",),
    "Flask": ("Python",),
    "FastAPI": ("Python",),
    "PyTorch": ("Python",),
    "TensorFlow": ("Python",),
    "Keras": ("Python", "TensorFlow"),
    "scikit-learn": ("Python",),
    "Pandas": ("Python",),
    "NumPy": ("Python",),
    "Python 2": ("Python",),
    "Python 3": ("Python",),
    "Kubernetes": ("Docker",),
    "Spring Boot": ("Spring", "Java"),
    "Spring": ("Java",),
    "Ruby on Rails": ("Ruby",),
    "Laravel": ("PHP",),
    "Flutter": ("Dart",),
    "SwiftUI": ("Swift", "iOS"),
    "ASP.NET": (".NET", "C#"),
    "PostgreSQL": ("SQL",),
    "MySQL": ("SQL",),
    "SQL Server": ("SQL",),
    "SQLite": ("SQL",),
    "GitHub Actions": ("CI/CD", "GitHub"),
    "GitLab CI": ("CI/CD", "GitLab"),
    "Jenkins": ("CI/CD",),
    "Deep Learning": ("Machine Learning",),
}

# Forms this short are matched case-sensitively with strict token boundaries
_SHORT_FORM_LEN = 2


def _form_key(form: str) -> str:
    return re.sub(r"\s+", " ", form.strip().lower())


def _form_regex(form: str) -> str:
    return re.escape(form.strip()).replace(r"\ ", r"\s+")


def _is_case_sensitive(form: str, skill: Skill) -> bool:
    if len(form) <= _SHORT_FORM_LEN:
        return True
    return skill.case_sensitive and form == skill.name


class SkillVocabulary:
    """Immutable skill reference table with mention scanning.

    Args:
        skills: canonical skills with their aliases.
        distinct_pairs: pairs of canonical names that must never be folded.
        implications: canonical name -> names it loosely implies.

    Raises:
        ValueError: if one surface form would resolve to two skills.
    """

    def __init__(
        self,
        skills: Iterable[Skill],
        distinct_pairs: Iterable[Iterable[str]] = DEFAULT_DISTINCT_PAIRS,
        implications: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._skills: dict[str, Skill] = {}
        self._ci_lookup: dict[str, str] = {}
        self._cs_lookup: dict[str, str] = {}
        self._distinct: frozenset[frozenset[str]] = frozenset(
            frozenset(pair) for pair in distinct_pairs
        )

        for skill in skills:
            if skill.name in self._skills:
                raise ValueError(f"Duplicate skill: {skill.name}")
            self._skills[skill.name] = skill
            for form in (skill.name, *sorted(skill.aliases)):
                self._register(form, skill)

        self._implications: dict[str, tuple[str, ...]] = {}
        for child, parents in (implications or {}).items():
            if child not in self._skills:
                continue
            kept = tuple(
                p for p in parents
                if p in self._skills and not self.are_distinct(child, p)
            )
            if kept:
                self._implications[child] = kept

        # Case-folded view of the case-sensitive forms, for explicit lookups only
        self._cs_folded: dict[str, str] = {}
        for form, name in self._cs_lookup.items():
            self._cs_folded.setdefault(form.lower(), name)

        self._ci_pattern = self._compile(self._ci_lookup.keys(), case_sensitive=False)
        self._cs_pattern = self._compile(self._cs_lookup.keys(), case_sensitive=True)

    def _register(self, form: str, skill: Skill) -> None:
        if _is_case_sensitive(form, skill):
            lookup, key = self._cs_lookup, form.strip()
        else:
            lookup, key = self._ci_lookup, _form_key(form)
        existing = lookup.get(key)
        if existing is not None and existing != skill.name:
            raise ValueError(
                f"Surface form {form!r} maps to both {existing!r} and {skill.name!r}"
            )
        lookup[key] = skill.name

    @staticmethod
    def _compile(forms: Iterable[str], case_sensitive: bool) -> re.Pattern | None:
        # Longest first so "react native" wins over "react" at the same position
        ordered = sorted(forms, key=lambda f: (-len(f), f))
        if not ordered:
            return None
        alternation = "|".join(_form_regex(f) for f in ordered)
        if case_sensitive:
            return re.compile(rf"(?<![\w.#+\-])(?:{alternation})(?![\w+#\-&])")
        return re.compile(rf"(?<![\w.#+])(?:{alternation})(?![\w+#])", re.IGNORECASE)

    # --- lookups -----------------------------------------------------------

    def __contains__(self, name: str) -> bool:
        return name in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    def get(self, name: str) -> Skill | None:
        return self._skills.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._skills)

    def resolve(self, surface: str) -> str | None:
        """Map a raw surface form to its canonical skill name, or None."""
        if not surface or not surface.strip():
            return None
        exact = self._cs_lookup.get(surface.strip())
        if exact is not None:
            return exact
        key = _form_key(surface)
        return self._ci_lookup.get(key) or self._cs_folded.get(key)

    def surface_forms(self, name: str) -> set[str]:
        """All lower-cased forms (canonical + aliases) of a skill."""
        skill = self._skills.get(name)
        if skill is None:
            return set()
        return {_form_key(f) for f in (skill.name, *skill.aliases)}

    def are_distinct(self, a: str, b: str) -> bool:
        return frozenset({a, b}) in self._distinct

    def implied_by(self, name: str) -> tuple[str, ...]:
        """Skills loosely implied by ``name`` (e.g. Django -> Python)."""
        return self._implications.get(name, ())

    def extend(self, extra: Iterable[Skill]) -> "SkillVocabulary":
        """Return a new table with ``extra`` skills added; unknown forms only."""
        added = [s for s in extra if s.name not in self._skills and self.resolve(s.name) is None]
        if not added:
            return self
        return SkillVocabulary(
            [*self._skills.values(), *added],
            distinct_pairs=self._distinct,
            implications=self._implications,
        )

    # --- scanning ----------------------------------------------------------

    def _scan_text(self, text: str) -> list[tuple[int, int, str]]:
        """Return non-overlapping (start, end, canonical) spans, longest first."""
        spans: list[tuple[int, int, str]] = []
        if self._ci_pattern is not None:
            for m in self._ci_pattern.finditer(text):
                name = self._ci_lookup.get(_form_key(m.group()))
                if name:
                    spans.append((m.start(), m.end(), name))
        if self._cs_pattern is not None:
            for m in self._cs_pattern.finditer(text):
                name = self._cs_lookup.get(m.group())
                if name:
                    spans.append((m.start(), m.end(), name))

        spans.sort(key=lambda s: (s[0], -(s[1] - s[0])))
        kept: list[tuple[int, int, str]] = []
        cursor = -1
        for start, end, name in spans:
            if start >= cursor:
                kept.append((start, end, name))
                cursor = end
        return kept

    def known_skills_in(self, text: str) -> list[str]:
        """Canonical names of every known skill named in a free-text string."""
        return [name for _, _, name in self._scan_text(text)]

    def find_mentions(self, document: Document, source: str) -> list[SkillMention]:
        """Scan every segment of a document for known skill surface forms."""
        mentions: list[SkillMention] = []
        for idx, seg in enumerate(document.segments):
            for start, end, name in self._scan_text(seg.text):
                mentions.append(SkillMention(
                    skill=name,
                    surface=seg.text[start:end],
                    source=source,
                    offset=seg.offset + start,
                    segment_index=idx,
                    segment_text=seg.text,
                ))
        return mentions

    def find_case_folded(
        self,
        document: Document,
        name: str,
        source: str,
        forms: Iterable[str] | None = None,
    ) -> list[SkillMention]:
        """Mentions of one skill in any letter case, case-sensitive forms included.

        Used once a skill is known to be wanted, so "swift" in a résumé still
        counts for a posting that asks for Swift. Short forms ("Go", "R") stay
        case-sensitive.
        """
        if name not in self._skills:
            return []
        if forms is None:
            forms = self.surface_forms(name)
        kept = sorted(
            {_form_key(f) for f in forms if len(f.strip()) > _SHORT_FORM_LEN},
            key=lambda f: (-len(f), f),
        )
        if not kept:
            return []
        alternation = "|".join(_form_regex(f) for f in kept)
        pattern = re.compile(rf"(?<![\w.#+])(?:{alternation})(?![\w+#])", re.IGNORECASE)

        mentions: list[SkillMention] = []
        for idx, seg in enumerate(document.segments):
            for m in pattern.finditer(seg.text):
                mentions.append(SkillMention(
                    skill=name,
                    surface=m.group(),
                    source=source,
                    offset=seg.offset + m.start(),
                    segment_index=idx,
                    segment_text=seg.text,
                ))
        return mentions


def build_vocabulary(
    skills: dict[str, tuple[str, ...]] | None = None,
    distinct_pairs: Iterable[Iterable[str]] | None = None,
    implications: dict[str, tuple[str, ...]] | None = None,
) -> SkillVocabulary:
    """Build a vocabulary from plain reference data (defaults when omitted)."""
    table = DEFAULT_SKILLS if skills is None else skills
    pairs = DEFAULT_DISTINCT_PAIRS if distinct_pairs is None else distinct_pairs
    implied = SKILL_IMPLICATIONS if implications is None else implications
    return SkillVocabulary(
        [
            Skill(
                name=name,
                aliases=frozenset(aliases),
                case_sensitive=name in CASE_SENSITIVE_NAMES,
            )
            for name, aliases in table.items()
        ],
        distinct_pairs=pairs,
        implications=implied,
    )


@lru_cache(maxsize=1)
def default_vocabulary() -> SkillVocabulary:
    """Shared read-only default table, built once per process."""
    vocab = build_vocabulary()
    logger.debug("Default skill vocabulary loaded: %d skills", len(vocab))
    return vocab


# ---------------------------------------------------------------------------
# Ad-hoc promotion: Title-Case technical terms shared verbatim by both documents
# ---------------------------------------------------------------------------
_TITLE_TERM_RE = re.compile(
    r"(?<![\w.])[A-Z][A-Za-z0-9.+#/-]*(?:[ \t]+[A-Z][A-Za-z0-9.+#/-]*){1,3}"
)

# Words that make a Title-Case phrase a heading, job title or place rather than a technology
_GENERIC_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "of", "for", "with", "in", "on", "to", "at",
    "we", "you", "our", "your", "us", "about", "who", "what", "why",
    "senior", "junior", "lead", "staff", "principal", "head", "chief", "intern",
    "engineer", "engineering", "developer", "development", "manager", "director",
    "analyst", "scientist", "architect", "consultant", "specialist", "designer",
    "requirements", "required", "qualifications", "preferred", "nice", "have",
    "bonus", "plus", "desirable", "must", "experience", "skills", "skill",
    "responsibilities", "summary", "education", "work", "professional",
    "technical", "job", "role", "position", "description", "team", "company",
    "remote", "hybrid", "years", "year", "knowledge", "strong", "ability",
    "bachelor", "bachelors", "master", "masters", "degree", "university",
    "college", "school", "inc", "llc", "ltd", "corp", "present", "current",
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
})

_TECH_VENDORS: frozenset[str] = frozenset({
    "apache", "google", "microsoft", "amazon", "aws", "azure", "adobe", "oracle",
    "sap", "salesforce", "ibm", "red", "unreal", "unity", "databricks", "hashicorp",
})

_TECH_SUFFIXES: frozenset[str] = frozenset({
    "engine", "framework", "studio", "cloud", "platform", "db", "sdk", "api",
    "apps", "server", "suite", "analytics", "lake", "pipelines", "functions",
    "lambda", "stack", "ml", "ai", "os", "script", "query",
})


def _looks_technical(tokens: list[str]) -> bool:
    for tok in tokens:
        if re.search(r"[0-9.+#/]", tok) or re.search(r"[a-z][A-Z]", tok):
            return True
    return tokens[0].lower() in _TECH_VENDORS or tokens[-1].lower() in _TECH_SUFFIXES


def _shared_verbatim(term: str, text: str) -> bool:
    return re.search(rf"(?<![\w]){re.escape(term)}(?![\w])", text) is not None


def promote_shared_terms(
    vocabulary: SkillVocabulary,
    posting: Document,
    resume: Document,
) -> list[Skill]:
    """Find unknown technical-looking multi-word terms present in both documents.

    Returns new alias-less skills in posting order; the vocabulary itself is
    not modified.
    """
    promoted: list[Skill] = []
    seen: set[str] = set()
    if posting.is_empty or resume.is_empty:
        return promoted

    for seg in posting.segments:
        for m in _TITLE_TERM_RE.finditer(seg.text):
            tokens = m.group().rstrip(".-/").split()
            # Longest sub-phrase first: "Apache Beam Pipelines" -> "Apache Beam"
            for size in range(len(tokens), 1, -1):
                found = None
                for i in range(len(tokens) - size + 1):
                    window = tokens[i:i + size]
                    term = " ".join(window).rstrip(".-/")
                    if any(t.lower().rstrip(".") in _GENERIC_WORDS for t in window):
                        continue
                    if not _looks_technical(window):
                        continue
                    if term.lower() in seen or vocabulary.known_skills_in(term):
                        continue
                    if _shared_verbatim(term, resume.raw):
                        found = term
                        break
                if found:
                    seen.add(found.lower())
                    promoted.append(Skill(name=found, ad_hoc=True))
                    break

    if promoted:
        logger.debug("Promoted ad-hoc skills: %s", [s.name for s in promoted])
    return promoted
