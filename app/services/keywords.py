"""
Keyword tables shared by the eligibility filter, relevance fallback and amount estimator.

All tables are built once at import time and are immutable. Patterns match text that
went through ``normalize_text`` (lowercase, accents folded).
"""
import re
from typing import Pattern


def _word_pattern(*terms: str) -> Pattern:
    """Compile terms into one word-bounded, case-insensitive pattern"""
    alternatives = '|'.join(re.escape(term) for term in terms)
    return re.compile(rf"(?<![a-z0-9])(?:{alternatives})(?![a-z0-9])")


# ---------------------------------------------------------------------------
# Nationality buckets
# ---------------------------------------------------------------------------

# Allow-list entries are split into tokens on "_" ("non-eu" -> {"non", "eu"})
ALL_TOKEN = "all"
NEGATION_TOKEN = "non"
CITIZEN_TOKENS = frozenset({"citizen", "citizens", "french", "national", "nationals", "eu", "eea"})
EU_TOKENS = frozenset({"eu", "eea", "ue"})
# Entries implying a valid residence permit admit documented non-EU residents
RESIDENCE_PERMIT_TOKENS = frozenset({"titre", "sejour", "permit", "residence"})

# Only these entries make a failed nationality match exclude the program
STRICT_NATIONALITY_MARKERS = frozenset({
    "french_only", "citizen_only", "citizens_only", "national_only", "eu_only",
})

# ---------------------------------------------------------------------------
# Profile types
# ---------------------------------------------------------------------------

PROFILE_SYNONYMS = {
    "students": frozenset({"student", "students", "etudiant", "etudiants"}),
    "workers": frozenset({"worker", "workers", "employed", "salarie", "salaries", "travailleur", "travailleurs"}),
    "jobseekers": frozenset({
        "jobseeker", "jobseekers", "job_seeker", "job_seekers",
        "demandeur_d'emploi", "demandeurs_d'emploi", "demandeurs_emploi",
    }),
}

WORKER_STATUSES = frozenset({"worker", "employed", "salarie", "travailleur"})
WORKER_EMPLOYMENT = frozenset({"employed", "self-employed"})
JOBSEEKER_STATUSES = frozenset({"job-seeker", "jobseeker", "job_seeker", "unemployed"})
STUDENT_STATUSES = frozenset({"student", "etudiant"})

# ---------------------------------------------------------------------------
# Housing
# ---------------------------------------------------------------------------

HOUSING_CATEGORIES = frozenset({"housing", "logement"})

# Benefits computed from the rent a tenant pays
RENT_LINKED_PATTERN = _word_pattern(
    "apl", "als", "alf",
    "aide personnalisee au logement",
    "allocation de logement sociale",
    "allocation de logement familiale",
)

# ---------------------------------------------------------------------------
# Relevance fallback: disqualifying keywords by situation
# ---------------------------------------------------------------------------

CHILD_PATTERN = _word_pattern(
    "enfant", "enfants", "naissance", "grossesse", "familiales", "paje", "cmg",
    "ars", "aeeh", "garde", "child", "children", "childcare",
)

DISABILITY_PATTERN = _word_pattern(
    "handicap", "handicape", "handicapee", "aah", "pch", "cmi", "invalidite", "disability",
)

SENIOR_PATTERN = _word_pattern(
    "aspa", "apa", "personnes agees", "personne agee", "retraite", "retraites", "senior", "seniors",
)

UNEMPLOYMENT_PATTERN = _word_pattern(
    "demandeur d'emploi", "demandeurs d'emploi", "chomage",
    "aide au retour a l'emploi", "allocation de solidarite specifique",
    "retour emploi", "retour a l'emploi", "unemployment",
)

# ---------------------------------------------------------------------------
# Program family signals (name and category)
# ---------------------------------------------------------------------------

SCHOLARSHIP_PATTERN = re.compile(r"bourse.*criteres sociaux")
MINIMUM_INCOME_PATTERN = _word_pattern("rsa", "revenu de solidarite active")
ACTIVITY_BONUS_PATTERN = _word_pattern("prime d'activite", "prime activite", "prime d activite")
TRANSPORT_PASS_PATTERN = _word_pattern("imagine r", "navigo")
MANDATORY_FEE_PATTERN = _word_pattern("cvec", "contribution vie etudiante")

FAMILY_CATEGORIES = frozenset({"family", "famille"})
EDUCATION_CATEGORIES = frozenset({"education", "etudiant"})

# Category-keyed defaults for programs with no recognized family
DEFAULT_CATEGORY_AMOUNTS = {
    "housing": 200,
    "logement": 200,
    "health": 50,
    "sante": 50,
    "transport": 30,
    "education": 100,
    "formation": 100,
}
DEFAULT_AMOUNT = 50
