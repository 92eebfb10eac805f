from types import MappingProxyType

# ── Skill categories ─────────────────────────────────────────────────────
# A skill belongs to a category when it contains one of the keywords or is
# contained by one ("react" -> frontend, "senior react developer" -> frontend).

SKILL_CATEGORIES = MappingProxyType({
    "programming": frozenset({
        "javascript", "typescript", "python", "java", "c++", "c#", "ruby",
        "go", "rust", "php", "swift", "kotlin", "scala",
    }),
    "frontend": frozenset({
        "react", "vue", "angular", "svelte", "html", "css", "sass",
        "tailwind", "bootstrap", "next.js",
    }),
    "backend": frozenset({
        "node.js", "express", "django", "flask", "spring", "rails",
        "laravel", "fastapi", "graphql",
    }),
    "data": frozenset({
        "sql", "mysql", "postgresql", "mongodb", "redis", "data science",
        "machine learning", "analytics",
    }),
    "cloud": frozenset({
        "aws", "azure", "gcp", "docker", "kubernetes", "devops", "ci/cd",
        "terraform",
    }),
    "design": frozenset({
        "figma", "sketch", "adobe xd", "photoshop", "illustrator", "ui/ux",
        "user research",
    }),
    "business": frozenset({
        "project management", "agile", "scrum", "product management",
        "marketing", "sales", "strategy",
    }),
    "soft_skills": frozenset({
        "communication", "leadership", "teamwork", "problem solving",
        "critical thinking", "time management",
    }),
})

# ── Industry groups ──────────────────────────────────────────────────────
# Matched one way only: an industry string is in a group when it contains
# one of the group's keywords.

INDUSTRY_GROUPS = MappingProxyType({
    "tech": frozenset({
        "technology", "software", "it", "engineering", "data science",
        "cybersecurity", "ai", "machine learning",
    }),
    "business": frozenset({
        "finance", "accounting", "consulting", "banking", "investment",
        "business", "management",
    }),
    "creative": frozenset({
        "design", "marketing", "advertising", "media", "entertainment",
        "content", "creative",
    }),
    "healthcare": frozenset({
        "healthcare", "medical", "pharmaceutical", "biotech", "nursing",
        "health",
    }),
    "education": frozenset({
        "education", "teaching", "training", "academic", "research",
        "learning",
    }),
    "manufacturing": frozenset({
        "manufacturing", "production", "operations", "supply chain",
        "logistics", "industrial",
    }),
})


def skill_categories_for(terms: list[str]) -> set[str]:
    """Return every skill category touched by at least one normalized term."""
    found: set[str] = set()
    for category, keywords in SKILL_CATEGORIES.items():
        if any(kw in term or term in kw for term in terms for kw in keywords):
            found.add(category)
    return found


def industry_groups_for(industry: str) -> set[str]:
    """Return every industry group whose keyword appears in a normalized industry."""
    return {
        group
        for group, keywords in INDUSTRY_GROUPS.items()
        if any(kw in industry for kw in keywords)
    }
