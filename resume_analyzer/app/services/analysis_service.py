"""
ATS analysis: keyword match of resume text against a job description plus
section/structure checks. Produces the feedback payload stored with each resume
(feedback["ATS"]["score"] is the ATS score shown on the review page).
"""
from __future__ import annotations

import re
from typing import Any

from resume_analyzer.app.core.logging_config import get_logger

logger = get_logger("services.analysis")

# Tech aliases for match accuracy (resume may say "React.js", JD says "React")
_ALIASES: dict[str, list[str]] = {
    "react": ["react", "react.js", "reactjs"],
    "node": ["node", "node.js", "nodejs"],
    "javascript": ["javascript", "js"],
    "typescript": ["typescript", "ts"],
    "python": ["python", "py"],
    "vue": ["vue", "vue.js", "vuejs"],
    "angular": ["angular", "angularjs", "angular.js"],
    "mongodb": ["mongodb", "mongo"],
    "postgresql": ["postgresql", "postgres", "psql"],
    "rest": ["rest", "rest api", "restful"],
    "kubernetes": ["kubernetes", "k8s"],
    "machine learning": ["machine learning", "ml"],
    "artificial intelligence": ["artificial intelligence", "ai"],
    "c++": ["c++", "cpp"],
    "c#": ["c#", "csharp"],
}

_STOP_WORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "from", "have", "been", "will", "your", "you",
    "are", "our", "who", "can", "all", "any", "not", "but", "into", "about", "their", "they",
    "work", "working", "team", "teams", "strong", "experience", "years", "year", "role",
    "ability", "skills", "skill", "knowledge", "good", "great", "must", "should", "using",
    "plus", "well", "including", "etc", "per", "new", "job", "looking", "join", "help",
})

# Section name -> headings that count as that section
SECTIONS: dict[str, tuple[str, ...]] = {
    "contact": (),  # detected from email/phone, not a heading
    "summary": ("summary", "objective", "profile", "about me"),
    "experience": ("experience", "employment", "work history"),
    "education": ("education", "academic"),
    "skills": ("skills", "technologies", "tech stack", "competencies"),
    "projects": ("projects", "portfolio"),
}

_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_PHONE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
_QUANTIFIED = re.compile(r"\d+\s?%|\$\s?\d|\b\d{2,}\b")

MAX_KEYWORDS = 20
KEYWORD_WEIGHT = 0.6


def _get_aliases(kw: str) -> list[str]:
    k = kw.lower().strip()
    for base, alts in _ALIASES.items():
        if k in alts or k == base:
            return list(set([base] + alts))
    return [k]


def _resume_contains(resume_lower: str, keyword: str) -> bool:
    """Check if resume contains keyword (with alias expansion, word boundaries)."""
    if not keyword or len(keyword) < 2:
        return False
    for alt in _get_aliases(keyword):
        pattern = r"(?<![a-z0-9])" + re.escape(alt) + r"(?![a-z0-9])"
        if re.search(pattern, resume_lower):
            return True
    return False


def extract_keywords(job_description: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Candidate keywords from a JD in first-seen order, stop words removed."""
    text = re.sub(r"[^a-z0-9\s\-+#./]", " ", (job_description or "").lower())
    words = re.findall(r"[a-z0-9#+]{2,}(?:\.[a-z0-9]+)?", text)
    seen: set[str] = set()
    keywords = []
    for w in words:
        if w in _STOP_WORDS or w in seen or w.isdigit() or len(w) < 2:
            continue
        seen.add(w)
        keywords.append(w)
        if len(keywords) >= limit:
            break
    return keywords


def detect_sections(resume_text: str) -> dict[str, bool]:
    lower = (resume_text or "").lower()
    found = {}
    for name, headings in SECTIONS.items():
        if name == "contact":
            found[name] = bool(_EMAIL.search(resume_text or "") or _PHONE.search(resume_text or ""))
        else:
            found[name] = any(h in lower for h in headings)
    return found


def _tips(sections: dict[str, bool], missing_keywords: list[str], quantified: bool) -> list[dict[str, str]]:
    tips = []
    for name, present in sections.items():
        if present:
            tips.append({"type": "good", "tip": f"{name.title()} section detected"})
        elif name == "contact":
            tips.append({"type": "improve", "tip": "Add an email address or phone number"})
        else:
            tips.append({"type": "improve", "tip": f"Add a clearly labelled {name.title()} section"})
    if missing_keywords:
        tips.append({
            "type": "improve",
            "tip": "Mention these job keywords where true: " + ", ".join(missing_keywords[:8]),
        })
    if not quantified:
        tips.append({"type": "improve", "tip": "Quantify achievements with numbers or percentages"})
    return tips


def analyze_resume(resume_text: str, job_description: str = "", job_title: str = "") -> dict[str, Any]:
    """
    Score a resume for ATS compatibility (0-100).

    With a job description: 60% keyword match + 40% structure.
    Without one: structure only.
    """
    text = (resume_text or "").strip()
    resume_lower = text.lower()

    sections = detect_sections(text)
    section_percent = round(100 * sum(sections.values()) / len(sections))

    keywords = extract_keywords(f"{job_title} {job_description}".strip())
    matched = [k for k in keywords if _resume_contains(resume_lower, k)]
    missing = [k for k in keywords if k not in matched]
    keyword_percent = round(100 * len(matched) / len(keywords)) if keywords else None

    if not text:
        score = 0
    elif keyword_percent is None:
        score = section_percent
    else:
        score = round(KEYWORD_WEIGHT * keyword_percent + (1 - KEYWORD_WEIGHT) * section_percent)
    score = max(0, min(100, score))

    quantified = bool(_QUANTIFIED.search(text))
    feedback = {
        "overallScore": score,
        "ATS": {"score": score, "tips": _tips(sections, missing, quantified)},
        "keywords": {
            "total": len(keywords),
            "matched": [k.title() for k in matched],
            "missing": [k.title() for k in missing],
            "percent": keyword_percent if keyword_percent is not None else 0,
        },
        "sections": sections,
        "quantifiedAchievements": quantified,
    }
    if not text:
        feedback["message"] = "No readable text found in resume"

    logger.info(
        "ATS analysis done score=%d keywords=%d matched=%d sections=%d/%d",
        score,
        len(keywords),
        len(matched),
        sum(sections.values()),
        len(sections),
    )
    return feedback
