"""Tests for the ATS analysis"""
from resume_analyzer.app.services.analysis_service import analyze_resume, detect_sections, extract_keywords

RESUME = """Ada Lovelace
ada@example.com | +1 555 010 0000
SUMMARY
Backend engineer.
EXPERIENCE
Built Python and React.js services, cut latency by 40%.
EDUCATION
BSc Computer Science
SKILLS
Python, React, PostgreSQL, Docker
PROJECTS
Resume analyzer
"""


def test_extract_keywords_drops_stop_words_and_duplicates():
    keywords = extract_keywords("We are looking for Python and Python and Kubernetes experience")
    assert keywords == ["we", "python", "kubernetes"]


def test_extract_keywords_limit():
    assert len(extract_keywords(" ".join(f"tool{i}" for i in range(50)), limit=5)) == 5


def test_detect_sections_full_resume():
    assert detect_sections(RESUME) == {
        "contact": True,
        "summary": True,
        "experience": True,
        "education": True,
        "skills": True,
        "projects": True,
    }


def test_detect_sections_missing():
    sections = detect_sections("Just some text without headings")
    assert not any(sections.values())


def test_analyze_without_job_description_scores_structure():
    feedback = analyze_resume(RESUME)
    assert feedback["ATS"]["score"] == 100
    assert feedback["overallScore"] == 100
    assert feedback["keywords"]["total"] == 0
    assert feedback["quantifiedAchievements"] is True


def test_analyze_with_job_description_blends_keyword_match():
    feedback = analyze_resume(RESUME, "Python Kubernetes", "")
    # 1 of 2 keywords matched -> 0.6 * 50 + 0.4 * 100
    assert feedback["keywords"]["matched"] == ["Python"]
    assert feedback["keywords"]["missing"] == ["Kubernetes"]
    assert feedback["keywords"]["percent"] == 50
    assert feedback["ATS"]["score"] == 70


def test_analyze_matches_aliases():
    feedback = analyze_resume(RESUME, "react postgres")
    assert feedback["keywords"]["percent"] == 100


def test_analyze_empty_text_scores_zero():
    feedback = analyze_resume("", "Python")
    assert feedback["ATS"]["score"] == 0
    assert feedback["message"] == "No readable text found in resume"


def test_tips_point_at_missing_sections():
    feedback = analyze_resume("Experience\nDid things")
    tips = [t["tip"] for t in feedback["ATS"]["tips"] if t["type"] == "improve"]
    assert "Add an email address or phone number" in tips
    assert "Add a clearly labelled Education section" in tips
    assert "Quantify achievements with numbers or percentages" in tips
