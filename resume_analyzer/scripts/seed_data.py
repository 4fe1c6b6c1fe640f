"""
Seed the database with development data.

Usage: python -m resume_analyzer.scripts.seed_data [--upload-files]

Creates three users, three resumes with their "resume:{id}" review records,
one session per user and two KV entries for the first user. Re-running updates
the same rows instead of adding more. With --upload-files each sample resume is
rendered to PDF and uploaded to the bucket so the resume rows point at real
objects.
"""
import argparse
import json
import sys
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import RESUME_FOLDER, RESUME_KV_PREFIX, STORAGE_USERS_PREFIX, settings
from resume_analyzer.app.core.logging_config import get_logger, setup_logging
from resume_analyzer.app.db.session import SessionLocal
from resume_analyzer.app.models.kv_entry import KVEntry
from resume_analyzer.app.models.resume import Resume
from resume_analyzer.app.models.user import User
from resume_analyzer.app.models.user_session import UserSession
from resume_analyzer.app.services import kv_service, storage_service
from resume_analyzer.app.services.pdf_generator import resume_to_pdf_bytes

logger = get_logger("scripts.seed_data")

SEED_USERS = [
    {"name": "John Developer", "email": "john@example.com", "subscription_tier": "free", "trial_uses": 1, "max_trial_uses": 3},
    {"name": "Jane Engineer", "email": "jane@example.com", "subscription_tier": "pro", "trial_uses": 3, "max_trial_uses": 3},
    {"name": "Test User", "email": "test@example.com", "subscription_tier": "free", "trial_uses": 0, "max_trial_uses": 3},
]

# owner is an index into SEED_USERS
SEED_RESUMES = [
    {
        "owner": 0,
        "file_name": "john_developer_resume.pdf",
        "file_size": 125000,
        "ats_score": 78,
        "analysis_data": {
            "score": 78,
            "summary": "Strong technical resume with good experience in web development.",
            "strengths": ["Clear formatting", "Relevant skills listed", "Quantified achievements"],
            "improvements": ["Add more keywords", "Include soft skills", "Expand project descriptions"],
            "keywords": ["JavaScript", "React", "Node.js", "TypeScript", "AWS"],
            "experience_years": 5,
        },
    },
    {
        "owner": 0,
        "file_name": "john_backend_resume.pdf",
        "file_size": 98000,
        "ats_score": 65,
        "analysis_data": {
            "score": 65,
            "summary": "Backend-focused resume, needs more detail on projects.",
            "strengths": ["Good technical depth", "Clear experience timeline"],
            "improvements": ["Missing action verbs", "Add metrics", "Better summary section"],
            "keywords": ["Python", "Django", "PostgreSQL", "Docker", "Kubernetes"],
            "experience_years": 3,
        },
    },
    {
        "owner": 1,
        "file_name": "jane_engineer_resume.pdf",
        "file_size": 156000,
        "ats_score": 92,
        "analysis_data": {
            "score": 92,
            "summary": "Excellent resume with strong ATS optimization.",
            "strengths": ["Highly optimized for ATS", "Strong action verbs", "Quantified results", "Relevant keywords"],
            "improvements": ["Consider adding certifications section"],
            "keywords": ["Machine Learning", "Python", "TensorFlow", "Data Science", "AWS", "SQL"],
            "experience_years": 7,
        },
    },
]


def upsert_user(db: Session, data: dict) -> User:
    user = db.query(User).filter(User.email == data["email"]).first()
    if user:
        user.name = data["name"]
    else:
        user = User(uuid=str(uuid.uuid4()), **data)
        db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _sample_pdf(user: User, sample: dict) -> bytes:
    analysis = sample["analysis_data"]
    return resume_to_pdf_bytes(
        user.name,
        {
            "Summary": [analysis["summary"]],
            "Skills": [", ".join(analysis["keywords"])],
            "Experience": [f"{analysis['experience_years']} years of professional experience"],
        },
        contact=user.email or "",
    )


def upsert_resume(db: Session, user: User, sample: dict, upload_files: bool = False) -> Resume:
    resume = (
        db.query(Resume)
        .filter(Resume.user_id == user.id, Resume.file_name == sample["file_name"])
        .first()
    )
    if resume is None:
        resume = Resume(
            user_id=user.id,
            file_name=sample["file_name"],
            file_path=f"{STORAGE_USERS_PREFIX}/{user.uuid}/{RESUME_FOLDER}/{sample['file_name']}",
            file_size=sample["file_size"],
            mime_type="application/pdf",
        )
        db.add(resume)
    resume.ats_score = sample["ats_score"]
    resume.analysis_data = sample["analysis_data"]

    if upload_files and not resume.storage_url:
        meta = storage_service.upload_file(
            _sample_pdf(user, sample), sample["file_name"], "application/pdf", user.uuid, RESUME_FOLDER
        )
        resume.file_path = meta.path
        resume.file_size = meta.size
        resume.storage_url = meta.url
        logger.info("Uploaded sample resume file_name=%s path=%s", sample["file_name"], meta.path)

    db.commit()
    db.refresh(resume)
    return resume


def _sample_feedback(sample: dict) -> dict:
    analysis = sample["analysis_data"]
    tips = [{"type": "good", "tip": s} for s in analysis["strengths"]]
    tips += [{"type": "improve", "tip": s} for s in analysis["improvements"]]
    return {**analysis, "overallScore": sample["ats_score"], "ATS": {"score": sample["ats_score"], "tips": tips}}


def upsert_review_record(db: Session, user: User, resume: Resume, sample: dict) -> None:
    """Write the review record the resume page reads for this seeded resume."""
    record = {
        "id": resume.id,
        "resumePath": resume.file_path,
        "imagePath": "",
        "feedback": _sample_feedback(sample),
        "jobTitle": "",
        "jobDescription": "",
    }
    kv_service.set(db, user.id, f"{RESUME_KV_PREFIX}{resume.id}", json.dumps(record))


def ensure_session(db: Session, user: User, now: datetime | None = None) -> UserSession:
    """Reuse an unexpired session for the user, otherwise create one."""
    now = now or datetime.utcnow()
    session = (
        db.query(UserSession)
        .filter(UserSession.user_id == user.id, UserSession.expires_at > now)
        .first()
    )
    if session:
        return session
    session = UserSession(
        user_id=user.id,
        session_token=f"test_session_{uuid.uuid4()}",
        expires_at=now + timedelta(days=settings.session_ttl_days),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def seed(db: Session, upload_files: bool = False) -> dict:
    users = [upsert_user(db, data) for data in SEED_USERS]
    for user in users:
        print(f"  user: {user.name} ({user.email})")

    for sample in SEED_RESUMES:
        owner = users[sample["owner"]]
        resume = upsert_resume(db, owner, sample, upload_files=upload_files)
        upsert_review_record(db, owner, resume, sample)
        print(f"  resume: {resume.file_name} (ATS score: {resume.ats_score})")

    for user in users:
        ensure_session(db, user)

    kv_service.set(db, users[0].id, "last_analysis_date", datetime.utcnow().isoformat())
    kv_service.set(db, users[0].id, "preferences", json.dumps({"theme": "dark", "notifications": True}))

    return {
        "users": db.query(User).count(),
        "resumes": db.query(Resume).count(),
        "sessions": db.query(UserSession).count(),
        "kv_entries": db.query(KVEntry).count(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed development data")
    parser.add_argument("--upload-files", action="store_true", help="Render sample PDFs and upload them to storage")
    args = parser.parse_args(argv)

    setup_logging()
    db = SessionLocal()
    try:
        counts = seed(db, upload_files=args.upload_files)
    except Exception as e:
        db.rollback()
        logger.error("Seeding failed: %s", e)
        return 1
    finally:
        db.close()

    print("Seed data summary:")
    for name, count in counts.items():
        print(f"  {name}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
