"""
Resume service - upload pipeline (store PDF, render preview, analyze, persist),
review lookup, file access and deletion.

Each uploaded resume has a Resume row plus a "resume:{id}" KV record holding
{resumePath, imagePath, feedback, jobTitle, jobDescription} for the review page.
The record is user-writable through /api/kv, so reads go through the owned
Resume row and only accept storage paths under the user's prefix.
"""
from __future__ import annotations

import json
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import (
    ALLOWED_RESUME_EXTENSIONS,
    RESUME_FOLDER,
    RESUME_IMAGE_FOLDER,
    RESUME_KV_PREFIX,
    STORAGE_USERS_PREFIX,
    settings,
)
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.models.resume import Resume
from resume_analyzer.app.models.user import User
from resume_analyzer.app.services import kv_service, storage_service
from resume_analyzer.app.services.analysis_service import analyze_resume
from resume_analyzer.app.services.pdf_converter import convert_pdf_to_image, extract_text_from_pdf, is_pdf
from resume_analyzer.app.services.storage_service import StorageConfigError, StorageNotFoundError
from resume_analyzer.app.services.trial_service import consume_trial, get_trial_status, refund_trial

logger = get_logger("services.resume")


class ResumeNotFoundError(LookupError):
    """No resume (or no readable review record) for this user and id."""


def resume_kv_key(resume_id: int) -> str:
    return f"{RESUME_KV_PREFIX}{resume_id}"


def validate_resume_file(data: bytes, file_name: str, content_type: str | None) -> None:
    if not data:
        raise ValueError("Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise ValueError(f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB")
    suffix = Path(file_name or "").suffix.lower()
    if suffix not in ALLOWED_RESUME_EXTENSIONS or not is_pdf(data, file_name, content_type):
        raise ValueError(f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_RESUME_EXTENSIONS))}")


def upload_resume(
    db: Session,
    user: User,
    data: bytes,
    file_name: str,
    content_type: str | None = None,
    job_title: str = "",
    job_description: str = "",
) -> dict:
    """
    Store a resume, render its preview, analyze it and persist the results.
    Consumes one trial use; on failure the use is refunded and uploaded objects removed.
    """
    validate_resume_file(data, file_name, content_type)
    consume_trial(db, user)

    uploaded: list[str] = []
    try:
        pdf_meta = storage_service.upload_file(data, file_name, "application/pdf", user.uuid, RESUME_FOLDER)
        uploaded.append(pdf_meta.path)

        image_path = ""
        conversion = convert_pdf_to_image(data, file_name, content_type)
        if conversion.ok:
            image_meta = storage_service.upload_file(
                conversion.image_bytes,
                conversion.file_name,
                conversion.content_type,
                user.uuid,
                RESUME_IMAGE_FOLDER,
            )
            uploaded.append(image_meta.path)
            image_path = image_meta.path
        else:
            logger.warning("Resume preview unavailable user_id=%s error=%s", user.id, conversion.error)

        feedback = analyze_resume(extract_text_from_pdf(data), job_description, job_title)
        ats_score = int(feedback["ATS"]["score"])

        resume = Resume(
            user_id=user.id,
            file_name=pdf_meta.name,
            file_path=pdf_meta.path,
            file_size=pdf_meta.size,
            mime_type="application/pdf",
            storage_url=pdf_meta.url,
            analysis_data=feedback,
            ats_score=ats_score,
        )
        db.add(resume)
        # flush for the id; the KV upsert commits both rows together
        db.flush()

        record = {
            "id": resume.id,
            "resumePath": pdf_meta.path,
            "imagePath": image_path,
            "feedback": feedback,
            "jobTitle": job_title or "",
            "jobDescription": job_description or "",
        }
        kv_service.set(db, user.id, resume_kv_key(resume.id), json.dumps(record))
        db.refresh(resume)
    except Exception:
        db.rollback()
        for path in uploaded:
            storage_service.delete_file(path)
        refund_trial(db, user)
        raise

    logger.info(
        "Resume uploaded user_id=%s resume_id=%s path=%s ats_score=%s",
        user.id,
        resume.id,
        resume.file_path,
        ats_score,
    )
    return {
        "id": resume.id,
        "file_name": resume.file_name,
        "resume_path": resume.file_path,
        "image_path": image_path or None,
        "ats_score": ats_score,
        "feedback": feedback,
        "trial": get_trial_status(user).to_dict(),
        "preview_error": conversion.error,
    }


def list_resumes(db: Session, user: User) -> list[Resume]:
    return (
        db.query(Resume)
        .filter(Resume.user_id == user.id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    )


def owned_resume(db: Session, user: User, resume_id: int) -> Resume:
    resume = db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == user.id).first()
    if not resume:
        logger.info("Resume not found user_id=%s resume_id=%s", user.id, resume_id)
        raise ResumeNotFoundError("Resume not found")
    return resume


def load_review_record(db: Session, user: User, resume_id: int) -> dict:
    """Parsed "resume:{id}" record; ResumeNotFoundError when missing or unreadable."""
    raw = kv_service.get(db, user.id, resume_kv_key(resume_id))
    if not raw:
        logger.info("Resume record not found user_id=%s resume_id=%s", user.id, resume_id)
        raise ResumeNotFoundError("Resume not found")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error("Failed to parse resume record user_id=%s resume_id=%s: %s", user.id, resume_id, e)
        raise ResumeNotFoundError("Resume data is corrupted") from e
    if not isinstance(data, dict):
        raise ResumeNotFoundError("Resume data is corrupted")
    return data


def _record_text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ResumeNotFoundError("Resume data is corrupted")
    return value


def _owned_path(user: User, path: str) -> str:
    """Storage key only when it sits under the user's own prefix."""
    if path and path.startswith(f"{STORAGE_USERS_PREFIX}/{user.uuid}/") and ".." not in path.split("/"):
        return path
    if path:
        logger.warning("Ignoring foreign storage path user_id=%s path=%s", user.id, path)
    return ""


def _record_feedback(data: dict, resume: Resume) -> tuple[dict | None, int]:
    feedback = data.get("feedback")
    if feedback is None:
        return None, int(resume.ats_score or 0)
    if not isinstance(feedback, dict):
        raise ResumeNotFoundError("Resume data is corrupted")
    ats = feedback.get("ATS")
    if ats is None:
        return feedback, int(resume.ats_score or 0)
    if not isinstance(ats, dict):
        raise ResumeNotFoundError("Resume data is corrupted")
    score = ats.get("score")
    if score is None:
        return feedback, int(resume.ats_score or 0)
    if isinstance(score, bool):
        raise ResumeNotFoundError("Resume data is corrupted")
    try:
        return feedback, int(score)
    except (TypeError, ValueError) as e:
        raise ResumeNotFoundError("Resume data is corrupted") from e


def _signed_url_or_none(path: str) -> str | None:
    if not path:
        return None
    try:
        return storage_service.get_signed_url(path)
    except (StorageNotFoundError, StorageConfigError, ClientError, BotoCoreError) as e:
        logger.warning("Signed URL unavailable path=%s error=%s", path, e)
        return None


def get_review(db: Session, user: User, resume_id: int) -> dict:
    """
    Review page payload. Storage paths come from the user's own Resume row;
    the KV image path is only used when it is under the user's prefix.
    """
    resume = owned_resume(db, user, resume_id)
    data = load_review_record(db, user, resume_id)
    feedback, ats_score = _record_feedback(data, resume)
    resume_path = _owned_path(user, resume.file_path)
    image_path = _owned_path(user, _record_text(data, "imagePath"))
    return {
        "id": resume.id,
        "job_title": _record_text(data, "jobTitle"),
        "job_description": _record_text(data, "jobDescription"),
        "resume_path": resume_path,
        "image_path": image_path,
        "resume_url": _signed_url_or_none(resume_path),
        "image_url": _signed_url_or_none(image_path),
        "feedback": feedback,
        "ats_score": ats_score,
    }


def read_resume_asset(db: Session, user: User, resume_id: int, kind: str) -> tuple[bytes, str, str]:
    """
    Bytes of the stored PDF ("file") or preview ("image") via the retrying reader.
    Returns (content, media_type, filename).
    """
    resume = owned_resume(db, user, resume_id)
    if kind == "image":
        data = load_review_record(db, user, resume_id)
        path, media_type = _owned_path(user, _record_text(data, "imagePath")), "image/png"
    else:
        path, media_type = _owned_path(user, resume.file_path), "application/pdf"
    if not path:
        raise ResumeNotFoundError(f"No {kind} stored for this resume")
    content = storage_service.read_file(path)
    return content, media_type, Path(path).name


def delete_resume(db: Session, user: User, resume_id: int) -> None:
    resume = owned_resume(db, user, resume_id)

    paths = [resume.file_path]
    raw = kv_service.get(db, user.id, resume_kv_key(resume_id))
    if raw:
        try:
            image_path = (json.loads(raw) or {}).get("imagePath")
        except (TypeError, ValueError, AttributeError):
            image_path = None
        if isinstance(image_path, str) and _owned_path(user, image_path):
            paths.append(image_path)

    db.delete(resume)
    db.commit()
    kv_service.delete(db, user.id, resume_kv_key(resume_id))

    for path in paths:
        try:
            storage_service.delete_file(path)
        except StorageConfigError as e:
            logger.warning("Skipping storage cleanup for resume_id=%s: %s", resume_id, e)
    logger.info("Resume deleted user_id=%s resume_id=%s", user.id, resume_id)
