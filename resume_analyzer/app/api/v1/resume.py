"""
Resume endpoints - upload + analysis, list, review data, file/preview proxy, delete
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from resume_analyzer.app.core.dependencies import get_current_user, get_db
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.models.user import User
from resume_analyzer.app.schemas.resume import ResumeReviewResponse, ResumeSummary, ResumeUploadResponse
from resume_analyzer.app.services import resume_service
from resume_analyzer.app.services.resume_service import ResumeNotFoundError
from resume_analyzer.app.services.storage_service import StorageConfigError, StorageNotFoundError
from resume_analyzer.app.services.trial_service import TrialExhaustedError
from resume_analyzer.app.utils.retry import RetryError

logger = get_logger("api.resume")
router = APIRouter()


@router.post("/upload", response_model=ResumeUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_resume(
    file: UploadFile = File(...),
    job_title: str = Form(""),
    job_description: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a resume PDF for analysis. Counts against the free trial.

    Returns the stored paths, ATS feedback and the updated trial status.
    """
    contents = file.file.read()
    try:
        return resume_service.upload_resume(
            db,
            current_user,
            contents,
            file.filename or "",
            file.content_type,
            job_title=(job_title or "").strip(),
            job_description=(job_description or "").strip(),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TrialExhaustedError as e:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e))
    except StorageConfigError as e:
        logger.error("Upload rejected, storage not configured: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except RetryError as e:
        logger.error("Upload failed user_id=%s error=%s", current_user.id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.exception("Resume upload error user_id=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Resume upload failed: {str(e)}",
        )


@router.get("", response_model=list[ResumeSummary])
def list_resumes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List user's resumes, newest first."""
    return resume_service.list_resumes(db, current_user)


@router.get("/{resume_id}", response_model=ResumeReviewResponse)
def get_resume_review(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Review data for one resume: feedback, ATS score, job context and signed file URLs."""
    try:
        return resume_service.get_review(db, current_user, resume_id)
    except ResumeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _asset_response(db: Session, user: User, resume_id: int, kind: str) -> Response:
    try:
        content, media_type, filename = resume_service.read_resume_asset(db, user, resume_id, kind)
    except (ResumeNotFoundError, StorageNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except RetryError as e:
        logger.error("Could not load resume %s user_id=%s resume_id=%s: %s", kind, user.id, resume_id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to fetch {kind}: {e}")
    logger.info("Served resume %s user_id=%s resume_id=%s bytes=%d", kind, user.id, resume_id, len(content))
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.get("/{resume_id}/file")
def get_resume_file(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Proxy the resume PDF through the backend (avoids bucket CORS)."""
    return _asset_response(db, current_user, resume_id, "file")


@router.get("/{resume_id}/image")
def get_resume_image(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Proxy the first-page PNG preview."""
    return _asset_response(db, current_user, resume_id, "image")


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        resume_service.delete_resume(db, current_user, resume_id)
    except ResumeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
