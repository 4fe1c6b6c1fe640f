"""
Key/value store endpoints (per user)
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from resume_analyzer.app.core.dependencies import get_current_user, get_db
from resume_analyzer.app.models.user import User
from resume_analyzer.app.schemas.kv import KVEntryOut, KVValueIn
from resume_analyzer.app.services import kv_service

router = APIRouter()


@router.get("")
def list_keys(
    pattern: str | None = None,
    return_values: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List keys; pattern supports a trailing '*' wildcard (e.g. resume:*)."""
    return kv_service.list_keys(db, current_user.id, pattern, return_values)


@router.get("/{key:path}", response_model=KVEntryOut)
def get_value(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    value = kv_service.get(db, current_user.id, key)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Key not found")
    return KVEntryOut(key=key, value=value)


@router.put("/{key:path}", response_model=KVEntryOut)
def set_value(
    key: str,
    payload: KVValueIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = kv_service.set(db, current_user.id, key, payload.value)
    return KVEntryOut(key=entry.key, value=entry.value)


@router.delete("/{key:path}")
def delete_value(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"deleted": kv_service.delete(db, current_user.id, key)}


@router.delete("")
def flush(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove every key for the current user."""
    return {"deleted": kv_service.flush(db, current_user.id)}
