"""
Per-user key/value store backed by the kv_store table.
"""
from sqlalchemy.orm import Session

from resume_analyzer.app.models.kv_entry import KVEntry


def get(db: Session, user_id: int, key: str) -> str | None:
    entry = db.query(KVEntry).filter(KVEntry.user_id == user_id, KVEntry.key == key).first()
    return entry.value if entry else None


def set(db: Session, user_id: int, key: str, value: str | None) -> KVEntry:
    """Upsert on (key, user_id)."""
    if not key:
        raise ValueError("Key is required")
    entry = db.query(KVEntry).filter(KVEntry.user_id == user_id, KVEntry.key == key).first()
    if entry:
        entry.value = value
    else:
        entry = KVEntry(user_id=user_id, key=key, value=value)
        db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def delete(db: Session, user_id: int, key: str) -> bool:
    deleted = (
        db.query(KVEntry)
        .filter(KVEntry.user_id == user_id, KVEntry.key == key)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def list_keys(db: Session, user_id: int, pattern: str | None = None, return_values: bool = False) -> list:
    """Keys for a user. A trailing '*' in pattern matches any suffix; otherwise exact match."""
    q = db.query(KVEntry).filter(KVEntry.user_id == user_id)
    if pattern and pattern != "*":
        if pattern.endswith("*"):
            prefix = pattern[:-1]
            q = q.filter(KVEntry.key.startswith(prefix, autoescape=True))
        else:
            q = q.filter(KVEntry.key == pattern)
    entries = q.order_by(KVEntry.key).all()
    if return_values:
        return [{"key": e.key, "value": e.value} for e in entries]
    return [e.key for e in entries]


def flush(db: Session, user_id: int) -> int:
    """Delete every entry for a user. Returns the number removed."""
    deleted = db.query(KVEntry).filter(KVEntry.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    return deleted
