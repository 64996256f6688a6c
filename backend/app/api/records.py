"""Records API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.record import Record
from app.models.user import User
from app.schemas.auth import OkResponse
from app.schemas.record import RecordCreate, RecordResponse, RecordUpdate

router = APIRouter(prefix="/records", tags=["records"])


def _get_owned_record(db: Session, user: User, record_id: str) -> Record:
    record = db.query(Record).filter(
        Record.id == record_id,
        Record.user_id == user.id,
    ).first()
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Record not found",
        )
    return record


@router.get("", response_model=list[RecordResponse])
def list_records(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the current user's records, newest first."""
    return (
        db.query(Record)
        .filter(Record.user_id == current_user.id)
        .order_by(Record.created_at.desc())
        .all()
    )


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
def create_record(
    record_data: RecordCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a record."""
    record = Record(
        user_id=current_user.id,
        title=record_data.title,
        content=record_data.content,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.put("/{record_id}", response_model=RecordResponse)
def update_record(
    record_id: str,
    record_data: RecordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a record's title and/or content."""
    record = _get_owned_record(db, current_user, record_id)

    if record_data.title is not None:
        record.title = record_data.title
    # Only touch content when the client sent the field, so null can clear it
    if "content" in record_data.model_fields_set:
        record.content = record_data.content

    db.commit()
    db.refresh(record)
    return record


@router.delete("/{record_id}", response_model=OkResponse)
def delete_record(
    record_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a record."""
    record = _get_owned_record(db, current_user, record_id)
    db.delete(record)
    db.commit()
    return OkResponse()
