import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session

from signage.api.deps import WRITE_ROLES, Page, current_user, pagination, require_roles
from signage.db import get_db
from signage.models.content import Content
from signage.schemas.common import paginated, success
from signage.schemas.content import ContentCreate, ContentOut, ContentType, ContentUpdate
from signage.services.auth import UserPrincipal
from signage.services.errors import ValidationError
from signage.services.storage import content_type_for, delete_file, save_file
from signage.services.webhooks import dispatch_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["content"])

writers = require_roles(*WRITE_ROLES)


def _get_content(db: Session, content_id: int, customer_id: int) -> Content:
    content = db.query(Content).filter(Content.id == content_id, Content.customer_id == customer_id).first()
    if not content:
        raise HTTPException(status_code=404, detail="Content not found")
    return content


def _resolved_name(name: str | None, file: UploadFile) -> str:
    candidate = (name or "").strip()
    if candidate:
        return candidate
    fallback = (file.filename or "").strip()
    if fallback:
        return fallback
    return "content-file"


def _announce(background_tasks: BackgroundTasks, content: Content) -> None:
    background_tasks.add_task(
        dispatch_event,
        content.customer_id,
        "content.uploaded",
        {"contentId": content.id, "name": content.name, "contentType": content.content_type},
    )


@router.get("")
def list_content(
    content_type: ContentType | None = Query(None, alias="contentType"),
    q: str | None = None,
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Content).filter(Content.customer_id == user.customer_id)
    if content_type:
        query = query.filter(Content.content_type == content_type)
    if q:
        keyword = f"%{q.strip().lower()}%"
        if keyword != "%%":
            query = query.filter(func.lower(Content.name).like(keyword) | func.lower(Content.tags).like(keyword))
    total = query.count()
    rows = query.order_by(Content.created_at.desc(), Content.id.desc()).offset(page.offset).limit(page.limit).all()
    return paginated([ContentOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_content(
    payload: ContentCreate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    if payload.content_type == "URL" and not payload.file_url:
        raise HTTPException(status_code=400, detail="URL content needs a fileUrl")
    content = Content(customer_id=user.customer_id, uploaded_by=user.user_id, status="Ready", **payload.model_dump())
    db.add(content)
    db.commit()
    db.refresh(content)
    logger.info("Created content %s", content.id)
    _announce(background_tasks, content)
    return success(ContentOut.model_validate(content))


@router.post("/upload", status_code=201)
def upload_content(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    name: str | None = Form(None),
    description: str | None = Form(None),
    content_type: str | None = Form(None, alias="contentType"),
    duration: int | None = Form(None, gt=0),
    tags: str | None = Form(None),
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    resolved_type = content_type or content_type_for(file.filename or "")
    if not resolved_type:
        raise ValidationError("Could not determine content type from the file name")
    try:
        stored = save_file(file, resolved_type, user.customer_id)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    content = Content(
        customer_id=user.customer_id,
        name=_resolved_name(name, file),
        description=description,
        content_type=resolved_type,
        duration=duration,
        tags=tags,
        status="Ready",
        uploaded_by=user.user_id,
        **stored,
    )
    db.add(content)
    db.commit()
    db.refresh(content)
    logger.info("Uploaded content %s (%d bytes)", content.id, content.file_size)
    _announce(background_tasks, content)
    return success(ContentOut.model_validate(content))


@router.get("/{content_id}")
def get_content(content_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(ContentOut.model_validate(_get_content(db, content_id, user.customer_id)))


@router.put("/{content_id}")
def update_content(
    content_id: int,
    payload: ContentUpdate,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    content = _get_content(db, content_id, user.customer_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(content, field, value)
    db.commit()
    db.refresh(content)
    logger.info("Updated content %s", content.id)
    return success(ContentOut.model_validate(content))


@router.delete("/{content_id}")
def delete_content(content_id: int, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    content = _get_content(db, content_id, user.customer_id)
    file_url = content.file_url
    db.delete(content)
    db.commit()
    if delete_file(file_url):
        logger.info("Removed stored file %s", file_url)
    logger.info("Deleted content %s", content_id)
    return success(message="Content deleted")
