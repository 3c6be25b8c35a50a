"""
Inspection record endpoints.

All routes require an authenticated, active account of any role. Create and
update accept form / multipart bodies so an image can travel with the fields.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from fastapi import (APIRouter, Depends, File, Form, Query, Request,
                     UploadFile, status)
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import RowId, get_current_active_user, get_db
from app.core.exceptions import NotFound
from app.db.base import utcnow
from app.models.inspection import Inspection
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.inspection import (InspectionCreate, InspectionPage,
                                    InspectionRead, InspectionUpdate)
from app.services.uploads import remove_image, save_image

router = APIRouter(prefix="/inspections", tags=["inspections"])
logger = logging.getLogger(__name__)


# ── Form parsing ────────────────────────────────────────────────────
async def _validate_form(request: Request, model: type[BaseModel], fields: dict[str, Any]) -> Any:
    """Validate the submitted form fields, skipping the ones that were not sent.

    FastAPI hands blank form values over as ``None``; the raw form tells a
    blank value apart from a missing one so blanks still get validated.
    """
    submitted = await request.form()
    data = {}
    for key, value in fields.items():
        if value is not None:
            data[key] = value
        elif key in submitted:
            data[key] = ""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def inspection_create_form(
    request: Request,
    unit_number: Optional[str] = Form(None, alias="unitNumber"),
    component_name: Optional[str] = Form(None, alias="componentName"),
    supplier_details: Optional[str] = Form(None, alias="supplierDetails"),
    remarks: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    is_completed: Optional[str] = Form(None, alias="isCompleted"),
    timer_events: Optional[str] = Form(None, alias="timerEvents"),
) -> InspectionCreate:
    return await _validate_form(
        request,
        InspectionCreate,
        {
            "unitNumber": unit_number,
            "componentName": component_name,
            "supplierDetails": supplier_details,
            "remarks": remarks,
            "duration": duration,
            "isCompleted": is_completed,
            "timerEvents": timer_events,
        },
    )


async def inspection_update_form(
    request: Request,
    unit_number: Optional[str] = Form(None, alias="unitNumber"),
    component_name: Optional[str] = Form(None, alias="componentName"),
    supplier_details: Optional[str] = Form(None, alias="supplierDetails"),
    remarks: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    is_completed: Optional[str] = Form(None, alias="isCompleted"),
    timer_events: Optional[str] = Form(None, alias="timerEvents"),
) -> InspectionUpdate:
    return await _validate_form(
        request,
        InspectionUpdate,
        {
            "unitNumber": unit_number,
            "componentName": component_name,
            "supplierDetails": supplier_details,
            "remarks": remarks,
            "duration": duration,
            "isCompleted": is_completed,
            "timerEvents": timer_events,
        },
    )


# ── Helpers ─────────────────────────────────────────────────────────
async def _get_inspection_or_404(db: AsyncSession, inspection_id: int) -> Inspection:
    result = await db.execute(
        select(Inspection)
        .where(Inspection.id == inspection_id)
        .execution_options(populate_existing=True)
    )
    inspection = result.scalar_one_or_none()
    if inspection is None:
        raise NotFound("Inspection not found")
    return inspection


def _has_file(image: UploadFile | None) -> bool:
    return image is not None and bool(image.filename)


# ── CRUD ────────────────────────────────────────────────────────────
@router.post("", response_model=InspectionRead, status_code=status.HTTP_201_CREATED)
async def create_inspection(
    current_user: User = Depends(get_current_active_user),
    body: InspectionCreate = Depends(inspection_create_form),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
) -> Inspection:
    """Record a new inspection owned by the caller."""
    inspection = Inspection(
        **body.model_dump(),
        inspected_by=current_user.id,
        end_time=utcnow() if body.is_completed else None,
    )
    if _has_file(image):
        inspection.image_path = await save_image(image)  # type: ignore[arg-type]

    db.add(inspection)
    try:
        await db.commit()
    except SQLAlchemyError:
        await remove_image(inspection.image_path)
        raise
    logger.info(
        "Inspection %d created by %s (unit %d, %s)",
        inspection.id,
        current_user.username,
        inspection.unit_number,
        inspection.component_name,
    )
    return await _get_inspection_or_404(db, inspection.id)


@router.get("", response_model=InspectionPage)
async def list_inspections(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> InspectionPage:
    """Paginated list, newest first."""
    total = (await db.execute(select(func.count()).select_from(Inspection))).scalar_one()
    result = await db.execute(
        select(Inspection)
        .order_by(Inspection.created_at.desc(), Inspection.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return InspectionPage(
        inspections=[InspectionRead.model_validate(i) for i in result.scalars().all()],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total=total,
    )


@router.get("/user/{user_id}", response_model=list[InspectionRead])
async def list_inspections_by_user(
    user_id: RowId,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Inspection]:
    """Every inspection recorded by one inspector, newest first."""
    result = await db.execute(
        select(Inspection)
        .where(Inspection.inspected_by == user_id)
        .order_by(Inspection.created_at.desc(), Inspection.id.desc())
    )
    return list(result.scalars().all())


@router.get("/{inspection_id}", response_model=InspectionRead)
async def get_inspection(
    inspection_id: RowId,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Inspection:
    return await _get_inspection_or_404(db, inspection_id)


@router.put("/{inspection_id}", response_model=InspectionRead)
async def update_inspection(
    inspection_id: RowId,
    current_user: User = Depends(get_current_active_user),
    body: InspectionUpdate = Depends(inspection_update_form),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
) -> Inspection:
    """Overwrite the submitted fields. The inspector never changes."""
    inspection = await _get_inspection_or_404(db, inspection_id)

    changes = body.model_dump(exclude_unset=True)
    replaced_image = None
    if _has_file(image):
        replaced_image = inspection.image_path
        changes["image_path"] = await save_image(image)  # type: ignore[arg-type]

    for field, value in changes.items():
        setattr(inspection, field, value)

    if changes.get("is_completed"):
        # Evaluated inside the UPDATE so an existing end time is kept
        inspection.end_time = func.coalesce(Inspection.end_time, utcnow())  # type: ignore[assignment]

    try:
        await db.commit()
    except SQLAlchemyError:
        await remove_image(changes.get("image_path"))
        raise
    await remove_image(replaced_image)
    logger.info(
        "Inspection %d updated by %s: %s",
        inspection_id,
        current_user.username,
        sorted(changes),
    )
    return await _get_inspection_or_404(db, inspection_id)


@router.delete("/{inspection_id}", response_model=MessageResponse)
async def delete_inspection(
    inspection_id: RowId,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    inspection = await _get_inspection_or_404(db, inspection_id)
    image_path = inspection.image_path

    await db.delete(inspection)
    await db.commit()
    await remove_image(image_path)
    logger.info("Inspection %d deleted by %s", inspection_id, current_user.username)
    return MessageResponse(message="Inspection deleted successfully")
