from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, col, select

from pos_console import crud, models
from pos_console.api.deps import Page, get_or_404, org_id
from pos_console.auth import get_current_user
from pos_console.dependencies import get_db
from pos_console.logging_config import get_logger
from pos_console.schemas import BookingCreate, BookingRead, BookingUpdate, PageOut

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = get_logger("api.bookings")


def _repo(db: Session) -> crud.BookingRepository:
    return crud.BookingRepository(db, org_id())


def _check_references(db: Session, user_ids: list[int], service_ids: list[int]) -> None:
    if user_ids:
        found = db.exec(select(models.User.id).where(col(models.User.id).in_(user_ids))).all()
        missing = sorted(set(user_ids) - set(found))
        if missing:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown attendants: {missing}")
    if service_ids:
        found = db.exec(select(models.Service.id).where(col(models.Service.id).in_(service_ids))).all()
        missing = sorted(set(service_ids) - set(found))
        if missing:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown services: {missing}")


def _replace_links(db: Session, booking_id: int, attendants: Optional[list[int]], service_ids: Optional[list[int]]) -> None:
    if attendants is not None:
        for link in db.exec(select(models.BookingAttendant).where(models.BookingAttendant.booking_id == booking_id)).all():
            db.delete(link)
        db.add_all(models.BookingAttendant(booking_id=booking_id, user_id=u) for u in dict.fromkeys(attendants))
    if service_ids is not None:
        for link in db.exec(select(models.BookingService).where(models.BookingService.booking_id == booking_id)).all():
            db.delete(link)
        db.add_all(models.BookingService(booking_id=booking_id, service_id=s) for s in dict.fromkeys(service_ids))
    db.flush()


def _read(db: Session, booking: models.Booking) -> BookingRead:
    attendants = db.exec(
        select(models.BookingAttendant.user_id)
        .where(models.BookingAttendant.booking_id == booking.id)
        .order_by(col(models.BookingAttendant.id))
    ).all()
    service_ids = db.exec(
        select(models.BookingService.service_id)
        .where(models.BookingService.booking_id == booking.id)
        .order_by(col(models.BookingService.id))
    ).all()
    customer = db.get(models.Customer, booking.customer_id) if booking.customer_id else None
    return BookingRead(
        **booking.model_dump(),
        customer_name=customer.name if customer else None,
        attendants=list(attendants),
        service_ids=list(service_ids),
    )


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> BookingRead:
    """Book a customer with at least one attendant; new bookings start pending."""

    _check_references(db, payload.attendants, payload.service_ids)
    booking = models.Booking(
        org_id=org_id(),
        branch_id=payload.branch_id,
        customer_id=payload.customer_id,
        doctor_id=payload.doctor_id,
        schedule_date=payload.schedule_date,
        time_start=payload.time_start,
        remarks=payload.remarks,
        status="pending",
        created_by=user.name,
    )
    db.add(booking)
    db.flush()
    _replace_links(db, booking.id, payload.attendants, payload.service_ids)
    db.commit()
    db.refresh(booking)
    logger.info(
        "Booked customer %s on %s %s (booking %s)",
        booking.customer_id,
        booking.schedule_date,
        booking.time_start,
        booking.id,
    )
    return _read(db, booking)


@router.get("", response_model=PageOut[BookingRead])
def list_bookings(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    status: Optional[str] = None,
    schedule_date: Optional[date] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    items, total = _repo(db).list(
        q=q,
        branch_id=branch_id,
        customer_id=customer_id,
        status=status,
        schedule_date=schedule_date,
        offset=page.offset,
        limit=page.limit,
    )
    return PageOut[BookingRead].build([_read(db, i) for i in items], total, page.page, page.per_page)


@router.get("/{booking_id}", response_model=BookingRead)
def get_booking(booking_id: int, db: Session = Depends(get_db)) -> BookingRead:
    return _read(db, get_or_404(_repo(db), booking_id, "Booking"))


@router.patch("/{booking_id}", response_model=BookingRead)
def update_booking(booking_id: int, payload: BookingUpdate, db: Session = Depends(get_db)) -> BookingRead:
    """Update a booking; given attendant or service lists replace the stored sets."""

    booking = get_or_404(_repo(db), booking_id, "Booking")
    data = payload.model_dump(exclude_unset=True)
    attendants = data.pop("attendants", None)
    service_ids = data.pop("service_ids", None)
    _check_references(db, attendants or [], service_ids or [])

    for key in ("schedule_date", "time_start"):
        if data.get(key) is None:
            data.pop(key, None)
    for key, value in data.items():
        setattr(booking, key, value)
    db.add(booking)
    _replace_links(db, booking.id, attendants, service_ids)
    db.commit()
    db.refresh(booking)
    return _read(db, booking)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: int, db: Session = Depends(get_db)) -> None:
    booking = get_or_404(_repo(db), booking_id, "Booking")
    _replace_links(db, booking.id, [], [])
    db.delete(booking)
    db.commit()
