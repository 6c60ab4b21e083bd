# app/api/routers/students.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Form, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from app.core.db import get_db
from app.api.deps.forms import parse_form
from app.api.deps.services import get_file_service, get_fee_policy
from app.models.student import Student
from app.models.payment import FeePayment
from app.schemas.student import StudentCreate, StudentUpdate, StudentOut, Course
from app.schemas.payment import Month
from app.schemas.dues import ArrearsOut
from app.services.dues import FeePolicy, compute_arrears
from app.services.export_service import students_to_csv
from app.services.file_service import FileService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_student_or_404(db: Session, student_id: UUID) -> Student:
    student = db.execute(
        select(Student)
        .options(selectinload(Student.fee_payments))
        .where(Student.id == student_id)
    ).scalar_one_or_none()

    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


def ensure_unique_aadhar(db: Session, aadhar_number: Optional[str], exclude_id: Optional[UUID] = None):
    if not aadhar_number:
        return
    query = select(Student.id).where(Student.aadhar_number == aadhar_number)
    if exclude_id is not None:
        query = query.where(Student.id != exclude_id)
    if db.execute(query).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Student with Aadhar number {aadhar_number} already exists"
        )


def filter_students(
    db: Session,
    search: Optional[str] = None,
    course: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> List[Student]:
    query = (
        select(Student)
        .options(selectinload(Student.fee_payments))
        .order_by(Student.created_at.desc())
    )
    if course:
        query = query.where(Student.course == course)
    if is_active is not None:
        query = query.where(Student.is_active.is_(is_active))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Student.name.ilike(pattern),
            Student.father_name.ilike(pattern),
            Student.contact_number.like(pattern),
            Student.aadhar_number.like(pattern),
        ))
    return db.execute(query).scalars().all()


@router.get("/", response_model=List[StudentOut])
async def list_students(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Match name, father's name, contact or Aadhar number"),
    course: Optional[Course] = Query(None),
    is_active: Optional[bool] = Query(None),
):
    """List students newest first, each with its payment history"""
    return filter_students(db, search, course, is_active)


@router.get("/export")
async def export_students(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None),
    course: Optional[Course] = Query(None),
    is_active: Optional[bool] = Query(None),
):
    """Student list as CSV"""
    students = filter_students(db, search, course, is_active)
    filename = f"Students_{date.today().isoformat()}.csv"
    return Response(
        content=students_to_csv(students),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(student_id: UUID, db: Session = Depends(get_db)):
    return get_student_or_404(db, student_id)


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(
    name: str = Form(...),
    father_name: str = Form(...),
    course: str = Form(...),
    aadhar_number: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    contact_number: Optional[str] = Form(None),
    admission_date: Optional[date] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    """Admit a new student; the photo is optional"""
    data = parse_form(
        StudentCreate,
        name=name,
        father_name=father_name,
        course=course,
        aadhar_number=aadhar_number,
        address=address,
        contact_number=contact_number,
        admission_date=admission_date,
    )
    ensure_unique_aadhar(db, data.aadhar_number)

    photo_path = files.save_image(photo, "photo") if photo and photo.filename else None

    student = Student(
        **data.model_dump(exclude_none=True),
        photo_path=photo_path,
    )
    db.add(student)

    try:
        db.commit()
        db.refresh(student)
    except IntegrityError as e:
        db.rollback()
        files.discard(photo_path)
        logger.error(f"Error creating student: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Student conflicts with an existing record"
        )

    logger.info(f"Student admitted: {student.name} ({student.course}) id={student.id}")
    return student


@router.put("/{student_id}", response_model=StudentOut)
async def update_student(
    student_id: UUID,
    name: Optional[str] = Form(None),
    father_name: Optional[str] = Form(None),
    course: Optional[str] = Form(None),
    aadhar_number: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    contact_number: Optional[str] = Form(None),
    admission_date: Optional[date] = Form(None),
    is_active: Optional[bool] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    """Edit a student; uploading a photo replaces the old one"""
    student = get_student_or_404(db, student_id)
    data = parse_form(
        StudentUpdate,
        name=name,
        father_name=father_name,
        course=course,
        aadhar_number=aadhar_number,
        address=address,
        contact_number=contact_number,
        admission_date=admission_date,
        is_active=is_active,
    )
    ensure_unique_aadhar(db, data.aadhar_number, exclude_id=student.id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(student, field, value)

    old_photo = new_photo = None
    if photo and photo.filename:
        old_photo = student.photo_path
        new_photo = files.save_image(photo, "photo")
        student.photo_path = new_photo

    try:
        db.commit()
        db.refresh(student)
    except IntegrityError as e:
        db.rollback()
        files.discard(new_photo)
        logger.error(f"Error updating student {student_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Student conflicts with an existing record"
        )

    if old_photo:
        files.discard(old_photo)

    logger.info(f"Student updated: {student.id}")
    return student


@router.delete("/{student_id}")
async def delete_student(
    student_id: UUID,
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    """Delete a student permanently along with their photo and payments"""
    student = get_student_or_404(db, student_id)
    photo_path = student.photo_path
    payment_count = len(student.fee_payments)

    db.delete(student)
    db.commit()
    files.discard(photo_path)

    logger.info(f"Student deleted: {student_id} ({payment_count} payments removed)")
    return {"message": "Student deleted successfully"}


@router.get("/{student_id}/arrears", response_model=ArrearsOut)
async def get_student_arrears(
    student_id: UUID,
    month: Month = Query(...),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    fee_policy: FeePolicy = Depends(get_fee_policy),
):
    """Unpaid months among the six before the given month"""
    student = get_student_or_404(db, student_id)
    payments = db.execute(
        select(FeePayment).where(FeePayment.student_id == student.id)
    ).scalars().all()

    arrears = compute_arrears(
        student.id, student.admission_date, payments, month, year,
        fee_policy=fee_policy, course=student.course,
    )
    return ArrearsOut(
        student_id=student.id,
        month=month,
        year=year,
        periods_owed=arrears.periods_owed,
        amount_owed=arrears.amount_owed,
        periods=[str(p) for p in arrears.periods],
    )
