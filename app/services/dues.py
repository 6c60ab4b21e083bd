# app/services/dues.py
"""
Due-list computation over already loaded students and payments.

A student owes the fee for a (month, year) period when the period is not
before their admission month and no payment row matches that exact month
name and year. Arrears are counted over the six periods preceding the target.
Everything here is pure: no queries, no writes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence

from app.core.errors import ValidationError
from app.models.payment import MONTHS

LOOKBACK_MONTHS = 6
DEFAULT_MONTHLY_FEE = Decimal("500")

# (course, month, year) -> fee for that period
FeePolicy = Callable[[Optional[str], str, int], Decimal]


def flat_fee_policy(amount=DEFAULT_MONTHLY_FEE) -> FeePolicy:
    """Fee policy charging the same amount for every course and period"""
    amount = Decimal(amount)

    def policy(course: Optional[str], month: str, year: int) -> Decimal:
        return amount

    return policy


def month_index(month: str) -> int:
    try:
        return MONTHS.index(month)
    except ValueError:
        raise ValidationError(f"Unknown month '{month}'. Expected one of: {', '.join(MONTHS)}")


@dataclass(frozen=True, order=True)
class Period:
    year: int
    index: int  # 0 = January

    @classmethod
    def of(cls, month: str, year: int) -> "Period":
        return cls(year=int(year), index=month_index(month))

    @property
    def month(self) -> str:
        return MONTHS[self.index]

    @property
    def first_day(self) -> date:
        return date(self.year, self.index + 1, 1)

    def previous(self) -> "Period":
        if self.index == 0:
            return Period(year=self.year - 1, index=11)
        return Period(year=self.year, index=self.index - 1)

    def __str__(self):
        return f"{self.month} {self.year}"


def previous_periods(month: str, year: int, count: int = LOOKBACK_MONTHS) -> List[Period]:
    """The `count` periods strictly before (month, year), most recent first"""
    periods = []
    current = Period.of(month, year)
    for _ in range(count):
        current = current.previous()
        periods.append(current)
    return periods


def is_period_before_admission(admission_date: Optional[date], month: str, year: int) -> bool:
    """True when the first day of (month, year) precedes the first day of the admission month"""
    period_start = Period.of(month, year).first_day
    if admission_date is None:
        return False
    admission_month_start = date(admission_date.year, admission_date.month, 1)
    return period_start < admission_month_start


def compute_due_roster(students: Sequence, payments: Iterable, month: str, year: int) -> list:
    """Students owing the fee for (month, year), in roster order"""
    year = int(year)
    month_index(month)
    paid = {(p.student_id, p.month, p.year) for p in payments}

    return [
        student for student in students
        if not is_period_before_admission(student.admission_date, month, year)
        and (student.id, month, year) not in paid
    ]


@dataclass
class Arrears:
    periods_owed: int = 0
    amount_owed: Decimal = Decimal("0")
    periods: List[Period] = field(default_factory=list)


def compute_arrears(
    student_id,
    admission_date: Optional[date],
    payments: Iterable,
    month: str,
    year: int,
    fee_policy: Optional[FeePolicy] = None,
    course: Optional[str] = None,
) -> Arrears:
    """Unpaid periods among the six before (month, year), skipping those before admission"""
    fee_policy = fee_policy or flat_fee_policy()
    paid = {(p.month, p.year) for p in payments if p.student_id == student_id}

    arrears = Arrears()
    for period in previous_periods(month, year):
        if is_period_before_admission(admission_date, period.month, period.year):
            continue
        if (period.month, period.year) in paid:
            continue
        arrears.periods_owed += 1
        arrears.amount_owed += fee_policy(course, period.month, period.year)
        arrears.periods.append(period)

    return arrears


@dataclass
class DueEntry:
    student: object
    current_due: Decimal
    arrears: Arrears

    @property
    def total_due(self) -> Decimal:
        return self.current_due + self.arrears.amount_owed


@dataclass
class DueReport:
    month: str
    year: int
    entries: List[DueEntry]

    @property
    def total_students(self) -> int:
        return len(self.entries)

    @property
    def current_due_total(self) -> Decimal:
        return sum((e.current_due for e in self.entries), Decimal("0"))

    @property
    def previous_due_total(self) -> Decimal:
        return sum((e.arrears.amount_owed for e in self.entries), Decimal("0"))

    @property
    def grand_total(self) -> Decimal:
        return self.current_due_total + self.previous_due_total


def _matches_search(student, search: str) -> bool:
    needle = search.lower()
    return (
        needle in (student.name or "").lower()
        or needle in (student.father_name or "").lower()
        or search in (student.contact_number or "")
    )


def build_due_report(
    students: Sequence,
    payments: Sequence,
    month: str,
    year: int,
    fee_policy: Optional[FeePolicy] = None,
    search: Optional[str] = None,
    course: Optional[str] = None,
) -> DueReport:
    """
    Due roster for (month, year) narrowed by search text and course, with
    the current-period fee and trailing arrears for every student in it.
    """
    fee_policy = fee_policy or flat_fee_policy()
    year = int(year)

    due_students = compute_due_roster(students, payments, month, year)
    if search:
        due_students = [s for s in due_students if _matches_search(s, search)]
    if course:
        due_students = [s for s in due_students if s.course == course]

    entries = [
        DueEntry(
            student=student,
            current_due=fee_policy(student.course, month, year),
            arrears=compute_arrears(
                student.id, student.admission_date, payments, month, year,
                fee_policy=fee_policy, course=student.course,
            ),
        )
        for student in due_students
    ]
    return DueReport(month=month, year=year, entries=entries)
