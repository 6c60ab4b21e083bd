# tests/test_dues.py
import uuid
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.core.errors import ValidationError
from app.models.payment import MONTHS
from app.services.dues import (
    Period,
    build_due_report,
    compute_arrears,
    compute_due_roster,
    flat_fee_policy,
    is_period_before_admission,
    previous_periods,
)


def student(name="Asha", admitted=date(2023, 1, 5), course="DCA", **extra):
    return SimpleNamespace(
        id=uuid.uuid4(),
        name=name,
        father_name=extra.get("father_name", "Mohan"),
        contact_number=extra.get("contact_number", "9000000000"),
        course=course,
        admission_date=admitted,
    )


def payment(student_id, month, year, amount="500.00", remarks=None):
    return SimpleNamespace(
        student_id=student_id,
        month=month,
        year=year,
        amount=Decimal(amount),
        remarks=remarks,
    )


class TestIsPeriodBeforeAdmission:
    def test_every_earlier_period_is_before_and_later_ones_are_not(self):
        admitted = date(2024, 3, 20)
        admission_period = Period.of("March", 2024)

        period = Period.of("December", 2025)
        for _ in range(48):
            expected = period < admission_period
            assert is_period_before_admission(admitted, period.month, period.year) is expected
            period = period.previous()

    def test_admission_month_itself_is_not_before(self):
        assert is_period_before_admission(date(2024, 3, 31), "March", 2024) is False

    def test_previous_year_same_month_is_before(self):
        assert is_period_before_admission(date(2024, 3, 1), "March", 2023) is True

    def test_missing_admission_date_is_never_before(self):
        assert is_period_before_admission(None, "January", 1990) is False

    def test_unknown_month_is_rejected(self):
        with pytest.raises(ValidationError):
            is_period_before_admission(date(2024, 1, 1), "Janvier", 2024)


class TestComputeDueRoster:
    def test_student_without_payments_is_due(self):
        s = student()
        assert compute_due_roster([s], [], "May", 2024) == [s]

    def test_exact_period_payment_settles_regardless_of_amount_or_remarks(self):
        s = student()
        payments = [payment(s.id, "May", 2024, amount="0.00", remarks="waived")]
        assert compute_due_roster([s], payments, "May", 2024) == []

    def test_payment_for_other_year_or_month_does_not_settle(self):
        s = student()
        payments = [payment(s.id, "May", 2023), payment(s.id, "June", 2024)]
        assert compute_due_roster([s], payments, "May", 2024) == [s]

    def test_other_students_payment_does_not_settle(self):
        a, b = student("A"), student("B")
        payments = [payment(b.id, "May", 2024)]
        assert compute_due_roster([a, b], payments, "May", 2024) == [a]

    def test_duplicate_payments_still_count_as_settled(self):
        s = student()
        payments = [payment(s.id, "May", 2024), payment(s.id, "May", 2024, amount="250.00")]
        assert compute_due_roster([s], payments, "May", 2024) == []

    def test_period_before_admission_is_not_due(self):
        s = student(admitted=date(2024, 6, 1))
        assert compute_due_roster([s], [], "May", 2024) == []
        assert compute_due_roster([s], [], "June", 2024) == [s]

    def test_roster_order_is_preserved(self):
        roster = [student(name) for name in ("Zara", "Amit", "Meena", "Bala")]
        paid = [payment(roster[2].id, "May", 2024)]
        result = compute_due_roster(roster, paid, "May", 2024)
        assert [s.name for s in result] == ["Zara", "Amit", "Bala"]

    def test_year_given_as_string_matches_integer_years(self):
        s = student()
        assert compute_due_roster([s], [payment(s.id, "May", 2024)], "May", "2024") == []


class TestPreviousPeriods:
    def test_january_wraps_into_previous_year(self):
        periods = previous_periods("January", 2024)
        assert [str(p) for p in periods] == [
            "December 2023",
            "November 2023",
            "October 2023",
            "September 2023",
            "August 2023",
            "July 2023",
        ]

    def test_mid_year_stays_in_year(self):
        assert [p.month for p in previous_periods("August", 2024, count=3)] == ["July", "June", "May"]

    def test_all_month_names_round_trip_through_period(self):
        for month in MONTHS:
            assert Period.of(month, 2024).month == month


class TestComputeArrears:
    def test_no_payments_and_long_enrolment_owes_six_months(self):
        s = student(admitted=date(2023, 1, 1))
        arrears = compute_arrears(s.id, s.admission_date, [], "March", 2024)
        assert arrears.periods_owed == 6
        assert arrears.amount_owed == Decimal("3000")

    def test_lookback_is_capped_at_six_months(self):
        s = student(admitted=date(2020, 1, 1))
        arrears = compute_arrears(s.id, s.admission_date, [], "March", 2024)
        assert arrears.periods_owed == 6

    def test_recent_admission_limits_arrears(self):
        s = student(admitted=date(2024, 2, 14))
        arrears = compute_arrears(s.id, s.admission_date, [], "April", 2024)
        assert arrears.periods_owed == 2
        assert [str(p) for p in arrears.periods] == ["March 2024", "February 2024"]
        assert arrears.amount_owed == Decimal("1000")

    def test_admitted_in_target_month_owes_nothing(self):
        s = student(admitted=date(2024, 4, 2))
        arrears = compute_arrears(s.id, s.admission_date, [], "April", 2024)
        assert arrears.periods_owed == 0
        assert arrears.amount_owed == Decimal("0")

    def test_paid_months_are_skipped_across_year_boundary(self):
        s = student(admitted=date(2022, 5, 1))
        payments = [
            payment(s.id, "December", 2023),
            payment(s.id, "October", 2023),
            payment(s.id, "July", 2023),
        ]
        arrears = compute_arrears(s.id, s.admission_date, payments, "January", 2024)
        assert [str(p) for p in arrears.periods] == ["November 2023", "September 2023", "August 2023"]
        assert arrears.amount_owed == Decimal("1500")

    def test_other_students_payments_are_ignored(self):
        s, other = student(), student()
        payments = [payment(other.id, month, 2024) for month in ("January", "February", "March")]
        arrears = compute_arrears(s.id, s.admission_date, payments, "April", 2024)
        assert arrears.periods_owed == 6

    def test_fee_policy_sets_the_amount(self):
        s = student(course="ADCA")

        def policy(course, month, year):
            return Decimal("750") if course == "ADCA" else Decimal("500")

        arrears = compute_arrears(s.id, s.admission_date, [], "April", 2024, fee_policy=policy, course="ADCA")
        assert arrears.amount_owed == Decimal("4500")


class TestBuildDueReport:
    def test_report_combines_current_fee_and_arrears(self):
        a = student("Anil", admitted=date(2024, 1, 10))
        b = student("Bina", admitted=date(2024, 1, 10))
        payments = [payment(b.id, "March", 2024), payment(a.id, "January", 2024)]

        report = build_due_report([a, b], payments, "March", 2024)

        assert report.total_students == 1
        entry = report.entries[0]
        assert entry.student is a
        assert entry.current_due == Decimal("500")
        assert entry.arrears.periods_owed == 1  # February
        assert entry.total_due == Decimal("1000")
        assert report.current_due_total == Decimal("500")
        assert report.previous_due_total == Decimal("500")
        assert report.grand_total == Decimal("1000")

    def test_current_and_previous_dues_use_the_same_fee(self):
        s = student(admitted=date(2023, 1, 1))
        report = build_due_report([s], [], "March", 2024, fee_policy=flat_fee_policy("650"))
        entry = report.entries[0]
        assert entry.current_due == Decimal("650")
        assert entry.arrears.amount_owed == Decimal("650") * 6

    def test_search_and_course_filters(self):
        roster = [
            student("Kiran Rao", course="DCA", contact_number="9111111111"),
            student("Lata Singh", course="ADCA", father_name="Kiran Singh"),
            student("Mohit Jain", course="DCA", contact_number="9222222222"),
        ]

        by_name = build_due_report(roster, [], "March", 2024, search="kiran")
        assert [e.student.name for e in by_name.entries] == ["Kiran Rao", "Lata Singh"]

        by_contact = build_due_report(roster, [], "March", 2024, search="92222")
        assert [e.student.name for e in by_contact.entries] == ["Mohit Jain"]

        by_course = build_due_report(roster, [], "March", 2024, course="DCA")
        assert [e.student.name for e in by_course.entries] == ["Kiran Rao", "Mohit Jain"]

    def test_empty_roster_gives_zero_totals(self):
        report = build_due_report([], [], "March", 2024)
        assert report.total_students == 0
        assert report.grand_total == Decimal("0")
