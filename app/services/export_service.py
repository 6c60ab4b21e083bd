# app/services/export_service.py
import csv
import io
from typing import Iterable

from app.services.dues import DueReport

# Excel needs the byte order mark to read the rupee sign correctly
BOM = "\ufeff"


def _csv(header: list, rows: Iterable[list]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return BOM + output.getvalue()


def _date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def payments_to_csv(payments) -> str:
    header = ["Payment Date", "Student Name", "Father's Name", "Course", "Month", "Year", "Amount (₹)", "Remarks"]
    rows = (
        [
            _date(p.payment_date),
            p.student.name if p.student else "",
            p.student.father_name if p.student else "",
            p.student.course if p.student else "",
            p.month,
            p.year,
            f"{p.amount:.2f}",
            p.remarks,
        ]
        for p in payments
    )
    return _csv(header, rows)


def students_to_csv(students) -> str:
    header = [
        "Student Name", "Father's Name", "Course", "Contact Number", "Aadhar Number",
        "Address", "Admission Date", "Status", "Total Fees Paid",
    ]
    rows = (
        [
            s.name,
            s.father_name,
            s.course,
            s.contact_number,
            s.aadhar_number,
            s.address,
            _date(s.admission_date),
            "Active" if s.is_active else "Inactive",
            f"{s.total_fees_paid:.2f}",
        ]
        for s in students
    )
    return _csv(header, rows)


def due_report_to_csv(report: DueReport) -> str:
    header = [
        "Student Name", "Father's Name", "Course", "Contact Number", "Admission Date",
        f"Due for {report.month} {report.year} (₹)", "Previous Dues (₹)", "Total Due (₹)",
    ]
    rows = (
        [
            e.student.name,
            e.student.father_name,
            e.student.course,
            e.student.contact_number,
            _date(e.student.admission_date),
            f"{e.current_due:.2f}",
            f"{e.arrears.amount_owed:.2f}",
            f"{e.total_due:.2f}",
        ]
        for e in report.entries
    )
    return _csv(header, rows)
