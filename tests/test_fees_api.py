# tests/test_fees_api.py
from datetime import date


def test_record_payment(client, make_student, make_payment):
    student = make_student()
    payment = make_payment(student["id"], month="March", year=2024, amount="450.5", remarks="  cash  ")

    assert payment["month"] == "March"
    assert payment["year"] == 2024
    assert payment["amount"] == 450.5
    assert payment["remarks"] == "cash"
    assert payment["payment_date"] == date.today().isoformat()
    assert payment["student"]["name"] == "Ravi Kumar"

    fetched = client.get(f"/api/students/{student['id']}").json()
    assert fetched["total_fees_paid"] == 450.5
    assert len(fetched["fee_payments"]) == 1


def test_backdated_payment_and_repeat_month(client, make_student, make_payment):
    student = make_student()
    make_payment(student["id"], month="March", year=2024, payment_date="2024-03-05")
    make_payment(student["id"], month="March", year=2024, amount="100")

    assert len(client.get("/api/fees/", params={"month": "March", "year": 2024}).json()) == 2


def test_payment_for_unknown_student_is_404(client):
    response = client.post("/api/fees/", json={
        "student_id": "00000000-0000-0000-0000-000000000000",
        "month": "March",
        "year": 2024,
        "amount": "500",
    })
    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found"


def test_invalid_payment_is_rejected(client, make_student):
    student = make_student()
    for bad in ({"month": "Marchh"}, {"amount": "-1"}, {"year": 1899}):
        payload = {"student_id": student["id"], "month": "March", "year": 2024, "amount": "500"}
        payload.update(bad)
        assert client.post("/api/fees/", json=payload).status_code == 422


def test_list_filters_and_ordering(client, make_student, make_payment):
    a = make_student(name="Alpha")
    b = make_student(name="Beta")
    make_payment(a["id"], month="January", payment_date="2024-01-05")
    make_payment(b["id"], month="February", payment_date="2024-02-05")
    make_payment(a["id"], month="March", payment_date="2024-03-05")

    all_payments = client.get("/api/fees/").json()
    assert [p["payment_date"] for p in all_payments] == ["2024-03-05", "2024-02-05", "2024-01-05"]

    by_student = client.get("/api/fees/", params={"student_id": a["id"]}).json()
    assert {p["month"] for p in by_student} == {"January", "March"}

    in_range = client.get("/api/fees/", params={"start_date": "2024-02-01", "end_date": "2024-02-29"}).json()
    assert [p["student"]["name"] for p in in_range] == ["Beta"]


def test_delete_payment(client, make_student, make_payment):
    payment = make_payment(make_student()["id"])

    response = client.delete(f"/api/fees/{payment['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Payment deleted successfully"}

    response = client.delete(f"/api/fees/{payment['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Payment not found"


def test_receipt_html(client, make_student, make_payment):
    payment = make_payment(
        make_student(name="Receipt <Student>")["id"],
        month="May",
        year=2024,
        amount="1500",
        payment_date="2024-05-15",
        remarks="Paid in full",
    )

    response = client.get(f"/api/fees/{payment['id']}/receipt")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    html = response.text
    assert "FEE PAYMENT RECEIPT" in html
    assert f"JNN-202405-{payment['id'].replace('-', '')[:8].upper()}" in html
    assert "15/05/2024" in html
    assert "May 2024" in html
    assert "1,500.00" in html
    assert "Receipt &lt;Student&gt;" in html
    assert "window.print" not in html

    printable = client.get(f"/api/fees/{payment['id']}/receipt", params={"print": "true"})
    assert "window.print" in printable.text


def test_receipt_uses_configured_prefix(client, make_student, make_payment):
    client.put("/api/settings/", data={"receipt_prefix": "abc"})
    payment = make_payment(make_student()["id"])

    html = client.get(f"/api/fees/{payment['id']}/receipt").text
    assert "ABC-" in html


def test_export_payments_csv(client, make_student, make_payment):
    make_payment(make_student(name="Csv Student")["id"], amount="500", payment_date="2024-01-20")

    response = client.get("/api/fees/export")

    assert response.status_code == 200
    lines = response.content.decode("utf-8").lstrip("\ufeff").splitlines()
    assert lines[0].startswith('"Payment Date","Student Name"')
    assert lines[1].startswith('"20/01/2024","Csv Student"')
    assert '"500.00"' in lines[1]
