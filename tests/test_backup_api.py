# tests/test_backup_api.py
import threading

from sqlalchemy import select

from app.api.deps.services import get_backup_manager
from app.core.db import db_manager, init_database
from app.models import Student


def test_list_is_empty_before_first_backup(client):
    response = client.get("/api/backup/")
    assert response.status_code == 200
    assert response.json() == []


def test_create_download_and_list(client, make_student):
    make_student()

    response = client.post("/api/backup/")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Backup created successfully"
    filename = body["filename"]
    assert filename.startswith("backup-")

    listed = client.get("/api/backup/").json()
    assert [b["filename"] for b in listed] == [filename]
    assert listed[0]["kind"] == "backup"
    assert listed[0]["size"].endswith(" MB")

    download = client.get(f"/api/backup/{filename}")
    assert download.status_code == 200
    assert download.content.startswith(b"SQLite format 3\x00")


def test_restore_round_trip(client, make_student):
    kept = make_student(name="Before Backup")
    filename = client.post("/api/backup/").json()["filename"]
    make_student(name="After Backup")
    assert len(client.get("/api/students/").json()) == 2

    response = client.post(f"/api/backup/restore/{filename}")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Database restored successfully"
    assert body["restored_from"] == filename
    assert body["previous_backup"].startswith("pre-restore-")

    students = client.get("/api/students/").json()
    assert [s["id"] for s in students] == [kept["id"]]

    kinds = sorted(b["kind"] for b in client.get("/api/backup/").json())
    assert kinds == ["backup", "pre-restore"]


def test_restore_pre_restore_copy_undoes_restore(client, make_student):
    make_student(name="First")
    filename = client.post("/api/backup/").json()["filename"]
    make_student(name="Second")

    safety = client.post(f"/api/backup/restore/{filename}").json()["previous_backup"]
    client.post(f"/api/backup/restore/{safety}")

    assert sorted(s["name"] for s in client.get("/api/students/").json()) == ["First", "Second"]


def test_delete_backup(client):
    filename = client.post("/api/backup/").json()["filename"]

    response = client.delete(f"/api/backup/{filename}")
    assert response.status_code == 200
    assert response.json() == {"message": "Backup deleted successfully"}
    assert client.get("/api/backup/").json() == []

    assert client.delete(f"/api/backup/{filename}").status_code == 404


def test_names_escaping_backup_directory_are_forbidden(client, app_paths):
    client.post("/api/backup/")
    escape = "backup-2020-01-01T00-00-00-000000Z.sqlite"
    (app_paths / "backups" / escape).symlink_to(app_paths / "database.sqlite")

    assert client.get(f"/api/backup/{escape}").status_code == 403
    assert client.post(f"/api/backup/restore/{escape}").status_code == 403
    response = client.delete(f"/api/backup/{escape}")
    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid filename"
    assert (app_paths / "database.sqlite").is_file()


def test_unknown_backup_is_404(client):
    missing = "backup-2024-01-01T00-00-00-000000Z.sqlite"
    assert client.get(f"/api/backup/{missing}").status_code == 404
    assert client.post(f"/api/backup/restore/{missing}").status_code == 404


def test_stray_file_cannot_be_restored(client, app_paths, make_student):
    make_student()
    client.post("/api/backup/")
    (app_paths / "backups" / "notes.txt").write_bytes(b"not a database")

    response = client.post("/api/backup/restore/notes.txt")

    assert response.status_code == 404
    assert (app_paths / "database.sqlite").read_bytes().startswith(b"SQLite format 3\x00")
    assert len(client.get("/api/students/").json()) == 1


def test_restore_waits_for_open_sessions(app_paths):
    init_database()
    manager = get_backup_manager()
    snapshot = manager.create_backup()

    sessions = db_manager.get_session()
    session = next(sessions)
    session.execute(select(Student)).all()

    restore = threading.Thread(target=manager.restore_backup, args=(snapshot.filename,))
    restore.start()
    restore.join(timeout=0.5)
    assert restore.is_alive()

    # The open session still writes to the file it started on
    session.add(Student(name="In Flight", father_name="Writer", course="DCA"))
    session.commit()
    sessions.close()

    restore.join(timeout=10)
    assert not restore.is_alive()

    with db_manager.transaction() as fresh:
        assert fresh.execute(select(Student)).scalars().all() == []

    safety = [b for b in manager.list_backups() if b.kind == "pre-restore"]
    assert len(safety) == 1


def test_new_sessions_wait_while_database_is_replaced(app_paths):
    init_database()
    opened = threading.Event()

    def open_session():
        with db_manager.transaction() as session:
            session.execute(select(Student)).all()
        opened.set()

    with db_manager.exclusive():
        db_manager.close()
        reader = threading.Thread(target=open_session)
        reader.start()
        assert not opened.wait(timeout=0.3)

    reader.join(timeout=10)
    assert opened.is_set()
