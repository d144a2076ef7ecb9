import csv
import sys

from sqlalchemy.orm import Session

from database.db import SessionLocal
from schemas.users import BatchStudent, BatchStudentsIn
from services.master_data_service import batch_create_students

CSV_PATH = "data/students.csv"  # username,password,name,email,student_number,class_id,grade


def import_students(csv_path: str = CSV_PATH):
    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        rows = [
            BatchStudent(
                username=row["username"],
                password=row["password"],
                name=row["name"],
                email=row.get("email") or None,
                student_number=row["student_number"],
                class_id=int(row["class_id"]),
                grade=int(row["grade"]),
            )
            for row in reader
        ]

    if not rows:
        print(f"No rows in {csv_path}")
        return

    db: Session = SessionLocal()
    try:
        results = batch_create_students(db, BatchStudentsIn(students=rows))
    finally:
        db.close()

    for r in results:
        if not r.success:
            print(f"❌ {r.username}: {r.error}")
    created = sum(1 for r in results if r.success)
    print(f"✅ students CSV -> DB: {created}/{len(results)} created")


if __name__ == "__main__":
    import_students(sys.argv[1] if len(sys.argv) > 1 else CSV_PATH)
