from datetime import date

from sqlalchemy.orm import Session

from database.db import SessionLocal
from database.schema import create_all
from models.semesters import Semester as SemesterModel
from services.master_data_service import ensure_default_admin


def _default_semester(today: date) -> SemesterModel:
    # spring: March-August, fall: September-February
    if 3 <= today.month <= 8:
        return SemesterModel(name=f"{today.year} Spring", start_date=date(today.year, 3, 1),
                             end_date=date(today.year, 8, 31), is_current=True)
    year = today.year if today.month >= 9 else today.year - 1
    return SemesterModel(name=f"{year} Fall", start_date=date(year, 9, 1),
                         end_date=date(year + 1, 2, 28), is_current=True)


def init_db():
    create_all()
    db: Session = SessionLocal()
    try:
        if db.query(SemesterModel.id).filter(SemesterModel.is_current.is_(True)).first() is None:
            semester = _default_semester(date.today())
            db.add(semester)
            db.commit()
            print(f"✅ current semester created: {semester.name}")
        if ensure_default_admin(db):
            print("✅ default admin account created")
    finally:
        db.close()
    print("✅ database initialised")


if __name__ == "__main__":
    init_db()
