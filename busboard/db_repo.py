# busboard/db_repo.py
# A BaseRepo subclass that defines the SQLAlchemy bus_units table and implements the same interface against a relational database.

import logging
import os
from contextlib import contextmanager

from sqlalchemy import Column, Integer, String, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DB_URL
from .errors import DuplicateUnitError, StoreError
from .persistence import BaseRepo
from .schema import COMPONENT_NAMES, STATUS_READY, build_unit, merge_unit

logger = logging.getLogger(__name__)

Base = declarative_base()


class BusUnit(Base):
    __tablename__ = "bus_units"
    # never hand a deleted id out again
    __table_args__ = {"sqlite_autoincrement": True}

    id          = Column(Integer, primary_key=True)
    unit_number = Column(Integer, nullable=False, unique=True)
    mot         = Column(String, nullable=False, default=STATUS_READY)
    tran        = Column(String, nullable=False, default=STATUS_READY)
    ele         = Column(String, nullable=False, default=STATUS_READY)
    aa          = Column(String, nullable=False, default=STATUS_READY)
    fre         = Column(String, nullable=False, default=STATUS_READY)
    sus         = Column(String, nullable=False, default=STATUS_READY)
    dir         = Column(String, nullable=False, default=STATUS_READY)
    hoj         = Column(String, nullable=False, default=STATUS_READY)
    tel         = Column(String, nullable=False, default=STATUS_READY)

    def to_dict(self) -> dict:
        rec = {"id": self.id, "unitNumber": self.unit_number}
        for name in COMPONENT_NAMES:
            rec[name] = getattr(self, name.lower()) or STATUS_READY
        return rec

    def apply(self, unit: dict) -> None:
        self.unit_number = unit["unitNumber"]
        for name in COMPONENT_NAMES:
            setattr(self, name.lower(), unit[name])


class DBRepo(BaseRepo):
    kind = "db"
    id_policy = "counter"

    def __init__(self, db_url: str = DB_URL):
        url = make_url(db_url)
        if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
            os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
        self.engine = create_engine(db_url, echo=False)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def _session(self):
        with self.Session() as s:
            try:
                yield s
            except IntegrityError as exc:
                s.rollback()
                raise DuplicateUnitError("Ya existe una unidad con este número") from exc
            except SQLAlchemyError as exc:
                s.rollback()
                logger.error("Database error: %s", exc)
                raise StoreError(f"Database error: {exc}") from exc

    # ─── Bus units ───────────────────────────────────────
    def get_all_bus_units(self):
        with self._session() as s:
            return [row.to_dict() for row in s.query(BusUnit).order_by(BusUnit.id).all()]

    def get_bus_unit_by_number(self, unit_number: int):
        with self._session() as s:
            row = s.query(BusUnit).filter_by(unit_number=unit_number).first()
            return row.to_dict() if row else None

    def create_bus_unit(self, unit_data: dict):
        # id 0 is a placeholder; the database assigns the real one
        unit = build_unit(0, unit_data)
        with self._session() as s:
            row = BusUnit()
            row.apply(unit)
            s.add(row)
            s.commit()
            return row.to_dict()

    def update_bus_unit(self, unit_id: int, updates: dict):
        with self._session() as s:
            row = s.get(BusUnit, unit_id)
            if row is None:
                return None
            merged = merge_unit(row.to_dict(), updates)
            row.apply(merged)
            s.commit()
            return row.to_dict()

    def delete_bus_unit(self, unit_id: int) -> bool:
        with self._session() as s:
            row = s.get(BusUnit, unit_id)
            if row is None:
                return False
            s.delete(row)
            s.commit()
            return True

    def delete_all_bus_units(self) -> None:
        with self._session() as s:
            s.query(BusUnit).delete()
            s.commit()
