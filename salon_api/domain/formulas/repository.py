"""Formula repository - Database operations for service packages"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, Formula


class FormulaRepository:
    """Repository for formula database operations"""

    @staticmethod
    def get_by_id(db: Session, formula_id: int) -> Optional[Formula]:
        return db.query(Formula).filter(Formula.id == formula_id).first()

    @staticmethod
    def get_by_title(db: Session, title: str) -> Optional[Formula]:
        return db.query(Formula).filter(Formula.title == title).first()

    @staticmethod
    def list_active(db: Session) -> list[Formula]:
        """Active formulas in catalogue order (oldest first)"""
        return (
            db.query(Formula)
            .filter(Formula.is_active.is_(True))
            .order_by(Formula.created_at.asc(), Formula.id.asc())
            .all()
        )

    @staticmethod
    def list_all(db: Session) -> list[Formula]:
        return db.query(Formula).order_by(Formula.created_at.asc(), Formula.id.asc()).all()

    @staticmethod
    def create(db: Session, **formula_data) -> Formula:
        formula = Formula(**formula_data)
        db.add(formula)
        db.commit()
        db.refresh(formula)
        return formula

    @staticmethod
    def update(db: Session, formula: Formula, **updates) -> Formula:
        """Update a formula with provided fields"""
        for key, value in updates.items():
            if hasattr(formula, key):
                setattr(formula, key, value)

        db.commit()
        db.refresh(formula)
        return formula

    @staticmethod
    def delete(db: Session, formula: Formula) -> None:
        db.delete(formula)
        db.commit()

    @staticmethod
    def count_appointments(db: Session, formula_id: int) -> int:
        return (
            db.query(func.count(Appointment.id))
            .filter(Appointment.formula_id == formula_id)
            .scalar()
        )
