"""Formula service - Business logic for the service catalogue"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Principal, require_admin
from ...errors import ConflictError, NotFoundError
from ...models import Formula
from .repository import FormulaRepository
from .schemas import FormulaCreate, FormulaUpdate

logger = logging.getLogger(__name__)

# Request field -> model column
_FIELD_MAP = {
    "title": "title",
    "label": "label",
    "price": "price",
    "duration": "duration",
    "treatments": "treatments",
    "description": "description",
    "isActive": "is_active",
}


class FormulaService:
    """Service layer for formula business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FormulaRepository()

    def list_active(self) -> list[Formula]:
        return self.repo.list_active(self.db)

    def list_all(self, actor: Principal) -> list[Formula]:
        require_admin(actor)
        return self.repo.list_all(self.db)

    def get_active(self, formula_id: int) -> Formula:
        """Public lookup; inactive formulas are reported as missing"""
        formula = self.repo.get_by_id(self.db, formula_id)
        if not formula or not formula.is_active:
            raise NotFoundError("Formula not found or inactive.")
        return formula

    def get_formula(self, formula_id: int) -> Formula:
        formula = self.repo.get_by_id(self.db, formula_id)
        if not formula:
            raise NotFoundError("Formula not found.")
        return formula

    def create_formula(self, data: FormulaCreate, actor: Principal) -> Formula:
        require_admin(actor)
        logger.info(f"📥 Creating formula '{data.title}' (admin {actor.user_id})")

        if self.repo.get_by_title(self.db, data.title):
            raise ConflictError("A formula with this title already exists.")

        try:
            return self.repo.create(
                self.db,
                title=data.title,
                label=data.label or "",
                price=data.price,
                duration=data.duration,
                treatments=data.treatments,
                description=data.description,
                is_active=data.isActive,
            )
        except IntegrityError as e:
            # Title taken between the check and the insert
            self.db.rollback()
            raise ConflictError("A formula with this title already exists.") from e

    def update_formula(self, formula_id: int, data: FormulaUpdate, actor: Principal) -> Formula:
        require_admin(actor)
        formula = self.get_formula(formula_id)

        updates = {
            _FIELD_MAP[key]: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if key in _FIELD_MAP
        }
        for column in ("title", "price", "duration", "is_active", "treatments"):
            if column in updates and updates[column] is None:
                updates.pop(column)

        new_title = updates.get("title")
        if new_title and new_title != formula.title and self.repo.get_by_title(self.db, new_title):
            raise ConflictError("A formula with this title already exists.")

        try:
            formula = self.repo.update(self.db, formula, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A formula with this title already exists.") from e

        logger.info(f"✅ Formula {formula.id} updated by admin {actor.user_id}")
        return formula

    def delete_formula(self, formula_id: int, actor: Principal) -> dict:
        require_admin(actor)
        formula = self.get_formula(formula_id)

        if self.repo.count_appointments(self.db, formula.id):
            raise ConflictError(
                "This formula is referenced by appointments. Deactivate it instead of deleting it."
            )

        self.repo.delete(self.db, formula)
        logger.info(f"🗑️ Formula {formula_id} deleted by admin {actor.user_id}")
        return {"id": formula_id}
