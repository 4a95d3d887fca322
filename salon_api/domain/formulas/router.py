"""Formula router - FastAPI endpoints for the service catalogue"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from .schemas import FormulaCreate, FormulaResponse, FormulaUpdate
from .service import FormulaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/formulas", tags=["Formulas"])


def get_formula_service(db: Session = Depends(get_db)) -> FormulaService:
    """Dependency injection for FormulaService"""
    return FormulaService(db)


# ============================================================================
# PUBLIC ROUTES
# ============================================================================


@router.get("")
async def list_formulas(service: FormulaService = Depends(get_formula_service)):
    """List active formulas"""
    formulas = service.list_active()
    return {
        "success": True,
        "message": "Formulas retrieved." if formulas else "No active formula found.",
        "data": [FormulaResponse.from_model(f) for f in formulas],
    }


# ============================================================================
# ADMIN ROUTES
# ============================================================================


@router.get("/admin/all")
async def list_all_formulas(
    actor: Principal = Depends(get_current_principal),
    service: FormulaService = Depends(get_formula_service),
):
    """List every formula, including inactive ones"""
    formulas = service.list_all(actor)
    return {
        "success": True,
        "message": "Formulas retrieved.",
        "data": [FormulaResponse.from_model(f) for f in formulas],
    }


@router.get("/{formula_id}")
async def get_formula(formula_id: int, service: FormulaService = Depends(get_formula_service)):
    """Get an active formula"""
    formula = service.get_active(formula_id)
    return {"success": True, "message": "Formula retrieved.", "data": FormulaResponse.from_model(formula)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_formula(
    data: FormulaCreate,
    actor: Principal = Depends(get_current_principal),
    service: FormulaService = Depends(get_formula_service),
):
    formula = service.create_formula(data, actor)
    return {"success": True, "message": "Formula created.", "data": FormulaResponse.from_model(formula)}


@router.put("/{formula_id}")
async def update_formula(
    formula_id: int,
    data: FormulaUpdate,
    actor: Principal = Depends(get_current_principal),
    service: FormulaService = Depends(get_formula_service),
):
    formula = service.update_formula(formula_id, data, actor)
    return {"success": True, "message": "Formula updated.", "data": FormulaResponse.from_model(formula)}


@router.delete("/{formula_id}")
async def delete_formula(
    formula_id: int,
    actor: Principal = Depends(get_current_principal),
    service: FormulaService = Depends(get_formula_service),
):
    data = service.delete_formula(formula_id, actor)
    return {"success": True, "message": "Formula deleted.", "data": data}
