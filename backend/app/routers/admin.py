"""
Router pour les opérations d'administration sur les soldes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_caller
from app.schemas.admin import AdjustmentResponse, PointAdjustmentRequest
from app.schemas.user import CallerIdentity
from app.services import admin_service

router = APIRouter(prefix="/api/v1/admin", tags=["Administration"])


@router.post("/points", response_model=AdjustmentResponse, summary="Ajuster manuellement un solde")
def adjust_points(
    data: PointAdjustmentRequest,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """
    Ajoute (add) ou retire (subtract) des points. Un retrait supérieur au solde
    ramène le solde à 0. Retourne 422 si le montant n'est pas strictement positif.
    """
    return admin_service.adjust_points(db, caller, data.user_email, data.action, data.amount)
