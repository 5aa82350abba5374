"""
Router pour les QR codes : consultation publique, gestion réservée aux administrateurs.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_caller
from app.schemas.qr_code import QRCodeCreate, QRCodeResponse, QRCodeUpdate
from app.schemas.user import CallerIdentity
from app.services import admin_service, qr_code_service

router = APIRouter(prefix="/api/v1/qr-codes", tags=["QR codes"])


@router.get("", response_model=List[QRCodeResponse], summary="Lister les QR codes")
def list_qr_codes(mode: Optional[str] = None, db: Session = Depends(get_db)):
    """Retourne les QR codes dans l'ordre de création, filtrables par mode."""
    return qr_code_service.list_qr_codes(db, mode)


@router.post("", response_model=QRCodeResponse, status_code=201, summary="Créer un QR code")
def create_qr_code(
    data: QRCodeCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """
    Crée un QR code ACTIVE. Sans ownerEmail, l'administrateur appelant en est le propriétaire.
    Retourne 422 si le nom est vide ou les points négatifs, 403 si l'appelant n'est pas ADMIN.
    """
    return admin_service.create_qr_code(
        db, caller, data.name, data.tags, data.mode, data.points, data.owner_email,
    )


@router.get("/{qr_code_id}", response_model=QRCodeResponse, summary="Détail d'un QR code")
def get_qr_code(qr_code_id: str, db: Session = Depends(get_db)):
    return qr_code_service.get_qr_code(db, qr_code_id)


@router.get("/{qr_code_id}/image", summary="Image PNG d'un QR code")
def get_qr_code_image(qr_code_id: str, db: Session = Depends(get_db)):
    """Génère l'image à imprimer ou afficher. Retourne 404 si le code n'existe pas."""
    qr = qr_code_service.get_qr_code(db, qr_code_id)
    return Response(
        content=qr_code_service.generate_qr_image(qr.qr_code_id),
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename={qr.qr_code_id}.png"},
    )


@router.patch("/{qr_code_id}", response_model=QRCodeResponse, summary="Modifier la valeur d'un QR code")
def update_qr_code(
    qr_code_id: str,
    data: QRCodeUpdate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Les scans déjà enregistrés conservent la valeur du moment du scan."""
    return admin_service.update_qr_code_points(db, caller, qr_code_id, data.points)


@router.post("/{qr_code_id}/deactivate", response_model=QRCodeResponse, summary="Désactiver un QR code")
def deactivate_qr_code(
    qr_code_id: str,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Idempotent. Tout scan ultérieur est rejeté (CodeInactive)."""
    return admin_service.deactivate_qr_code(db, caller, qr_code_id)


@router.post("/{qr_code_id}/activate", response_model=QRCodeResponse, summary="Réactiver un QR code")
def activate_qr_code(
    qr_code_id: str,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return admin_service.activate_qr_code(db, caller, qr_code_id)


@router.delete("/{qr_code_id}", summary="Supprimer un QR code")
def delete_qr_code(
    qr_code_id: str,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Supprime la définition du code ; l'historique des scans est conservé."""
    admin_service.delete_qr_code(db, caller, qr_code_id)
    return {"qr_code_id": qr_code_id, "deleted": True}
