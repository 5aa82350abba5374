"""
Opérations d'administration : gestion des QR codes et ajustement manuel des points.
Toutes les opérations exigent un appelant de rôle ADMIN.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.errors import InvalidInput, NotFound, PermissionDenied
from app.models.point_adjustment import PointAdjustment
from app.schemas.admin import VALID_ACTIONS, AdjustmentResponse
from app.schemas.qr_code import QRCodeResponse
from app.schemas.user import CallerIdentity
from app.services import qr_code_service, user_service

logger = logging.getLogger(__name__)


def _require_admin(caller: CallerIdentity) -> None:
    if (caller.role or "").upper() != "ADMIN":
        raise PermissionDenied("Action réservée aux administrateurs.")


def adjust_points(
    db: Session,
    caller: CallerIdentity,
    user_email: str,
    action: str,
    amount: int,
) -> AdjustmentResponse:
    """
    Ajoute ou retire des points à un utilisateur.

    Le montant doit être strictement positif. Un retrait supérieur au solde
    ramène le solde à 0 ; la variation réellement appliquée est journalisée
    dans point_adjustments. Lève InvalidInput, NotFound ou PermissionDenied.
    """
    _require_admin(caller)

    action = (action or "").strip().lower()
    if action not in VALID_ACTIONS:
        raise InvalidInput(f"Action invalide. Valeurs acceptées : {VALID_ACTIONS}")
    if amount is None or isinstance(amount, bool) or amount <= 0:
        raise InvalidInput("Le montant doit être strictement positif.")

    delta = amount if action == "add" else -amount
    try:
        user, applied = user_service.credit(db, user_email, delta)
        db.add(PointAdjustment(
            user_email=user.email,
            action=action,
            amount=amount,
            applied_delta=applied,
            adjusted_by=user_service.normalize_email(caller.email),
            created_at=datetime.now(timezone.utc),
        ))
        response = AdjustmentResponse(
            user_email=user.email,
            action=action,
            amount=amount,
            applied_delta=applied,
            balance=user.points,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Ajustement %s de %d points pour %s par %s (appliqué : %+d, solde : %d)",
        action, amount, response.user_email, caller.email, applied, response.balance,
    )
    return response


def create_qr_code(
    db: Session,
    caller: CallerIdentity,
    name: str,
    tags: List[str],
    mode: str,
    points: int,
    owner_email: Optional[str] = None,
) -> QRCodeResponse:
    """
    Crée un QR code. Le propriétaire (crédité en mode GIVE_TO_OWNER / BOTH) est
    l'administrateur appelant, sauf si un autre compte existant est désigné.
    """
    _require_admin(caller)

    owner = owner_email or caller.email
    try:
        owner = user_service.get_user_by_email(db, owner).email
    except NotFound as e:
        raise InvalidInput(f"Le propriétaire {owner} n'a pas de compte.") from e

    return qr_code_service.create_qr_code(db, name, tags, mode, points, owner)


def deactivate_qr_code(db: Session, caller: CallerIdentity, qr_code_id: str) -> QRCodeResponse:
    _require_admin(caller)
    return qr_code_service.set_status(db, qr_code_id, "INACTIVE")


def activate_qr_code(db: Session, caller: CallerIdentity, qr_code_id: str) -> QRCodeResponse:
    _require_admin(caller)
    return qr_code_service.set_status(db, qr_code_id, "ACTIVE")


def update_qr_code_points(
    db: Session,
    caller: CallerIdentity,
    qr_code_id: str,
    points: int,
) -> QRCodeResponse:
    _require_admin(caller)
    return qr_code_service.update_points(db, qr_code_id, points)


def delete_qr_code(db: Session, caller: CallerIdentity, qr_code_id: str) -> None:
    """Supprime la définition ; les scans déjà enregistrés restent dans le ledger."""
    _require_admin(caller)
    qr_code_service.delete_qr_code(db, qr_code_id)
