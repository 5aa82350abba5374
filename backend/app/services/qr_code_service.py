"""
Service métier pour les définitions de QR codes (création, statut, suppression).

Supprimer un QR code ne touche pas au ledger : les scans passés restent dans
l'historique des utilisateurs, avec la valeur en points du moment du scan.
"""

import io
import logging
from typing import List, Optional

import qrcode
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import InvalidInput, NotFound
from app.models.qr_code import QRCode
from app.schemas.qr_code import (
    VALID_STATUSES,
    QRCodeResponse,
    normalize_mode,
    normalize_tags,
)

logger = logging.getLogger(__name__)


def _format_qr_code_id(sequence: int) -> str:
    """QR001, QR002, ... (préfixe et largeur configurables)."""
    return f"{settings.QR_CODE_PREFIX}{sequence:0{settings.QR_CODE_ID_WIDTH}d}"


def _check_points(points: int) -> None:
    if points is None or isinstance(points, bool) or points < 0:
        raise InvalidInput("La valeur en points doit être un entier positif ou nul.")


def _get_or_404(db: Session, qr_code_id: str) -> QRCode:
    qr = db.execute(select(QRCode).where(QRCode.qr_code_id == qr_code_id)).scalar()
    if qr is None:
        raise NotFound(f"QR code {qr_code_id} introuvable.")
    return qr


def create_qr_code(
    db: Session,
    name: str,
    tags: List[str],
    mode: str,
    points: int,
    owner_email: str,
) -> QRCodeResponse:
    """
    Crée un QR code en statut ACTIVE.

    L'identifiant public est dérivé de la clé auto-incrémentée après le flush,
    dans la même transaction : il n'est jamais visible à NULL ni réutilisé.

    Lève InvalidInput si le nom est vide, les points négatifs ou le mode inconnu.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Le nom du QR code ne peut pas être vide.")
    _check_points(points)
    try:
        mode = normalize_mode(mode or "")
    except ValueError as e:
        raise InvalidInput(str(e)) from e
    owner_email = (owner_email or "").strip().lower()
    if not owner_email:
        raise InvalidInput("Le propriétaire du QR code est obligatoire.")

    qr = QRCode(
        name=name,
        tags=normalize_tags(tags or []),
        mode=mode,
        points=points,
        status="ACTIVE",
        owner_email=owner_email,
    )
    db.add(qr)
    db.flush()
    qr.qr_code_id = _format_qr_code_id(qr.id)
    db.commit()
    db.refresh(qr)

    logger.info("QR code %s créé (%s, %s, %d points)", qr.qr_code_id, name, mode, points)
    return QRCodeResponse.model_validate(qr)


def get_qr_code(db: Session, qr_code_id: str) -> QRCodeResponse:
    return QRCodeResponse.model_validate(_get_or_404(db, qr_code_id))


def set_status(db: Session, qr_code_id: str, status: str) -> QRCodeResponse:
    """
    Passe un QR code en ACTIVE ou INACTIVE. Idempotent : redemander le statut
    courant ne modifie rien. Lève NotFound ou InvalidInput (statut inconnu).
    """
    status = (status or "").strip().upper()
    if status not in VALID_STATUSES:
        raise InvalidInput(f"Statut invalide. Valeurs acceptées : {VALID_STATUSES}")

    qr = _get_or_404(db, qr_code_id)
    if qr.status != status:
        qr.status = status
        db.commit()
        db.refresh(qr)
        logger.info("QR code %s → %s", qr_code_id, status)

    return QRCodeResponse.model_validate(qr)


def update_points(db: Session, qr_code_id: str, points: int) -> QRCodeResponse:
    """Change la valeur d'un code ; les scans déjà enregistrés gardent leur instantané."""
    _check_points(points)
    qr = _get_or_404(db, qr_code_id)
    if qr.points != points:
        logger.info("QR code %s : %d → %d points", qr_code_id, qr.points, points)
        qr.points = points
        db.commit()
        db.refresh(qr)
    return QRCodeResponse.model_validate(qr)


def delete_qr_code(db: Session, qr_code_id: str) -> None:
    """Supprime la définition du code. L'historique des scans est conservé."""
    qr = _get_or_404(db, qr_code_id)
    db.delete(qr)
    db.commit()
    logger.info("QR code %s supprimé", qr_code_id)


def list_qr_codes(db: Session, mode: Optional[str] = None) -> List[QRCodeResponse]:
    """Liste les QR codes dans l'ordre de création, éventuellement filtrés par mode."""
    stmt = select(QRCode)
    if mode:
        try:
            stmt = stmt.where(QRCode.mode == normalize_mode(mode))
        except ValueError as e:
            raise InvalidInput(str(e)) from e

    codes = db.execute(stmt.order_by(QRCode.id)).scalars().all()
    return [QRCodeResponse.model_validate(qr) for qr in codes]


def generate_qr_image(qr_code_id: str) -> bytes:
    """Génère une image PNG du QR code encodant l'identifiant donné."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(qr_code_id)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
