"""
Ledger append-only des scans.

Un événement n'est jamais modifié ni supprimé. L'historique d'un utilisateur est
une requête (re-exécutée à chaque appel), triée du plus récent au plus ancien.
append() ne commite pas : il fait partie de la transaction de scan.
"""

import logging
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import NotFound
from app.models.point_adjustment import PointAdjustment
from app.models.scan_event import ScanEvent
from app.models.user import User
from app.schemas.scan import ScanEventResponse
from app.schemas.user import BalanceReport
from app.services.user_service import normalize_email

logger = logging.getLogger(__name__)


def append(
    db: Session,
    qr_code_id: str,
    scanner_email: str,
    points: int,
    scanned_by: Optional[str] = None,
    award_target: str = "SCANNER",
) -> ScanEvent:
    """Ajoute un événement horodaté (UTC) au ledger et le flushe pour obtenir son id."""
    scanner_email = normalize_email(scanner_email)
    event = ScanEvent(
        qr_code_id=qr_code_id,
        scanner_email=scanner_email,
        scanned_by=normalize_email(scanned_by) if scanned_by else scanner_email,
        award_target=award_target,
        points=points,
        scanned_at=datetime.now(timezone.utc),
    )
    db.add(event)
    db.flush()
    return event


def _ordered(stmt):
    return stmt.order_by(ScanEvent.scanned_at.desc(), ScanEvent.id.desc())


def history_for(db: Session, email: str) -> Iterator[ScanEventResponse]:
    """
    Historique d'un utilisateur, du plus récent au plus ancien.
    Générateur paresseux : chaque appel relance la requête sur l'état courant.
    """
    stmt = _ordered(select(ScanEvent).where(ScanEvent.scanner_email == normalize_email(email)))
    for event in db.execute(stmt).scalars():
        yield ScanEventResponse.model_validate(event)


def total_points_for(db: Session, email: str) -> int:
    """Somme des points de l'historique d'un utilisateur."""
    return db.execute(
        select(func.coalesce(func.sum(ScanEvent.points), 0))
        .where(ScanEvent.scanner_email == normalize_email(email))
    ).scalar_one()


def list_scans(
    db: Session,
    email: Optional[str] = None,
    qr_code_id: Optional[str] = None,
) -> List[ScanEventResponse]:
    """Événements du ledger, filtrés par compte crédité et/ou par QR code."""
    stmt = select(ScanEvent)
    if email:
        stmt = stmt.where(ScanEvent.scanner_email == normalize_email(email))
    if qr_code_id:
        stmt = stmt.where(ScanEvent.qr_code_id == qr_code_id.strip())

    events = db.execute(_ordered(stmt)).scalars().all()
    return [ScanEventResponse.model_validate(e) for e in events]


def balance_report(db: Session, email: str) -> BalanceReport:
    """
    Compare le solde stocké à ce que le ledger et le journal des ajustements
    permettent de reconstruire : points == scans + ajustements manuels.
    """
    email = normalize_email(email)
    points = db.execute(select(User.points).where(User.email == email)).scalar()
    if points is None:
        raise NotFound(f"Utilisateur {email} introuvable.")

    scan_points = total_points_for(db, email)
    adjustment_points = db.execute(
        select(func.coalesce(func.sum(PointAdjustment.applied_delta), 0))
        .where(PointAdjustment.user_email == email)
    ).scalar_one()

    consistent = points == scan_points + adjustment_points
    if not consistent:
        logger.warning(
            "Solde incohérent pour %s : stocké=%d, scans=%d, ajustements=%d",
            email, points, scan_points, adjustment_points,
        )

    return BalanceReport(
        email=email,
        points=points,
        scan_points=scan_points,
        adjustment_points=adjustment_points,
        consistent=consistent,
    )
