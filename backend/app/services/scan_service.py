"""
Moteur de scan : valide un QR code, crédite les bénéficiaires et écrit le ledger.

Cycle d'un scan :
  Soumis → Validé → Crédité → Enregistré   (succès)
  Soumis → Rejeté                          (EmptyInput, CodeNotFound, CodeInactive, NotFound)

Bénéficiaires selon le mode du code :
  - SCANNER        : l'appelant
  - GIVE_TO_OWNER  : le propriétaire du code
  - BOTH           : le propriétaire puis l'appelant (deux crédits, deux événements,
                     y compris quand le propriétaire scanne son propre code)

Chaque crédit et son événement sont écrits dans une seule transaction : tout est
commité ensemble ou rien ne l'est. Un rejet n'a aucun effet de bord.
Pas de déduplication : scanner deux fois le même code rapporte deux fois les points.
"""

import logging
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import CodeInactive, CodeNotFound, EmptyInput, Internal, InvalidInput
from app.models.qr_code import QRCode
from app.schemas.scan import ScanEventResponse, ScanResult
from app.schemas.user import normalize_role
from app.services import scan_ledger_service, user_service

logger = logging.getLogger(__name__)

AWARD_TARGETS = {
    "SCANNER": ("SCANNER",),
    "GIVE_TO_OWNER": ("OWNER",),
    "BOTH": ("OWNER", "SCANNER"),
}


def scan(
    db: Session,
    qr_code_id: str,
    caller_email: str,
    caller_role: Optional[str] = None,
) -> ScanResult:
    """
    Traite le scan d'un QR code par un utilisateur authentifié.

    caller_role est facultatif : s'il est absent, le rôle du compte est utilisé.
    Il n'influe pas sur les bénéficiaires ; ADMIN comme SCANNER peuvent scanner.

    Les échecs de stockage (OperationalError : verrou expiré, connexion perdue)
    sont rejoués jusqu'à SCAN_COMMIT_RETRIES fois puis remontés en Internal.
    Toute autre erreur est remontée immédiatement après rollback.
    """
    code_id = (qr_code_id or "").strip()
    if not code_id:
        raise EmptyInput("Veuillez saisir un identifiant de QR code.")

    caller = user_service.normalize_email(caller_email)
    if not caller:
        raise EmptyInput("L'email de l'appelant est obligatoire.")

    if caller_role is not None:
        try:
            caller_role = normalize_role(caller_role)
        except ValueError as e:
            raise InvalidInput(str(e)) from e

    attempts = max(settings.SCAN_COMMIT_RETRIES, 0) + 1
    for attempt in range(1, attempts + 1):
        try:
            return _scan_once(db, code_id, caller, caller_role)
        except OperationalError as exc:
            db.rollback()
            if attempt == attempts:
                logger.error("Scan %s par %s abandonné après %d tentatives : %s", code_id, caller, attempts, exc)
                raise Internal("Le scan n'a pas pu être enregistré, veuillez réessayer.") from exc
            logger.warning("Scan %s par %s : échec de stockage, tentative %d/%d", code_id, caller, attempt, attempts)
            time.sleep(settings.SCAN_RETRY_DELAY_SECONDS * attempt)
        except Exception:
            db.rollback()
            raise


def _scan_once(
    db: Session,
    code_id: str,
    caller: str,
    caller_role: Optional[str],
) -> ScanResult:
    # Verrou partagé sur le code : une désactivation concurrente attend la fin du scan
    qr = db.execute(
        select(QRCode)
        .where(QRCode.qr_code_id == code_id)
        .with_for_update(read=True)
        .execution_options(populate_existing=True)
    ).scalar()
    if qr is None:
        logger.warning("Scan rejeté : QR code %s introuvable (appelant %s)", code_id, caller)
        raise CodeNotFound(f"QR code {code_id} introuvable.")
    if qr.status != "ACTIVE":
        logger.warning("Scan rejeté : QR code %s inactif (appelant %s)", code_id, caller)
        raise CodeInactive(f"Le QR code {code_id} n'est plus actif.")

    account = user_service.get_user_by_email(db, caller)
    role = caller_role or account.role

    events = []
    for target in AWARD_TARGETS[qr.mode]:
        party = qr.owner_email if target == "OWNER" else caller
        user_service.credit(db, party, qr.points)
        event = scan_ledger_service.append(
            db, code_id, party, qr.points, scanned_by=caller, award_target=target,
        )
        events.append(ScanEventResponse.model_validate(event))

    # Réponse construite avant le commit (les objets expirent ensuite)
    result = ScanResult(
        qr_code_id=code_id,
        points_awarded=sum(e.points for e in events),
        balance=account.points,
        events=events,
        message=f"Scan réussi : {qr.name} ({qr.points} points).",
    )
    db.commit()

    logger.info(
        "Scan %s par %s (%s) : %d points crédités à %s",
        code_id, caller, role, result.points_awarded,
        ", ".join(e.scanner_email for e in events),
    )
    return result
