"""
Router pour les scans : enregistrement d'un scan et consultation du ledger.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_optional_caller
from app.errors import InvalidInput, PermissionDenied
from app.schemas.scan import ScanEventResponse, ScanRequest, ScanResult
from app.schemas.user import CallerIdentity
from app.services import scan_ledger_service, scan_service, user_service

router = APIRouter(prefix="/api/v1/scans", tags=["Scans"])


@router.post("", response_model=ScanResult, status_code=201, summary="Scanner un QR code")
def scan(
    data: ScanRequest,
    db: Session = Depends(get_db),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
):
    """
    Valide le code et crédite les bénéficiaires selon son mode.

    L'appelant vient des en-têtes X-User-Email / X-User-Role quand ils sont
    présents (scannerEmail, s'il est envoyé, doit alors correspondre), sinon
    du champ scannerEmail du corps.

    Erreurs (champ `kind` du corps) :
    - 422 EmptyInput       : identifiant vide
    - 422 InvalidInput     : aucun appelant fourni
    - 403 PermissionDenied : scannerEmail différent de l'identité des en-têtes
    - 404 CodeNotFound     : code inexistant
    - 409 CodeInactive     : code désactivé
    - 404 NotFound         : compte de l'appelant inconnu
    - 503 Internal         : échec de stockage, le scan peut être renvoyé
    """
    if caller is None:
        if not data.scanner_email:
            raise InvalidInput("scannerEmail est obligatoire sans en-têtes d'identité.")
        return scan_service.scan(db, data.qr_code_id, data.scanner_email, caller_role=None)

    if data.scanner_email and user_service.normalize_email(data.scanner_email) != caller.email:
        raise PermissionDenied("Impossible de scanner au nom d'un autre compte.")
    return scan_service.scan(db, data.qr_code_id, caller.email, caller_role=caller.role)


@router.get("", response_model=List[ScanEventResponse], summary="Historique des scans")
def list_scans(
    email: Optional[str] = None,
    qr_code_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Événements du plus récent au plus ancien, filtrables par compte crédité et par code."""
    return scan_ledger_service.list_scans(db, email=email, qr_code_id=qr_code_id)
