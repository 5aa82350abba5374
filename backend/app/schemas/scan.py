"""
Schémas Pydantic pour les scans et le ledger.
Le client navigateur envoie { qrCodeId, scannerEmail } : les alias camelCase sont acceptés.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScanRequest(BaseModel):
    qr_code_id: str = Field(alias="qrCodeId")
    # Facultatif quand l'identité arrive par les en-têtes X-User-*
    scanner_email: Optional[str] = Field(default=None, alias="scannerEmail")

    model_config = ConfigDict(populate_by_name=True)


class ScanEventResponse(BaseModel):
    """Une ligne du ledger."""
    id: int
    qr_code_id: str
    scanner_email: str
    scanned_by: str
    award_target: str  # SCANNER, OWNER
    points: int
    scanned_at: datetime

    model_config = {"from_attributes": True}


class ScanResult(BaseModel):
    """Résultat d'un scan réussi."""
    qr_code_id: str
    points_awarded: int          # Total crédité, tous bénéficiaires confondus
    balance: int                 # Solde de l'appelant après le scan
    events: List[ScanEventResponse]
    message: str
