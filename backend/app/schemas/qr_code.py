"""
Schémas Pydantic pour les définitions de QR codes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_MODES = {"GIVE_TO_OWNER", "SCANNER", "BOTH"}
VALID_STATUSES = {"ACTIVE", "INACTIVE"}

# Variantes envoyées par le client navigateur ("GiveToOwner", "give-to-owner"...)
_MODE_ALIASES = {"GIVETOOWNER": "GIVE_TO_OWNER", "OWNER": "GIVE_TO_OWNER"}


def normalize_mode(value: str) -> str:
    key = value.strip().upper().replace("-", "_").replace(" ", "_")
    mode = _MODE_ALIASES.get(key.replace("_", ""), key)
    if mode not in VALID_MODES:
        raise ValueError(f"Mode invalide. Valeurs acceptées : {VALID_MODES}")
    return mode


def normalize_tags(tags: List[str]) -> List[str]:
    """Ensemble de tags : sans doublons ni vides, trié (l'ordre n'a pas de sens)."""
    return sorted({t.strip() for t in tags if t and t.strip()})


class QRCodeCreate(BaseModel):
    """Corps de requête pour créer un QR code (POST /qr-codes)."""
    name: str
    tags: List[str] = []
    mode: str = "SCANNER"
    points: int = 0
    owner_email: Optional[str] = Field(default=None, alias="ownerEmail")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("mode")
    @classmethod
    def valid_mode(cls, v: str) -> str:
        return normalize_mode(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class QRCodeUpdate(BaseModel):
    """Modification de la valeur d'un code (l'historique garde l'ancienne valeur)."""
    points: int


class QRCodeResponse(BaseModel):
    qr_code_id: str
    name: str
    tags: List[str]
    mode: str
    points: int
    status: str
    owner_email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
