"""
Schémas Pydantic pour les comptes utilisateurs et l'authentification.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

VALID_ROLES = {"ADMIN", "SCANNER"}


def normalize_role(value: str) -> str:
    """Accepte 'Admin', 'admin', 'SCANNER'... et renvoie la forme canonique."""
    role = value.strip().upper()
    if role not in VALID_ROLES:
        raise ValueError(f"Rôle invalide. Valeurs acceptées : {VALID_ROLES}")
    return role


class UserCreate(BaseModel):
    """Corps de requête pour l'inscription (POST /auth/signup)."""
    name: str
    email: EmailStr
    password: str
    role: str = "SCANNER"

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        return normalize_role(v)


class LoginRequest(BaseModel):
    email: str
    password: str


class CallerIdentity(BaseModel):
    """Identité authentifiée transmise au moteur (email + rôle)."""
    email: str
    role: str


class UserResponse(BaseModel):
    """Schéma de réponse pour un utilisateur (GET /users)."""
    id: uuid.UUID
    name: str
    email: str
    role: str
    points: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BalanceReport(BaseModel):
    """Contrôle de cohérence entre solde stocké et ledger."""
    email: str
    points: int               # Solde stocké
    scan_points: int          # Somme des points du ledger des scans
    adjustment_points: int    # Somme des ajustements manuels effectifs
    consistent: bool
