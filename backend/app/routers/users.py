"""
Router pour la consultation des comptes et de leur solde.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user import BalanceReport, UserResponse
from app.services import scan_ledger_service, user_service

router = APIRouter(prefix="/api/v1/users", tags=["Utilisateurs"])


@router.get("", response_model=List[UserResponse], summary="Lister les utilisateurs")
def list_users(role: Optional[str] = None, db: Session = Depends(get_db)):
    """Retourne les utilisateurs par ordre d'inscription, filtrables par rôle (ADMIN, SCANNER)."""
    return user_service.list_users(db, role)


@router.get("/{email}", response_model=UserResponse, summary="Détail d'un utilisateur")
def get_user(email: str, db: Session = Depends(get_db)):
    return user_service.find_by_email(db, email)


@router.get("/{email}/balance", response_model=BalanceReport, summary="Contrôle de cohérence du solde")
def get_balance(email: str, db: Session = Depends(get_db)):
    """
    Compare le solde stocké à la somme des scans et des ajustements manuels.
    `consistent` vaut false si les deux divergent.
    """
    return scan_ledger_service.balance_report(db, email)
