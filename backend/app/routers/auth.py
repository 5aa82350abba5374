"""
Router d'authentification : inscription et connexion.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user import CallerIdentity, LoginRequest, UserCreate, UserResponse
from app.services import user_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/signup", response_model=UserResponse, status_code=201, summary="Créer un compte")
def signup(data: UserCreate, db: Session = Depends(get_db)):
    """
    Crée un compte ADMIN ou SCANNER avec un solde de 0 point.
    Retourne 409 si l'email est déjà utilisé (sans tenir compte de la casse).
    """
    return user_service.create_user(db, data.name, data.email, data.role, data.password)


@router.post("/login", response_model=CallerIdentity, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Vérifie les identifiants et retourne {email, role}. Retourne 401 sinon."""
    return user_service.authenticate(db, data.email, data.password)
