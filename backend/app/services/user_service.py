"""
Service métier pour les comptes utilisateurs.

Le solde `points` n'est modifié que par credit(), appelé par le moteur de scan
ou par un ajustement manuel d'un administrateur. credit() ne commite pas :
c'est l'appelant qui porte la transaction.
"""

import logging
import re
from typing import List, Optional, Tuple

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import DuplicateEmail, InvalidCredential, InvalidInput, NotFound
from app.models.user import User
from app.schemas.user import CallerIdentity, UserResponse, normalize_role

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt ignore (ou refuse selon la version) tout ce qui dépasse 72 octets
_BCRYPT_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_user(
    db: Session,
    name: str,
    email: str,
    role: str,
    password: str,
) -> UserResponse:
    """
    Crée un compte avec un solde initial de 0.

    Lève InvalidInput (nom vide, email mal formé, mot de passe vide ou trop long,
    rôle inconnu) ou DuplicateEmail si l'email existe déjà, sans tenir compte de la casse.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Le nom ne peut pas être vide.")

    email = normalize_email(email)
    if not _EMAIL_RE.match(email):
        raise InvalidInput(f"Adresse email invalide : '{email}'.")

    if not password:
        raise InvalidInput("Le mot de passe ne peut pas être vide.")
    if len(password.encode("utf-8")) > _BCRYPT_MAX_BYTES:
        raise InvalidInput(f"Le mot de passe ne peut pas dépasser {_BCRYPT_MAX_BYTES} octets.")

    try:
        role = normalize_role(role or "")
    except ValueError as e:
        raise InvalidInput(str(e)) from e

    existing = db.execute(select(User).where(User.email == email)).scalar()
    if existing:
        raise DuplicateEmail(f"Un compte existe déjà pour l'email {email}.")

    user = User(
        name=name,
        email=email,
        role=role,
        password_hash=hash_password(password),
        points=0,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Inscription concurrente avec le même email
        db.rollback()
        raise DuplicateEmail(f"Un compte existe déjà pour l'email {email}.") from e
    db.refresh(user)

    logger.info("Compte créé : %s (%s)", email, role)
    return UserResponse.model_validate(user)


def get_user_by_email(db: Session, email: str) -> User:
    """Retourne le modèle User ; lève NotFound si l'email est inconnu."""
    email = normalize_email(email)
    user = db.execute(select(User).where(User.email == email)).scalar()
    if user is None:
        raise NotFound(f"Utilisateur {email} introuvable.")
    return user


def find_by_email(db: Session, email: str) -> UserResponse:
    return UserResponse.model_validate(get_user_by_email(db, email))


def credit(db: Session, email: str, delta: int) -> Tuple[User, int]:
    """
    Applique une variation signée au solde d'un utilisateur.

    Le solde est plancher à 0 : retirer plus que le solde le ramène à 0 sans erreur.
    La ligne est verrouillée (SELECT ... FOR UPDATE, ou BEGIN IMMEDIATE sur SQLite)
    jusqu'au commit de l'appelant : deux crédits concurrents sur le même compte
    sont sérialisés, deux comptes différents ne se bloquent pas (PostgreSQL).

    Retourne (user, variation effectivement appliquée). Lève NotFound.
    """
    email = normalize_email(email)
    user = db.execute(
        select(User)
        .where(User.email == email)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar()
    if user is None:
        raise NotFound(f"Utilisateur {email} introuvable.")

    before = user.points
    user.points = max(before + delta, 0)
    db.flush()

    return user, user.points - before


def list_users(db: Session, role: Optional[str] = None) -> List[UserResponse]:
    """
    Liste les utilisateurs par ordre d'inscription, éventuellement filtrés par rôle.
    created_at est posé côté Python à la microseconde ; l'email ne départage qu'une égalité stricte.
    """
    stmt = select(User)
    if role:
        try:
            stmt = stmt.where(User.role == normalize_role(role))
        except ValueError as e:
            raise InvalidInput(str(e)) from e

    users = db.execute(stmt.order_by(User.created_at, User.email)).scalars().all()
    return [UserResponse.model_validate(u) for u in users]


def authenticate(db: Session, email: str, password: str) -> CallerIdentity:
    """
    Vérifie les identifiants et retourne l'identité {email, role}.
    Email inconnu et mot de passe erroné lèvent la même erreur InvalidCredential.
    """
    email = normalize_email(email)
    user = db.execute(select(User).where(User.email == email)).scalar()

    password_bytes = (password or "").encode("utf-8")
    if (
        user is None
        or not password_bytes
        or len(password_bytes) > _BCRYPT_MAX_BYTES
        or not bcrypt.checkpw(password_bytes, user.password_hash.encode("utf-8"))
    ):
        logger.warning("Échec d'authentification pour %s", email)
        raise InvalidCredential("Email ou mot de passe incorrect.")

    return CallerIdentity(email=user.email, role=user.role)
