"""
Dépendances FastAPI partagées par les routers.

L'identité de l'appelant est posée par la couche d'authentification en amont
(en-têtes X-User-Email / X-User-Role) ; le moteur lui fait confiance.
"""

from typing import Optional

from fastapi import Header

from app.errors import InvalidCredential
from app.schemas.user import CallerIdentity, normalize_role


def get_caller(
    x_user_email: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> CallerIdentity:
    if not x_user_email or not x_user_role:
        raise InvalidCredential("Identité de l'appelant manquante.")
    try:
        role = normalize_role(x_user_role)
    except ValueError as e:
        raise InvalidCredential(str(e)) from e
    return CallerIdentity(email=x_user_email.strip().lower(), role=role)


def get_optional_caller(
    x_user_email: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Optional[CallerIdentity]:
    """Comme get_caller, mais None quand aucun en-tête d'identité n'est envoyé."""
    if not x_user_email and not x_user_role:
        return None
    return get_caller(x_user_email, x_user_role)
