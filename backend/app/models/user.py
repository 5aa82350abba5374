"""
Modèle SQLAlchemy pour les comptes utilisateurs (ADMIN ou SCANNER).
Le solde `points` est stocké et maintenu cohérent avec le ledger des scans.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Uuid, func

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("points >= 0", name="ck_users_points_non_negative"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)  # Toujours stocké en minuscules
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # ADMIN, SCANNER
    points = Column(Integer, nullable=False, default=0)
    # Horodaté côté Python à la microseconde : clé d'ordre d'inscription
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
