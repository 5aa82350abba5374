"""
Modèle SQLAlchemy pour les définitions de QR codes.

L'identifiant public `qr_code_id` (ex: "QR001") est dérivé de la clé
auto-incrémentée : il n'est jamais réutilisé, même après suppression d'un code.
"""

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Integer, String, func

from app.database import Base


class QRCode(Base):
    __tablename__ = "qr_codes"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_qr_codes_points_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    qr_code_id = Column(String(50), unique=True, nullable=True)  # Renseigné au flush, immuable ensuite
    name = Column(String(255), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    mode = Column(String(20), nullable=False)                    # GIVE_TO_OWNER, SCANNER, BOTH
    points = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="ACTIVE")  # ACTIVE, INACTIVE
    owner_email = Column(String(255), nullable=False)            # Crédité en mode GIVE_TO_OWNER / BOTH
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
