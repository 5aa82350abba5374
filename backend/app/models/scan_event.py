"""
Modèle SQLAlchemy pour le ledger des scans (append-only).

- qr_code_id    : référence par valeur, sans clé étrangère : supprimer un QR code
                  ne supprime pas son historique
- scanner_email : compte crédité par cet événement (historique de l'utilisateur)
- points        : instantané de la valeur du code au moment du scan
"""

from sqlalchemy import Column, DateTime, Index, Integer, String

from app.database import Base


class ScanEvent(Base):
    """Un crédit de points issu d'un scan réussi. Jamais modifié ni supprimé."""
    __tablename__ = "scan_events"
    __table_args__ = (
        Index("ix_scan_events_scanner_email", "scanner_email"),
        Index("ix_scan_events_qr_code_id", "qr_code_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    qr_code_id = Column(String(50), nullable=False)
    scanner_email = Column(String(255), nullable=False)
    scanned_by = Column(String(255), nullable=False)    # Appelant ayant effectué le scan
    award_target = Column(String(20), nullable=False)   # SCANNER, OWNER
    points = Column(Integer, nullable=False)
    scanned_at = Column(DateTime(timezone=True), nullable=False)
