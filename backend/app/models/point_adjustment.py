"""
Modèle SQLAlchemy pour le journal des ajustements manuels de points (admin).
`applied_delta` est la variation réellement appliquée après plancher à 0.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String

from app.database import Base


class PointAdjustment(Base):
    __tablename__ = "point_adjustments"
    __table_args__ = (Index("ix_point_adjustments_user_email", "user_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_email = Column(String(255), nullable=False)
    action = Column(String(20), nullable=False)      # add, subtract
    amount = Column(Integer, nullable=False)         # Montant demandé (> 0)
    applied_delta = Column(Integer, nullable=False)  # Variation signée effective
    adjusted_by = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
