"""
Schémas Pydantic pour les opérations d'administration (ajustement manuel de points).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_ACTIONS = {"add", "subtract"}


class PointAdjustmentRequest(BaseModel):
    user_email: str = Field(alias="userEmail")
    action: str
    amount: int

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("action")
    @classmethod
    def valid_action(cls, v: str) -> str:
        action = v.strip().lower()
        if action not in VALID_ACTIONS:
            raise ValueError(f"Action invalide. Valeurs acceptées : {VALID_ACTIONS}")
        return action


class AdjustmentResponse(BaseModel):
    user_email: str
    action: str
    amount: int
    applied_delta: int  # Peut différer de -amount si le solde a été ramené à 0
    balance: int
