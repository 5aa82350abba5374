"""
Taxonomie des erreurs métier du ledger de points.

Chaque erreur porte un `kind` distinguable par machine et un message lisible.
Elles héritent de ValueError : les services lèvent, les routers et le handler
global de main.py traduisent en réponse HTTP.
"""


class LedgerError(ValueError):
    kind = "Internal"
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def to_dict(self) -> dict:
        return {"detail": self.reason, "kind": self.kind}


class InvalidInput(LedgerError):
    """Champ manquant ou mal formé : l'appelant doit corriger et renvoyer."""
    kind = "InvalidInput"
    status_code = 422


class EmptyInput(InvalidInput):
    kind = "EmptyInput"


class NotFound(LedgerError):
    kind = "NotFound"
    status_code = 404


class CodeNotFound(NotFound):
    kind = "CodeNotFound"


class CodeInactive(LedgerError):
    kind = "CodeInactive"
    status_code = 409


class DuplicateEmail(LedgerError):
    kind = "DuplicateEmail"
    status_code = 409


class InvalidCredential(LedgerError):
    kind = "InvalidCredential"
    status_code = 401


class PermissionDenied(LedgerError):
    kind = "PermissionDenied"
    status_code = 403


class Internal(LedgerError):
    """Échec de stockage ou de transaction, seul cas rejoué automatiquement."""
    kind = "Internal"
    status_code = 503
