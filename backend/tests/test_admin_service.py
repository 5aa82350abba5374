"""
Tests unitaires pour les opérations d'administration.
Couverture : contrôle du rôle, adjust_points (journal, plancher à 0),
create_qr_code (propriétaire), désactivation, suppression.
"""

import pytest

from app.errors import InvalidInput, NotFound, PermissionDenied
from app.models.point_adjustment import PointAdjustment
from app.services import admin_service, qr_code_service, user_service


# ----------------------------------------------------------------
# Contrôle du rôle
# ----------------------------------------------------------------

class TestPermissions:
    def test_scanner_ne_peut_pas_ajuster(self, db, accounts):
        _, scanner = accounts
        with pytest.raises(PermissionDenied):
            admin_service.adjust_points(db, scanner, scanner.email, "add", 100)

    def test_scanner_ne_peut_pas_creer_de_code(self, db, accounts):
        _, scanner = accounts
        with pytest.raises(PermissionDenied):
            admin_service.create_qr_code(db, scanner, "Free", [], "SCANNER", 1000)

    def test_scanner_ne_peut_pas_supprimer(self, db, accounts):
        admin, scanner = accounts
        qr = admin_service.create_qr_code(db, admin, "Daily", [], "SCANNER", 10)
        with pytest.raises(PermissionDenied):
            admin_service.delete_qr_code(db, scanner, qr.qr_code_id)


# ----------------------------------------------------------------
# adjust_points
# ----------------------------------------------------------------

class TestAdjustPoints:
    def test_ajout(self, db, accounts):
        admin, scanner = accounts
        result = admin_service.adjust_points(db, admin, scanner.email, "add", 30)

        assert result.balance == 30
        assert result.applied_delta == 30
        assert user_service.get_user_by_email(db, scanner.email).points == 30

    def test_retrait(self, db, accounts):
        admin, scanner = accounts
        admin_service.adjust_points(db, admin, scanner.email, "add", 30)
        result = admin_service.adjust_points(db, admin, scanner.email, "subtract", 12)

        assert result.balance == 18
        assert result.applied_delta == -12

    def test_retrait_superieur_au_solde(self, db, accounts):
        admin, scanner = accounts
        admin_service.adjust_points(db, admin, scanner.email, "add", 10)
        result = admin_service.adjust_points(db, admin, scanner.email, "subtract", 1000)

        assert result.balance == 0
        assert result.applied_delta == -10
        assert result.amount == 1000

    def test_journal_des_ajustements(self, db, accounts):
        admin, scanner = accounts
        admin_service.adjust_points(db, admin, scanner.email, "ADD", 5)

        rows = db.query(PointAdjustment).all()
        assert len(rows) == 1
        assert rows[0].user_email == scanner.email
        assert rows[0].action == "add"
        assert rows[0].adjusted_by == admin.email

    @pytest.mark.parametrize("amount", [0, -5])
    def test_montant_non_positif(self, db, accounts, amount):
        admin, scanner = accounts
        with pytest.raises(InvalidInput, match="strictement positif"):
            admin_service.adjust_points(db, admin, scanner.email, "add", amount)

    def test_action_inconnue(self, db, accounts):
        admin, scanner = accounts
        with pytest.raises(InvalidInput, match="Action"):
            admin_service.adjust_points(db, admin, scanner.email, "multiply", 2)

    def test_utilisateur_inconnu_aucun_journal(self, db, accounts):
        admin, _ = accounts
        with pytest.raises(NotFound):
            admin_service.adjust_points(db, admin, "ghost@qrpoints.io", "add", 5)

        assert db.query(PointAdjustment).count() == 0


# ----------------------------------------------------------------
# Gestion des QR codes
# ----------------------------------------------------------------

class TestQRCodeManagement:
    def test_proprietaire_par_defaut_est_l_admin(self, db, accounts):
        admin, _ = accounts
        qr = admin_service.create_qr_code(db, admin, "Daily", ["promo"], "GIVE_TO_OWNER", 5)
        assert qr.owner_email == admin.email

    def test_proprietaire_designe(self, db, accounts):
        admin, scanner = accounts
        qr = admin_service.create_qr_code(
            db, admin, "Daily", [], "GIVE_TO_OWNER", 5, owner_email=scanner.email.upper(),
        )
        assert qr.owner_email == scanner.email

    def test_proprietaire_sans_compte(self, db, accounts):
        admin, _ = accounts
        with pytest.raises(InvalidInput, match="propriétaire"):
            admin_service.create_qr_code(db, admin, "Daily", [], "BOTH", 5, owner_email="ghost@qrpoints.io")

    def test_desactivation_et_reactivation(self, db, accounts):
        admin, _ = accounts
        qr = admin_service.create_qr_code(db, admin, "Daily", [], "SCANNER", 10)

        assert admin_service.deactivate_qr_code(db, admin, qr.qr_code_id).status == "INACTIVE"
        assert admin_service.activate_qr_code(db, admin, qr.qr_code_id).status == "ACTIVE"

    def test_desactivation_code_inexistant(self, db, accounts):
        admin, _ = accounts
        with pytest.raises(NotFound):
            admin_service.deactivate_qr_code(db, admin, "QR404")

    def test_suppression(self, db, accounts):
        admin, _ = accounts
        qr = admin_service.create_qr_code(db, admin, "Daily", [], "SCANNER", 10)
        admin_service.delete_qr_code(db, admin, qr.qr_code_id)

        assert qr_code_service.list_qr_codes(db) == []
