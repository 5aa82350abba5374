"""
Tests de bout en bout sur une vraie base SQLite : inscription, création de code,
scans, désactivation, ajustement et contrôle de cohérence des soldes via l'API.
"""

ADMIN_HEADERS = {"X-User-Email": "admin@qrpoints.io", "X-User-Role": "ADMIN"}


def signup(api, name, email, role):
    response = api.post("/api/v1/auth/signup", json={
        "name": name, "email": email, "password": "secret", "role": role,
    })
    assert response.status_code == 201
    return response.json()


def create_code(api, **body):
    response = api.post("/api/v1/qr-codes", json=body, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    return response.json()


def scan(api, qr_code_id, email):
    return api.post("/api/v1/scans", json={"qrCodeId": qr_code_id, "scannerEmail": email})


def test_parcours_complet(api):
    signup(api, "Admin", "admin@qrpoints.io", "Admin")
    signup(api, "Scanner", "scanner@qrpoints.io", "Scanner")

    login = api.post("/api/v1/auth/login", json={"email": "Scanner@QRPoints.io", "password": "secret"})
    assert login.json() == {"email": "scanner@qrpoints.io", "role": "SCANNER"}

    qr = create_code(api, name="Daily", tags=["daily"], mode="Scanner", points=10)
    assert qr["qr_code_id"] == "QR001"

    # Scénario A
    first = scan(api, "QR001", "scanner@qrpoints.io")
    assert first.status_code == 201
    assert first.json()["balance"] == 10

    history = api.get("/api/v1/scans", params={"email": "scanner@qrpoints.io"}).json()
    assert len(history) == 1
    assert history[0]["points"] == 10

    # Scénario B
    assert api.post("/api/v1/qr-codes/QR001/deactivate", headers=ADMIN_HEADERS).status_code == 200
    rejected = scan(api, "QR001", "scanner@qrpoints.io")
    assert rejected.status_code == 409
    assert rejected.json()["kind"] == "CodeInactive"
    assert len(api.get("/api/v1/scans", params={"email": "scanner@qrpoints.io"}).json()) == 1

    # Scénario C
    adjusted = api.post("/api/v1/admin/points", json={
        "userEmail": "scanner@qrpoints.io", "action": "subtract", "amount": 1000,
    }, headers=ADMIN_HEADERS)
    assert adjusted.status_code == 200
    assert adjusted.json()["balance"] == 0

    report = api.get("/api/v1/users/scanner@qrpoints.io/balance").json()
    assert report["points"] == 0
    assert report["consistent"] is True


def test_mode_both_via_api(api):
    signup(api, "Admin", "admin@qrpoints.io", "ADMIN")
    signup(api, "Owner", "owner@qrpoints.io", "SCANNER")
    signup(api, "Scanner", "s@qrpoints.io", "SCANNER")
    qr = create_code(api, name="Both", mode="BOTH", points=5, ownerEmail="owner@qrpoints.io")

    response = scan(api, qr["qr_code_id"], "s@qrpoints.io")
    assert response.status_code == 201
    assert len(response.json()["events"]) == 2

    users = {u["email"]: u["points"] for u in api.get("/api/v1/users").json()}
    assert users == {"admin@qrpoints.io": 0, "owner@qrpoints.io": 5, "s@qrpoints.io": 5}


def test_code_inexistant_et_doublon_email(api):
    signup(api, "Scanner", "s@qrpoints.io", "SCANNER")

    response = scan(api, "QR777", "s@qrpoints.io")
    assert response.status_code == 404
    assert response.json()["kind"] == "CodeNotFound"

    duplicate = api.post("/api/v1/auth/signup", json={
        "name": "Other", "email": "S@qrpoints.io", "password": "x", "role": "SCANNER",
    })
    assert duplicate.status_code == 409


def test_suppression_conserve_l_historique(api):
    signup(api, "Admin", "admin@qrpoints.io", "ADMIN")
    qr = create_code(api, name="Once", mode="SCANNER", points=3)
    scan(api, qr["qr_code_id"], "admin@qrpoints.io")

    assert api.delete(f"/api/v1/qr-codes/{qr['qr_code_id']}", headers=ADMIN_HEADERS).status_code == 200
    assert api.get("/api/v1/qr-codes").json() == []

    history = api.get("/api/v1/scans", params={"qr_code_id": qr["qr_code_id"]}).json()
    assert len(history) == 1
    assert api.get("/api/v1/users/admin@qrpoints.io/balance").json()["consistent"] is True
