"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (SQLite en local, PostgreSQL en production)
    DATABASE_URL: str = "sqlite:///./qrpoints.db"
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 30.0

    # Identifiants des QR codes : QR001, QR002, ...
    QR_CODE_PREFIX: str = "QR"
    QR_CODE_ID_WIDTH: int = 3

    # Transaction de scan (crédit + écriture dans le ledger)
    SCAN_COMMIT_RETRIES: int = 3
    SCAN_RETRY_DELAY_SECONDS: float = 0.05

    # CORS : client navigateur en développement
    CORS_ORIGIN_REGEX: str = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
