from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Reseed Credentials"
    LOG_LEVEL: str = "INFO"

    # Where generated artifacts are written
    OUTPUT_DIR: str = "."

    # Never prompt; missing key material becomes an error
    NON_INTERACTIVE: bool = False

    # Signing identity
    SIGNER_ID: Optional[str] = None
    SIGNER_KEY: Optional[str] = None  # defaults to <OUTPUT_DIR>/<signer stem>.pem
    SIGNING_KEY_SIZE: int = 4096
    SIGNING_VALIDITY_DAYS: int = 3650

    # TLS identity (optional - TLS is skipped when TLS_HOST is unset)
    TLS_HOST: Optional[str] = None
    TLS_CERT: Optional[str] = None
    TLS_KEY: Optional[str] = None
    TLS_VALIDITY_DAYS: int = 1825


settings = Settings()
