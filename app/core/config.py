from typing import Annotated, List, Union
import json
from pathlib import Path
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "DocAssess API"
    API_STR: str = "/api"

    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False

    # Uploads
    UPLOAD_DIR: str = "/tmp/uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024 # 10 MiB
    ALLOWED_EXTENSIONS: Annotated[List[str], NoDecode] = [".doc", ".docx", ".rtf"]

    # Payments
    DOCUMENT_FEE: int = 60
    MPESA_COUNTRY_CODE: str = "254"
    MPESA_SIMULATE_CONFIRMATION: bool = True # Confirm settles without asking the gateway

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[AnyHttpUrl], NoDecode] = []

    @field_validator("BACKEND_CORS_ORIGINS", "ALLOWED_EXTENSIONS", mode="before")
    def split_comma_list(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    @field_validator("ALLOWED_EXTENSIONS")
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    # Use .env file if it exists, otherwise rely on environment variables
    _env_file = Path(__file__).resolve().parent.parent.parent / ".env"
    model_config = SettingsConfigDict(
        env_file=_env_file if _env_file.exists() else None,
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
