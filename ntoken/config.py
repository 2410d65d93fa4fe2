from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings
from typing import Optional, Any, List


class Settings(BaseSettings):
    # Database
    DB_PATH: str = "ntoken.db"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        return f"sqlite:///{info.data.get('DB_PATH')}"

    DB_ECHO: bool = False

    # Monitoring
    LOG_LEVEL: str = "INFO"

    # Principals
    SELF_AUTHORITY: str = "flon.ntoken"
    ADMIN_PRINCIPALS: List[str] = ["armoniaadmin", "nftone.admin"]
    GOVERNANCE_PRINCIPALS: List[str] = ["flon", "flonian"]

    # Creator gate: "credential_or_whitelist" or "whitelist_and_credential"
    CREATOR_POLICY: str = "credential_or_whitelist"

    # External credential ledger (separate instance, read-only)
    CREDENTIAL_DATABASE_URL: Optional[str] = None
    CREDENTIAL_SYMBOL_ID: int = 1000001

    # Ledger variant: "generic" or "credential"
    LEDGER_PROFILE: str = "generic"

    # Limits
    MAX_MEMO_BYTES: int = 256
    MAX_TOKEN_URI_BYTES: int = 1024

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
