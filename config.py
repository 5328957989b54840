from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings

from schemas.lender import DEFAULT_LENDER_PANEL, LenderProfile


class Settings(BaseSettings):
    app_name: str = "Smart Lending API"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./smart_lending.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    host: str = "0.0.0.0"
    port: int = 3005

    log_level: str = "INFO"
    log_format: str = "standard"

    # JSON list in env, e.g. LENDER_PANEL='[{"id": 1, "interestType": "simple"}]'
    lender_panel: list[LenderProfile] = Field(default_factory=lambda: list(DEFAULT_LENDER_PANEL))

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @field_validator("lender_panel")
    @classmethod
    def _unique_lender_ids(cls, panel: list[LenderProfile]) -> list[LenderProfile]:
        ids = [lender.id for lender in panel]
        if len(ids) != len(set(ids)):
            raise ValueError(f"lender ids must be unique, got {ids}")
        if not panel:
            raise ValueError("lender panel must not be empty")
        return panel

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql


settings = Settings()
