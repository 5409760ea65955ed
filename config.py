from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Desk API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_desk.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Loan request limits (amount in rupees; 10 Cr ceiling)
    max_loan_amount: int = 100_000_000
    min_term_months: int = 12
    max_term_months: int = 360

    # Upload boundary
    max_document_size_bytes: int = 10 * 1024 * 1024
    allowed_document_types: str = "application/pdf,image/jpeg,image/png"

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

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    @property
    def allowed_document_type_set(self) -> frozenset[str]:
        return frozenset(t.strip().lower() for t in self.allowed_document_types.split(",") if t.strip())


settings = Settings()
