"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from LEDGER_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service
    service_name: str = "installment-ledger"
    log_level: str = "INFO"
    metrics_enabled: bool = True

    # Schedule rules
    balance_tolerance_cents: int = 1  # Final-rounding drift accepted on validation
    installment_interval_months: int = 1

    # "Today" for overdue classification is the company's local date
    timezone: str = "America/Sao_Paulo"


settings = Settings()
