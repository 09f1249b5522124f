"""Configuration management using Pydantic Settings"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    cashflow_api_base: str = "http://localhost:5000/api"
    api_token: str | None = None

    # Service
    service_name: str = "cashflow-insights"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # Branch selection defaults
    branch_codes: List[str] = ["JHB01", "CPT01", "DBN01", "PTA01", "PLZ01"]
    default_branch: str = "JHB01"
    default_secondary_branch: str = "DBN01"
    default_horizon_days: int = 14
    transactions_page_size: int = 50

    # Debounce windows in seconds
    comparison_debounce_seconds: float = 0.15
    simulation_debounce_seconds: float = 0.20

    # What-if sliders (percent)
    default_inflow_delta: float = 6.0
    default_outflow_delta: float = 2.0

    # Display
    currency_symbol: str = "R"


settings = Settings()
