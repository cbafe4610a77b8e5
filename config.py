# config.py
"""
Application settings loaded from environment variables.

Values come from the process environment, optionally seeded from a local
.env file. A single Settings instance is built per process:

     from config import get_settings

     settings = get_settings()
     settings.database_url
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

from errors import ConfigurationError

# Load environment variables
load_dotenv()

DATA_MODES = ("real", "mock")
LOG_FORMATS = ("standard", "json")


def _env_bool(name: str, default: str = "false") -> bool:
     return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _build_mssql_url() -> str:
     """Assemble the MS SQL Server URL from the DB_* variables (pymssql driver)."""
     server = os.getenv("DB_SERVER", "localhost")
     port = os.getenv("DB_PORT", "1433")
     user = quote_plus(os.getenv("DB_USER") or "")
     password = quote_plus(os.getenv("DB_PASS") or "")
     name = os.getenv("DB_NAME", "proman")
     return f"mssql+pymssql://{user}:{password}@{server}:{port}/{name}"


@dataclass(frozen=True)
class LateFeeConfig:
     """Late-fee policy applied to overdue invoices."""
     enabled: bool = True
     grace_period_days: int = 5
     percentage_rate: Decimal = Decimal("5")
     flat_fee: Decimal = Decimal("0")
     max_percentage: Optional[Decimal] = Decimal("25")


@dataclass(frozen=True)
class Settings:
     environment: str = "development"
     database_url: str = "sqlite://"
     sql_echo: bool = False
     data_mode: str = "real"
     jwt_secret: str = "change-me"
     jwt_algorithm: str = "HS256"
     cors_origins: List[str] = field(default_factory=list)
     log_level: str = "INFO"
     log_format: str = "standard"
     late_fees: LateFeeConfig = field(default_factory=LateFeeConfig)

     @property
     def is_development(self) -> bool:
          return self.environment == "development"

     @property
     def is_sqlite(self) -> bool:
          return self.database_url.startswith("sqlite")

     @classmethod
     def from_env(cls) -> "Settings":
          """
          Build settings from the environment.

          Raises:
               ConfigurationError: If DATA_MODE or LOG_FORMAT has an unknown value
                    or a numeric variable cannot be parsed.
          """
          data_mode = os.getenv("DATA_MODE", "real").strip().lower()
          if data_mode not in DATA_MODES:
               raise ConfigurationError(
                    f"DATA_MODE must be one of {', '.join(DATA_MODES)}, got '{data_mode}'"
               )

          log_format = os.getenv("LOG_FORMAT", "standard").strip().lower()
          if log_format not in LOG_FORMATS:
               raise ConfigurationError(
                    f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}, got '{log_format}'"
               )

          origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

          try:
               max_percentage = os.getenv("LATE_FEE_MAX_PERCENT", "25")
               late_fees = LateFeeConfig(
                    enabled=_env_bool("LATE_FEE_ENABLED", "true"),
                    grace_period_days=int(os.getenv("LATE_FEE_GRACE_DAYS", "5")),
                    percentage_rate=Decimal(os.getenv("LATE_FEE_PERCENT", "5")),
                    flat_fee=Decimal(os.getenv("LATE_FEE_FLAT", "0")),
                    max_percentage=Decimal(max_percentage) if max_percentage else None,
               )
          except (ArithmeticError, ValueError) as e:
               raise ConfigurationError(f"Invalid late fee configuration: {e}") from e

          return cls(
               environment=os.getenv("ENVIRONMENT", "development").strip().lower(),
               database_url=os.getenv("DATABASE_URL") or _build_mssql_url(),
               sql_echo=_env_bool("SQL_ECHO"),
               data_mode=data_mode,
               jwt_secret=os.getenv("JWT_SECRET", "change-me"),
               jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
               cors_origins=origins,
               log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
               log_format=log_format,
               late_fees=late_fees,
          )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
     """Return the process-wide settings instance."""
     return Settings.from_env()
