from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from groupsettle.core.utils import normalize_currency


class Settings(BaseSettings):
    APP_NAME: str = "GroupSettle"
    LOG_LEVEL: str = "INFO"
    BASE_CURRENCY: str = "USD"
    SETTLEMENT_EPSILON: Decimal = Decimal("0.01")
    STRICT_CONSERVATION: bool = False

    class Config:
        env_file = ".env"

    @field_validator("BASE_CURRENCY")
    @classmethod
    def check_base_currency(cls, v: str) -> str:
        return normalize_currency(v)


settings = Settings()
