"""
Session policy

Immutable settings injected into the session use cases. Built once from
ApplicationConfig at the composition root; business logic never reads the
ambient configuration.
"""

import re
from datetime import timedelta
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class SessionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    cookie_name: str = "w_sid"
    duration: timedelta = timedelta(days=30)
    secrets: Tuple[str, ...]
    production: bool = False
    root_domain: Optional[str] = None
    store_timeout_seconds: float = 5.0
    risk_lookback: timedelta = timedelta(days=7)
    trust_window: timedelta = timedelta(days=30)

    @field_validator("secrets", mode="before")
    @classmethod
    def split_secrets(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        secrets = tuple(s.strip() for s in value if s and s.strip())
        if not secrets:
            raise ValueError("At least one session secret is required")
        return secrets

    @property
    def cookie_domain(self) -> Optional[str]:
        """Root deployment domain in production, host-only cookie otherwise"""
        if not self.production or not self.root_domain:
            return None
        return "." + re.sub(r":\d+$", "", self.root_domain)

    @classmethod
    def from_config(cls, config) -> "SessionSettings":
        return cls(
            cookie_name=config.SESSION_COOKIE_NAME,
            duration=timedelta(days=config.SESSION_DURATION_DAYS),
            secrets=config.SESSION_SECRETS,
            production=config.ENVIRONMENT == "production",
            root_domain=config.ROOT_DOMAIN,
            store_timeout_seconds=float(config.STORE_TIMEOUT_SECONDS),
            risk_lookback=timedelta(days=config.RISK_LOOKBACK_DAYS),
        )
