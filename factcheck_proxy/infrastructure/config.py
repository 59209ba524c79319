"""Configuration for the upstream agent platform and the gateway client."""

import os
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_API_BASE = "https://api.fluo.one/api/v1"


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class AgentSettings(BaseModel):
    """Credentials, agent ids and timeouts for the hosted agent platform."""

    api_key: str = Field(default="", description="Platform API key (secret)")
    project_id: str = Field(default="", description="Platform project id (secret)")
    api_base: str = Field(default=DEFAULT_API_BASE, description="Platform base URL")

    extractor_agent_id: str = "agent-0rpKkKttamHK9WnJaN"
    verifier_agent_id: str = "agent-2i2O86cbJPBmSygMQ9"
    source_cred_agent_id: str = "agent-ZIRfFcdyMusVYfhOXc"
    assess_agent_id: str = "agent-UmeIQIjx2QahQJfcT0"

    # Seconds. Extraction has no bound of its own and relies on http_timeout.
    extract_timeout: Optional[float] = None
    verify_timeout: float = 25.0
    source_cred_timeout: float = 20.0
    assess_timeout: float = 25.0
    http_timeout: float = 60.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.project_id)

    def run_url(self, agent_id: str) -> str:
        return f"{self.api_base.rstrip('/')}/agents/{agent_id}/run"

    @classmethod
    def from_env(cls) -> "AgentSettings":
        """Build settings from the process environment."""
        defaults = cls()
        return cls(
            api_key=os.getenv("FLUO_API_KEY", "").strip(),
            project_id=os.getenv("FLUO_PROJECT_ID", "").strip(),
            api_base=os.getenv("FLUO_API_BASE") or defaults.api_base,
            extractor_agent_id=os.getenv("FLUO_AGENT_ID_EXTRACTOR") or defaults.extractor_agent_id,
            verifier_agent_id=os.getenv("FLUO_AGENT_ID_VERIFIER") or defaults.verifier_agent_id,
            source_cred_agent_id=os.getenv("FLUO_AGENT_ID_SOURCE_CRED") or defaults.source_cred_agent_id,
            assess_agent_id=os.getenv("FLUO_AGENT_ID_ASSESS") or defaults.assess_agent_id,
            http_timeout=_env_float("FLUO_HTTP_TIMEOUT", defaults.http_timeout),
        )


class AppSettings(BaseModel):
    """Process-level settings for the HTTP service."""

    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "AppSettings":
        origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=origins or ["*"],
        )


class ClientSettings(BaseModel):
    """Settings for talking to the gateways from the terminal driver."""

    base_url: str = "http://localhost:8000"
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            base_url=os.getenv("FACTCHECK_API_URL") or cls().base_url,
            timeout=_env_float("FACTCHECK_API_TIMEOUT", 30.0),
        )
