from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from batchhttp.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, validation_alias="BATCHHTTP_TIMEOUT_SECONDS")
    # Ceiling on simultaneously in-flight requests per batch.
    concurrency: int = Field(DEFAULT_CONCURRENCY, ge=1, validation_alias="BATCHHTTP_CONCURRENCY")
    user_agent: str = Field(DEFAULT_USER_AGENT, validation_alias="BATCHHTTP_USER_AGENT")

    max_redirects: int = Field(DEFAULT_MAX_REDIRECTS, ge=0, validation_alias="BATCHHTTP_MAX_REDIRECTS")
    verify_tls: bool = Field(True, validation_alias="BATCHHTTP_VERIFY_TLS")
