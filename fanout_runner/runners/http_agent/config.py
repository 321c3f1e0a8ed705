"""Configuration for the HTTP runner."""

from pydantic import BaseModel, PositiveFloat, SecretStr


class HttpRunnerConfig(BaseModel):
    """Configuration for dispatching runs to a remote target agent."""

    api_base_url: str
    token: SecretStr | None = None
    timeout: PositiveFloat = 1800
    poll_interval: PositiveFloat = 5
