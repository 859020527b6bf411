"""
CloudMemo Client - Configuration
==================================

Pydantic Settings for the client side, read from CLOUDMEMO_* environment
variables (or .env) so a client and a server can share one .env file
without their names colliding.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Client settings; every value has a working local default."""

    # Includes the API prefix, e.g. http://localhost:8000/api
    api_base_url: str = Field(default="http://localhost:8000/api")

    # Per-request deadline; a request that exceeds it is reported as `timeout`
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Quiet period before an edited draft autosaves
    autosave_delay_seconds: float = Field(default=5.0, ge=0)

    # Autosave of a memo that has no id yet waits for this many characters
    min_new_memo_length: int = Field(default=3, ge=1)

    # Where FileCredentialStore keeps the session token
    credential_path: str = Field(default="~/.cloudmemo/token")

    model_config = {
        "env_prefix": "CLOUDMEMO_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


client_settings = ClientSettings()
