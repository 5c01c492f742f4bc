"""Runtime settings, read from the environment (and `.env`)."""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from git_scribe.errors import ConfigError

BackendName = Literal["copilot", "openai"]


class Settings(BaseModel):
    """Settings shared by every flow; passed explicitly, never global."""

    backend: BackendName = "copilot"
    model: str = "gpt-4.1"
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    max_diff_chars: int = Field(default=40000, gt=0)
    recent_commits: int = Field(default=5, gt=0)
    largest_commits: int = Field(default=5, gt=0)
    most_modified_files: int = Field(default=10, gt=0)
    timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        **overrides: object,
    ) -> "Settings":
        """Build settings from environment variables.

        ``overrides`` (e.g. CLI options) win over the environment; ``None``
        values are ignored so unset options fall through.
        """
        env = os.environ if env is None else env
        mapping = {
            "backend": "SCRIBE_BACKEND",
            "model": "SCRIBE_MODEL",
            "api_key": "OPENAI_API_KEY",
            "base_url": "OPENAI_BASE_URL",
            "max_diff_chars": "SCRIBE_MAX_DIFF_CHARS",
            "recent_commits": "SCRIBE_RECENT_COMMITS",
            "largest_commits": "SCRIBE_LARGEST_COMMITS",
            "most_modified_files": "SCRIBE_MOST_MODIFIED",
            "timeout": "SCRIBE_TIMEOUT",
        }
        values: dict[str, object] = {}
        for field, var in mapping.items():
            raw = env.get(var, "").strip()
            if raw:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from e
