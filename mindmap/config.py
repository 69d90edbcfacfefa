"""Runtime settings for the mind-map editor.

Values come from environment variables (a ``.env`` file is honored).
"""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EditorSettings(BaseModel):
    """Settings loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    graph_limit: int = Field(default=4, description="Maximum stored mind maps per owner")
    click_window_ms: float = Field(default=300, description="Handle double-click window")
    removal_delay_ms: float = Field(default=400, description="Highlight time before edges are removed")
    api_url: str = Field(default="http://localhost:8000", description="Base URL of the graph API")
    http_timeout: float = Field(default=10.0, description="HTTP request timeout in seconds")

    @field_validator("graph_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value < 0:
            raise ValueError("MINDMAP_GRAPH_LIMIT must not be negative")
        return value

    @field_validator("click_window_ms", "removal_delay_ms", "http_timeout")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("durations must not be negative")
        return value

    @field_validator("api_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


def load_settings() -> EditorSettings:
    """Build settings from the current environment."""
    load_dotenv()
    env = {
        "graph_limit": os.getenv("MINDMAP_GRAPH_LIMIT"),
        "click_window_ms": os.getenv("MINDMAP_CLICK_WINDOW_MS"),
        "removal_delay_ms": os.getenv("MINDMAP_REMOVAL_DELAY_MS"),
        "api_url": os.getenv("MINDMAP_API_URL"),
        "http_timeout": os.getenv("MINDMAP_HTTP_TIMEOUT"),
    }
    return EditorSettings(**{key: value for key, value in env.items() if value is not None})


@lru_cache(maxsize=1)
def get_settings() -> EditorSettings:
    """Cached settings for the process."""
    return load_settings()
