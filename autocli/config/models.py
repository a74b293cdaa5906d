"""Pydantic models for autocli configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator


class ToolsConfig(BaseModel):
    """Limits applied by the tool implementations."""

    shell_timeout: float = Field(default=30.0, description="Foreground shell timeout in seconds")
    kill_grace: float = Field(
        default=2.0, description="Seconds to wait after SIGTERM before sending SIGKILL"
    )
    max_output_chars: int = Field(
        default=100_000, description="Maximum characters kept per captured stream"
    )
    fetch_timeout: float = Field(default=15.0, description="WebFetch request timeout in seconds")
    fetch_max_chars: int = Field(default=5000, description="WebFetch body length ceiling")
    tree_max_depth: int = Field(default=3, description="Default Tree depth")
    tree_depth_limit: int = Field(default=10, description="Largest depth Tree accepts")
    batch_max_concurrent: int = Field(default=8, description="Worker threads used by Batch")

    @field_validator("shell_timeout", "fetch_timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v


class PlanConfig(BaseModel):
    """Configuration for the multi-step plan sub-loop."""

    enabled: bool = Field(default=True, description="Execute <plan> blocks step by step")
    completion_token: str = Field(
        default="TASK COMPLETE", description="Token the model emits when a step is done"
    )
    max_step_iterations: int = Field(
        default=70, description="Model calls per plan step before the soft stop"
    )


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    project_path: str = Field(default="", description="Project root the tools are confined to")
    commands_file: Optional[str] = Field(
        default=None, description="JSON file with slash command definitions"
    )

    @field_validator("project_path", mode="before")
    @classmethod
    def resolve_project_path(cls, v: Optional[str]) -> str:
        """Resolve empty project path to current directory."""
        if not v:
            return os.getcwd()
        return str(Path(v).expanduser().resolve())


class LoggingConfig(BaseModel):
    """Configuration for the stdlib logging setup."""

    level: str = Field(default="INFO", description="Root log level")
    file: Optional[str] = Field(default=None, description="Optional log file")

    @field_validator("level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()


class AgentConfig(BaseModel):
    """Main configuration for the assistant."""

    # Model settings
    model: str = Field(default="deepseek-ai/DeepSeek-V3-0324", description="Model to use")
    base_url: str = Field(default="https://llm.chutes.ai/v1", description="API base URL")
    temperature: float = Field(default=0.5, description="Generation temperature")
    timeout: float = Field(default=120.0, description="Timeout per LLM call in seconds")

    # Loop settings
    max_iterations: int = Field(
        default=70, description="Model calls per user request before the soft stop"
    )
    brave: bool = Field(default=False, description="Execute tools without asking")

    # Sub-configurations
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    plan: PlanConfig = Field(default_factory=PlanConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    API_KEY_ENV_VARS: ClassVar[tuple[str, ...]] = ("CHUTES_API_KEY", "CHUTES_API_TOKEN")

    @field_validator("max_iterations")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_iterations must be >= 1")
        return v

    @property
    def project_root(self) -> Path:
        """Get the project root as a Path object."""
        return Path(self.paths.project_path or os.getcwd())

    def get_api_key(self) -> str:
        """Get the API key from the environment."""
        for var in self.API_KEY_ENV_VARS:
            key = os.environ.get(var)
            if key:
                return key

        raise ValueError(f"No API key found. Set one of: {list(self.API_KEY_ENV_VARS)}")

    def has_api_key(self) -> bool:
        try:
            self.get_api_key()
        except ValueError:
            return False
        return True
