"""Configuration management using pydantic-settings."""

import os
from typing import Any, Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Claude Code Configuration
    claude_binary: str = Field(default="claude", description="Claude binary path")
    slack_bot_token: Optional[str] = Field(default=None, description="Bot credential forwarded to the permission prompt server")
    permission_server_command: Optional[str] = Field(
        default=None,
        description="Command that starts the permission prompt MCP server; required for interactive queries"
    )
    permission_server_args: List[str] = Field(
        default_factory=list,
        description="Arguments for the permission prompt MCP server"
    )

    mcp_servers: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="MCP servers as JSON: name -> {command, args, env}"
    )

    # Working Directory Configuration
    base_directory: str = Field(default="", description="Base directory for relative cwd commands")
    persistence_path: str = Field(default="", description="Path of the working directory persistence file")
    save_debounce_seconds: float = Field(default=1.0, description="Quiet period before persisting directory changes")

    # Session Configuration
    session_max_age_seconds: float = Field(default=30 * 60, description="Idle time after which a session is dropped")
    session_cleanup_interval_seconds: float = Field(default=5 * 60, description="Interval of the session sweep")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default="./logs/app.log", description="Log file path")

    def get_persistence_path(self) -> str:
        """Get the persistence file path, defaulting to ./data/working-directories.json."""
        if self.persistence_path:
            return self.persistence_path
        return os.path.join(os.getcwd(), "data", "working-directories.json")

    def get_base_directory(self) -> Optional[str]:
        """Get the base directory, or None if it is not configured."""
        return self.base_directory or None


# Global settings instance
settings = Settings()
