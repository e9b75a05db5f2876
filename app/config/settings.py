from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Bypasses RLS for deployment record writes

    # Language model provider (OpenAI)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_timeout_seconds: float = 180.0

    # GitHub publishing
    github_api_url: str = "https://api.github.com"
    github_default_branch: str = "main"
    github_timeout_seconds: float = 30.0
    github_ref_wait_initial_seconds: float = 1.0  # First wait before reading the new repo's branch ref
    github_ref_wait_max_attempts: int = 4  # Doubling delay between attempts
    github_rollback_on_failure: bool = False  # Delete the created repo when a later step fails
    github_commit_message: str = "Initial commit from Intent Flow Designer"

    # Deno Deploy hand-off returned after publishing
    deploy_platform_url: str = "https://dash.deno.com/new_project"

    # Deployment records
    deployment_log_retention: int = 200  # Most recent log entries kept across runs

    # App
    app_name: str = "intentflow-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
