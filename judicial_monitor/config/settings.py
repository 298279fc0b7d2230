from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "judicial_monitor"
    db_username: str = "judicial_monitor"
    db_password: str = "secret"

    registry_provider: str = "rama_judicial"
    registry_timeout_seconds: int = 30
    registry_fetch_attempts: int = 2
    registry_retry_wait_seconds: float = 1.0
    registry_max_retry_after_seconds: float = 60.0

    rama_judicial_base_url: str = "https://consultaprocesos.ramajudicial.gov.co:448/api/v2"
    rama_judicial_max_pages: int = 10

    firecrawl_api_key: str = ""
    firecrawl_base_url: str = "https://api.firecrawl.dev/v1"
    firecrawl_wait_for_ms: int = 5000

    metering_provider: str = "http"
    metering_base_url: str = ""
    metering_api_key: str = ""
    metering_tool_type: str = "process_monitor"
    metering_timeout_seconds: int = 10

    sync_all_delay_seconds: float = 0.3
    check_updates_delay_seconds: float = 0.5
    bulk_add_delay_seconds: float = 2.0
    sweep_owner_delay_seconds: float = 3.0
