from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    clickup_api_token: str | None = None
    clickup_api_base_url: str = "https://api.clickup.com/api/v2"
    clickup_workspace_id: str | None = None
    leave_list_id: str | None = None
    work_calendar_list_id: str | None = None

    discord_webhook_url: str | None = None

    # every window and "today" is computed in this zone, never the host's
    timezone: str = "Asia/Colombo"
    new_request_lookback_hours: int = 2
    fetch_limit: int = 100
    http_timeout_seconds: float = 10

    org_name: str = "Twist Digital"
    member_noun: str = "Twister"
    bot_username: str = "Twist Digital Bot"

    log_level: str = "INFO"

    mcp_host: str = "127.0.0.1"
    mcp_port: int = 9002
    mcp_path: str = "/sse"


settings = Settings()
