from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "feature-agent"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./feature_agent.db"
    redis_url: str = "redis://localhost:6379/0"

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: float = 120.0
    # model turns that may request a tool before the conversation answers anyway
    chat_max_tool_rounds: int = 10

    workspaces_dir: str = "/data/workspaces"

    # None means external commands may block indefinitely
    command_timeout: float | None = None
    npx_command: str = "npx"

settings = Settings()
