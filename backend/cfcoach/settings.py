from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Primary chat-completions backend (DeepSeek speaks the OpenAI wire format)
	deepseek_api_key: str | None = Field(default=None, validation_alias="DEEPSEEK_API_KEY")
	deepseek_base_url: str = Field(default="https://api.deepseek.com/v1/chat/completions", validation_alias="DEEPSEEK_BASE_URL")
	deepseek_model: str = Field(default="deepseek-chat", validation_alias="DEEPSEEK_MODEL")
	llm_temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")
	llm_max_tokens: int = Field(default=2000, validation_alias="LLM_MAX_TOKENS")
	llm_timeout_seconds: float = Field(default=60, validation_alias="LLM_TIMEOUT_SECONDS")

	# OpenRouter secondary provider (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="deepseek/deepseek-chat", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Codeforces Coach", validation_alias="OPENROUTER_TITLE")

	# Codeforces public API
	codeforces_api_url: str = Field(default="https://codeforces.com/api", validation_alias="CODEFORCES_API_URL")
	codeforces_timeout_seconds: float = Field(default=15, validation_alias="CODEFORCES_TIMEOUT_SECONDS")
	codeforces_submission_count: int = Field(default=10000, validation_alias="CODEFORCES_SUBMISSION_COUNT")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=7 * 24 * 60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Requests without a bearer token act as the demo user (development only)
	demo_mode: bool = Field(default=False, validation_alias="DEMO_MODE")
	demo_username: str = Field(default="demo", validation_alias="DEMO_USERNAME")
	default_requests_limit: int = Field(default=1000, validation_alias="DEFAULT_REQUESTS_LIMIT")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
