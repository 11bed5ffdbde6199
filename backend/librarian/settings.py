from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Smart Librarian", validation_alias="OPENROUTER_TITLE")

	# Low temperature keeps resource matching stable between identical queries
	classifier_temperature: float = Field(default=0.1, validation_alias="CLASSIFIER_TEMPERATURE")

	# Auth configuration (in-memory accounts and sessions)
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	# Teacher dashboard
	analytics_download_weight: float = Field(default=0.1, validation_alias="ANALYTICS_DOWNLOAD_WEIGHT")
	# The chart never shows more than five topics
	analytics_top_topics: int = Field(default=5, ge=1, le=5, validation_alias="ANALYTICS_TOP_TOPICS")
	topic_label_max_chars: int = Field(default=15, validation_alias="TOPIC_LABEL_MAX_CHARS")
	activity_feed_limit: int = Field(default=10, validation_alias="ACTIVITY_FEED_LIMIT")
	# Pre-fill each new session's activity log with a few demo queries
	seed_demo_activity: bool = Field(default=True, validation_alias="SEED_DEMO_ACTIVITY")

	cors_origins: list[str] = Field(default_factory=lambda: ["*"], validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
