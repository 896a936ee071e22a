from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True,
    )

    app_name: str = 'PlanningPass Report Service'

    data_dir: Path = Field(default=Path('./data'))
    log_level: str = 'INFO'

    # Report text generation (any OpenAI-compatible chat completions endpoint)
    llm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('GEMINI_API_KEY', 'OPENAI_API_KEY', 'LLM_API_KEY'),
    )
    llm_base_url: str | None = Field(
        default='https://generativelanguage.googleapis.com/v1beta/openai/',
        validation_alias=AliasChoices('LLM_BASE_URL', 'OPENAI_BASE_URL'),
    )
    report_model: str = 'gemini-1.5-flash'
    report_temperature: float = 0.4
    report_max_tokens: int = 4096
    llm_timeout_seconds: int = 120

    # Confirmation mail
    email_user: str | None = Field(default=None, validation_alias=AliasChoices('EMAIL_USER'))
    email_pass: str | None = Field(default=None, validation_alias=AliasChoices('EMAIL_PASS'))
    email_host: str = 'smtp.gmail.com'
    email_port: int = 465
    email_use_ssl: bool = True
    email_timeout_seconds: int = 30
    email_sender_name: str = 'PlanningPass'
    support_email: str = 'planning@planningpass.co.uk'

    # HTTP server
    server_host: str = '0.0.0.0'
    server_port: int = Field(default=3001, validation_alias=AliasChoices('PORT', 'SERVER_PORT'))

    # PDF export
    report_brand: str = 'Your Brand'
    pdf_page_margin: int = 50
    pdf_column_width: int = 100
    pdf_bullet_indent: int = 20
    pdf_heading_font_size: int = 12
    pdf_body_font_size: int = 10

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / 'submissions').mkdir(parents=True, exist_ok=True)
    return settings
