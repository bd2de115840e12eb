from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # ════════════════════════════════════════
    # Slack
    # ════════════════════════════════════════
    slack_bot_token: str = Field(
        default="",
        description="Bot token (xoxb-...) used for chat.postMessage"
    )
    slack_signing_secret: str = Field(
        default="",
        description="Signing secret used to verify inbound Slack requests (verification skipped when empty)"
    )
    slack_api_base_url: str = Field(
        default="https://slack.com/api",
        description="Slack Web API base URL"
    )

    # ════════════════════════════════════════
    # LLM (generative fallback)
    # ════════════════════════════════════════
    groq_api_key: str = Field(
        default="",
        description="Groq API key for the generative fallback"
    )
    llm_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Groq model to use"
    )
    llm_max_tokens: int = Field(
        default=700,
        description="Maximum tokens generated per fallback answer"
    )
    llm_temperature: float = Field(
        default=0.4,
        description="Sampling temperature for fallback answers"
    )
    brand_signature: str = Field(
        default="The Murphy Group | mgsells.com",
        description="Signature line appended to generated answers"
    )

    # ════════════════════════════════════════
    # Knowledge Sources
    # ════════════════════════════════════════
    faq_sheet_url: str = Field(
        default="",
        description="Published CSV URL (or local CSV path) of the FAQ spreadsheet; empty disables FAQ"
    )
    procedures_dir: str = Field(
        default="",
        description="Folder of SOP documents (.md/.txt); empty disables procedures"
    )
    procedure_link_base_url: str = Field(
        default="",
        description="Base URL prepended to a procedure's file name when it declares no Link: line"
    )
    refresh_interval_minutes: int = Field(
        default=30,
        description="Minutes between scheduled knowledge refreshes (0 disables the timer)"
    )
    source_timeout_seconds: float = Field(
        default=20.0,
        description="HTTP timeout when fetching the FAQ sheet"
    )

    # ════════════════════════════════════════
    # Routing
    # ════════════════════════════════════════
    match_confidence_threshold: float = Field(
        default=6.0,
        description="Minimum relevance score for a confident single best match"
    )
    faq_max_results: int = Field(
        default=3,
        description="Maximum FAQ items included in one answer"
    )
    procedure_max_results: int = Field(
        default=3,
        description="Maximum procedures returned by knowledge search"
    )
    min_query_tokens: int = Field(
        default=3,
        description="Messages shorter than this (and not a question) are treated as trivial"
    )
    faq_categories: str = Field(
        default="listings,buyers,sellers,transactions,commission,marketing,technology,onboarding",
        description="Comma-separated FAQ categories accepted as '<category>: <question>' prefixes"
    )

    # ════════════════════════════════════════
    # Debug and Logging
    # ════════════════════════════════════════
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_dir: str = Field(
        default="",
        description="Directory for log files; console only when empty"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def faq_categories_list(self) -> List[str]:
        """Convert comma-separated FAQ categories to a lowercase list"""
        return [c.strip().lower() for c in self.faq_categories.split(",") if c.strip()]


settings = Settings()
