"""
Loan Agent Configuration
Manages environment variables and application settings
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Loan Voice Agent"
    debug: bool = False
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")

    # Agent persona (spoken in the greeting)
    brand_name: str = Field(default="विशफिन डॉट कॉम", alias="BRAND_NAME")
    agent_name: str = Field(default="प्रिया", alias="AGENT_NAME")

    # Conversation memory
    max_transcript_turns: int = 200

    # Link placed into follow-up SMS/WhatsApp previews
    follow_up_link: str = Field(default="https://wishfin.com/apply", alias="FOLLOW_UP_LINK")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True


# Global settings instance
settings = Settings()
