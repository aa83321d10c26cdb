from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of studydeck folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = "sqlite:///./studydeck.db"

    # AI Provider Configuration
    ai_provider: str = "ollama"  # "ollama" or "claude"
    ai_temperature: float = 0.3

    # Ollama settings (for local development)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:latest"

    # Claude API settings (for production)
    claude_api_key: str = ""
    claude_model: str = "claude-3-5-sonnet-20241022"

    # Deck limits
    max_decks_per_user: int = 10

    # No auth: the CLI acts as a single local user
    default_user_id: str = "local"

    log_level: str = "WARNING"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        extra = "ignore"

settings = Settings()
