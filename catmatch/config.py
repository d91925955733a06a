"""Configuration management."""
import os


class Config:
    def __init__(self):
        self.OPENAI_KEY: str = os.environ.get("OPENAI_API_KEY", "")
        self.OPENAI_BASE: str = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.OPENAI_MODEL: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.AI_TEMPERATURE: float = float(os.environ.get("AI_TEMPERATURE", "0.1"))
        self.AI_MAX_TOKENS: int = int(os.environ.get("AI_MAX_TOKENS", "200"))
        self.AI_TIMEOUT: float = float(os.environ.get("AI_TIMEOUT", "30"))
        self.TAXONOMY_URL: str = os.environ.get(
            "TAXONOMY_URL", "https://auqliserver-8xr8zvib.b4a.run/api/public/categories"
        )
        self.REDIS_URL: str = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        self.MAX_HISTORY: int = int(os.environ.get("MAX_HISTORY", "5000"))
        self.DIRECT_MATCH_FLOOR: int = int(os.environ.get("DIRECT_MATCH_FLOOR", "70"))
        self.REVIEW_THRESHOLD: int = int(os.environ.get("REVIEW_THRESHOLD", "60"))
        self.MAX_WORKERS: int = int(os.environ.get("MAX_WORKERS", "8"))
        self.LOOKUP_TIMEOUT: float = float(os.environ.get("LOOKUP_TIMEOUT", "10"))
        self.TERM_TABLE_PATH: str = os.environ.get("TERM_TABLE_PATH", "")

    def validate(self, require_remote: bool = False):
        if not 0 <= self.DIRECT_MATCH_FLOOR <= 100:
            raise ValueError("DIRECT_MATCH_FLOOR must be between 0 and 100")
        if not 0 <= self.REVIEW_THRESHOLD <= 100:
            raise ValueError("REVIEW_THRESHOLD must be between 0 and 100")
        if self.MAX_WORKERS < 1:
            raise ValueError("MAX_WORKERS must be at least 1")
        if require_remote and not self.OPENAI_KEY:
            raise ValueError("OPENAI_API_KEY is not set")


config = Config()
