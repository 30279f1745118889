from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    # Default empty string allows tests to run without .env; requests that need
    # the backend answer 500 until it is set
    openai_api_key: str = ""

    # gpt-4o-mini: extraction, adjudication, rephrasing (cheap, fast enough)
    # gpt-4o: web-search calls (evidence retrieval, answers)
    reasoning_model: str = "gpt-4o-mini"
    search_model: str = "gpt-4o"

    # Every backend call is bounded by this timeout; a timeout degrades the
    # affected claim instead of failing the request
    backend_timeout_seconds: float = 60.0
    backend_max_retries: int = 1

    # Claim extraction
    max_claims: int = 10
    extraction_chunk_chars: int = 4000
    extraction_max_chunks: int = 3

    # Evidence retrieval (bounded to 2-5 per claim)
    evidence_per_claim: int = 3

    # 1 = claims adjudicated one at a time (cheapest)
    claim_concurrency: int = 1

    # Rankings: score = supported_rate - penalty * contradicted_rate
    ranking_contradiction_penalty: int = 2

    # Query trust score weights
    trust_base_score: float = 50.0
    trust_high_weight: float = 15.0
    trust_medium_weight: float = 8.0
    trust_strong_agreement_threshold: int = 3
    trust_strong_agreement_bonus: float = 20.0
    trust_partial_agreement_threshold: int = 2
    trust_partial_agreement_bonus: float = 10.0
    trust_no_credible_penalty: float = 20.0

    # Words that flag an answer as uncertain
    hedging_terms: list[str] = ["may", "might", "could", "possibly", "reportedly", "allegedly"]

    # Empty = bundled trustie/data/misconceptions.json
    misconceptions_path: str = ""

    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
