# API schemas and domain models
from trustie.models.schemas import (
    AnswerResult,
    Claim,
    Evidence,
    Ranking,
    VerificationSummary,
)

__all__ = [
    "AnswerResult",
    "Claim",
    "Evidence",
    "Ranking",
    "VerificationSummary",
]
