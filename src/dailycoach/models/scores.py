"""Score models."""

from pydantic import BaseModel, Field

# Weights in percent, so the composite floors exactly in integer arithmetic
HEALTH_WEIGHT = 50
WELLNESS_WEIGHT = 30
HABITS_WEIGHT = 20


class CategoryScores(BaseModel):
    health_score: int = Field(default=0, ge=0, le=100)
    wellness_score: int = Field(default=0, ge=0, le=100)
    habits_score: int = Field(default=0, ge=0, le=100)

    def daily_score(self) -> int:
        """Weighted composite: health 50%, wellness 30%, habits 20%."""
        return (
            self.health_score * HEALTH_WEIGHT
            + self.wellness_score * WELLNESS_WEIGHT
            + self.habits_score * HABITS_WEIGHT
        ) // 100


class ScoreCard(BaseModel):
    """Category scores plus the composite, as returned to dashboards."""

    scores: CategoryScores
    daily_score: int
