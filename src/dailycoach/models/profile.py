"""User profile, resolved goals and macro targets."""

from enum import Enum

from pydantic import BaseModel

from dailycoach.config.settings import GoalSettings


class DietaryPreference(str, Enum):
    """Dietary styles with their (carbs, protein, fat) calorie ratios."""

    BALANCED = "balanced"
    HIGH_PROTEIN = "high_protein"
    MODERATE_LOW_CARB = "moderate_low_carb"
    KETOGENIC = "ketogenic"
    VERY_LOW_CARB = "very_low_carb"
    CARNIVORE = "carnivore"
    MEDITERRANEAN = "mediterranean"
    PLANT_BASED = "plant_based"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    PALEO = "paleo"

    @property
    def ratios(self) -> tuple[float, float, float]:
        return _RATIOS[self]


_RATIOS = {
    DietaryPreference.BALANCED: (0.50, 0.25, 0.25),
    DietaryPreference.HIGH_PROTEIN: (0.40, 0.35, 0.25),
    DietaryPreference.MODERATE_LOW_CARB: (0.25, 0.30, 0.45),
    DietaryPreference.KETOGENIC: (0.05, 0.20, 0.75),
    DietaryPreference.VERY_LOW_CARB: (0.05, 0.35, 0.60),
    DietaryPreference.CARNIVORE: (0.01, 0.45, 0.55),
    DietaryPreference.MEDITERRANEAN: (0.50, 0.20, 0.30),
    DietaryPreference.PLANT_BASED: (0.55, 0.20, 0.25),
    DietaryPreference.VEGETARIAN: (0.55, 0.20, 0.25),
    DietaryPreference.VEGAN: (0.575, 0.20, 0.245),
    DietaryPreference.PALEO: (0.35, 0.30, 0.35),
}


class MacroTargets(BaseModel):
    protein_grams: float
    carbs_grams: float
    fat_grams: float


class UserProfile(BaseModel):
    """Profile fields the engine reads. Every field is optional."""

    macro_targets: MacroTargets | None = None
    calorie_goal: int | None = None
    step_goal: int | None = None
    water_goal_ml: int | None = None
    sleep_goal_hours: float | None = None
    current_weight: float | None = None  # kg
    goal_weight: float | None = None  # kg
    dietary_preference: DietaryPreference | None = None


class Goals(BaseModel):
    """Daily targets after falling back to configured defaults."""

    calorie_goal: int = 2000
    step_goal: int = 10000
    water_goal_ml: int = 2000
    sleep_goal_hours: float = 8.0

    @classmethod
    def resolve(cls, profile: UserProfile | None, defaults: GoalSettings) -> "Goals":
        profile = profile or UserProfile()
        return cls(
            calorie_goal=profile.calorie_goal or defaults.calories,
            step_goal=profile.step_goal or defaults.steps,
            water_goal_ml=profile.water_goal_ml or defaults.water_ml,
            sleep_goal_hours=profile.sleep_goal_hours or defaults.sleep_hours,
        )
