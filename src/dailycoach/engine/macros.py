"""Macro target resolution and the daily macro check."""

from dailycoach.config.settings import MacroSettings, settings
from dailycoach.models import DerivedDailyTotals, DietaryPreference, MacroTargets, UserProfile

DEFAULT_WEIGHT_KG = 75.0
# Diets whose ratios are not nudged toward the weight goal
STRICT_DIETS = {
    DietaryPreference.KETOGENIC,
    DietaryPreference.VERY_LOW_CARB,
    DietaryPreference.CARNIVORE,
}


def _goal_trend(profile: UserProfile) -> str:
    if profile.current_weight is None or profile.goal_weight is None:
        return "maintain"
    if profile.goal_weight < profile.current_weight - 0.1:
        return "lose"
    if profile.goal_weight > profile.current_weight + 0.1:
        return "gain"
    return "maintain"


def calculate_macro_targets(profile: UserProfile, calories: int) -> MacroTargets:
    """Derive gram targets from calories, dietary preference and weight goal.

    Protein is bounded per kilogram of body weight; fat gets at least 20%
    of calories; carbs take the remainder.
    """
    preference = profile.dietary_preference or DietaryPreference.BALANCED
    carbs_ratio, protein_ratio, fat_ratio = preference.ratios
    trend = _goal_trend(profile)

    if preference not in STRICT_DIETS:
        if trend == "lose":
            protein_ratio += 0.05
            carbs_ratio -= 0.05
        elif trend == "gain":
            carbs_ratio += 0.05
            fat_ratio += 0.02
            protein_ratio -= 0.02

    carbs_ratio = min(max(carbs_ratio, 0.0), 0.65)
    protein_ratio = min(max(protein_ratio, 0.15), 0.45)
    fat_ratio = min(max(fat_ratio, 0.2), 0.8)
    total = carbs_ratio + protein_ratio + fat_ratio
    carbs_ratio, protein_ratio, fat_ratio = (r / total for r in (carbs_ratio, protein_ratio, fat_ratio))

    weight = profile.current_weight if profile.current_weight and profile.current_weight > 0 else DEFAULT_WEIGHT_KG
    min_per_kg = {"lose": 1.5, "gain": 1.4}.get(trend, 1.3)
    max_per_kg = {
        DietaryPreference.HIGH_PROTEIN: 2.2,
        DietaryPreference.CARNIVORE: 2.4,
    }.get(preference, 2.0)
    protein_min = max(min_per_kg * weight, 80.0)
    protein_max = max(min(max_per_kg * weight, 220.0), protein_min)
    protein = min(max(calories * protein_ratio / 4.0, protein_min), protein_max)

    remaining = max(calories - protein * 4.0, 0.0)
    carb_fat_total = carbs_ratio + fat_ratio
    carbs_share = carbs_ratio / carb_fat_total if carb_fat_total > 0 else 0.6
    min_fat_calories = max(calories * 0.20, weight * 9 * 0.5)
    fat_calories = min(max(remaining * (1 - carbs_share), min_fat_calories), remaining)
    carb_calories = max(remaining - fat_calories, 0.0)

    return MacroTargets(
        protein_grams=round(protein),
        carbs_grams=round(carb_calories / 4.0),
        fat_grams=round(fat_calories / 9.0),
    )


def resolve_macro_targets(
    profile: UserProfile | None, defaults: MacroSettings | None = None
) -> MacroTargets:
    """Explicit profile targets, else computed from the calorie goal, else defaults."""
    defaults = defaults or settings.macros
    if profile is not None:
        if profile.macro_targets is not None:
            return profile.macro_targets
        if profile.calorie_goal:
            return calculate_macro_targets(profile, profile.calorie_goal)
    return MacroTargets(
        protein_grams=defaults.protein_grams,
        carbs_grams=defaults.carbs_grams,
        fat_grams=defaults.fat_grams,
    )


def within_tolerance(actual: float, target: float, tolerance: float) -> bool:
    return target * (1 - tolerance) <= actual <= target * (1 + tolerance)


def macro_hits(
    totals: DerivedDailyTotals, targets: MacroTargets, tolerance: float | None = None
) -> tuple[bool, bool, bool]:
    """Whether protein, carbs and fat each landed within the tolerance band."""
    tolerance = settings.macros.tolerance if tolerance is None else tolerance
    return (
        within_tolerance(totals.total_protein, targets.protein_grams, tolerance),
        within_tolerance(totals.total_carbs, targets.carbs_grams, tolerance),
        within_tolerance(totals.total_fat, targets.fat_grams, tolerance),
    )
