"""
HRDD Engine Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Engine bounds (focus clamps, caps, floors, thresholds) and optimizer search
parameters live here.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Portfolio ──
    default_volume: float = Field(
        default=10.0, description="Volume assigned to a selected unit without one"
    )
    max_indicator_weight: float = Field(
        default=50.0, description="Upper bound for a single indicator weight"
    )

    # ── Focus bias ──
    focus_exponent_min: float = Field(default=1.0, description="Exponent at focus 0")
    focus_exponent_mid: float = Field(default=1.6, description="Exponent at the focus midpoint")
    focus_exponent_max: float = Field(default=2.0, description="Exponent cap at focus 1")
    focus_midpoint: float = Field(default=0.5, description="Focus where the exponent slope changes")
    focus_min_ratio: float = Field(default=0.08, description="Lower clamp for risk ratios")
    focus_max_ratio: float = Field(default=2.5, description="Upper clamp for risk ratios")
    low_ratio_pivot: float = Field(
        default=0.8, description="Ratios below this get the moderate compression"
    )
    low_ratio_compression: float = Field(
        default=0.75, description="Exponent multiplier applied below the pivot"
    )
    extreme_ratio_threshold: float = Field(
        default=1.5, description="Biased ratios above this may be compressed"
    )
    extreme_focus_threshold: float = Field(
        default=0.7, description="Focus above which extreme compression phases in"
    )
    extreme_ratio_compression: float = Field(
        default=0.9, description="Log-space exponent for biased ratios at focus 1"
    )

    # ── Coverage distribution ──
    high_risk_threshold: float = Field(default=60.0, description="Risk score treated as high risk")
    high_risk_boost_max: float = Field(default=0.30, description="Maximum extra coverage boost")
    high_risk_boost_focus_start: float = Field(default=0.3, description="Focus where the boost starts")
    high_risk_boost_focus_span: float = Field(
        default=0.4, description="Focus range over which the boost reaches full strength"
    )
    high_risk_boost_risk_span: float = Field(
        default=20.0, description="Risk range above the threshold over which the boost phases in"
    )
    coverage_expansion_cap: float = Field(
        default=0.30, description="Allowed growth of total tool usage after redistribution"
    )

    # ── Effectiveness & managed risk ──
    detection_ceiling: float = Field(default=0.90, description="Maximum achievable detection")
    focus_concentration_sensitivity: float = Field(
        default=0.5, description="Gamma used when blending the country focus multiplier"
    )
    high_risk_focus_threshold: float = Field(
        default=0.6, description="Focus above which high-risk units get the bonus multiplier"
    )
    high_risk_focus_bonus: float = Field(default=1.15, description="Bonus multiplier for high-risk units")
    effectiveness_cap_low_risk: float = Field(
        default=0.70, description="Reduction cap for near-zero-risk units"
    )
    effectiveness_cap_high_risk: float = Field(
        default=0.50, description="Reduction cap for maximum-risk units"
    )
    managed_risk_floor: float = Field(
        default=0.25, description="Managed risk never drops below this share of baseline"
    )
    rank_epsilon: float = Field(default=0.5, description="Gap enforced by rank preservation")

    # ── Optimizer ──
    optimizer_max_restarts: int = Field(default=5, ge=1, le=5, description="Restart attempts")
    budget_tolerance_ratio: float = Field(
        default=0.02, description="Budget tolerance as a share of the target budget"
    )
    min_improvement_pp: float = Field(
        default=0.1, description="Minimum gain in risk reduction (percentage points)"
    )
    invalid_penalty: float = Field(default=1000.0, description="Fitness penalty for off-budget candidates")
    anneal_iterations: int = Field(default=300, description="Simulated annealing iterations")
    anneal_initial_temperature: float = Field(default=5.0, description="Starting temperature")
    anneal_cooling_rate: float = Field(default=0.97, description="Geometric cooling factor")
    anneal_step: float = Field(default=15.0, description="Max perturbation per annealing move")
    ga_population: int = Field(default=20, description="Genetic loop population size")
    ga_generations: int = Field(default=25, description="Genetic loop generations")
    ga_elite: int = Field(default=2, description="Candidates carried over unchanged")
    ga_mutation_rate: float = Field(default=0.25, description="Per-slot mutation probability")
    ga_mutation_step: float = Field(default=10.0, description="Max mutation per slot")
    local_search_steps: list[float] = Field(
        default=[10.0, 5.0, 1.0], description="Coordinate step sizes, coarse to fine"
    )
    local_search_max_passes: int = Field(default=25, description="Max passes per step size")
    repair_max_iterations: int = Field(default=30, description="Bisection steps per budget repair")
    optimizer_time_budget_seconds: float = Field(
        default=20.0, description="Wall-clock deadline for one optimize call"
    )
    optimizer_seed: int | None = Field(default=None, description="Seed for reproducible searches")

    # ── Data ──
    country_data_path: str | None = Field(
        default=None, description="Optional CSV of country indicators served by GET /units"
    )

    # ── Server ──
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")
    log_level: str = Field(default="INFO", description="Root log level")

    # ── Audit ──
    audit_log_path: str = Field(
        default="audit.jsonl", description="Path to JSON-lines audit log file"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by other modules
settings = Settings()
