"""
Application settings for the LIFTR command line and storage layer.

Values come from ``LIFTR_*`` environment variables or a ``.env`` file.
The engine never reads these directly: callers turn them into explicit
values (an AdjustmentPolicy, an InventorySnapshot bar weight) and pass
those in.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from liftr.schemas import AdjustmentMode, AdjustmentPolicy, PolicyPreset, UnitSystem
from liftr.units import default_rounding_increment


def default_database_url() -> str:
    """SQLite file in the working directory, as an absolute path."""
    db_path = Path.cwd() / "liftr.db"
    return f"sqlite:///{db_path.resolve()}"


class Settings(BaseSettings):
    database_url: str = Field(default_factory=default_database_url)
    unit_system: UnitSystem = UnitSystem.IMPERIAL
    rounding_increment: Optional[float] = Field(
        None, gt=0, description="Falls back to the unit system's default when unset"
    )
    default_bar_weight: float = Field(45.0, gt=0)
    default_day_offsets: List[int] = Field(default_factory=lambda: [0, 2, 4])
    adjustment_mode: AdjustmentMode = AdjustmentMode.PROMPT
    policy_preset: PolicyPreset = PolicyPreset.MODERATE

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LIFTR_",
        extra="ignore",
    )

    @field_validator("default_day_offsets")
    @classmethod
    def validate_day_offsets(cls, value: List[int]) -> List[int]:
        if not value or any(offset < 0 or offset > 6 for offset in value):
            raise ValueError("LIFTR_DEFAULT_DAY_OFFSETS must hold offsets between 0 and 6")
        return value

    @property
    def effective_rounding_increment(self) -> float:
        if self.rounding_increment is not None:
            return self.rounding_increment
        return default_rounding_increment(self.unit_system)

    def adjustment_policy(self) -> AdjustmentPolicy:
        """Build the policy value handed to the adjustment engine."""
        return AdjustmentPolicy.from_preset(
            self.policy_preset,
            mode=self.adjustment_mode,
            rounding_increment=self.effective_rounding_increment,
            unit_system=self.unit_system,
        )


def get_settings() -> Settings:
    """Read settings from the environment; a fresh instance on every call."""
    return Settings()
