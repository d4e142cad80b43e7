"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    BusinessHours,
    Cabin,
    CabinCatalog,
    CabinCategory,
    OpeningHours,
)


class HoursConfig(BaseModel):
    """Opening window for a single weekday."""
    start: int
    end: int

    @field_validator("start", "end")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "HoursConfig":
        """Ensure the window opens before it closes."""
        if self.end <= self.start:
            raise ValueError("end must be later than start")
        return self


def _default_business_hours() -> Dict[int, HoursConfig]:
    weekday = HoursConfig(start=9, end=20)
    return {
        0: weekday,
        1: weekday,
        2: weekday,
        3: weekday,
        4: weekday,
        5: HoursConfig(start=9, end=16),
        6: HoursConfig(start=9, end=14),
    }


class CabinConfig(BaseModel):
    """Cabin catalog entry."""
    id: str
    name: str
    category: CabinCategory
    description: str = ""
    price_per_minute: float = 0.70
    webhook_url: Optional[str] = None  # Calendar webhook for this cabin

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Cabin id must not be empty")
        return value

    @field_validator("price_per_minute")
    @classmethod
    def validate_price(cls, value: float) -> float:
        if value < 0:
            raise ValueError("price_per_minute must not be negative")
        return value

    def to_cabin(self) -> Cabin:
        return Cabin(
            id=self.id,
            name=self.name,
            category=self.category,
            description=self.description,
            price_per_minute=self.price_per_minute,
        )


def _default_cabins() -> List[CabinConfig]:
    return [
        CabinConfig(
            id="lying-1",
            name="Pirmoji gulima kabina",
            category=CabinCategory.LYING,
            description="Aukščiausios klasės gulima kabina su 42UV lempom ir vėdinimo sistema",
        ),
        CabinConfig(
            id="lying-2",
            name="Antroji gulima kabina",
            category=CabinCategory.LYING,
            description="Aukščiausios klasės gulima kabina su aromaterapija ir valdoma muzika",
        ),
        CabinConfig(
            id="standing-1",
            name="Stovima kabina",
            category=CabinCategory.STANDING,
            description="Prabangi stovima kabina su 42UV lempom ir vėdinimo sistema",
        ),
    ]


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Vilnius"
    cabins: List[CabinConfig] = Field(default_factory=_default_cabins)
    business_hours: Dict[int, HoursConfig] = Field(default_factory=_default_business_hours)
    notification_url: Optional[str] = None  # Booking confirmation endpoint
    booking_store_path: Path = Field(
        default_factory=lambda: Path.home() / ".cabinbooking_bookings.json"
    )
    booking_window_days: int = 7
    request_timeout_seconds: float = 30.0

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, value: Dict[int, HoursConfig]) -> Dict[int, HoursConfig]:
        """Every weekday (0=Monday .. 6=Sunday) must have opening hours."""
        invalid_days = sorted(day for day in value if day not in range(7))
        if invalid_days:
            raise ValueError(f"business_hours weekdays must be between 0 and 6, got {invalid_days}")
        missing_days = sorted(set(range(7)) - set(value))
        if missing_days:
            raise ValueError(f"business_hours is missing weekdays {missing_days}")
        return value

    @field_validator("cabins")
    @classmethod
    def validate_cabins(cls, value: List[CabinConfig]) -> List[CabinConfig]:
        """Ensure cabin ids are unique."""
        if not value:
            raise ValueError("At least one cabin must be configured")
        seen_ids: set[str] = set()
        for cabin in value:
            if cabin.id in seen_ids:
                raise ValueError(f"Duplicate cabin id detected: {cabin.id}")
            seen_ids.add(cabin.id)
        return value

    @field_validator("booking_window_days")
    @classmethod
    def validate_window(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("booking_window_days must be greater than zero")
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def build_catalog(self) -> CabinCatalog:
        return CabinCatalog([cabin.to_cabin() for cabin in self.cabins])

    def build_business_hours(self) -> BusinessHours:
        return BusinessHours(
            hours={
                day: OpeningHours(start_hour=hours.start, end_hour=hours.end)
                for day, hours in self.business_hours.items()
            }
        )

    def webhook_endpoints(self) -> Dict[str, str]:
        """Map cabin id -> calendar webhook URL for cabins that have one."""
        return {
            cabin.id: cabin.webhook_url
            for cabin in self.cabins
            if cabin.webhook_url
        }


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_file: Optional[Path] = None) -> AppConfig:
    """
    Load the configuration, falling back to built-in defaults.

    An explicitly passed path must exist; the default location is optional.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    config_path = get_default_config_path()
    if config_path.exists():
        return AppConfig.load_from_yaml(config_path)
    return AppConfig()
