"""Configuration models for the staging/prod comparison suite."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from sitecompare.models.checks import FormFlow, MenuCheck


class DeviceConfig(BaseModel):
    name: str = "Desktop"
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=800, gt=0)


class EnvironmentConfig(BaseModel):
    base_url: str

    @field_validator("base_url", mode="before")
    @classmethod
    def resolve_env_url(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v


class SuiteConfig(BaseModel):
    # Environments
    staging: EnvironmentConfig
    prod: EnvironmentConfig

    # Relative page paths tested on both environments, in order
    pages: list[str] = Field(default_factory=lambda: ["/"])

    devices: list[DeviceConfig] = Field(default_factory=lambda: [DeviceConfig()])

    # Output locations
    screenshots_dir: str = "screenshots"
    report_dir: str = "."
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])

    # Capture
    navigation_timeout_ms: int = Field(default=60000, gt=0)
    soft_deadline_ms: int = Field(default=10000, gt=0)
    headless: bool = True
    user_agent: Optional[str] = None

    # Comparison
    canonical_width: int = Field(default=1280, gt=0)
    canonical_height: int = Field(default=800, gt=0)
    diff_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    pass_threshold: float = Field(default=95.0, ge=0.0, le=100.0)

    # Broken image check
    image_exclude_patterns: list[str] = Field(
        default_factory=lambda: ["bat.bing.com", "tracking"]
    )

    # Menu and form checks
    menu_page_url: Optional[str] = None
    menus: list[MenuCheck] = Field(default_factory=list)
    forms: list[FormFlow] = Field(default_factory=list)

    @field_validator("pages")
    @classmethod
    def require_pages(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one page path is required")
        return v

    def device(self, name: str) -> DeviceConfig:
        """Look up a configured device by name (case-insensitive)."""
        for d in self.devices:
            if d.name.lower() == name.lower():
                return d
        raise KeyError(f"Unknown device: {name}")

    @classmethod
    def load(cls, path: str | Path) -> "SuiteConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
