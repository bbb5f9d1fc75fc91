"""
Intake normalization.
=====================
Pure conversion of a raw intake payload into a ProjectConfig.
"""
import re
from typing import Any, Dict, List

from ..domain import ProjectConfig, Service, Location, BrandPreferences
from ..utils import slugify

REQUIRED_FIELDS = ("businessName", "industry")

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


class IntakeValidationError(ValueError):
    """Raised before the pipeline starts when required intake fields are missing."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required intake fields: {', '.join(self.missing)}")


class ConfigNormalizer:
    """Converts raw intake data into a canonical project configuration."""

    def normalize(self, intake: Dict[str, Any]) -> ProjectConfig:
        if not isinstance(intake, dict):
            raise IntakeValidationError(list(REQUIRED_FIELDS))

        missing = [name for name in REQUIRED_FIELDS if not str(intake.get(name) or "").strip()]
        if missing:
            raise IntakeValidationError(missing)

        name = str(intake["businessName"]).strip()
        slug = slugify(intake.get("projectSlug") or name) or "project"

        return ProjectConfig(
            project_name=name,
            project_slug=slug,
            industry=str(intake["industry"]).strip(),
            services=self._services(intake.get("services") or []),
            location=self._location(intake.get("location")),
            tone_of_voice=str(intake.get("toneOfVoice") or intake.get("tone") or "professional").strip(),
            brand=self._brand(intake.get("brand") or intake.get("brandPreferences") or {}),
            target_audiences=self._audiences(intake.get("targetAudiences") or intake.get("targetAudience")),
            competitor_url=(intake.get("competitorUrl") or None),
            contact_email=str(intake.get("email") or intake.get("contactEmail") or ""),
            contact_phone=str(intake.get("phone") or intake.get("contactPhone") or ""),
        )

    def _services(self, raw) -> List[Service]:
        if isinstance(raw, str):
            raw = [part for part in raw.split(",")]
        services = []
        seen = set()
        for item in raw:
            if isinstance(item, dict):
                name = str(item.get("name") or "").strip()
                description = str(item.get("description") or "").strip()
            else:
                name, description = str(item).strip(), ""
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            services.append(Service(name=name, description=description))
        return services

    def _location(self, raw) -> Location:
        if isinstance(raw, str):
            parts = [p.strip() for p in raw.split(",")]
            parts += [""] * (3 - len(parts))
            return Location(city=parts[0], region=parts[1], country=parts[2])
        if isinstance(raw, dict):
            return Location(
                city=str(raw.get("city") or "").strip(),
                region=str(raw.get("region") or raw.get("state") or "").strip(),
                country=str(raw.get("country") or "").strip(),
            )
        return Location()

    def _brand(self, raw: Dict[str, Any]) -> BrandPreferences:
        def color(key):
            value = raw.get(key) or raw.get(f"{key}Color")
            if isinstance(value, str) and _HEX_COLOR.match(value.strip()):
                return value.strip().lower()
            return None

        return BrandPreferences(
            primary_color=color("primary"),
            secondary_color=color("secondary"),
            accent_color=color("accent"),
            heading_font=raw.get("headingFont") or None,
            body_font=raw.get("bodyFont") or None,
        )

    def _audiences(self, raw) -> List[str]:
        if isinstance(raw, str):
            raw = raw.split(",")
        audiences = [str(a).strip() for a in (raw or []) if str(a).strip()]
        return audiences or ["general public"]
