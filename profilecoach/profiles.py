import calendar
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import unquote, urlparse

import httpx
from bs4 import BeautifulSoup
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import load_settings
from .errors import (
    ConfigurationError,
    InvalidProfileIdError,
    InvalidResponseError,
    ProfileNotFoundError,
)
from .schemas import EducationEntry, ExperienceEntry, Profile
from .upstream import raise_for_upstream_status, request_with_retry

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Profile provider"

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_%-]{3,100}$")


class RawProfile(BaseModel):
    """Provider payload, validated loosely; only the container shapes are enforced."""

    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = Field(None, validation_alias=AliasChoices("summary", "about"))
    occupation: Optional[str] = None
    experiences: List[Dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("experiences", "experience")
    )
    education: List[Dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("education", "educations")
    )
    skills: Union[str, List[Union[str, Dict[str, Any]]], None] = None
    certifications: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)

    @field_validator("experiences", "education", "certifications", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v


def parse_profile_identifier(value: str) -> str:
    """Return the public identifier from a bare id or a profile URL.

    Raises ``InvalidProfileIdError`` when nothing usable can be extracted.
    """
    value = (value or "").strip()
    if "linkedin.com" in value.lower() or "://" in value:
        parsed = urlparse(value if "://" in value else f"https://{value}")
        host = parsed.netloc.lower()
        parts = [p for p in parsed.path.split("/") if p]
        if not (host == "linkedin.com" or host.endswith(".linkedin.com")):
            raise InvalidProfileIdError("Please provide a LinkedIn profile URL or public identifier.")
        if len(parts) < 2 or parts[0].lower() != "in":
            raise InvalidProfileIdError("Profile URLs must look like https://www.linkedin.com/in/<id>.")
        value = parts[1]

    if not _IDENTIFIER.match(value):
        raise InvalidProfileIdError(
            "Invalid profile identifier. Use 3-100 letters, digits, '-' or '_'."
        )
    return unquote(value)


def _plain_text(value: Any) -> Optional[str]:
    """Strip provider HTML (descriptions sometimes arrive as markup)."""
    if value is None:
        return None
    text = str(value)
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "lxml").get_text(separator="\n", strip=True)
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    return text or None


def _first(entry: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value not in (None, "", {}):
            return value
    return None


def format_date(value: Any) -> Optional[str]:
    """``{"year": 2021, "month": 3}`` -> ``"Mar 2021"``; strings pass through."""
    if value is None:
        return None
    if isinstance(value, dict):
        year = value.get("year")
        if not year:
            return None
        month = value.get("month")
        if isinstance(month, int) and 1 <= month <= 12:
            return f"{calendar.month_abbr[month]} {year}"
        return str(year)
    text = str(value).strip()
    return text or None


def _names(items: Iterable[Union[str, Dict[str, Any]]]) -> List[str]:
    """Deduplicated names from strings or ``{"name": ...}`` objects, order kept."""
    seen = set()
    names = []
    for item in items:
        name = item.get("name") if isinstance(item, dict) else item
        if not isinstance(name, str):
            continue
        name = name.strip()
        if name and name.casefold() not in seen:
            seen.add(name.casefold())
            names.append(name)
    return names


def normalize_skills(raw: Union[str, List[Any], None]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return _names(raw.split(","))
    return _names(raw)


def normalize_profile(raw: RawProfile) -> Profile:
    name = raw.full_name or " ".join(p for p in (raw.first_name, raw.last_name) if p)

    experiences = [
        ExperienceEntry(
            company=_plain_text(_first(e, "company", "company_name")) or "",
            title=_plain_text(_first(e, "title", "position")) or "",
            start=format_date(_first(e, "starts_at", "start_date", "start")),
            end=format_date(_first(e, "ends_at", "end_date", "end")),
            description=_plain_text(e.get("description")),
        )
        for e in raw.experiences
    ]
    education = [
        EducationEntry(
            school=_plain_text(_first(e, "school", "school_name")) or "",
            degree=_plain_text(_first(e, "degree", "degree_name")),
            field_of_study=_plain_text(e.get("field_of_study")),
        )
        for e in raw.education
    ]

    return Profile(
        name=_plain_text(name),
        headline=_plain_text(raw.headline),
        summary=_plain_text(raw.summary),
        occupation=_plain_text(raw.occupation),
        experiences=[e for e in experiences if e.company or e.title],
        education=[e for e in education if e.school],
        skills=normalize_skills(raw.skills),
        certifications=_names(raw.certifications),
    )


async def fetch_profile(
    identifier: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Profile:
    """Fetch and normalize one public profile from the provider."""
    profile_id = parse_profile_identifier(identifier)

    settings = load_settings()
    if not settings.profile_api_url or not settings.profile_api_key:
        raise ConfigurationError("PROFILE_API_URL and PROFILE_API_KEY must be configured.")

    headers = {
        "x-rapidapi-key": settings.profile_api_key,
        "x-rapidapi-host": settings.profile_api_host or urlparse(settings.profile_api_url).netloc,
    }

    async with httpx.AsyncClient(
        timeout=settings.profile_api_timeout,
        headers=headers,
        transport=transport,
    ) as client:
        response = await request_with_retry(
            client,
            "GET",
            settings.profile_api_url,
            params={"username": profile_id},
            service=PROVIDER_NAME,
            max_retries=settings.upstream_max_retries,
            backoff=settings.upstream_retry_backoff,
        )

    if response.status_code == 404:
        raise ProfileNotFoundError(f"No public profile found for '{profile_id}'.")
    raise_for_upstream_status(response, PROVIDER_NAME)

    try:
        payload = response.json()
    except ValueError as exc:
        raise InvalidResponseError("Profile provider returned a non-JSON response.") from exc

    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if not payload:
        raise ProfileNotFoundError(f"No public profile found for '{profile_id}'.")
    if not isinstance(payload, dict):
        raise InvalidResponseError("Unexpected response from profile provider.")

    try:
        raw = RawProfile.model_validate(payload)
    except ValidationError as exc:
        raise InvalidResponseError(f"Unexpected response from profile provider: {exc}") from exc

    profile = normalize_profile(raw)
    logger.info(
        "Fetched profile %s (%d experiences, %d skills)",
        profile_id,
        len(profile.experiences),
        len(profile.skills),
    )
    return profile
