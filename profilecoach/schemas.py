from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Section = Literal["experience", "network", "profile"]
Priority = Literal["high", "medium", "low"]


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: Section
    suggestion: str
    priority: Priority


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = 50
    suggestions: List[Suggestion]
    strengths: List[str]
    weaknesses: List[str]

    @field_validator("score")
    @classmethod
    def clamp_score(cls, v: int) -> int:
        return max(0, min(100, v))


# ---------------------------------------------------------------------------
# Normalized profile
# ---------------------------------------------------------------------------


class ExperienceEntry(BaseModel):
    company: str = ""
    title: str = ""
    start: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None


class EducationEntry(BaseModel):
    school: str = ""
    degree: Optional[str] = None
    field_of_study: Optional[str] = None


class Profile(BaseModel):
    name: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    occupation: Optional[str] = None
    experiences: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    profile: str = Field(..., min_length=1, description="Public identifier or profile URL")


class InterpretRequest(BaseModel):
    text: str = ""
