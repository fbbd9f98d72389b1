from typing import List

from .schemas import ExperienceEntry, Profile

EMPTY_PROFILE_PROMPT = (
    "The profile has no public information available. Explain what a strong "
    "professional profile should contain."
)

SYSTEM_INSTRUCTION = """\
You are an experienced career coach and recruiter reviewing a professional \
networking profile. Evaluate how effectively the profile presents the person \
to recruiters and hiring managers.

Structure your reply as plain text sections separated by a blank line:

Score: <integer from 0 to 100>/100

Strengths:
- <3 to 5 specific strengths, one per line>

Weaknesses:
- <3 to 5 specific weaknesses, one per line>

Profile Suggestions:
- <actionable suggestions for the headline, summary and skills>

Experience Suggestions:
- <actionable suggestions for the experience entries>

Network Suggestions:
- <actionable suggestions for networking and engagement>

Reference actual content from the profile. Say how urgent each suggestion is \
using words such as "must", "should" or "consider".

Scoring guide:
- 85-100: Outstanding profile, ready for recruiters
- 65-84: Solid profile with a few gaps
- 45-64: Average profile, notable gaps exist
- 0-44: Weak profile, significant work needed
"""


def format_date_range(entry: ExperienceEntry) -> str:
    """``"Jan 2020 - Present"``; empty when the start date is unknown."""
    if not entry.start:
        return ""
    return f"{entry.start} - {entry.end or 'Present'}"


def _format_experience(entry: ExperienceEntry) -> List[str]:
    if entry.title and entry.company:
        line = f"- {entry.title} at {entry.company}"
    else:
        line = f"- {entry.title or entry.company}"
    dates = format_date_range(entry)
    if dates:
        line += f" ({dates})"
    lines = [line]
    if entry.description:
        lines.extend(f"  {d}" for d in entry.description.splitlines() if d.strip())
    return lines


def build_profile_prompt(profile: Profile) -> str:
    """Render the normalized profile as the text sent to the model."""
    sections = []

    identity = " - ".join(p for p in (profile.name, profile.headline) if p)
    if profile.occupation and profile.occupation != profile.headline:
        identity = f"{identity} ({profile.occupation})" if identity else profile.occupation
    if identity:
        sections.append(identity)

    if profile.summary:
        sections.append(f"Summary:\n{profile.summary}")

    if profile.experiences:
        lines = ["Experience:"]
        for entry in profile.experiences:
            lines.extend(_format_experience(entry))
        sections.append("\n".join(lines))

    if profile.education:
        lines = ["Education:"]
        for entry in profile.education:
            detail = ", ".join(p for p in (entry.degree, entry.field_of_study) if p)
            lines.append(f"- {entry.school}" + (f" ({detail})" if detail else ""))
        sections.append("\n".join(lines))

    if profile.skills:
        sections.append(f"Skills: {', '.join(profile.skills)}")

    if profile.certifications:
        sections.append(f"Certifications: {', '.join(profile.certifications)}")

    if not sections:
        return EMPTY_PROFILE_PROMPT
    return "\n\n".join(sections)
