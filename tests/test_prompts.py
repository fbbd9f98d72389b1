from profilecoach.prompts import EMPTY_PROFILE_PROMPT, build_profile_prompt, format_date_range
from profilecoach.schemas import EducationEntry, ExperienceEntry, Profile


def test_empty_profile_uses_fallback_prompt() -> None:
    assert build_profile_prompt(Profile()) == EMPTY_PROFILE_PROMPT


def test_full_profile_prompt() -> None:
    profile = Profile(
        name="Jane Doe",
        headline="Data Engineer",
        summary="Builds reliable pipelines.",
        experiences=[
            ExperienceEntry(
                company="Acme",
                title="Data Engineer",
                start="Jan 2020",
                description="Led a team of five.\nShipped v2.",
            ),
            ExperienceEntry(company="Initech", title="Analyst", start="2017", end="2019"),
            ExperienceEntry(company="Freelance"),
        ],
        education=[EducationEntry(school="State University", degree="BSc", field_of_study="CS")],
        skills=["Python", "SQL"],
        certifications=["AWS Certified"],
    )

    assert build_profile_prompt(profile) == (
        "Jane Doe - Data Engineer\n\n"
        "Summary:\nBuilds reliable pipelines.\n\n"
        "Experience:\n"
        "- Data Engineer at Acme (Jan 2020 - Present)\n"
        "  Led a team of five.\n"
        "  Shipped v2.\n"
        "- Analyst at Initech (2017 - 2019)\n"
        "- Freelance\n\n"
        "Education:\n- State University (BSc, CS)\n\n"
        "Skills: Python, SQL\n\n"
        "Certifications: AWS Certified"
    )


def test_identity_line_includes_distinct_occupation() -> None:
    profile = Profile(name="Jane", headline="Engineer", occupation="Engineer at Acme")
    assert build_profile_prompt(profile) == "Jane - Engineer (Engineer at Acme)"

    assert build_profile_prompt(Profile(occupation="Consultant")) == "Consultant"


def test_date_range_requires_start() -> None:
    assert format_date_range(ExperienceEntry(company="Acme", end="2020")) == ""
    assert format_date_range(ExperienceEntry(company="Acme", start="2018")) == "2018 - Present"
