# profilehub/core/seed.py
# Starter master data & sample profiles used on first run, failed loads & reset-to-defaults

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from .constants import Template
from .models import (
    DataBundle,
    Education,
    Experience,
    PersonalInfo,
    Profile,
    Project,
    Skill,
    new_id,
)


# * Build a fresh starter DataBundle (new objects on every call)
def default_data() -> DataBundle:
    return DataBundle(
        personal_info=PersonalInfo(
            full_name="Your Name",
            email="your.email@domain.com",
            phone="(555) 123-4567",
            location="City, State",
            linkedin="linkedin.com/in/yourname",
            github="github.com/username",
            website="yourwebsite.com",
            summary="Your professional summary here",
        ),
        experiences=[
            Experience(
                id="experience-1",
                title="Software Engineer",
                company="Tech Company",
                date="2023 - Present",
                bullets=[
                    "Built scalable web applications using modern frameworks",
                    "Collaborated with cross-functional teams to deliver features",
                    "Improved system performance and user experience",
                ],
                tags=["JavaScript", "React", "Node.js"],
            ),
            Experience(
                id="experience-2",
                title="Junior Developer",
                company="Previous Company",
                date="2022 - 2023",
                bullets=[
                    "Developed responsive web interfaces",
                    "Participated in code reviews and testing",
                ],
                tags=["HTML", "CSS", "JavaScript"],
            ),
        ],
        projects=[
            Project(
                id="project-1",
                title="Portfolio Website",
                link="github.com/username/portfolio",
                bullets=[
                    "Built personal portfolio using React and TypeScript",
                    "Deployed using CI/CD pipeline",
                ],
                tags=["React", "TypeScript", "CSS"],
            ),
            Project(
                id="project-2",
                title="Task Management App",
                link="github.com/username/tasks",
                bullets=[
                    "Created full-stack task management application",
                    "Integrated user authentication and data persistence",
                ],
                tags=["Python", "PostgreSQL"],
            ),
        ],
        skills=[
            Skill(id="languages", name="Languages", details="Python, TypeScript, SQL"),
            Skill(id="tools", name="Tools", details="Git, Docker, Linux"),
            Skill(id="cloud", name="Cloud", details="AWS, CI/CD"),
        ],
        education=[
            Education(
                id="education-1",
                title="B.Sc. Computer Science",
                details="University Name, 2022",
            ),
        ],
    )


# * Sample profiles referencing the starter ids
def default_profiles(
    data: DataBundle, id_factory: Callable[[], str] = new_id
) -> list[Profile]:
    def personal(summary: str) -> PersonalInfo:
        return replace(data.personal_info, summary=summary)

    return [
        Profile(
            id=id_factory(),
            name="General Software",
            personal_info=personal("Full-stack engineer"),
            experience_ids=["experience-1", "experience-2"],
            project_ids=["project-1", "project-2"],
            skill_ids=["languages", "tools", "cloud"],
            education_ids=["education-1"],
            template=Template.CLASSIC,
        ),
        Profile(
            id=id_factory(),
            name="Frontend",
            personal_info=personal("Frontend engineer"),
            experience_ids=["experience-1"],
            project_ids=["project-1"],
            skill_ids=["languages", "tools"],
            education_ids=["education-1"],
            template=Template.COMPACT,
        ),
    ]
