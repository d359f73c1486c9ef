"""Shared test configuration, pytest markers and sample documents."""

from datetime import date

import pytest

from services.skill_vocabulary import build_vocabulary

TODAY = date(2024, 6, 1)

SAMPLE_RESUME = """Jane Doe
Senior Software Engineer

Summary
Backend engineer with 6 years of experience building Python services.

Experience
Software Engineer, Acme Corp
Jan 2018 - Dec 2020
- Built REST APIs in Django serving 2M requests per day
- Reduced deployment time by 40% with Docker and Jenkins pipelines

Senior Software Engineer, Globex
Jan 2021 - Present
- Migrated 12 services to Kubernetes on AWS, cutting infra cost by 30%
- Worked with Kafka

Education
B.Sc. Computer Science, State University, 2013 - 2017

Skills
Python, PostgreSQL, Redis, Git, Linux
"""

SAMPLE_JD = """Senior Backend Engineer

We are hiring a backend engineer to scale our Python platform.

Requirements:
- 5+ years of experience with Python
- Strong knowledge of Django or FastAPI
- Experience with PostgreSQL and Redis
- Docker and Kubernetes in production

Nice to have:
- Kafka
- GraphQL
- Terraform
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "api: exercises the FastAPI routes through TestClient"
    )


@pytest.fixture
def small_vocabulary():
    """A fixed, tiny vocabulary for deterministic unit tests."""
    return build_vocabulary(
        skills={
            "Python": (),
            "Python 3": ("python3",),
            "React": ("React.js", "ReactJS"),
            "React Native": ("react-native",),
            "Docker": (),
            "AWS": ("Amazon Web Services",),
            "SQL": (),
            "GraphQL": (),
            "Django": (),
            "PostgreSQL": ("postgres",),
            "Kubernetes": ("k8s",),
        },
        implications={
            "Django": ("Python",),
            "Python 3": ("Python",),
        },
    )
