"""Shared dependencies for API routes."""

from services.skill_vocabulary import SkillVocabulary, default_vocabulary


def get_vocabulary() -> SkillVocabulary:
    return default_vocabulary()
