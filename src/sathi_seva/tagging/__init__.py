"""Skill-tag suggestion for job postings."""

from .generator import TagSuggester, generate_fallback_tags, parse_tags_from_response

__all__ = ["TagSuggester", "generate_fallback_tags", "parse_tags_from_response"]
