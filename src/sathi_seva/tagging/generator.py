"""Skill-tag suggestion for new job postings.

Tags come from Gemini when an API key is configured and the call succeeds;
otherwise a fixed keyword table produces them locally.
"""

from typing import Dict, List, Optional

import httpx

from sathi_seva.config import settings
from sathi_seva.core.models import TagSuggestion, normalize_tags
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)

MAX_REMOTE_TAGS = 10
MAX_TAG_LENGTH = 30
MAX_FALLBACK_TAGS = 6

SERVICE_KEYWORDS: Dict[str, List[str]] = {
    "cleaning": ["House Cleaning", "Deep Cleaning", "Office Cleaning"],
    "cook": ["Cooking", "Meal Prep", "Indian Cuisine"],
    "plumb": ["Plumbing", "Pipe Repair", "Bathroom Fitting"],
    "electric": ["Electrical Work", "Wiring", "Appliance Repair"],
    "garden": ["Gardening", "Plant Care", "Landscaping"],
    "paint": ["Painting", "Wall Painting", "Interior Design"],
    "repair": ["Home Repair", "Maintenance", "Handyman"],
    "delivery": ["Delivery", "Pickup", "Transportation"],
    "tutor": ["Tutoring", "Teaching", "Education"],
    "beauty": ["Beauty Services", "Salon", "Grooming"],
    "massage": ["Massage", "Therapy", "Wellness"],
    "laundry": ["Laundry", "Dry Cleaning", "Ironing"],
    "baby": ["Babysitting", "Child Care", "Nanny"],
    "elder": ["Elder Care", "Nursing", "Companion"],
    "pet": ["Pet Care", "Dog Walking", "Pet Sitting"],
}

PROMPT_TEMPLATE = """
You are an AI assistant that helps generate relevant skill tags for job postings in a local services marketplace called "Sathi Seva".

Job Title: {title}
Job Description: {description}

Based on the job title and description above, generate a list of 5-8 relevant skill tags that would help workers find this job. These tags should represent the skills, tools, or expertise needed to complete this job.

Guidelines:
1. Focus on specific skills and tools required
2. Use common, searchable terms
3. Include both general and specific skills
4. Consider the Indian local services context
5. Keep tags concise (1-3 words each)
6. Avoid generic terms like "good" or "reliable"

Examples of good tags:
- "House Cleaning", "Deep Cleaning", "Kitchen Cleaning"
- "Plumbing", "Pipe Repair", "Bathroom Fitting"
- "Electrical Work", "Wiring", "Fan Installation"
- "Cooking", "Indian Cuisine", "Meal Prep"
- "Gardening", "Plant Care", "Lawn Mowing"

Return only the tags as a comma-separated list, nothing else.
Example format: House Cleaning, Deep Cleaning, Bathroom Cleaning, Kitchen Cleaning, Vacuum Cleaning
"""


def parse_tags_from_response(text: str) -> List[str]:
    """Split a comma-separated model answer into clean tags."""
    cleaned = text.strip().replace('"', "").replace("'", "")
    tags = [tag.strip() for tag in cleaned.split(",")]
    return [tag for tag in tags if 0 < len(tag) <= MAX_TAG_LENGTH][:MAX_REMOTE_TAGS]


def generate_fallback_tags(description: str, title: Optional[str] = None) -> List[str]:
    """Keyword-table tags for a job; deterministic and capped."""
    text = f"{title or ''} {description}".lower()
    tags = []
    for keyword, keyword_tags in SERVICE_KEYWORDS.items():
        if keyword in text:
            tags.extend(keyword_tags)
    return normalize_tags(tags)[:MAX_FALLBACK_TAGS]


class TagSuggester:
    """Suggests required tags from a job's title and description."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.client = client or httpx.AsyncClient(timeout=settings.tag_request_timeout)
        self.endpoint = f"{settings.gemini_api_url}/{settings.gemini_model}:generateContent"
        self.logger = logger.bind(component="tag_suggester")

    async def suggest(self, description: str, title: Optional[str] = None) -> TagSuggestion:
        """
        Suggest tags, preferring Gemini.

        The local table is used when no API key is configured or when the
        remote call fails or returns nothing usable.

        Args:
            description: Job description
            title: Optional job title

        Returns:
            TagSuggestion naming the strategy that produced the tags
        """
        if not self.api_key:
            self.logger.warning("Gemini API key not configured, using fallback tag generation")
            return self._fallback(description, title, error="Gemini API key not configured")

        try:
            text = await self._generate(self._create_prompt(description, title))
            tags = parse_tags_from_response(text)
            if not tags:
                raise ValueError("Gemini returned no usable tags")
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            self.logger.error("Gemini tag generation failed, falling back", **log_error_context(e))
            return self._fallback(description, title, error=str(e))

        self.logger.info("Tags generated", source="gemini", tags_count=len(tags))
        return TagSuggestion(tags=tags, success=True, source="gemini")

    def _create_prompt(self, description: str, title: Optional[str]) -> str:
        return PROMPT_TEMPLATE.format(title=title or "Not provided", description=description)

    async def _generate(self, prompt: str) -> str:
        response = await self.client.post(
            self.endpoint,
            params={"key": self.api_key},
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": 0.7,
                    "topK": 40,
                    "topP": 0.95,
                    "maxOutputTokens": 1024,
                },
            }
        )
        response.raise_for_status()
        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def _fallback(self, description: str, title: Optional[str], error: Optional[str]) -> TagSuggestion:
        tags = generate_fallback_tags(description, title)
        self.logger.info("Tags generated", source="fallback", tags_count=len(tags))
        return TagSuggestion(tags=tags, success=True, source="fallback", error=error)

    async def close(self) -> None:
        await self.client.aclose()
