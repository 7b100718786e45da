"""
Template and animation-style recommendations for video prompts.

An LLM (OpenAI ``gpt-4o-mini`` in JSON mode) reads the user's prompt and
the tier-filtered catalogue from :mod:`genstudio.templates`, then returns
scored template and style ids with short reasoning. Ids are mapped back to
catalogue entries; unknown ids and entries the tier cannot use are dropped.

When no API key is available, the request fails, or the reply cannot be
parsed, a keyword heuristic produces the recommendations instead.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from genstudio.templates import (
    AnimationStyle,
    VideoTemplate,
    available_styles,
    available_templates,
)

MAX_TEMPLATES = 5
MAX_STYLES = 3

ANALYSIS_PROMPT = """You are an AI video production expert. Analyze this user prompt for video generation and recommend the best templates and animation styles.

User Prompt: "{prompt}"

Available Templates:
{templates}

Available Animation Styles:
{styles}

Analyze the prompt and provide recommendations in this exact JSON structure:
{{
  "mood": ["array", "of", "mood", "descriptors"],
  "motion": ["array", "of", "motion", "types"],
  "category": "motion|transition|effect|storytelling",
  "complexity": "simple|moderate|complex",
  "recommendedTemplates": [
    {{ "id": "template-id", "score": 95, "reasoning": "why this template fits" }}
  ],
  "recommendedStyles": [
    {{ "id": "style-id", "score": 90, "reasoning": "why this style fits" }}
  ]
}}

Guidelines:
- Recommend 3-5 templates sorted by score (0-100)
- Recommend 2-3 styles sorted by score (0-100)
- Score based on how well the template/style matches the prompt's intent, mood, and motion
- Provide clear, concise reasoning for each recommendation
- Consider the visual intent, pacing, and emotional tone of the prompt"""


@dataclass
class TemplateRecommendation:
    template: VideoTemplate
    score: float
    reasoning: str


@dataclass
class StyleRecommendation:
    style: AnimationStyle
    score: float
    reasoning: str


@dataclass
class PromptAnalysis:
    mood: List[str] = field(default_factory=list)
    motion: List[str] = field(default_factory=list)
    category: str = "motion"
    complexity: str = "simple"


@dataclass
class RecommendationResult:
    templates: List[TemplateRecommendation] = field(default_factory=list)
    styles: List[StyleRecommendation] = field(default_factory=list)
    analysis: PromptAnalysis = field(default_factory=PromptAnalysis)


class TemplateRecommender:
    """LLM-backed recommender with a keyword fallback.

    Parameters:
        api_key: OpenAI API key (falls back to ``OPENAI_API_KEY``).
        model_name: Chat model used for the analysis.
        client: Pre-built ``openai.OpenAI`` client (optional).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gpt-4o-mini",
        client: Any = None,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model_name = model_name
        self._client = client

    def setup(self) -> None:
        """Initialize the OpenAI client."""
        if not self.api_key:
            raise ValueError(
                "OpenAI API key is required for prompt analysis. "
                "Set OPENAI_API_KEY or store a key with `genstudio keys set openai`."
            )
        from openai import OpenAI

        self._client = OpenAI(api_key=self.api_key)

    def recommend(self, prompt: str, tier: str = "free") -> RecommendationResult:
        """Recommend templates and styles for ``prompt``.

        Parameters:
            prompt: The user's video prompt.
            tier: ``"free"`` or ``"pro"``; pro-only entries are hidden from free.

        Returns:
            A :class:`RecommendationResult` (empty for a blank prompt).
        """
        if not prompt.strip():
            return RecommendationResult()

        try:
            if self._client is None:
                self.setup()
            raw = self._ask(prompt, tier)
            return self._map_response(json.loads(raw), tier)
        except Exception as e:
            print(f"[Recommender] Analysis failed, using keyword fallback: {e}")
            return fallback_recommendations(prompt, tier)

    def _ask(self, prompt: str, tier: str) -> str:
        templates = [
            {"id": t.id, "name": t.name, "description": t.description, "category": t.category}
            for t in available_templates(tier)
        ]
        styles = [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "moodTags": list(s.mood_tags),
            }
            for s in available_styles(tier)
        ]
        content = ANALYSIS_PROMPT.format(
            prompt=prompt,
            templates=json.dumps(templates, indent=2),
            styles=json.dumps(styles, indent=2),
        )

        response = self._client.chat.completions.create(
            model=self.model_name,
            messages=[{"role": "user", "content": content}],
            response_format={"type": "json_object"},
        )
        if not response.choices or not response.choices[0].message.content:
            raise ValueError("Empty response from recommender model")
        return response.choices[0].message.content

    @staticmethod
    def _map_response(data: Dict[str, Any], tier: str) -> RecommendationResult:
        """Map recommended ids back onto the tier's catalogue.

        Entries with an unknown id are skipped; a missing score or
        reasoning defaults to 0 / ``""``.
        """
        templates_by_id = {t.id: t for t in available_templates(tier)}
        styles_by_id = {s.id: s for s in available_styles(tier)}

        templates = [
            TemplateRecommendation(
                templates_by_id[rec["id"]], rec.get("score", 0), rec.get("reasoning", "")
            )
            for rec in _entries(data.get("recommendedTemplates"))
            if rec.get("id") in templates_by_id
        ][:MAX_TEMPLATES]

        styles = [
            StyleRecommendation(
                styles_by_id[rec["id"]], rec.get("score", 0), rec.get("reasoning", "")
            )
            for rec in _entries(data.get("recommendedStyles"))
            if rec.get("id") in styles_by_id
        ][:MAX_STYLES]

        analysis = PromptAnalysis(
            mood=_as_list(data.get("mood")),
            motion=_as_list(data.get("motion")),
            category=data.get("category", "motion"),
            complexity=data.get("complexity", "simple"),
        )
        return RecommendationResult(templates=templates, styles=styles, analysis=analysis)


def _entries(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [rec for rec in value if isinstance(rec, dict)]


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


# ── Keyword fallback ─────────────────────────────────────────────────────────

_TEMPLATE_RULES = [
    (("zoom", "close"), "epic-zoom", 85, "Prompt mentions zoom or close-up movement"),
    (
        ("rotate", "around", "orbit"),
        "orbital-rotation",
        85,
        "Prompt suggests rotational or orbital movement",
    ),
]

_STYLE_RULES = [
    (("slow", "elegant", "smooth"), "smooth-elegant", 80, "Prompt indicates smooth, elegant motion"),
    (
        ("fast", "energy", "dynamic"),
        "energetic-dynamic",
        80,
        "Prompt suggests energetic, dynamic motion",
    ),
]


def fallback_recommendations(prompt: str, tier: str = "free") -> RecommendationResult:
    """Keyword-based recommendations used when the LLM is unavailable."""
    lower = prompt.lower()
    templates_by_id = {t.id: t for t in available_templates(tier)}
    styles_by_id = {s.id: s for s in available_styles(tier)}

    templates: List[TemplateRecommendation] = []
    for words, template_id, score, reasoning in _TEMPLATE_RULES:
        if any(w in lower for w in words) and template_id in templates_by_id:
            templates.append(TemplateRecommendation(templates_by_id[template_id], score, reasoning))

    styles: List[StyleRecommendation] = []
    for words, style_id, score, reasoning in _STYLE_RULES:
        if any(w in lower for w in words) and style_id in styles_by_id:
            styles.append(StyleRecommendation(styles_by_id[style_id], score, reasoning))

    if not templates and "cinematic-pan" in templates_by_id:
        templates.append(
            TemplateRecommendation(
                templates_by_id["cinematic-pan"],
                70,
                "Versatile cinematic movement suitable for most scenarios",
            )
        )
    if not styles and "organic-natural" in styles_by_id:
        styles.append(
            StyleRecommendation(
                styles_by_id["organic-natural"],
                70,
                "Natural, adaptable style that works well for various content",
            )
        )

    return RecommendationResult(
        templates=templates,
        styles=styles,
        analysis=PromptAnalysis(
            mood=["creative"], motion=["dynamic"], category="motion", complexity="moderate"
        ),
    )


def analyze_prompt_and_recommend(
    prompt: str,
    tier: str = "free",
    api_key: Optional[str] = None,
    client: Any = None,
) -> RecommendationResult:
    """Convenience wrapper around :class:`TemplateRecommender`."""
    return TemplateRecommender(api_key=api_key, client=client).recommend(prompt, tier)


def recommendation_badge(score: float) -> str:
    """Badge level for a recommendation score."""
    if score >= 90:
        return "primary"
    if score >= 75:
        return "secondary"
    if score >= 60:
        return "accent"
    return "muted"
