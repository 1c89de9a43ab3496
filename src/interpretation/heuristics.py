# src/interpretation/heuristics.py — v2
"""Heuristic path: derive findings from prose when no JSON could be decoded.

Terms are matched case-insensitively at word starts, so "rot" matches
"rotting" but not "protect" or "carrot". This differs on purpose from plain
substring containment, under which both of those would flag rot. The keyword
tables below assume word-start matching.

Explicit healthy phrases take precedence over every disease keyword in the
same text. That precedence is kept as inherited behavior even for mixed
replies ("no signs of disease ... slight rot").
"""

from __future__ import annotations

import re
from functools import lru_cache

from lansonesscan.core.models import ItemCategory
from lansonesscan.interpretation.findings import ParsedFindings

HEALTHY_PHRASES: tuple[str, ...] = (
    "appears healthy",
    "looks healthy",
    "is healthy",
    "seems healthy",
    "no disease",
    "no visible disease",
    "no signs of disease",
    "no symptoms",
    "no visible symptoms",
    "healthy condition",
)

DISEASE_KEYWORDS: tuple[str, ...] = (
    "anthracnose",
    "rot",
    "blight",
    "spot disease",
    "mildew",
    "infected",
    "diseased",
    "unhealthy",
    "damaged",
    "fungal growth",
    "bacterial infection",
    "pathogen",
    "signs of disease",
    "disease symptoms",
    "infection",
)

# Searched in order; the first match names the disease.
DISEASE_CATALOG: tuple[tuple[str, str], ...] = (
    ("anthracnose", "Anthracnose"),
    ("fruit rot", "Fruit Rot"),
    ("bacterial soft rot", "Bacterial Soft Rot"),
    ("leaf spot", "Leaf Spot"),
    ("powdery mildew", "Powdery Mildew"),
    ("downy mildew", "Downy Mildew"),
    ("bacterial leaf blight", "Bacterial Leaf Blight"),
    ("cercospora", "Cercospora"),
    ("phyllosticta", "Phyllosticta"),
    ("septoria", "Septoria"),
    ("oidium", "Oidium"),
    ("scale insects", "Scale Insects"),
    ("mealybugs", "Mealybugs"),
    ("spider mites", "Spider Mites"),
    ("thrips", "Thrips"),
)

CONFIDENCE_QUALIFIERS: tuple[tuple[tuple[str, ...], float], ...] = (
    (("clearly", "definitely", "obvious"), 0.9),
    (("likely", "appears", "seems"), 0.7),
    (("possibly", "might", "could"), 0.5),
    (("uncertain", "unclear", "difficult"), 0.3),
)
DEFAULT_CONFIDENCE = 0.6

SYMPTOM_LABELS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("black spots", ("black spot", "dark spot", "black patch")),
    ("brown patches", ("brown patch", "brown area", "browning")),
    ("yellowing", ("yellow", "chlorosis")),
    ("wilting", ("wilt", "drooping")),
    ("fungal growth", ("fungal", "mold", "mildew")),
    ("bacterial infection", ("bacterial", "soft rot", "oozing")),
    ("powdery coating", ("powdery", "white coating")),
    ("webbing", ("webbing", "spider web")),
    ("sticky residue", ("sticky", "honeydew")),
    ("small insects", ("insects", "bugs", "pests")),
    ("necrotic areas", ("necrotic", "dead tissue")),
    ("distorted growth", ("distorted", "deformed")),
)
GENERAL_SYMPTOM = "General disease symptoms observed"

RECOMMENDATION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("fungicide",), "Apply appropriate fungicide treatment"),
    (("remove",), "Remove affected parts to prevent spread"),
    (("spray",), "Apply recommended spray treatment"),
    (("drainage",), "Improve drainage around the plant"),
    (("ventilation",), "Ensure proper air circulation"),
    (("pruning",), "Prune affected leaves to improve air circulation"),
    (("fertilizer", "nutrient"), "Apply appropriate fertilizer to address nutrient deficiencies"),
    (("watering",), "Adjust watering practices to prevent waterlogging"),
)
DEFAULT_RECOMMENDATIONS: tuple[str, ...] = (
    "Monitor plant health regularly",
    "Maintain proper growing conditions",
    "Consult with agricultural extension services if symptoms persist",
)
FOLIAGE_RECOMMENDATIONS: tuple[str, ...] = (
    "Ensure proper spacing between plants for air circulation",
    "Water at the base of the plant to keep foliage dry",
    "Apply mulch to maintain soil moisture and temperature",
)

SEVERITY_QUALIFIERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("severe", "extensive", "widespread"), "high"),
    (("moderate", "noticeable", "significant"), "medium"),
    (("mild", "slight", "minor"), "low"),
    (("healthy", "no disease", "normal"), "none"),
)
DEFAULT_SEVERITY = "medium"


@lru_cache(maxsize=256)
def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(term))


def mentions(text: str, term: str) -> bool:
    """True when term occurs in text starting at a word boundary (case-insensitive)."""
    return _term_pattern(term.lower()).search(text.lower()) is not None


def mentions_any(text: str, terms: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(_term_pattern(term).search(lowered) for term in terms)


def detect_disease(text: str) -> bool:
    if mentions_any(text, HEALTHY_PHRASES):
        return False
    return mentions_any(text, DISEASE_KEYWORDS)


def extract_disease_name(text: str) -> str | None:
    for pattern, display_name in DISEASE_CATALOG:
        if mentions(text, pattern):
            return display_name
    return None


def estimate_confidence(text: str) -> float:
    for qualifiers, value in CONFIDENCE_QUALIFIERS:
        if mentions_any(text, qualifiers):
            return value
    return DEFAULT_CONFIDENCE


def extract_symptoms(text: str, disease_detected: bool) -> list[str]:
    symptoms = [label for label, keywords in SYMPTOM_LABELS if mentions_any(text, keywords)]
    if not symptoms and disease_detected:
        symptoms.append(GENERAL_SYMPTOM)
    return symptoms


def extract_recommendations(text: str) -> list[str]:
    recommendations = [
        advice for keywords, advice in RECOMMENDATION_RULES if mentions_any(text, keywords)
    ]
    if not recommendations:
        recommendations.extend(DEFAULT_RECOMMENDATIONS)
    if mentions_any(text, ("leaf", "foliage")):
        recommendations.extend(FOLIAGE_RECOMMENDATIONS)
    return recommendations


def determine_severity(text: str) -> str:
    for qualifiers, severity in SEVERITY_QUALIFIERS:
        if mentions_any(text, qualifiers):
            return severity
    return DEFAULT_SEVERITY


def interpret_prose(text: str, category: ItemCategory) -> ParsedFindings:
    """Build findings from free text; never raises."""
    disease_detected = detect_disease(text)
    return ParsedFindings(
        source="heuristic",
        disease_detected=disease_detected,
        disease_name=extract_disease_name(text),
        confidence=estimate_confidence(text),
        symptoms=extract_symptoms(text, disease_detected),
        recommendations=extract_recommendations(text),
        severity=determine_severity(text),
        affected_part=category,
    )
