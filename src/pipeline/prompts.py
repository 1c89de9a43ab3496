# src/pipeline/prompts.py — v1
"""Prompt templates for each gateway call the pipeline makes.

Each prompt asks for a single JSON object whose keys match the reply schemas
in interpretation.schemas; the interpreter copes with replies that ignore it.
"""

from __future__ import annotations

from lansonesscan.core.models import ItemCategory

DETECTION_PROMPT = """\
You are an expert botanist specializing in lansones (Lansium domesticum).
Analyze the provided image and determine if it contains lansones fruit or leaves.

Lansones characteristics:
- Fruit: Small, round, yellow-brown tropical fruits that grow in clusters
- Leaves: Compound pinnate leaves with 5-7 leaflets (this is a key identifying feature)

IMPORTANT: Respond ONLY with a valid JSON object in this exact format, no other text:
{
    "isLansones": boolean,
    "itemType": "lansones_fruit|lansones_leaves|other",
    "confidence": float,
    "description": "string"
}

Key identification points:
- A compound leaf with 5-7 leaflets is lansones leaves
- Small, round, yellow-brown fruits in clusters are lansones fruit
- If you are unsure or the image does not match these characteristics, use "other"

Be conservative: only classify as lansones if you are confident."""

FRUIT_ANALYSIS_PROMPT = """\
Expert agricultural pathologist specializing in lansones fruit diseases.
Analyze the provided image of lansones fruit for diseases, ripeness, and defects.

IMPORTANT: Respond ONLY with a valid JSON object in this exact format, no other text:
{
    "diseaseDetected": boolean,
    "diseaseName": "string",
    "confidenceLevel": float,
    "symptoms": ["string"],
    "recommendations": ["string"],
    "severity": "low|medium|high|none",
    "ripenessLevel": "unripe|ripe|overripe|unknown"
}

Rules:
1. If diseaseDetected is true, diseaseName MUST be a non-empty string.
2. If diseaseDetected is false, diseaseName should be null.
3. Use specific disease names when possible: Anthracnose, Fruit Rot, Bacterial Soft Rot, Blight.
4. If a disease is present but cannot be named, use "Unidentified Disease".
5. confidenceLevel must be between 0.0 and 1.0.

Focus on lansones-specific diseases like anthracnose, fruit rot and bacterial soft rot.
Write recommendations as formal, complete sentences.
If no disease is detected, give handling and storage recommendations."""

LEAF_ANALYSIS_PROMPT = """\
Expert agricultural pathologist specializing in lansones leaf diseases.
Analyze the provided image of lansones leaves for diseases, pests, and nutrient deficiencies.
Lansones have compound pinnate leaves with 5-7 leaflets.

IMPORTANT: Respond ONLY with a valid JSON object in this exact format, no other text:
{
    "diseaseDetected": boolean,
    "diseaseName": "string",
    "confidenceLevel": float,
    "symptoms": ["string"],
    "recommendations": ["string"],
    "severity": "low|medium|high|none",
    "leafHealthStatus": "healthy|stressed|diseased|severely_damaged"
}

Rules:
1. If diseaseDetected is true, diseaseName MUST be a non-empty string.
2. If diseaseDetected is false, diseaseName should be null.
3. Use specific names: Cercospora Leaf Spot, Anthracnose, Scale Insects, Chlorosis.
4. If a disease is present but cannot be named, use "Unidentified Disease".
5. confidenceLevel must be between 0.0 and 1.0.

Lansones-specific issues:
- Cercospora Leaf Spot: brown spots with yellow halos
- Anthracnose: dark, sunken lesions on leaves
- Scale insects: small, brown, immobile insects on leaf surfaces
- Nutrient deficiencies: yellowing (chlorosis), stunted growth
- Environmental stress: wilting, browning edges

Write recommendations as formal, complete sentences.
If no disease is detected, give preventive care recommendations."""

VARIETY_PROMPT = """\
Expert in lansones varieties and botany.
Analyze the provided image to identify the lansones variety.

IMPORTANT: Respond ONLY with a valid JSON object in this exact format, no other text:
{
    "variety": "longkong|duku|paete|jolo|unknown",
    "confidenceLevel": float,
    "characteristics": ["string"],
    "description": "string"
}

Focus on distinguishing characteristics like fruit size, shape, skin texture, and color.
Known varieties: Longkong, Duku, Paete, Jolo.
If unsure, respond with "unknown" for the variety."""

NEUTRAL_PROMPT = """\
Analyze the image and provide factual, objective observations.

IMPORTANT: Respond ONLY with a valid JSON object in this exact format, no other text:
{
    "observations": ["string"],
    "measurements": ["string"],
    "characteristics": ["string"]
}

Do not include subjective judgments, health assessments, or recommendations."""

_ANALYSIS_PROMPTS: dict[ItemCategory, str] = {
    "fruit": FRUIT_ANALYSIS_PROMPT,
    "leaf": LEAF_ANALYSIS_PROMPT,
    "unrelated": NEUTRAL_PROMPT,
}


def analysis_prompt(category: ItemCategory) -> str:
    """Prompt for the second-stage call of a detected category."""
    return _ANALYSIS_PROMPTS[category]
