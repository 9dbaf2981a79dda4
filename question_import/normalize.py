"""
Normalizers
===========
Pure, total helpers used wherever question text is compared or labelled.

    normalize_text        lower-case, strip punctuation, collapse whitespace
    normalize_category    free-form label -> Category
    normalize_difficulty  free-form label -> Difficulty
    detect_question_type  stem/answers -> QuestionType
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .models import Category, Difficulty, QuestionType

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_LETTERS = re.compile(r"[^a-z]")


def normalize_text(text: str) -> str:
    """Normalize question text for duplicate comparison."""
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


# ─── Category ─────────────────────────────────────────────────────────────────

DEFAULT_CATEGORY = Category.MANAGEMENT_OF_CARE

# Keys are lower-cased labels with every non-letter removed
CATEGORY_SYNONYMS: dict[str, Category] = {
    # Management of Care
    "managementofcare": Category.MANAGEMENT_OF_CARE,
    "management": Category.MANAGEMENT_OF_CARE,
    "caremanagement": Category.MANAGEMENT_OF_CARE,
    "casemanagement": Category.MANAGEMENT_OF_CARE,
    "delegation": Category.MANAGEMENT_OF_CARE,
    "advocacy": Category.MANAGEMENT_OF_CARE,
    "ethics": Category.MANAGEMENT_OF_CARE,
    "legal": Category.MANAGEMENT_OF_CARE,
    "safeeffectivecare": Category.MANAGEMENT_OF_CARE,

    # Safety and Infection Control
    "safetyinfectioncontrol": Category.SAFETY_INFECTION_CONTROL,
    "safetyandinfectioncontrol": Category.SAFETY_INFECTION_CONTROL,
    "safety": Category.SAFETY_INFECTION_CONTROL,
    "infectioncontrol": Category.SAFETY_INFECTION_CONTROL,
    "standardprecautions": Category.SAFETY_INFECTION_CONTROL,
    "emergencyresponse": Category.SAFETY_INFECTION_CONTROL,

    # Health Promotion and Maintenance
    "healthpromotion": Category.HEALTH_PROMOTION,
    "healthpromotionmaintenance": Category.HEALTH_PROMOTION,
    "healthpromotionandmaintenance": Category.HEALTH_PROMOTION,
    "wellness": Category.HEALTH_PROMOTION,
    "prevention": Category.HEALTH_PROMOTION,
    "screening": Category.HEALTH_PROMOTION,
    "immunizations": Category.HEALTH_PROMOTION,
    "pediatrics": Category.HEALTH_PROMOTION,
    "maternal": Category.HEALTH_PROMOTION,
    "newborn": Category.HEALTH_PROMOTION,

    # Psychosocial Integrity
    "psychosocial": Category.PSYCHOSOCIAL_INTEGRITY,
    "psychosocialintegrity": Category.PSYCHOSOCIAL_INTEGRITY,
    "mentalhealth": Category.PSYCHOSOCIAL_INTEGRITY,
    "psychiatricnursing": Category.PSYCHOSOCIAL_INTEGRITY,
    "coping": Category.PSYCHOSOCIAL_INTEGRITY,
    "grief": Category.PSYCHOSOCIAL_INTEGRITY,
    "therapeutic": Category.PSYCHOSOCIAL_INTEGRITY,
    "communication": Category.PSYCHOSOCIAL_INTEGRITY,
    "endoflife": Category.PSYCHOSOCIAL_INTEGRITY,

    # Basic Care and Comfort
    "basiccarecomfort": Category.BASIC_CARE_COMFORT,
    "basiccareandcomfort": Category.BASIC_CARE_COMFORT,
    "basiccare": Category.BASIC_CARE_COMFORT,
    "comfort": Category.BASIC_CARE_COMFORT,
    "nutrition": Category.BASIC_CARE_COMFORT,
    "elimination": Category.BASIC_CARE_COMFORT,
    "mobility": Category.BASIC_CARE_COMFORT,
    "hygiene": Category.BASIC_CARE_COMFORT,
    "sleep": Category.BASIC_CARE_COMFORT,
    "fundamentals": Category.BASIC_CARE_COMFORT,
    "physiologicalbasic": Category.BASIC_CARE_COMFORT,

    # Pharmacological and Parenteral Therapies
    "pharmacological": Category.PHARMACOLOGICAL_THERAPIES,
    "pharmacologicaltherapies": Category.PHARMACOLOGICAL_THERAPIES,
    "pharmacologicalandparenteraltherapies": Category.PHARMACOLOGICAL_THERAPIES,
    "pharmacology": Category.PHARMACOLOGICAL_THERAPIES,
    "medications": Category.PHARMACOLOGICAL_THERAPIES,
    "ivtherapy": Category.PHARMACOLOGICAL_THERAPIES,
    "bloodproducts": Category.PHARMACOLOGICAL_THERAPIES,
    "painmanagement": Category.PHARMACOLOGICAL_THERAPIES,

    # Reduction of Risk Potential
    "riskreduction": Category.RISK_REDUCTION,
    "reductionofriskpotential": Category.RISK_REDUCTION,
    "riskpotential": Category.RISK_REDUCTION,
    "diagnostictests": Category.RISK_REDUCTION,
    "labvalues": Category.RISK_REDUCTION,
    "complications": Category.RISK_REDUCTION,
    "vitalsigns": Category.RISK_REDUCTION,
    "assessment": Category.RISK_REDUCTION,

    # Physiological Adaptation
    "physiologicaladaptation": Category.PHYSIOLOGICAL_ADAPTATION,
    "adaptation": Category.PHYSIOLOGICAL_ADAPTATION,
    "medsurg": Category.PHYSIOLOGICAL_ADAPTATION,
    "medicalsurgical": Category.PHYSIOLOGICAL_ADAPTATION,
    "acutecare": Category.PHYSIOLOGICAL_ADAPTATION,
    "chroniccare": Category.PHYSIOLOGICAL_ADAPTATION,
    "emergencies": Category.PHYSIOLOGICAL_ADAPTATION,
    "fluidelectrolyte": Category.PHYSIOLOGICAL_ADAPTATION,
    "hemodynamics": Category.PHYSIOLOGICAL_ADAPTATION,
    "pathophysiology": Category.PHYSIOLOGICAL_ADAPTATION,
    "physiologicalcomplex": Category.PHYSIOLOGICAL_ADAPTATION,
}


def normalize_category(label: Optional[str]) -> Category:
    """Map a free-form category label onto a canonical Category."""
    if not label:
        return DEFAULT_CATEGORY
    key = _NON_LETTERS.sub("", label.lower())
    return CATEGORY_SYNONYMS.get(key, DEFAULT_CATEGORY)


# ─── Difficulty ───────────────────────────────────────────────────────────────

_EASY = re.compile(r"easy|low|\b1\b")
_HARD = re.compile(r"hard|high|\b3\b")


def normalize_difficulty(label: Optional[str]) -> Difficulty:
    """Map a free-form difficulty label onto easy/medium/hard."""
    if not label:
        return Difficulty.MEDIUM
    value = label.lower().strip()
    if _EASY.search(value):
        return Difficulty.EASY
    if _HARD.search(value):
        return Difficulty.HARD
    return Difficulty.MEDIUM


# ─── Question Type ────────────────────────────────────────────────────────────

# Checked in order; the first rule whose keyword appears in the stem wins
_TYPE_KEYWORDS: list[tuple[QuestionType, tuple[str, ...]]] = [
    (QuestionType.ORDERED_RESPONSE, (
        "order", "sequence", "priority", "arrange", "rank", "first action",
    )),
    (QuestionType.HOT_SPOT, (
        "click", "identify on", "point to", "locate on", "image", "diagram",
    )),
    (QuestionType.CLOZE_DROPDOWN, (
        "fill in", "blank", "complete the", "___", "dropdown",
    )),
    (QuestionType.MATRIX, (
        "matrix", "grid", "table", "for each", "indicate whether",
    )),
    (QuestionType.HIGHLIGHT, (
        "highlight", "select the text", "click on the finding",
        "select the phrase",
    )),
]

CASE_STUDY_MIN_LENGTH = 500


def detect_question_type(
    text: str,
    correct_answers: Sequence[str],
) -> QuestionType:
    """Guess the question format from the stem and answer count."""
    if len(correct_answers) > 1:
        return QuestionType.SELECT_ALL

    stem = text.lower()

    for question_type, keywords in _TYPE_KEYWORDS:
        if any(k in stem for k in keywords):
            return question_type

    if (
        "bow-tie" in stem
        or "bowtie" in stem
        or ("cause" in stem and "action" in stem)
        or ("condition" in stem and "intervention" in stem)
    ):
        return QuestionType.BOW_TIE

    if (
        "case study" in stem
        or "unfolding case" in stem
        or "scenario continues" in stem
        or len(stem) > CASE_STUDY_MIN_LENGTH
    ):
        return QuestionType.CASE_STUDY

    return QuestionType.MULTIPLE_CHOICE
