"""
Module: catalog.loader

Purpose:
    Read-only question/assessment lookup used when an attempt is set up.
    Bad catalog data never crashes setup: unknown ids and unusable
    questions are skipped with a warning, and the caller decides what to
    do when nothing usable remains.

Key Classes:
    - QuestionCatalog: id -> Question / Assessment lookup

Key Functions:
    - load_catalog: Build a catalog from a JSON file
    - resolve_questions: Ordered, usable questions for an assessment
    - placeholder_question: Fallback question when none resolve

Dependencies:
    - json (std)
    - core.models

Used By:
    - session.registry.AttemptRegistry
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from exam_engine.core.models import Assessment, Difficulty, Question, QuestionType

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "This is a placeholder question. The actual questions could not be loaded."


class QuestionCatalog:
    """
    In-memory catalog of questions and assessments.

    Example:
        >>> catalog = QuestionCatalog([q1, q2], [assessment])
        >>> catalog.question("q1") is q1
        True
    """

    def __init__(
        self,
        questions: Iterable[Question] = (),
        assessments: Iterable[Assessment] = (),
    ):
        self._questions: Dict[str, Question] = {q.id: q for q in questions}
        self._assessments: Dict[str, Assessment] = {a.id: a for a in assessments}

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._questions

    def question(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def assessment(self, assessment_id: str) -> Optional[Assessment]:
        return self._assessments.get(assessment_id)

    @property
    def assessments(self) -> List[Assessment]:
        return list(self._assessments.values())


def load_catalog(path: Path) -> QuestionCatalog:
    """
    Load a catalog from JSON.

    Expected shape: {"questions": [...], "assessments": [...]}. Entries
    that fail to parse are skipped with a warning.

    Args:
        path: Catalog JSON file

    Returns:
        QuestionCatalog with every valid entry

    Raises:
        FileNotFoundError: If path does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))

    questions = []
    for index, raw in enumerate(data.get("questions", [])):
        try:
            questions.append(Question.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping question #{index} in {Path(path).name}: {e}")

    assessments = []
    for index, raw in enumerate(data.get("assessments", [])):
        try:
            assessments.append(Assessment.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping assessment #{index} in {Path(path).name}: {e}")

    logger.info(f"Loaded {len(questions)} questions and {len(assessments)} assessments")
    return QuestionCatalog(questions, assessments)


def resolve_questions(assessment: Assessment, catalog: QuestionCatalog) -> List[Question]:
    """
    Resolve an assessment's question ids to usable questions, in order.

    Missing ids and questions with data-quality issues (blank text, a
    choice question without options) are skipped and logged.

    Returns:
        Possibly empty list of questions
    """
    resolved = []
    for question_id in assessment.question_ids:
        question = catalog.question(question_id)
        if question is None:
            logger.warning(f"Question {question_id} not found for assessment {assessment.id}")
            continue
        issues = question.data_quality_issues
        if issues:
            logger.warning(f"Skipping question {question_id}: {'; '.join(issues)}")
            continue
        resolved.append(question)

    if not resolved:
        logger.warning(f"No usable questions resolved for assessment {assessment.id}")
    else:
        logger.info(
            f"Resolved {len(resolved)}/{len(assessment.question_ids)} questions "
            f"for assessment {assessment.id}"
        )
    return resolved


def placeholder_question(unit_code: str = "") -> Question:
    """Single multiple-choice question used when nothing else resolves."""
    return Question(
        id=str(uuid.uuid4()),
        text=PLACEHOLDER_TEXT,
        type=QuestionType.MULTIPLE_CHOICE,
        marks=1,
        options=("Option A", "Option B", "Option C"),
        correct_answers=frozenset({"Option A"}),
        difficulty=Difficulty.MEDIUM,
        topic="General",
        unit_code=unit_code,
    )
