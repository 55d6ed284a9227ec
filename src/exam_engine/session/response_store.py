"""
Module: session.response_store

Purpose:
    question id -> StudentResponse map for the active attempt. Not
    thread-safe on its own; AttemptSession serialises access.

Key Classes:
    - ResponseStore

Used By:
    - session.attempt_session.AttemptSession
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from exam_engine.core.models import StudentResponse


class ResponseStore:
    """
    Upsert-only response map.

    Backed by the attempt's own responses dict, so the attempt always
    reflects what the store holds. Overwriting an answer keeps the
    response identity, giving exactly one response per (attempt, question).
    """

    def __init__(self, attempt_id: str, responses: Optional[Dict[str, StudentResponse]] = None):
        self.attempt_id = attempt_id
        self._responses = responses if responses is not None else {}

    def upsert(self, question_id: str, text: str) -> StudentResponse:
        """Record text for a question, replacing any earlier answer."""
        response = self._responses.get(question_id)
        if response is None:
            response = StudentResponse.new(self.attempt_id, question_id, text)
            self._responses[question_id] = response
        else:
            response.text = text
            response.marks_awarded = 0
            response.is_correct = None
        return response

    def get(self, question_id: str) -> Optional[StudentResponse]:
        return self._responses.get(question_id)

    def answered_ids(self) -> frozenset[str]:
        return frozenset(self._responses)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._responses

    def __len__(self) -> int:
        return len(self._responses)

    def __iter__(self) -> Iterator[StudentResponse]:
        return iter(list(self._responses.values()))
