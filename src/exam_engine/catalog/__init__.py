"""Read-only question and assessment catalog."""

from .loader import QuestionCatalog, load_catalog, placeholder_question, resolve_questions

__all__ = ["QuestionCatalog", "load_catalog", "placeholder_question", "resolve_questions"]
