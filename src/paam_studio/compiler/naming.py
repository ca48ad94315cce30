"""Identifier helpers shared by the compilers.

Generated paths and identifiers are pure functions of PAAM names and ids,
so two entities whose names differ only in case map to the same path.
"""

import re

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _words(text: str) -> list[str]:
    words = []
    for chunk in _WORD_SPLIT.split(text):
        words.extend(w for w in _CAMEL_BOUNDARY.split(chunk) if w)
    return words


def _safe(identifier: str) -> str:
    if not identifier:
        return "_"
    return f"_{identifier}" if identifier[0].isdigit() else identifier


def pascal_case(text: str) -> str:
    """'todo list' / 'todo_list' / 'todoList' -> 'TodoList'."""
    return _safe("".join(w[0].upper() + (w[1:].lower() if w.isupper() else w[1:]) for w in _words(text)))


def camel_case(text: str) -> str:
    """'Due Date' / 'due_date' / 'dueDate' -> 'dueDate'; 'ID' -> 'id'."""
    pascal = pascal_case(text)
    if pascal.startswith("_"):
        return pascal
    return pascal[0].lower() + pascal[1:]


def snake_case(text: str) -> str:
    """'dueDate' / 'Due Date' -> 'due_date'."""
    return _safe("_".join(w.lower() for w in _words(text)))


def kebab_case(text: str) -> str:
    return "-".join(w.lower() for w in _words(text))
