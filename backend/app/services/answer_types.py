# SPDX-License-Identifier: Apache-2.0
"""Answer types and their canonical text encoding.

Values arrive as JSON scalars or lists; storage keeps one text column, so each
type validates its input and renders a canonical string.
"""
from __future__ import annotations

import json
import math
from enum import Enum

from app.core.exceptions import ValidationError


class AnswerType(str, Enum):
    TEXT = "text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    NUMERIC = "numeric"


def _scalar_text(value) -> str:
    if isinstance(value, (list, dict)):
        raise ValidationError("Expected a single value, got a list")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _numeric(value) -> str:
    if isinstance(value, bool) or isinstance(value, (list, dict)):
        raise ValidationError("Numeric answer required")
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ValidationError(f"Not a number: {value!r}")
    if not math.isfinite(number):
        raise ValidationError("Numeric answer must be finite")
    return str(int(number)) if number.is_integer() else repr(number)


def _multi(value, options: list[str]) -> str:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            value = [value] if value else []
    if not isinstance(value, list):
        raise ValidationError("Multiple-choice answer must be a list")
    choices = [_scalar_text(v) for v in value]
    if options:
        unknown = [c for c in choices if c not in options]
        if unknown:
            raise ValidationError(f"Unknown option(s): {', '.join(unknown)}")
    return json.dumps(choices)


def canonical_answer(question, value) -> str:
    """Validate `value` against the question's answer type and return its stored text.

    An empty string is stored as-is for every type: it records "answered with
    nothing", which differs from having no answer row at all.
    """
    if value is None:
        raise ValidationError("answer_value is required")
    if value == "":
        return ""
    try:
        answer_type = AnswerType(question.answer_type)
    except ValueError:
        answer_type = AnswerType.TEXT
    options = question.option_list()
    if answer_type is AnswerType.NUMERIC:
        return _numeric(value)
    if answer_type is AnswerType.MULTI_CHOICE:
        return _multi(value, options)
    text = _scalar_text(value)
    if answer_type is AnswerType.SINGLE_CHOICE and options and text not in options:
        raise ValidationError(f"Unknown option: {text}")
    return text
