# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import BadRequestError, ValidationError

# Pydantic error types that mean the body did not have the expected shape,
# as opposed to a field that is present but fails a domain rule.
_STRUCTURAL_TYPES = frozenset({"missing", "model_type", "model_attributes_type", "dict_type"})


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    errors_list = []
    fields_set = set()

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)

        if field_path:
            fields_set.add(field_path)

        error_entry = {
            "field": field_path or "unknown",
            "type": error.get("type", "value_error"),
            "message": error.get("msg", ""),
        }

        if "ctx" in error:
            error_entry["ctx"] = {key: str(value) for key, value in error["ctx"].items()}

        errors_list.append(error_entry)

    return {
        "fields": sorted(fields_set),
        "errors": errors_list,
    }


def is_structural(exc: PydanticValidationError) -> bool:
    return any(error.get("type") in _STRUCTURAL_TYPES for error in exc.errors())


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    context = format_pydantic_errors(exc)
    if is_structural(exc):
        raise BadRequestError(context=context) from exc
    raise ValidationError(context=context) from exc


__all__ = [
    "format_pydantic_errors",
    "is_structural",
    "raise_validation_error",
]
