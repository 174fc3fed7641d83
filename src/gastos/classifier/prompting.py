"""Prompt construction and response schema for the expense classifier.

Prompts are in Spanish, like the category names the user works with.
"""
import json
from typing import Any, Dict, Mapping, Sequence

from gastos.domain.enums import Bank


def build_corrections_context(corrections: Mapping[str, str]) -> str:
    """
    Render learned corrections as a hint block for the model.

    Returns an empty string when there are no corrections.
    """
    if not corrections:
        return ""

    lines = [f'- "{name}" DEBE SER "{category}"' for name, category in corrections.items()]
    return (
        "\nIMPORTANTE: El usuario ha corregido previamente estas categorizaciones, "
        "respétalas si aparecen nombres similares:\n" + "\n".join(lines)
    )


def build_name_prompt(
    name: str,
    valid_categories: Sequence[str],
    corrections: Mapping[str, str],
) -> str:
    """Prompt asking for the category of a single expense name"""
    return (
        f"Categoriza {json.dumps(name, ensure_ascii=False)} en una de estas opciones: "
        f"{', '.join(valid_categories)}."
        f"{build_corrections_context(corrections)}\n"
        "Responde solo con el nombre de la categoría."
    )


def build_extraction_prompt(
    bank: Bank,
    period_month: str,
    period_year: str,
    valid_categories: Sequence[str],
    corrections: Mapping[str, str],
) -> str:
    """Prompt asking for the purchases listed in a statement document"""
    return (
        f"Analiza este estado de cuenta del banco {bank.value} ({period_month}/{period_year}).\n"
        "Extrae consumos y compras.\n"
        "IGNORA: Pagos a la tarjeta o abonos.\n"
        "Categoriza cada gasto usando EXCLUSIVAMENTE esta lista: "
        f"{', '.join(valid_categories)}."
        f"{build_corrections_context(corrections)}"
    )


def build_extraction_format(valid_categories: Sequence[str]) -> Dict[str, Any]:
    """
    Strict JSON schema text format for the Responses API.

    Strict mode needs an object at the top level and every property
    listed as required, so the optional date is nullable instead.
    """
    expense_schema = {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Nombre del establecimiento"},
            "date": {"type": ["string", "null"], "description": "Fecha YYYY-MM-DD"},
            "amount": {"type": "number", "description": "Monto"},
            "currency": {"type": "string", "enum": ["PEN", "USD"]},
            "category": {
                "type": "string",
                "description": f"Categoría. Debe ser una de estas: {', '.join(valid_categories)}",
            },
        },
        "required": ["name", "date", "amount", "currency", "category"],
        "additionalProperties": False,
    }

    return {
        "format": {
            "type": "json_schema",
            "name": "statement_expenses",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {
                    "expenses": {"type": "array", "items": expense_schema},
                },
                "required": ["expenses"],
                "additionalProperties": False,
            },
        }
    }
