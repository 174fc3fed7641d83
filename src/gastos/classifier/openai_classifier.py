import base64
import json
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from openai import OpenAI

from gastos.categorization.rules import match_category
from gastos.classifier import prompting
from gastos.classifier.base import ExpenseClassifier, ExtractedExpense, ExtractionError
from gastos.domain.enums import Bank, Currency
from gastos.categorization.categories import DEFAULT_CATEGORY
from gastos.domain.models import parse_amount
from gastos.logging_setup import get_logger

_logger = get_logger("gastos.classifier.openai")

EXTRACTION_INSTRUCTIONS = (
    "Eres un asistente que extrae gastos de estados de cuenta bancarios. "
    "Responde solo con JSON que cumpla el esquema indicado."
)


def _response_text(resp: Any) -> Optional[str]:
    """Text output of a Responses API result, or None if there is none"""
    text = getattr(resp, "output_text", None)
    if isinstance(text, str):
        return text
    return None


class OpenAIClassifier(ExpenseClassifier):
    """
    Expense classifier backed by the OpenAI Responses API.

    Uses a light model for single names and a stronger one for reading
    statement documents. The API key comes from OPENAI_API_KEY unless a
    client factory is injected.
    """

    def __init__(
        self,
        categorize_model: str = "gpt-5-mini",
        extract_model: str = "gpt-5",
        client_factory: Callable[[], Any] = OpenAI,
        default_category: str = DEFAULT_CATEGORY,
    ):
        self.categorize_model = categorize_model
        self.extract_model = extract_model
        self._client_factory = client_factory
        self.default_category = default_category
        self._client: Optional[Any] = None

    @property
    def client(self) -> Any:
        """Lazy-create the API client on first use"""
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def classify_name(
        self,
        name: str,
        valid_categories: Sequence[str],
        corrections: Mapping[str, str],
    ) -> Optional[str]:
        prompt = prompting.build_name_prompt(name, valid_categories, corrections)

        _logger.debug("classify_name model=%s name=%r", self.categorize_model, name)
        resp = self.client.responses.create(model=self.categorize_model, input=prompt)

        text = _response_text(resp)
        return text.strip() if text else None

    def extract_from_document(
        self,
        file_bytes: bytes,
        mime_type: str,
        bank: Bank,
        period_month: str,
        period_year: str,
        valid_categories: Sequence[str],
        corrections: Mapping[str, str],
    ) -> List[ExtractedExpense]:
        prompt = prompting.build_extraction_prompt(
            bank, period_month, period_year, valid_categories, corrections
        )

        _logger.info(
            "extract_from_document model=%s bank=%s period=%s/%s bytes=%d",
            self.extract_model,
            bank.value,
            period_month,
            period_year,
            len(file_bytes),
        )

        try:
            resp = self.client.responses.create(
                model=self.extract_model,
                instructions=EXTRACTION_INSTRUCTIONS,
                input=[
                    {
                        "role": "user",
                        "content": [
                            self._document_part(file_bytes, mime_type),
                            {"type": "input_text", "text": prompt},
                        ],
                    }
                ],
                text=prompting.build_extraction_format(valid_categories),
            )
        except Exception as e:
            _logger.error("extract_from_document failed error=%s", e.__class__.__name__)
            raise ExtractionError(f"Statement extraction failed: {e}") from e

        return self._parse_extraction(_response_text(resp), valid_categories)

    @staticmethod
    def _document_part(file_bytes: bytes, mime_type: str) -> Dict[str, Any]:
        """Inline content part for the document, as a base64 data URL"""
        data_url = f"data:{mime_type};base64,{base64.b64encode(file_bytes).decode('ascii')}"

        if mime_type.startswith("image/"):
            return {"type": "input_image", "image_url": data_url}

        return {"type": "input_file", "filename": "estado_de_cuenta.pdf", "file_data": data_url}

    def _parse_extraction(
        self,
        text: Optional[str],
        valid_categories: Sequence[str],
    ) -> List[ExtractedExpense]:
        """
        Turn the model's JSON answer into partial expenses.

        Raises:
            ExtractionError: If the answer is missing or doesn't follow the schema
        """
        if not text:
            raise ExtractionError("Statement extraction returned no content")

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError("Statement extraction returned invalid JSON") from e

        items = payload.get("expenses") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise ExtractionError("Statement extraction returned an unexpected shape")

        extracted = []
        for item in items:
            if not isinstance(item, dict):
                raise ExtractionError(f"Invalid expense in extraction result: {item!r}")

            name = item.get("name")
            if not isinstance(name, str) or not name.strip():
                raise ExtractionError(f"Extracted expense has no name: {item!r}")

            try:
                expense_date = date.fromisoformat(item["date"]) if item.get("date") else None
                extracted.append(
                    ExtractedExpense(
                        name=name.strip(),
                        amount=parse_amount(item["amount"]),
                        currency=Currency(str(item["currency"]).upper()),
                        category=match_category(item.get("category"), valid_categories) or self.default_category,
                        date=expense_date,
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ExtractionError(f"Invalid expense in extraction result: {item!r}") from e

        return extracted
