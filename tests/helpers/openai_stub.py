"""Stub for the OpenAI client used by OpenAIClassifier.

Records every ``responses.create`` call and answers with a fixed text, or
raises the given exception, so tests never touch the network.
"""
from typing import Any, Dict, List, Optional


class _Response:
    def __init__(self, output_text: Optional[str]):
        self.output_text = output_text


class OpenAIStub:
    """
    Minimal stand-in matching the ``openai.OpenAI`` shape the classifier uses.

    Args:
        output_text: Text returned by every call
        error: Exception raised by every call instead of answering
    """

    def __init__(self, output_text: Optional[str] = None, error: Optional[Exception] = None):
        self.calls: List[Dict[str, Any]] = []
        self._output_text = output_text
        self._error = error

        class _Responses:
            def __init__(self, outer: "OpenAIStub"):
                self._outer = outer

            def create(self, **kwargs):
                self._outer.calls.append(kwargs)
                if self._outer._error is not None:
                    raise self._outer._error
                return _Response(self._outer._output_text)

        self.responses = _Responses(self)
