"""Schema Inference Service Interface

Turns canonical comma-separated text of an arbitrary spreadsheet into
item rows with a fixed schema.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.tabular_import import TabularImportRow


class SchemaInferenceError(Exception):
    """Classification failed (bad response, gateway error)"""


class RateLimitedError(SchemaInferenceError):
    """The classification service is rate limiting this caller"""


class PaymentRequiredError(SchemaInferenceError):
    """The classification service requires payment / credits"""


class SchemaInferenceService(ABC):
    """
    Abstract schema-inference collaborator

    Implementations infer which columns hold the style number,
    description, quantity and unit price by example.
    """

    @abstractmethod
    async def classify(self, content: str, file_name: str) -> List[TabularImportRow]:
        """
        Extract item rows from canonical tabular text

        Args:
            content: Comma-separated text produced by the normalizer
            file_name: Original upload name, for logging

        Returns:
            Parsed rows (possibly empty)

        Raises:
            RateLimitedError, PaymentRequiredError, SchemaInferenceError
        """
        pass
