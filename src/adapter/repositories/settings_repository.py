"""Document Store Settings Repository Implementation"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from pydantic import ValidationError
from src.app.repositories.settings_repository import SettingsRepository
from src.app.services.document_store import DocumentStore, join_path
from src.domain.profile import CompanyProfile, CustomerProfile

logger = logging.getLogger(__name__)


class DocumentSettingsRepository(SettingsRepository):
    """DocumentStore implementation of SettingsRepository"""

    def __init__(
        self,
        store: DocumentStore,
        exchange_rate_path: str,
        default_company: CompanyProfile,
        company_path: str = "company",
        customers_path: str = "customers",
    ):
        self.store = store
        self._exchange_rate_path = exchange_rate_path
        self.default_company = default_company
        self.company_path = company_path
        self.customers_path = customers_path

    @property
    def exchange_rate_path(self) -> str:
        return self._exchange_rate_path

    async def get_exchange_rate(self) -> Optional[Decimal]:
        value = await self.store.get(self._exchange_rate_path)
        if value is None:
            return None
        try:
            rate = Decimal(str(value))
        except InvalidOperation:
            logger.warning(f"Ignoring non-numeric exchange rate at {self._exchange_rate_path}: {value!r}")
            return None
        if rate <= 0:
            logger.warning(f"Ignoring non-positive exchange rate at {self._exchange_rate_path}: {rate}")
            return None
        return rate

    async def get_company_profile(self) -> CompanyProfile:
        document = await self.store.get(self.company_path)
        if not isinstance(document, dict):
            return self.default_company
        try:
            return CompanyProfile.from_document(document)
        except ValidationError:
            logger.warning(f"Malformed company profile at {self.company_path}, using defaults")
            return self.default_company

    async def get_customer_profile(self, customer_id: str) -> Optional[CustomerProfile]:
        document = await self.store.get(join_path(self.customers_path, customer_id))
        if not isinstance(document, dict):
            return None
        try:
            return CustomerProfile.from_document(document)
        except ValidationError:
            logger.warning(f"Malformed customer profile for {customer_id}")
            return None
