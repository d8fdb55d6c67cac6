"""Settings Repository Interface

Defines the contract for configuration values kept in the store.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from src.domain.profile import CompanyProfile, CustomerProfile


class SettingsRepository(ABC):
    """Repository interface for store-held settings and profiles"""

    @property
    @abstractmethod
    def exchange_rate_path(self) -> str:
        """Store path of the foreign exchange rate"""
        pass

    @abstractmethod
    async def get_exchange_rate(self) -> Optional[Decimal]:
        """
        Read the local-currency units per one foreign-currency unit

        Returns:
            Positive rate, or None if not configured
        """
        pass

    @abstractmethod
    async def get_company_profile(self) -> CompanyProfile:
        """Issuing company header, falling back to configured defaults"""
        pass

    @abstractmethod
    async def get_customer_profile(self, customer_id: str) -> Optional[CustomerProfile]:
        """
        Recipient details for a customer

        Returns:
            CustomerProfile if stored, None otherwise
        """
        pass
