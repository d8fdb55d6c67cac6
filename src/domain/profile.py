"""Company and customer profiles used on rendered invoices"""

from pydantic import AliasChoices, Field
from src.domain.base import BaseModel


class CompanyProfile(BaseModel):
    """Issuing company header (stored at the `company` path)"""
    name: str
    address_line: str = ""
    phone: str = ""
    logo_url: str = ""


class CustomerProfile(BaseModel):
    """Recipient block (stored at `customers/{id}`)"""
    to_name: str = Field(validation_alias=AliasChoices("toName", "to_name", "name"))
    to_city: str = Field(
        default="Unknown City",
        validation_alias=AliasChoices("toCity", "to_city", "city"),
    )
