"""Request schemas for Invoice API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from src.app.use_cases.invoicing.dtos import OrderSelection


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for consolidating orders into an invoice

    Used for POST /invoices/from-orders and POST /invoices/preview.
    selection=ready_orders bills confirmed/ready orders that are not yet
    invoiced; selection=filtered bills sales orders matching the status
    and date range.
    """

    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer identifier (required, non-empty)"
    )

    customer_name: str = Field(
        default="",
        description="Customer display name printed on the invoice"
    )

    selection: OrderSelection = Field(
        default=OrderSelection.READY_ORDERS,
        description="ready_orders or filtered"
    )

    status: Optional[str] = Field(
        default="all",
        description="Order status to match when selection=filtered ('all' matches any)"
    )

    start_date: Optional[date] = Field(
        default=None,
        description="Inclusive range start (selection=filtered)"
    )

    end_date: Optional[date] = Field(
        default=None,
        description="Inclusive range end (selection=filtered)"
    )

    issue_date: Optional[date] = Field(
        default=None,
        description="Invoice date (defaults to today)"
    )

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cust_cotton_feel",
                "customer_name": "Cotton Feel",
                "selection": "filtered",
                "status": "all",
                "start_date": "2024-11-01",
                "end_date": "2024-11-30"
            }
        }


class UpdateInvoiceStatusRequestSchema(BaseModel):
    """Request schema for PATCH /invoices/{number}/status"""

    status: str = Field(
        ...,
        min_length=1,
        description="New payment status: pending or paid"
    )

    class Config:
        json_schema_extra = {
            "example": {"status": "paid"}
        }
