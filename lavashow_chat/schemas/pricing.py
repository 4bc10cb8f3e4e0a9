"""
Pydantic schemas for ticket price breakdowns.

A breakdown is computed fresh for each pricing question and returned inside
the chat response. It is never cached on its own.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class PricingCategory(BaseModel):
    """Subtotal for one visitor category (adults, children, ...)."""
    count: int = Field(..., ge=0)
    price_per_person: int = Field(..., ge=0, examples=[6590])
    total: int = Field(..., ge=0, examples=[13180])


class GroupDiscount(BaseModel):
    percentage: int = Field(..., examples=[10])
    amount: int = Field(..., ge=0, description="Discount in ISK")


class PricingBreakdown(BaseModel):
    """
    Per-person breakdown.

    Categories whose count is zero are omitted (None). The Premium package
    never carries a children category.
    """
    package: Literal["classic", "premium"] = Field(..., examples=["classic", "premium"])
    adults: Optional[PricingCategory] = None
    children: Optional[PricingCategory] = None
    students: Optional[PricingCategory] = None
    seniors: Optional[PricingCategory] = None
    group_discount: Optional[GroupDiscount] = None
    total_price: int = Field(..., ge=0)
    currency: Literal["ISK"] = "ISK"


class FamilyPackageBreakdown(BaseModel):
    """Flat-rate family bundle, no per-category fields."""
    package: Literal["Family Package"] = "Family Package"
    base_price: int = Field(..., ge=0)
    total_price: int = Field(..., ge=0)
    details: str
    currency: Literal["ISK"] = "ISK"


PricingResult = Union[PricingBreakdown, FamilyPackageBreakdown]
