"""
Customer and pricing template schemas (read-only lookup data)
"""
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class HourlyRate(_ApiModel):
    """Stundensatz template"""
    id: str
    name: str
    description: Optional[str] = None
    rate: Decimal = Field(..., ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    is_default: bool = False


class MaterialTemplate(_ApiModel):
    """Material template with unit price"""
    id: str
    name: str
    description: Optional[str] = None
    unit_price: Decimal = Field(..., ge=0)
    unit: str = ""
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    is_default: bool = False


class Customer(_ApiModel):
    """Customer with optional customer-specific templates"""
    id: str
    customer_number: str = ""
    name: str
    email: Optional[str] = None
    address: Optional[str] = None
    hourly_rates: List[HourlyRate] = []
    materials: List[MaterialTemplate] = []


class TemplateOption(BaseModel):
    """A template as listed in a selection dropdown"""
    template: Union[HourlyRate, MaterialTemplate]
    display_name: str
    is_general: bool
    is_customer_specific: bool

    @property
    def id(self) -> str:
        return self.template.id
