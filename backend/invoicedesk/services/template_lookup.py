"""
Read-only lookup of customers and pricing templates (hourly rates, materials).

Customers may carry their own templates. The plain lookups return the
customer-specific list when it is non-empty and the general list otherwise;
the "combined" lookups list both, marked for display in one dropdown.
"""
from typing import Iterable, List, Optional, Union

from invoicedesk.config import settings
from invoicedesk.schemas.template import Customer, HourlyRate, MaterialTemplate, TemplateOption

GENERAL_SUFFIX = "(Allgemein)"
CUSTOMER_SUFFIX = "(Kundenspezifisch)"


class TemplateCatalog:
    """Customers plus general hourly rates and material templates"""

    def __init__(
        self,
        customers: Iterable[Customer] = (),
        hourly_rates: Iterable[HourlyRate] = (),
        materials: Iterable[MaterialTemplate] = (),
        show_combined_dropdowns: Optional[bool] = None,
    ):
        self.customers = list(customers)
        self.hourly_rates = list(hourly_rates)
        self.materials = list(materials)
        if show_combined_dropdowns is None:
            show_combined_dropdowns = settings.SHOW_COMBINED_DROPDOWNS
        self.show_combined_dropdowns = show_combined_dropdowns

    @classmethod
    def from_api(cls, client, show_combined_dropdowns: Optional[bool] = None) -> "TemplateCatalog":
        return cls(
            customers=client.get_customers(),
            hourly_rates=client.get_hourly_rates(),
            materials=client.get_material_templates(),
            show_combined_dropdowns=show_combined_dropdowns,
        )

    def get_customer(self, customer_id: Optional[str]) -> Optional[Customer]:
        if not customer_id:
            return None
        for customer in self.customers:
            if customer.id == customer_id:
                return customer
        return None

    def hourly_rates_for_customer(self, customer_id: Optional[str] = None) -> List[HourlyRate]:
        customer = self.get_customer(customer_id)
        if customer and customer.hourly_rates:
            return list(customer.hourly_rates)
        return list(self.hourly_rates)

    def materials_for_customer(self, customer_id: Optional[str] = None) -> List[MaterialTemplate]:
        customer = self.get_customer(customer_id)
        if customer and customer.materials:
            return list(customer.materials)
        return list(self.materials)

    def _combined(self, general: List, specific: List, chosen: List) -> List[TemplateOption]:
        if not self.show_combined_dropdowns:
            specific_ids = {t.id for t in specific}
            return [
                TemplateOption(
                    template=t,
                    display_name=t.name,
                    is_general=t.id not in specific_ids,
                    is_customer_specific=t.id in specific_ids,
                )
                for t in chosen
            ]
        options = [
            TemplateOption(template=t, display_name=f"{t.name} {GENERAL_SUFFIX}", is_general=True, is_customer_specific=False)
            for t in general
        ]
        options.extend(
            TemplateOption(template=t, display_name=f"{t.name} {CUSTOMER_SUFFIX}", is_general=False, is_customer_specific=True)
            for t in specific
        )
        return options

    def combined_hourly_rates_for_customer(self, customer_id: Optional[str] = None) -> List[TemplateOption]:
        customer = self.get_customer(customer_id)
        specific = list(customer.hourly_rates) if customer else []
        return self._combined(self.hourly_rates, specific, self.hourly_rates_for_customer(customer_id))

    def combined_materials_for_customer(self, customer_id: Optional[str] = None) -> List[TemplateOption]:
        customer = self.get_customer(customer_id)
        specific = list(customer.materials) if customer else []
        return self._combined(self.materials, specific, self.materials_for_customer(customer_id))

    def find_hourly_rate(self, customer_id: Optional[str], template_id: str) -> Optional[HourlyRate]:
        """Hourly rate selectable for this customer (in the current dropdown mode)."""
        return self._find(self.combined_hourly_rates_for_customer(customer_id), template_id)

    def find_material(self, customer_id: Optional[str], template_id: str) -> Optional[MaterialTemplate]:
        return self._find(self.combined_materials_for_customer(customer_id), template_id)

    @staticmethod
    def _find(options: List[TemplateOption], template_id: str) -> Optional[Union[HourlyRate, MaterialTemplate]]:
        for option in options:
            if option.id == template_id:
                return option.template
        return None
