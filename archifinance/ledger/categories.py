"""
Category Lookup Tables

Costs use a closed set of categories; general fund rows use the open set
defined in the firm settings. Both are modelled as one CategoryTable so
aggregation code has a single path: a fixed seed table for the closed set,
a settings-driven table for the open one.

Ids are weak references. An id with no definition never fails a lookup:
display falls back to the raw id and grouping to the unmapped bucket.
"""

from typing import Iterable, Optional

from archifinance.models.firm import CategoryDefinition, FirmSettings
from archifinance.models.ledger import TransactionType
from archifinance.models.project import CostCategory


UNMAPPED_BUCKET = "unmapped"

COST_CATEGORY_NAMES = {
    CostCategory.SUBCONTRACTOR: "複委託/外包",
    CostCategory.GOV_FEE: "規費",
    CostCategory.PRINTING: "圖說印製",
    CostCategory.TRAVEL: "差旅費",
    CostCategory.MISC: "雜支",
}


class CategoryTable:
    """Ordered lookup of category definitions by id."""
    
    def __init__(self, definitions: Iterable[CategoryDefinition]):
        self._definitions = list(definitions)
        self._by_id = {d.id: d for d in self._definitions}
    
    @classmethod
    def for_costs(cls) -> "CategoryTable":
        """The fixed project cost table."""
        return cls(
            CategoryDefinition(
                id=category.value,
                name=COST_CATEGORY_NAMES[category],
                type=TransactionType.EXPENSE,
                is_system=True,
            )
            for category in CostCategory
        )
    
    @classmethod
    def for_transactions(cls, settings: FirmSettings) -> "CategoryTable":
        """The firm's transaction categories, as configured."""
        return cls(settings.transaction_categories)
    
    @property
    def ids(self) -> list[str]:
        return [d.id for d in self._definitions]
    
    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id
    
    def __len__(self) -> int:
        return len(self._definitions)
    
    def resolve(self, category_id: Optional[str]) -> Optional[CategoryDefinition]:
        if category_id is None:
            return None
        return self._by_id.get(category_id)
    
    def display_name(self, category_id: Optional[str]) -> str:
        """The configured name, or the raw id when nothing matches."""
        definition = self.resolve(category_id)
        if definition is not None:
            return definition.name
        return category_id or ""
    
    def bucket(self, category_id: Optional[str]) -> str:
        """Grouping key: the id when known, otherwise the unmapped bucket."""
        return category_id if category_id in self._by_id else UNMAPPED_BUCKET
    
    def for_type(self, transaction_type: TransactionType) -> list[CategoryDefinition]:
        """Definitions offered for one direction (income or expense)."""
        return [d for d in self._definitions if d.type == transaction_type]
