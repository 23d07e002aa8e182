"""
Firm Settings Models

Settings act as the lookup table for everything the other records refer to
by id: bank accounts on quotes, classification tags on projects, and the
transaction categories used by costs and general fund rows.
"""

from typing import Any, Optional

from pydantic import Field, model_validator

from archifinance.models.base import RecordModel, new_id
from archifinance.models.ledger import TransactionType


class FirmInfo(RecordModel):
    """Identity printed on quotes and invoices."""
    
    name: str = ""
    sub_name: Optional[str] = Field(default=None, alias="subName")
    english_name: str = Field(default="", alias="englishName")
    address: str = ""
    phone: str = ""
    tax_id: Optional[str] = Field(default=None, alias="taxId")
    email: Optional[str] = None


class BankAccount(RecordModel):
    """A receiving account that quotes and invoices can point at."""
    
    id: str = Field(default_factory=new_id)
    bank_name: str = Field(default="", alias="bankName")
    branch: str = ""
    account_number: str = Field(default="", alias="accountNumber")
    account_name: str = Field(default="", alias="accountName")


class CategoryDefinition(RecordModel):
    """
    One row of the transaction category table.
    
    System categories ship with the application; the firm can add its own.
    """
    
    id: str
    name: str
    type: TransactionType = TransactionType.EXPENSE
    is_system: bool = Field(default=False, alias="isSystem")


DEFAULT_PROJECT_TYPES = [
    "私人住宅",
    "公共工程",
    "室內裝修",
    "危老重建",
    "景觀設計",
    "變更使用",
]

DEFAULT_TRANSACTION_CATEGORIES = [
    # General expenses
    ("OfficeRent", "辦公室租金", TransactionType.EXPENSE),
    ("Utilities", "水電網路", TransactionType.EXPENSE),
    ("Salary", "薪資獎金", TransactionType.EXPENSE),
    ("Software", "軟體訂閱", TransactionType.EXPENSE),
    ("Marketing", "行銷廣告", TransactionType.EXPENSE),
    ("Tax", "稅務/會計", TransactionType.EXPENSE),
    ("Equipment", "設備採購", TransactionType.EXPENSE),
    ("Misc", "雜支", TransactionType.EXPENSE),
    # General income
    ("Capital", "資本挹注", TransactionType.INCOME),
    # Project cost categories, also usable for general rows
    ("Subcontractor", "複委託/外包", TransactionType.EXPENSE),
    ("GovFee", "規費", TransactionType.EXPENSE),
    ("Printing", "圖說印製", TransactionType.EXPENSE),
    ("Travel", "差旅費", TransactionType.EXPENSE),
]


def default_transaction_categories() -> list[CategoryDefinition]:
    return [
        CategoryDefinition(id=cid, name=name, type=ctype, is_system=True)
        for cid, name, ctype in DEFAULT_TRANSACTION_CATEGORIES
    ]


def default_bank_accounts() -> list[BankAccount]:
    return [
        BankAccount(
            id="default-company",
            bank_name="範例銀行 (000)",
            branch="範例分行",
            account_number="123-456-7890",
            account_name="公司戶名",
        ),
    ]


class FirmSettings(RecordModel):
    """
    The settings document.
    
    Documents written before project types or transaction categories
    existed get the default tables filled in on load.
    """
    
    firm_info: FirmInfo = Field(
        default_factory=lambda: FirmInfo(
            name="您的事務所名稱",
            sub_name="",
            english_name="Your Architecture Firm",
            address="事務所地址",
            phone="02-1234-5678",
            tax_id="",
        ),
        alias="firmInfo",
    )
    bank_accounts: list[BankAccount] = Field(
        default_factory=default_bank_accounts,
        alias="bankAccounts",
    )
    project_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROJECT_TYPES),
        alias="projectTypes",
    )
    transaction_categories: list[CategoryDefinition] = Field(
        default_factory=default_transaction_categories,
        alias="transactionCategories",
    )
    
    @model_validator(mode='before')
    @classmethod
    def fill_missing_tables(cls, data: Any) -> Any:
        """Null tables from older documents fall back to the defaults."""
        if isinstance(data, dict):
            data = {
                key: value for key, value in data.items()
                if not (key in {"projectTypes", "transactionCategories"} and value is None)
            }
        return data
