"""
Shared enumerations for database models.

Python enums mapped to database enums ensure that only valid
values can be stored.
"""

import enum


class Role(str, enum.Enum):
    """Staff roles, from most to least privileged."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    COMPTABLE = "COMPTABLE"


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(str, enum.Enum):
    SALES = "SALES"
    SERVICES = "SERVICES"
    SALARY = "SALARY"
    RENT = "RENT"
    OFFICE = "OFFICE"
    SUPPLIES = "SUPPLIES"
    UTILITIES = "UTILITIES"
    TAXES = "TAXES"
    TRAVEL = "TRAVEL"
    MARKETING = "MARKETING"
    OTHER = "OTHER"


class TransactionStatus(str, enum.Enum):
    """Approval workflow states."""
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    FINALIZED = "FINALIZED"
    REJECTED = "REJECTED"
