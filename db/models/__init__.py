"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.application import Application, ApplicationStatus
from db.models.claim import Claim, ClaimStatus
from db.models.member import Member, MemberStatus
from db.models.transaction import Transaction, TransactionStatus

__all__ = [
    "Application",
    "ApplicationStatus",
    "Claim",
    "ClaimStatus",
    "Member",
    "MemberStatus",
    "Transaction",
    "TransactionStatus",
]
