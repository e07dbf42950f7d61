from ..extensions import db
from .user import User
from .expense import Expense

__all__ = ["db", "User", "Expense"]
