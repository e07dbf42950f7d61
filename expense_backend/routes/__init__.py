from .auth import auth_bp
from .expenses import expenses_bp

__all__ = ["auth_bp", "expenses_bp"]
