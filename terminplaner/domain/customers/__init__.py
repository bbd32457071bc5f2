"""Customer domain - Customer records, form validation and name search"""

from .router import router

__all__ = ["router"]
