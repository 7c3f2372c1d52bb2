from .session import PropertyBag, Session

__all__ = ["PropertyBag", "Session"]
