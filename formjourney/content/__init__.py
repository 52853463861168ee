from .resolver import CatalogContentResolver, ContentResolver, StepContent

__all__ = ["ContentResolver", "CatalogContentResolver", "StepContent"]
