"""Component tree model, SQL classifier, collaboration hub and SQLite storage for a low-code builder backend."""

__version__ = "0.1.0"