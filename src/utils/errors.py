# src/utils/errors.py


class FloatChatError(Exception):
    """Base class for FloatChat Explorer errors"""


class ConfigError(FloatChatError):
    """Settings file could not be read or has the wrong shape"""


class CatalogError(FloatChatError):
    """Catalog data could not be loaded"""


class ExportValidationError(FloatChatError):
    """Export was requested for a configuration that does not validate"""

    def __init__(self, reasons):
        self.reasons = list(reasons)
        super().__init__("Invalid export configuration: " + "; ".join(self.reasons))
