"""spaceconvert: converts legacy Matrix communities into spaces."""

__version__ = "0.1.0"
__logo__ = "🪐"
