"""Zero-configuration content engine for photo galleries, blogs and pages."""

__version__ = "0.1.0"
