"""Products, subscription records, per-country pricing and Square response models for a self-hosted payment page."""

__version__ = "0.1.0"