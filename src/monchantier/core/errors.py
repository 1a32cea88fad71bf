"""
Error classes for MonChantier.

This module defines the exceptions raised while reading configuration and
dataset files. Aggregation failures live in :mod:`monchantier.core.exceptions`.
"""


class ConfigError(ValueError):
    """
    Configuration error in the exchange-rate table or application settings.

    **Common Causes:**
    - A non-positive or non-finite exchange rate
    - A base currency whose rate is not exactly 1
    - A display currency missing from the rate table
    - A configuration file that is not a mapping

    **Example Usage:**
        ```python
        from monchantier.core.config import AppConfig, update_rates
        from monchantier.core.errors import ConfigError

        try:
            update_rates(AppConfig(), {"EUR": -1})
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class DatasetError(ValueError):
    """Raised when a dataset file cannot be parsed into a snapshot."""
