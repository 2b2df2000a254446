import copy
from contextlib import contextmanager
from typing import Any

from mcp_screenshot_mac.settings import settings


@contextmanager
def temporary_settings(**kwargs: Any):
    """
    Temporarily override mcp-screenshot-mac setting values.

    Args:
        **kwargs: The settings to override.

    Example:
        Temporarily disable cleanup:
        ```python
        from mcp_screenshot_mac.settings import settings
        from mcp_screenshot_mac.utilities.tests import temporary_settings

        with temporary_settings(ttl_ms=0):
            assert settings.ttl_ms == 0
        assert settings.ttl_ms == 600_000
        ```
    """
    old_settings = copy.deepcopy(settings.model_dump())

    try:
        # apply the new settings
        for attr, value in kwargs.items():
            if not hasattr(settings, attr):
                raise AttributeError(f"Setting {attr} does not exist.")
            setattr(settings, attr, value)
        yield

    finally:
        # restore the old settings
        for attr in kwargs:
            if hasattr(settings, attr):
                setattr(settings, attr, old_settings[attr])
