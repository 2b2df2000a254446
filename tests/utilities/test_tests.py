import pytest

import mcp_screenshot_mac.settings
from mcp_screenshot_mac.utilities.tests import temporary_settings


class TestTemporarySettings:
    def test_temporary_settings(self):
        with temporary_settings(log_level="DEBUG"):
            assert mcp_screenshot_mac.settings.settings.log_level == "DEBUG"
        assert mcp_screenshot_mac.settings.settings.log_level == "INFO"

    def test_unknown_setting(self):
        with pytest.raises(AttributeError, match="Setting nope does not exist"):
            with temporary_settings(nope=1):
                pass
