import logging

import pytest

from dlpc900ctl.config import ControllerConfig
from dlpc900ctl.dlp_errors import InvalidArgument
from dlpc900ctl.log import LOGGER_NAME, ColorFormatter, configure_logging, level_for_debug


class TestControllerConfig:

    def test_defaults(self):
        config = ControllerConfig()
        assert config.debug == 0
        assert config.packet_size == 64
        assert (config.vendor_id, config.product_id) == (0x0451, 0xC900)
        assert not config.dummy

    def test_dummy(self):
        assert ControllerConfig(debug=3).dummy

    @pytest.mark.parametrize("kwargs", [{"debug": 4}, {"debug": -1}, {"debug": True},
                                        {"packet_size": 0}, {"timeout_ms": -5}])
    def test_rejects(self, kwargs):
        with pytest.raises(InvalidArgument):
            ControllerConfig(**kwargs)

    def test_from_env(self):
        config = ControllerConfig.from_env({"DLPC900_DEBUG": "2", "DLPC900_TIMEOUT_MS": "250"})
        assert config.debug == 2
        assert config.timeout_ms == 250

    def test_from_env_defaults(self):
        assert ControllerConfig.from_env({}) == ControllerConfig()

    def test_from_env_garbage(self):
        with pytest.raises(InvalidArgument):
            ControllerConfig.from_env({"DLPC900_DEBUG": "loud"})


class TestLogging:

    @pytest.mark.parametrize("debug, level", [(0, logging.WARNING), (1, logging.INFO),
                                              (2, logging.DEBUG), (3, logging.DEBUG)])
    def test_levels(self, debug, level):
        assert level_for_debug(debug) == level

    def test_handler_added_once(self):
        configure_logging(1)
        logger = configure_logging(2)
        handlers = [h for h in logger.handlers if isinstance(h.formatter, ColorFormatter)]
        assert len(handlers) == 1
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG

    def test_formatter_keeps_message(self):
        record = logging.LogRecord("dlpc900ctl", logging.INFO, __file__, 1, "sent: %s", ("[ 00 ]",), None)
        assert ColorFormatter("%(message)s").format(record).endswith("sent: [ 00 ]")

    def test_debug_0_sets_warning_again(self):
        configure_logging(2)
        logger = configure_logging(0)
        assert logger.level == logging.WARNING
