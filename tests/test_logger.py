"""LoggerAdapter 테스트"""

import logging

from adapters.logger import ROOT_LOGGER_NAME, LoggerAdapter, create_logger


class TestLoggerAdapter:
    def test_names_are_nested_under_root(self):
        assert create_logger("signin_router").logger.name == "cmflairs.signin_router"
        assert LoggerAdapter(ROOT_LOGGER_NAME).logger.name == "cmflairs"
        assert LoggerAdapter("cmflairs.worker").logger.name == "cmflairs.worker"

    def test_console_handler_only_on_root(self):
        create_logger("web_server")
        create_logger("signin_router")

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1
        assert logging.getLogger("cmflairs.web_server").handlers == []

    def test_context_rendered_into_message(self, caplog):
        logger = create_logger("sync_worker", "INFO")

        with caplog.at_level(logging.INFO):
            logger.error("배치 처리 실패", consecutive_errors=2, entity_key="puuid-1")
            logger.info("워커 시작")

        messages = [record.getMessage() for record in caplog.records if record.name == "cmflairs.sync_worker"]
        assert messages == ["배치 처리 실패 [consecutive_errors=2, entity_key=puuid-1]", "워커 시작"]

    def test_level_filters_debug(self, caplog):
        logger = create_logger("quiet", "WARNING")

        with caplog.at_level(logging.DEBUG):
            logger.debug("보이지 않음")
            logger.warning("보임")

        assert [record.getMessage() for record in caplog.records if record.name == "cmflairs.quiet"] == ["보임"]
