"""로깅 설정 유틸리티.

Logging setup for the ``streetwatch`` logger tree.
Records go to stdout; when Axiom is configured they are also shipped to the
same dataset the request middleware writes to.
"""

import logging
import sys

from axiom_py import Client as AxiomClient
from axiom_py.logging import AxiomHandler

from streetwatch.config import Settings, settings as default_settings

ROOT_LOGGER: str = "streetwatch"
_FORMAT: str = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def setup_logging(config: Settings | None = None) -> logging.Logger:
    """``streetwatch`` 로거에 핸들러를 설치합니다. 여러 번 호출해도 안전합니다.

    Install handlers on the ``streetwatch`` logger. Safe to call repeatedly.

    Args:
        config: 설정 객체, None이면 전역 설정 (Settings; defaults to the global singleton)

    Returns:
        logging.Logger: 설정된 루트 로거 (Configured package logger)
    """
    config = config or default_settings
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)

    if not any(getattr(h, "_streetwatch", False) for h in logger.handlers):
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(_FORMAT))
        stream._streetwatch = True  # type: ignore[attr-defined]
        logger.addHandler(stream)

        # Axiom 미설정시 스트림 핸들러만 사용 (Stream only if Axiom not configured)
        if config.AXIOM_API_TOKEN and config.AXIOM_DATASET:
            axiom = AxiomHandler(AxiomClient(token=config.AXIOM_API_TOKEN), config.AXIOM_DATASET)
            axiom._streetwatch = True  # type: ignore[attr-defined]
            logger.addHandler(axiom)

    return logger


def get_logger(name: str) -> logging.Logger:
    """``streetwatch`` 하위 로거를 반환합니다 (e.g. ``get_logger(__name__)``)."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
