import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

NO_JOB = "-"


class _JobContextFilter(logging.Filter):
    """Stamps every record with the upload currently being processed."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job_id = Log.current_job_id
        return True


class Log:
    """Logging facade for the extraction worker.

    Lines carry the id of the upload being processed, so a single run can
    be followed through a busy log: ``... [INFO] [job 7d3c] Saved 3 responses``.
    """

    _logger: logging.Logger = logging.getLogger("survey_extract")
    current_job_id: str = NO_JOB

    @classmethod
    def configure(cls, log_level: str) -> None:
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] [job %(job_id)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def job_context(cls, job_id: str) -> Iterator[None]:
        previous = cls.current_job_id
        cls.current_job_id = job_id
        try:
            yield
        finally:
            cls.current_job_id = previous

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)


Log._logger.addFilter(_JobContextFilter())
