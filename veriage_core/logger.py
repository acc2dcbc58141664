import logging, json, re, sys, time, os

DATE_PATTERN = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")


class RedactDatesFilter(logging.Filter):
    """Masks calendar dates in log messages so a birthdate never reaches a sink."""

    def filter(self, record):
        msg = record.getMessage()
        if DATE_PATTERN.search(msg):
            record.msg = DATE_PATTERN.sub("****-**-**", msg)
            record.args = ()
        return True


def get_logger(name="veriage", level=None, to_file=None):
    """Structured JSON logger shared by the proof, credential and ledger services."""
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("VERIAGE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        logger.addFilter(RedactDatesFilter())

        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "service": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
