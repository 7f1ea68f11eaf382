"""
Logging setup shared by the API process and scripts.
"""
import logging

LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'

# Driver loggers are chatty at INFO
NOISY_LOGGERS = ('neo4j', 'botocore', 'boto3', 'urllib3', 's3transfer')


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
