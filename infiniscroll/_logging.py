import hashlib
import logging

# Create the library logger
logger = logging.getLogger("infiniscroll")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_cursor(cursor: str | None) -> str | None:
    """
    Redacts an opaque continuation token for logging.
    Hashes the value to allow correlation between log lines without revealing
    whatever the backend encoded into it (document ids, offsets, user data).
    """
    if cursor is None:
        return None
    return hashlib.sha256(cursor.encode("utf-8")).hexdigest()[:8]
