from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Ids and quantities are INTEGER columns: 32-bit on every supported backend
MAX_INTEGER = 2**31 - 1


def record_id_in_range(value: int) -> bool:
    """False for ids that no row can have (and the driver may not even bind)."""
    return 0 < value <= MAX_INTEGER
