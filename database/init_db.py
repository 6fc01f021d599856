import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from database.models import Base

logger = logging.getLogger(__name__)


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(10),
    wait=wait_fixed(2),
    reraise=True,
)
def init_db(engine: Engine) -> None:
    """Create the screening tables, waiting for the database to come up."""
    logger.info("Creating screening tables if missing")
    Base.metadata.create_all(bind=engine)
