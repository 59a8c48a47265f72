"""
Schema bootstrap: create tables if missing and seed the default funnel products.
Idempotent. No migration tooling.
"""
import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

# Max retries and sleep (seconds) while waiting for the database
DB_RETRY_ATTEMPTS = 20
DB_RETRY_SLEEP = 1.0

# slug -> (name, price in cents, product type, description)
DEFAULT_PRODUCTS = {
    "fb-ads-course": ("FB Ads Course", 19700, "course", "Facebook ads launch course for health practices."),
    "ceo-vault": ("Health Pro CEO Vault", 99700, "vault", "Templates, scripts and SOP library."),
    "strategy-session": ("Strategy Session", 29700, "session", "One-on-one scaling strategy call."),
}


def wait_for_db(engine, attempts: int = DB_RETRY_ATTEMPTS, sleep: float = DB_RETRY_SLEEP) -> None:
    """Block until the database answers `SELECT 1`, retrying `attempts` times."""
    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return
        except OperationalError as e:
            logger.warning(
                "DB not ready (attempt %d/%d): %s. Retrying in %s s...",
                attempt,
                attempts,
                e,
                sleep,
            )
            if attempt == attempts:
                raise RuntimeError(
                    f"Database not ready after {attempts} attempts. "
                    "Check that the database is running and reachable."
                ) from e
            time.sleep(sleep)


def seed_default_products(engine) -> int:
    """Insert any default product that is missing. Returns the number inserted."""
    from leadflow.db.models import Product, ProductType
    from leadflow.db.session import SessionLocal

    inserted = 0
    db = SessionLocal(bind=engine)
    try:
        existing = {slug for (slug,) in db.query(Product.slug).all()}
        for slug, (name, price, product_type, description) in DEFAULT_PRODUCTS.items():
            if slug in existing:
                continue
            db.add(Product(
                name=name,
                slug=slug,
                description=description,
                price_in_cents=price,
                type=ProductType(product_type),
                active=True,
            ))
            inserted += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return inserted


def init_db(engine) -> None:
    """
    Create tables if missing and seed default products. Idempotent.
    Retries connection up to DB_RETRY_ATTEMPTS times with DB_RETRY_SLEEP between attempts.
    """
    import leadflow.db.models  # noqa: F401

    from leadflow.db.session import Base

    wait_for_db(engine)

    logger.info("Creating tables if missing (Base.metadata.create_all)...")
    Base.metadata.create_all(bind=engine)

    inserted = seed_default_products(engine)
    if inserted:
        logger.info("Seeded %d default funnel products", inserted)

    tables = list(Base.metadata.tables.keys())
    logger.info("Schema bootstrap complete. Tables: %s", tables or "(none)")
