import logging
import uuid

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Salário", "type": "income", "color": "#2ecc71"},
    {"name": "Investimentos", "type": "income", "color": "#27ae60"},
    {"name": "Presente", "type": "income", "color": "#16a085"},
    {"name": "Alimentação", "type": "expense", "color": "#e74c3c"},
    {"name": "Transporte", "type": "expense", "color": "#c0392b"},
    {"name": "Lazer", "type": "expense", "color": "#9b59b6"},
    {"name": "Contas", "type": "expense", "color": "#34495e"},
    {"name": "Saúde", "type": "expense", "color": "#e67e22"},
    {"name": "Educação", "type": "expense", "color": "#f39c12"},
]


def _insert_ignoring_conflicts(db: Session, rows):
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = postgresql.insert(Category).on_conflict_do_nothing(
            index_elements=["name", "type"]
        )
    elif dialect == "sqlite":
        stmt = sqlite.insert(Category).on_conflict_do_nothing(
            index_elements=["name", "type"]
        )
    else:
        # no portable upsert: one savepoint per row, duplicates are dropped
        inserted = 0
        for row in rows:
            try:
                with db.begin_nested():
                    db.execute(insert(Category), [row])
                inserted += 1
            except IntegrityError:
                pass
        return inserted

    return db.execute(stmt.values(rows)).rowcount


def seed_default_categories(db: Session) -> int:
    """Insert the default categories that are not present yet.

    Relies on the (name, type) unique constraint, so running it from several
    processes at once still leaves exactly one copy of each category.
    Returns the number of rows inserted.
    """
    rows = [dict(cat, id=uuid.uuid4()) for cat in DEFAULT_CATEGORIES]
    inserted = _insert_ignoring_conflicts(db, rows)
    db.commit()

    if inserted:
        logger.info("Seeded %d default categories", inserted)
    else:
        logger.info("Default categories already present, seed skipped")
    return inserted
