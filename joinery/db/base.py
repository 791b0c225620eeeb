# joinery/db/base.py

"""
Imports all the ORM models so Alembic and create_all can discover them.
Whenever you add a new model, import it here.
"""
from joinery.db.models.project import Project
from joinery.db.models.task import ProjectTask
from joinery.db.models.material import Material
from joinery.db.models.joinery_item import JoineryItem
from joinery.db.session import engine, Base

async def init_db(bind=None):
    """Create all tables on the given engine (defaults to the app engine)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
