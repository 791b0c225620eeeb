"""create projects, tasks, materials and joinery items

Revision ID: joinery_initial_001
Revises:
Create Date: 2025-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'joinery_initial_001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CHECKLIST_STEPS = (
    'shop_drawings_approved',
    'board_ordered',
    'hardware_ordered',
    'site_measured',
    'microvellum_ready_to_process',
    'processed_to_factory',
    'picked_up_from_factory',
    'install_scheduled',
    'plans_printed',
    'assembled',
    'delivered',
    'installed',
    'invoiced',
)


def _id_and_stamps():
    return [
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _project_fk():
    return sa.Column(
        'project_id', sa.String(36),
        sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False,
    )


def upgrade() -> None:
    """Create the four project tables"""
    op.create_table(
        'projects',
        *_id_and_stamps(),
        sa.Column('project_number', sa.String(32), nullable=False),
        sa.Column('client', sa.String(200), nullable=False),
        sa.Column('project_name', sa.String(200), nullable=False),
        sa.Column('project_address', sa.String(300), nullable=False, server_default=''),
        sa.Column('date_created', sa.Date(), nullable=False),
        sa.Column('project_status', sa.String(32), nullable=False, server_default='planning'),
        sa.Column('install_commencement_date', sa.Date()),
        sa.Column('install_duration', sa.Integer()),
        sa.Column('overall_project_budget', sa.Float(), nullable=False, server_default='0'),
        sa.Column('priority_level', sa.String(16), nullable=False, server_default='medium'),
        sa.UniqueConstraint('project_number', name='uq_projects_project_number'),
    )
    op.create_index('ix_projects_created_at', 'projects', ['created_at'])
    op.create_index('ix_projects_project_status', 'projects', ['project_status'])

    op.create_table(
        'project_tasks',
        *_id_and_stamps(),
        _project_fk(),
        sa.Column('task_description', sa.Text(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_project_tasks_project_id', 'project_tasks', ['project_id'])

    op.create_table(
        'materials',
        *_id_and_stamps(),
        _project_fk(),
        sa.Column('material_name', sa.String(200), nullable=False),
        sa.Column('thickness', sa.Float()),
        sa.Column('board_size', sa.String(64)),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('supplier', sa.String(200)),
        sa.Column('is_ordered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order_number', sa.String(64)),
    )
    op.create_index('ix_materials_project_id', 'materials', ['project_id'])

    op.create_table(
        'joinery_items',
        *_id_and_stamps(),
        _project_fk(),
        sa.Column('item_name', sa.String(200), nullable=False),
        sa.Column('item_budget', sa.Float(), nullable=False, server_default='0'),
        sa.Column('install_commencement_date', sa.Date()),
        sa.Column('install_duration', sa.Integer()),
        *[sa.Column(step, sa.Boolean(), nullable=False, server_default=sa.false()) for step in CHECKLIST_STEPS],
    )
    op.create_index('ix_joinery_items_project_id', 'joinery_items', ['project_id'])


def downgrade() -> None:
    """Drop everything, children first"""
    op.drop_index('ix_joinery_items_project_id', table_name='joinery_items')
    op.drop_table('joinery_items')
    op.drop_index('ix_materials_project_id', table_name='materials')
    op.drop_table('materials')
    op.drop_index('ix_project_tasks_project_id', table_name='project_tasks')
    op.drop_table('project_tasks')
    op.drop_index('ix_projects_project_status', table_name='projects')
    op.drop_index('ix_projects_created_at', table_name='projects')
    op.drop_table('projects')
