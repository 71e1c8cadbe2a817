"""create_competency_catalog_tables

Revision ID: 3c7d1e9a4b20
Revises:
Create Date: 2026-10-19 10:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c7d1e9a4b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

competency_domain = sa.Enum('COGNITIVE', 'CLINICAL', 'PRACTICAL', name='competency_domain')
academic_level = sa.Enum('UG', 'PG', 'SPECIALIZATION', name='academic_level')
competency_status = sa.Enum('DRAFT', 'ACTIVE', 'DEPRECATED', name='competency_status')


def upgrade() -> None:
    """Create competency and audit log tables."""

    op.create_table(
        'catalog_competencies',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('domain', competency_domain, nullable=False),
        sa.Column('academic_level', academic_level, nullable=False),
        sa.Column('status', competency_status, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_by', sa.String(length=255), nullable=False),
        sa.Column('reviewed_by', sa.String(length=255), nullable=True),
        sa.Column('replaced_by', sa.Uuid(), nullable=True),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deprecated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['replaced_by'], ['catalog_competencies.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )
    op.create_index('ix_catalog_competencies_status', 'catalog_competencies', ['status'], unique=False)
    op.create_index('ix_catalog_competencies_subject', 'catalog_competencies', ['subject'], unique=False)
    op.create_index(
        'ix_catalog_competencies_status_subject',
        'catalog_competencies',
        ['status', 'subject'],
        unique=False
    )

    op.create_table(
        'catalog_audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.String(length=255), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_catalog_audit_logs_created_at', 'catalog_audit_logs', ['created_at'], unique=False)
    op.create_index(
        'ix_catalog_audit_logs_entity',
        'catalog_audit_logs',
        ['entity_type', 'entity_id'],
        unique=False
    )
    op.create_index(
        'ix_catalog_audit_logs_actor_action',
        'catalog_audit_logs',
        ['actor_id', 'action'],
        unique=False
    )


def downgrade() -> None:
    """Drop competency and audit log tables."""
    op.drop_index('ix_catalog_audit_logs_actor_action', table_name='catalog_audit_logs')
    op.drop_index('ix_catalog_audit_logs_entity', table_name='catalog_audit_logs')
    op.drop_index('ix_catalog_audit_logs_created_at', table_name='catalog_audit_logs')
    op.drop_table('catalog_audit_logs')

    op.drop_index('ix_catalog_competencies_status_subject', table_name='catalog_competencies')
    op.drop_index('ix_catalog_competencies_subject', table_name='catalog_competencies')
    op.drop_index('ix_catalog_competencies_status', table_name='catalog_competencies')
    op.drop_table('catalog_competencies')

    competency_status.drop(op.get_bind(), checkfirst=True)
    academic_level.drop(op.get_bind(), checkfirst=True)
    competency_domain.drop(op.get_bind(), checkfirst=True)
