"""Create student document tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create student_document and student_document_translation."""

    op.create_table(
        'student_document',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('lesson_id', postgresql.UUID(as_uuid=True), nullable=False),

        # File metadata
        sa.Column('original_file_name', sa.Text(), nullable=False),
        sa.Column('stored_file_name', sa.Text(), nullable=False),
        sa.Column('storage_key', sa.Text(), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('file_size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.Text(), nullable=False),

        # Enums are stored as strings (native_enum=False in the models)
        sa.Column('document_type', sa.String(32), nullable=False),
        sa.Column('protection_level', sa.String(32), nullable=False),
        sa.Column('review_status', sa.String(32), nullable=False, server_default='PENDING_REVIEW'),

        # Review
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.TIMESTAMP(timezone=True), nullable=True),

        # Timestamps
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('storage_key'),
    )

    op.create_index('ix_student_document_owner_id', 'student_document', ['owner_id'])
    op.create_index('ix_student_document_lesson_id', 'student_document', ['lesson_id'])
    op.create_index('ix_student_document_review_status', 'student_document', ['review_status'])

    op.create_table(
        'student_document_translation',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('document_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('locale', sa.String(16), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['student_document.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('document_id', 'locale', name='uq_student_document_translation_locale'),
    )


def downgrade():
    """Drop student document tables."""
    op.drop_table('student_document_translation')
    op.drop_index('ix_student_document_review_status', table_name='student_document')
    op.drop_index('ix_student_document_lesson_id', table_name='student_document')
    op.drop_index('ix_student_document_owner_id', table_name='student_document')
    op.drop_table('student_document')
