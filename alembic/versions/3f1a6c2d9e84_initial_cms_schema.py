"""Initial CMS schema: forms, submissions, leads, content, versions, SEO, AI content

Revision ID: 3f1a6c2d9e84
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a6c2d9e84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('forms',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('fields', sa.JSON(), nullable=True),
        sa.Column('lead_scoring', sa.JSON(), nullable=True),
        sa.Column('notifications', sa.JSON(), nullable=True),
        sa.Column('crm', sa.JSON(), nullable=True),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('submissions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('conversion_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('last_submission_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('leads',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('job_title', sa.Text(), nullable=True),
        sa.Column('company', sa.JSON(), nullable=True),
        sa.Column('source', sa.JSON(), nullable=True),
        sa.Column('qualification', sa.JSON(), nullable=True),
        sa.Column('custom_fields', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('grade', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=True),
        sa.Column('scoring_history', sa.JSON(), nullable=True),
        sa.Column('activities', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table('form_submissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('submission_time', sa.Float(), nullable=True),
        sa.Column('submitter_email', sa.Text(), nullable=True),
        sa.Column('submitter_name', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('is_spam', sa.Boolean(), nullable=True),
        sa.Column('spam_score', sa.Integer(), nullable=True),
        sa.Column('spam_reasons', sa.JSON(), nullable=True),
        sa.Column('lead_score', sa.Integer(), nullable=True),
        sa.Column('qualified', sa.Boolean(), nullable=True),
        sa.Column('lead_id', sa.Integer(), nullable=True),
        sa.Column('email_sent', sa.Boolean(), nullable=True),
        sa.Column('webhook_sent', sa.Boolean(), nullable=True),
        sa.Column('crm_synced', sa.Boolean(), nullable=True),
        sa.Column('processing_errors', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_form_submissions_form_id', 'form_submissions', ['form_id'])

    op.create_table('content_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('content_type', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('layout', sa.JSON(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('links', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_type', 'slug', name='uq_content_item_type_slug'),
    )

    op.create_table('content_versions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content_type', sa.Text(), nullable=False),
        sa.Column('content_id', sa.Text(), nullable=False),
        sa.Column('version', sa.Text(), nullable=False),
        sa.Column('version_type', sa.Text(), nullable=True),
        sa.Column('author', sa.Text(), nullable=True),
        sa.Column('parent_version_id', sa.Integer(), nullable=True),
        sa.Column('content_snapshot', sa.JSON(), nullable=False),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('change_log', sa.Text(), nullable=True),
        sa.Column('is_current', sa.Boolean(), nullable=True),
        sa.Column('metrics', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['parent_version_id'], ['content_versions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_content_versions_content_id', 'content_versions', ['content_id'])

    op.create_table('seo_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('content_type', sa.Text(), nullable=False),
        sa.Column('content_id', sa.Text(), nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('seo_score', sa.Integer(), nullable=True),
        sa.Column('readability_score', sa.Integer(), nullable=True),
        sa.Column('issues', sa.JSON(), nullable=True),
        sa.Column('last_analyzed', sa.DateTime(timezone=True), nullable=True),
        sa.Column('include_in_sitemap', sa.Boolean(), nullable=True),
        sa.Column('change_frequency', sa.Text(), nullable=True),
        sa.Column('priority', sa.Float(), nullable=True),
        sa.Column('last_modified', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_type', 'content_id', name='uq_seo_record_content'),
    )

    op.create_table('ai_content',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('prompt', sa.JSON(), nullable=True),
        sa.Column('ai_settings', sa.JSON(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('seo_optimization', sa.JSON(), nullable=True),
        sa.Column('quality_score', sa.Integer(), nullable=True),
        sa.Column('readability_score', sa.Integer(), nullable=True),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('estimated_cost', sa.Float(), nullable=True),
        sa.Column('status', sa.Text(), nullable=True),
        sa.Column('regeneration_count', sa.Integer(), nullable=True),
        sa.Column('author', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('ai_content')
    op.drop_table('seo_records')
    op.drop_index('ix_content_versions_content_id', 'content_versions')
    op.drop_table('content_versions')
    op.drop_table('content_items')
    op.drop_index('ix_form_submissions_form_id', 'form_submissions')
    op.drop_table('form_submissions')
    op.drop_table('leads')
    op.drop_table('forms')
