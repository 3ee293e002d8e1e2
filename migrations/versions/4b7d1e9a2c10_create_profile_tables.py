"""create_profile_tables

Revision ID: 4b7d1e9a2c10
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7d1e9a2c10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, per-profile view counters and the site counter row."""
    op.create_table('profiles',
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('status_text', sa.String(length=200), nullable=True),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('mood', sa.String(length=100), nullable=True),
        sa.Column('join_date', sa.String(length=50), nullable=False),
        sa.Column('avatar_ref', sa.String(length=500), nullable=True),
        sa.Column('provider_username', sa.String(length=100), nullable=True),
        sa.Column('social_links_json', sa.Text(), nullable=True),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('shareable_slug', sa.String(length=50), nullable=True),
        sa.Column('theme_id', sa.String(length=50), nullable=True),
        sa.Column('background_kind', sa.String(length=50), nullable=True),
        sa.Column('background_ref', sa.String(length=500), nullable=True),
        sa.Column('audio_ref', sa.String(length=500), nullable=True),
        sa.Column('audio_title', sa.String(length=200), nullable=True),
        sa.Column('name_style', sa.String(length=50), nullable=True),
        sa.Column('name_color', sa.String(length=9), nullable=True),
        sa.Column('social_icon_style', sa.String(length=50), nullable=True),
        sa.Column('social_icon_color', sa.String(length=9), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('view_count >= 0', name='ck_profiles_view_count'),
        sa.PrimaryKeyConstraint('owner_id'),
        sa.UniqueConstraint('shareable_slug'),
    )

    op.create_table('view_counters',
        sa.Column('profile_id', sa.String(length=64), nullable=False),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_viewed_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('count >= 0', name='ck_view_counters_count'),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.owner_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('profile_id'),
    )

    site_counter = op.create_table('site_counter',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('total_views', sa.Integer(), server_default='0', nullable=False),
        sa.Column('unique_visitors', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('id = 1', name='ck_site_counter_singleton'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.bulk_insert(site_counter, [{'id': 1, 'total_views': 0, 'unique_visitors': 0}])


def downgrade() -> None:
    """Drop the profile and counter tables."""
    op.drop_table('site_counter')
    op.drop_table('view_counters')
    op.drop_table('profiles')
