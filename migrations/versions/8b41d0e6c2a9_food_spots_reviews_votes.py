"""food_spots_reviews_votes

Revision ID: 8b41d0e6c2a9
Revises: 3f2a9c1d7e40
Create Date: 2026-10-19 15:40:07.512380

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b41d0e6c2a9'
down_revision: Union[str, None] = '3f2a9c1d7e40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'food_spots',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('min_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('max_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('image', sa.String(), nullable=False),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('approval_status', sa.String(), nullable=False, server_default='PENDING'),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('total_rating', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('review_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_upvotes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_downvotes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_food_spots_id'), 'food_spots', ['id'], unique=False)
    op.create_index(op.f('ix_food_spots_category'), 'food_spots', ['category'], unique=False)
    op.create_index(op.f('ix_food_spots_is_premium'), 'food_spots', ['is_premium'], unique=False)
    op.create_index(op.f('ix_food_spots_approval_status'), 'food_spots', ['approval_status'], unique=False)
    op.create_index(op.f('ix_food_spots_creator_id'), 'food_spots', ['creator_id'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('food_spot_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['food_spot_id'], ['food_spots.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'food_spot_id', name='unique_review_user_food_spot'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)
    op.create_index(op.f('ix_reviews_food_spot_id'), 'reviews', ['food_spot_id'], unique=False)

    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('food_spot_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['food_spot_id'], ['food_spots.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'food_spot_id', name='unique_vote_user_food_spot'),
    )
    op.create_index(op.f('ix_votes_id'), 'votes', ['id'], unique=False)
    op.create_index(op.f('ix_votes_user_id'), 'votes', ['user_id'], unique=False)
    op.create_index(op.f('ix_votes_food_spot_id'), 'votes', ['food_spot_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_votes_food_spot_id'), table_name='votes')
    op.drop_index(op.f('ix_votes_user_id'), table_name='votes')
    op.drop_index(op.f('ix_votes_id'), table_name='votes')
    op.drop_table('votes')
    op.drop_index(op.f('ix_reviews_food_spot_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_id'), table_name='reviews')
    op.drop_table('reviews')
    op.drop_index(op.f('ix_food_spots_creator_id'), table_name='food_spots')
    op.drop_index(op.f('ix_food_spots_approval_status'), table_name='food_spots')
    op.drop_index(op.f('ix_food_spots_is_premium'), table_name='food_spots')
    op.drop_index(op.f('ix_food_spots_category'), table_name='food_spots')
    op.drop_index(op.f('ix_food_spots_id'), table_name='food_spots')
    op.drop_table('food_spots')
