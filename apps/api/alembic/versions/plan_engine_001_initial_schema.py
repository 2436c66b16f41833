"""Create plan engine tables

Revision ID: plan_engine_001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'plan_engine_001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'training_plan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('athlete_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('sport', sa.Text(), nullable=False),
        sa.Column('goal', sa.Text(), nullable=False),
        sa.Column('fitness_tier', sa.Text(), nullable=False),
        sa.Column('plan_start_date', sa.Date(), nullable=False),
        sa.Column('plan_end_date', sa.Date(), nullable=False),
        sa.Column('total_weeks', sa.Integer(), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=True),
        sa.Column('goal_time_seconds', sa.Float(), nullable=True),
        sa.Column('goal_time_source', sa.Text(), nullable=True),
        sa.Column('zones', sa.JSON(), nullable=True),
        sa.Column('phases', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_training_plan_athlete_id', 'training_plan', ['athlete_id'], unique=False)
    op.create_index('ix_training_plan_status', 'training_plan', ['status'], unique=False)
    # At most one active plan per athlete
    op.create_index(
        'uq_training_plan_one_active', 'training_plan', ['athlete_id'], unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'planned_workout',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=False),
        sa.Column('athlete_id', sa.Uuid(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('phase', sa.Text(), nullable=False),
        sa.Column('workout_type', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_minutes', sa.Float(), nullable=False),
        sa.Column('target_zone', sa.Text(), nullable=False),
        sa.Column('target', sa.Text(), nullable=True),
        sa.Column('computed_stress', sa.Float(), nullable=False),
        sa.Column('segments', sa.JSON(), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['training_plan.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id', 'scheduled_date', name='uq_planned_workout_plan_date')
    )
    op.create_index('ix_planned_workout_plan_id', 'planned_workout', ['plan_id'], unique=False)
    op.create_index('ix_planned_workout_athlete_id', 'planned_workout', ['athlete_id'], unique=False)
    op.create_index('ix_planned_workout_date', 'planned_workout', ['scheduled_date'], unique=False)

    op.create_table(
        'training_plan_preference',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=False),
        sa.Column('athlete_id', sa.Uuid(), nullable=False),
        sa.Column('days_per_week', sa.Integer(), nullable=True),
        sa.Column('available_days', sa.JSON(), nullable=False),
        sa.Column('long_run_day', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('target_time_seconds', sa.Float(), nullable=True),
        sa.Column('target_time_source', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['training_plan.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id')
    )
    op.create_index('ix_training_plan_preference_athlete_id', 'training_plan_preference', ['athlete_id'], unique=False)

    op.create_table(
        'health_declaration',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('athlete_id', sa.Uuid(), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=True),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('declaration_accepted', sa.Boolean(), nullable=False),
        sa.Column('is_eligible', sa.Boolean(), nullable=False),
        sa.Column('declared_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['training_plan.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_health_declaration_athlete_id', 'health_declaration', ['athlete_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_health_declaration_athlete_id', table_name='health_declaration')
    op.drop_table('health_declaration')
    op.drop_index('ix_training_plan_preference_athlete_id', table_name='training_plan_preference')
    op.drop_table('training_plan_preference')
    op.drop_index('ix_planned_workout_date', table_name='planned_workout')
    op.drop_index('ix_planned_workout_athlete_id', table_name='planned_workout')
    op.drop_index('ix_planned_workout_plan_id', table_name='planned_workout')
    op.drop_table('planned_workout')
    op.drop_index('uq_training_plan_one_active', table_name='training_plan')
    op.drop_index('ix_training_plan_status', table_name='training_plan')
    op.drop_index('ix_training_plan_athlete_id', table_name='training_plan')
    op.drop_table('training_plan')
