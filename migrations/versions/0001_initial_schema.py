"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Agents, metric catalog, weekly progress per metric kind and targets.
Progress and target tables key metrics by remote id (position + kind
offset); metric_definitions keys them by position.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    metric_kind_enum = sa.Enum("action", "skillset", "requirement", name="metric_kind_enum")
    metric_kind_enum.create(op.get_bind(), checkfirst=True)

    # --- sales_agents ---
    op.create_table(
        "sales_agents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mentor_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("full_name", sa.String(256), nullable=False),
        sa.Column("profile_image", sa.String(512), nullable=True),
        sa.Column("generation", sa.Integer(), nullable=True),
        sa.Column("current_rank", sa.Integer(), nullable=True),
        sa.Column("rank_name", sa.String(128), nullable=True),
        sa.Column("probation_status", sa.String(64), nullable=False, server_default=""),
        sa.Column("probation_extended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("starting_date", sa.Date(), nullable=True),
        sa.Column("property_type", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sales_agents_id", "sales_agents", ["id"])
    op.create_index("ix_sales_agents_mentor_id", "sales_agents", ["mentor_id"])

    # --- metric_definitions ---
    op.create_table(
        "metric_definitions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.Enum(
            "action", "skillset", "requirement", name="metric_kind_enum", create_type=False,
        ), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("kind", "position", name="uq_metric_kind_position"),
    )
    op.create_index("ix_metric_definitions_id", "metric_definitions", ["id"])
    op.create_index("ix_metric_definitions_kind", "metric_definitions", ["kind"])

    # --- kpi_action_progress ---
    op.create_table(
        "kpi_action_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("kpi_id", sa.Integer(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_kpi_action_progress_id", "kpi_action_progress", ["id"])
    op.create_index("ix_kpi_action_progress_agent_id", "kpi_action_progress", ["agent_id"])
    op.create_index("ix_kpi_action_progress_week_number", "kpi_action_progress", ["week_number"])

    # --- kpi_skillset_progress ---
    op.create_table(
        "kpi_skillset_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("kpi_id", sa.Integer(), nullable=False),
        sa.Column("wording_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("tonality_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("rapport_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("total_score", sa.Numeric(5, 2), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_kpi_skillset_progress_id", "kpi_skillset_progress", ["id"])
    op.create_index("ix_kpi_skillset_progress_agent_id", "kpi_skillset_progress", ["agent_id"])
    op.create_index("ix_kpi_skillset_progress_week_number", "kpi_skillset_progress", ["week_number"])

    # --- requirement_progress ---
    op.create_table(
        "requirement_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("requirement_id", sa.Integer(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_requirement_progress_id", "requirement_progress", ["id"])
    op.create_index("ix_requirement_progress_agent_id", "requirement_progress", ["agent_id"])
    op.create_index("ix_requirement_progress_week_number", "requirement_progress", ["week_number"])

    # --- sales_targets ---
    op.create_table(
        "sales_targets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mentor_id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("kpi_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("requirement_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("target_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "agent_id", "week_number", "kpi_id", "requirement_id",
            name="uq_sales_target_agent_week_metric",
        ),
    )
    op.create_index("ix_sales_targets_id", "sales_targets", ["id"])
    op.create_index("ix_sales_targets_agent_id", "sales_targets", ["agent_id"])


def downgrade() -> None:
    op.drop_table("sales_targets")
    op.drop_table("requirement_progress")
    op.drop_table("kpi_skillset_progress")
    op.drop_table("kpi_action_progress")
    op.drop_table("metric_definitions")
    op.drop_table("sales_agents")
    sa.Enum(name="metric_kind_enum").drop(op.get_bind(), checkfirst=True)
