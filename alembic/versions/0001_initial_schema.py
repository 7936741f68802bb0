"""initial travel crm schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _uuid_pk():
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _created_at():
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
    )


def _user_fk(name, ondelete="SET NULL", nullable=True):
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete),
        nullable=nullable,
    )


def _lead_fk():
    return sa.Column(
        "lead_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
    )


def _itinerary_fk():
    return sa.Column(
        "itinerary_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("itineraries.id", ondelete="SET NULL"),
    )


def upgrade() -> None:
    # ---------------------------------------------------------------
    # Users and targets
    # ---------------------------------------------------------------
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20)),
        sa.Column("role", sa.String(20), nullable=False, server_default="sales"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("last_assigned_at", sa.DateTime(timezone=True)),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.CheckConstraint("role IN ('admin', 'sales')", name="ck_user_role"),
        sa.CheckConstraint(
            "status IN ('active', 'inactive')", name="ck_user_status"
        ),
    )
    op.create_index(
        "idx_users_rotation", "users", ["role", "status", "last_assigned_at"]
    )

    op.create_table(
        "targets",
        _uuid_pk(),
        _user_fk("user_id", ondelete="CASCADE", nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("target_leads", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "target_conversions", sa.Integer, nullable=False, server_default="0"
        ),
        sa.Column(
            "target_revenue", sa.Numeric(15, 2), nullable=False, server_default="0"
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.UniqueConstraint("user_id", "month", "year", name="uq_target_user_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_target_month"),
        sa.CheckConstraint(
            "target_leads >= 0 AND target_conversions >= 0 AND target_revenue >= 0",
            name="ck_target_nonneg",
        ),
    )

    # ---------------------------------------------------------------
    # Itinerary catalogue
    # ---------------------------------------------------------------
    op.create_table(
        "itineraries",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("destination", sa.String(120), nullable=False),
        sa.Column("transport_mode", sa.String(20), nullable=False),
        sa.Column("days", sa.Integer, nullable=False, server_default="1"),
        sa.Column("cost_usd", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("cost_inr", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("details", sa.Text),
        _created_at(),
        sa.CheckConstraint(
            "transport_mode IN ('driver', 'self_drive', 'scooter')",
            name="ck_itinerary_transport",
        ),
        sa.CheckConstraint("days > 0", name="ck_itinerary_days"),
        sa.CheckConstraint(
            "cost_usd >= 0 AND cost_inr >= 0", name="ck_itinerary_costs_nonneg"
        ),
    )

    # ---------------------------------------------------------------
    # Leads
    # ---------------------------------------------------------------
    op.create_table(
        "leads",
        _uuid_pk(),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("country_code", sa.String(6), nullable=False, server_default="+91"),
        sa.Column("contact_number", sa.String(20), nullable=False),
        sa.Column("place", sa.String(120), nullable=False),
        sa.Column("no_of_pax", sa.Integer, nullable=False),
        sa.Column(
            "expected_budget", sa.Numeric(15, 2), nullable=False, server_default="0"
        ),
        sa.Column("travel_date", sa.Date),
        sa.Column("travel_month", sa.String(7)),
        sa.Column("lead_source", sa.String(30), nullable=False, server_default="Other"),
        sa.Column("lead_type", sa.String(20), nullable=False, server_default="normal"),
        sa.Column("status", sa.String(40), nullable=False, server_default="allocated"),
        sa.Column("call_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("remark", sa.Text),
        sa.Column("feedback_requested_at", sa.DateTime(timezone=True)),
        _user_fk("assigned_to"),
        _user_fk("assigned_by"),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.CheckConstraint("no_of_pax > 0", name="ck_lead_pax_positive"),
        sa.CheckConstraint("expected_budget >= 0", name="ck_lead_budget_nonneg"),
        sa.CheckConstraint("call_count >= 0", name="ck_lead_call_count_nonneg"),
        sa.CheckConstraint(
            "(travel_date IS NULL) <> (travel_month IS NULL)",
            name="ck_lead_travel_date_xor_month",
        ),
        sa.CheckConstraint(
            "status IN ('allocated', 'hot', 'follow_up', 'confirmed', "
            "'allocated_to_operations', 'dead', 'no_response')",
            name="ck_lead_status",
        ),
        sa.CheckConstraint(
            "lead_type IN ('normal', 'urgent', 'hot')", name="ck_lead_type"
        ),
        sa.CheckConstraint(
            "lead_source IN ('Instagram', 'Facebook', 'Google Ads', 'Website', "
            "'WhatsApp', 'Phone', 'Other')",
            name="ck_lead_source",
        ),
    )
    op.create_index("idx_leads_assigned_status", "leads", ["assigned_to", "status"])
    op.create_index("idx_leads_created_at", "leads", ["created_at"])

    # ---------------------------------------------------------------
    # Lead history: follow-ups, confirmations, reminders, calls
    # ---------------------------------------------------------------
    op.create_table(
        "follow_ups",
        _uuid_pk(),
        _lead_fk(),
        _user_fk("sales_person_id"),
        sa.Column("action_type", sa.String(40), nullable=False),
        sa.Column("remark", sa.Text, nullable=False),
        sa.Column("next_follow_up_date", sa.Date),
        sa.Column("next_follow_up_time", sa.Time),
        _itinerary_fk(),
        sa.Column("total_amount", sa.Numeric(15, 2)),
        sa.Column("advance_amount", sa.Numeric(15, 2)),
        sa.Column("due_amount", sa.Numeric(15, 2)),
        sa.Column("transaction_id", sa.String(100)),
        sa.Column("dead_reason", sa.Text),
        _created_at(),
        sa.CheckConstraint(
            "action_type IN ('itinerary_sent', 'itinerary_updated', 'follow_up', "
            "'almost_confirmed', 'confirmed_advance_paid', 'dead', 'no_response', "
            "'reassigned', 'allocated_to_operations')",
            name="ck_follow_up_type",
        ),
        sa.CheckConstraint("length(trim(remark)) > 0", name="ck_follow_up_remark"),
        sa.CheckConstraint(
            "due_amount IS NULL OR due_amount = total_amount - advance_amount",
            name="ck_follow_up_due_amount",
        ),
        sa.CheckConstraint(
            "action_type <> 'dead' OR dead_reason IS NOT NULL",
            name="ck_follow_up_dead_reason",
        ),
    )
    op.create_index(
        "idx_follow_ups_lead_created", "follow_ups", ["lead_id", "created_at"]
    )
    op.create_index(
        "idx_follow_ups_agent_next_date",
        "follow_ups",
        ["sales_person_id", "next_follow_up_date"],
    )

    op.create_table(
        "confirmations",
        _uuid_pk(),
        _lead_fk(),
        _user_fk("confirmed_by"),
        _itinerary_fk(),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("advance_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("transaction_id", sa.String(100), nullable=False),
        sa.Column("payment_mode", sa.String(20)),
        sa.Column("travel_date", sa.Date, nullable=False),
        sa.Column("remark", sa.Text),
        _created_at(),
        sa.CheckConstraint(
            "advance_amount >= 0 AND advance_amount <= total_amount",
            name="ck_confirmation_amounts",
        ),
        sa.CheckConstraint(
            "payment_mode IS NULL OR payment_mode IN "
            "('upi', 'cash', 'bank_transfer', 'card')",
            name="ck_confirmation_payment_mode",
        ),
    )
    op.create_index(
        "idx_confirmations_confirmed_by_created",
        "confirmations",
        ["confirmed_by", "created_at"],
    )

    op.create_table(
        "reminders",
        _uuid_pk(),
        _lead_fk(),
        _user_fk("sales_person_id"),
        sa.Column("travel_date", sa.Date, nullable=False),
        sa.Column("reminder_date", sa.Date, nullable=False),
        sa.Column("reminder_time", sa.Time, nullable=False),
        sa.Column("calendar_event_id", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _created_at(),
        sa.CheckConstraint(
            "reminder_date = travel_date - 7", name="ck_reminder_seven_days"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'done', 'cancelled')", name="ck_reminder_status"
        ),
    )
    op.create_index(
        "idx_reminders_agent_date", "reminders", ["sales_person_id", "reminder_date"]
    )

    op.create_table(
        "call_logs",
        _uuid_pk(),
        _lead_fk(),
        _user_fk("sales_person_id"),
        sa.Column("call_start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("call_end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("call_duration", sa.Integer, nullable=False),
        sa.CheckConstraint("call_duration >= 0", name="ck_call_duration_nonneg"),
        sa.CheckConstraint(
            "call_end_time >= call_start_time", name="ck_call_end_after_start"
        ),
    )
    op.create_index(
        "idx_call_logs_agent_start", "call_logs", ["sales_person_id", "call_start_time"]
    )

    # ---------------------------------------------------------------
    # Notifications
    # ---------------------------------------------------------------
    op.create_table(
        "notifications",
        _uuid_pk(),
        _user_fk("user_id", ondelete="CASCADE", nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column(
            "lead_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.id", ondelete="CASCADE"),
        ),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
        sa.CheckConstraint(
            "type IN ('lead_assigned', 'follow_up', 'message', 'allocation', "
            "'trip_confirmed')",
            name="ck_notification_type",
        ),
    )
    op.create_index(
        "idx_notifications_user_created", "notifications", ["user_id", "created_at"]
    )


def downgrade() -> None:
    for table in (
        "notifications",
        "call_logs",
        "reminders",
        "confirmations",
        "follow_ups",
        "leads",
        "itineraries",
        "targets",
        "users",
    ):
        op.drop_table(table)
