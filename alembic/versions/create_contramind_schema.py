"""Create ContraMind schema

Revision ID: create_contramind_schema
Revises: 
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_contramind_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('open_id', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.Text, nullable=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('login_method', sa.String(64), nullable=True),
        sa.Column('role', sa.String(32), nullable=False, server_default='user'),
        sa.Column('subscription_tier', sa.String(32), nullable=False, server_default='free_trial'),
        sa.Column('subscription_status', sa.String(32), nullable=False, server_default='trial'),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('language', sa.String(32), nullable=False, server_default='en'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        _timestamp('last_signed_in'),
    )

    op.create_table(
        'contracts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('filename', sa.String(500), nullable=False),
        sa.Column('file_key', sa.String(500), nullable=False),
        sa.Column('file_url', sa.Text, nullable=False),
        sa.Column('file_size', sa.Integer, nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('extracted_text', sa.Text, nullable=True),
        sa.Column('detected_language', sa.String(32), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='uploading'),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('risk_score', sa.String(32), nullable=True),
        sa.Column('sharia_compliance', sa.String(32), nullable=True),
        sa.Column('ksa_compliance', sa.String(32), nullable=True),
        sa.Column('analysis', sa.JSON, nullable=True),
        _timestamp('uploaded_at'),
        sa.Column('analyzed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_contracts_user_id', 'contracts', ['user_id'])
    op.create_index('ix_contracts_status', 'contracts', ['status'])

    op.create_table(
        'ai_messages',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('contract_id', sa.Integer, sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('tokens_used', sa.Integer, nullable=True),
        sa.Column('prompt_type', sa.String(100), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_ai_messages_contract_id', 'ai_messages', ['contract_id'])
    op.create_index('ix_ai_messages_user_id', 'ai_messages', ['user_id'])

    op.create_table(
        'ai_feedback',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('message_id', sa.Integer, sa.ForeignKey('ai_messages.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.String(32), nullable=False),
        sa.Column('comment', sa.Text, nullable=True),
        _timestamp('created_at'),
    )

    op.create_table(
        'knowledge_base',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('filename', sa.String(500), nullable=False),
        sa.Column('file_key', sa.String(500), nullable=False),
        sa.Column('file_url', sa.Text, nullable=False),
        sa.Column('file_size', sa.Integer, nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('extracted_text', sa.Text, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        _timestamp('uploaded_at'),
    )
    op.create_index('ix_knowledge_base_user_id', 'knowledge_base', ['user_id'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('tier', sa.String(32), nullable=False),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('billing_cycle', sa.String(32), nullable=False),
        sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('payment_method_token', sa.String(500), nullable=True),
        sa.Column('payment_method_last4', sa.String(4), nullable=True),
        sa.Column('payment_method_brand', sa.String(50), nullable=True),
        sa.Column('cancel_at_period_end', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('canceled_at', sa.DateTime(timezone=True), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subscription_id', sa.Integer, sa.ForeignKey('subscriptions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Integer, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='SAR'),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('transaction_id', sa.String(500), nullable=True, unique=True),
        sa.Column('tier', sa.String(32), nullable=True),
        sa.Column('billing_cycle', sa.String(32), nullable=True),
        sa.Column('gateway_order_id', sa.String(500), nullable=True),
        sa.Column('gateway_payment_id', sa.String(500), nullable=True),
        sa.Column('failure_reason', sa.Text, nullable=True),
        sa.Column('refunded_at', sa.DateTime(timezone=True), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])

    op.create_table(
        'support_tickets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('ticket_number', sa.String(50), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='open'),
        sa.Column('priority', sa.String(32), nullable=False, server_default='medium'),
        sa.Column('assigned_to', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_support_tickets_user_id', 'support_tickets', ['user_id'])
    op.create_index('ix_support_tickets_status', 'support_tickets', ['status'])

    op.create_table(
        'ticket_messages',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('ticket_id', sa.Integer, sa.ForeignKey('support_tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_type', sa.String(32), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        _timestamp('created_at'),
    )
    op.create_index('ix_ticket_messages_ticket_id', 'ticket_messages', ['ticket_id'])

    op.create_table(
        'admin_audit_log',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('admin_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(50), nullable=True),
        sa.Column('resource_id', sa.Integer, nullable=True),
        sa.Column('details', sa.Text, nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_admin_audit_log_admin_user_id', 'admin_audit_log', ['admin_user_id'])
    op.create_index('ix_admin_audit_log_action', 'admin_audit_log', ['action'])

    op.create_table(
        'prompt_library',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('title_ar', sa.String(200), nullable=True),
        sa.Column('prompt', sa.Text, nullable=False),
        sa.Column('prompt_ar', sa.Text, nullable=True),
        sa.Column('display_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp('created_at'),
    )
    op.create_index('ix_prompt_library_category', 'prompt_library', ['category'])

    op.create_table(
        'rum_metrics',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('metric_name', sa.String(16), nullable=False),
        sa.Column('metric_value', sa.Integer, nullable=False),
        sa.Column('metric_rating', sa.String(32), nullable=False),
        sa.Column('metric_delta', sa.Integer, nullable=False),
        sa.Column('metric_id', sa.String(255), nullable=False),
        sa.Column('navigation_type', sa.String(64), nullable=True),
        sa.Column('url', sa.Text, nullable=False),
        sa.Column('user_agent', sa.Text, nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_rum_metrics_metric_name', 'rum_metrics', ['metric_name'])


def downgrade() -> None:
    op.drop_table('rum_metrics')
    op.drop_table('prompt_library')
    op.drop_table('admin_audit_log')
    op.drop_table('ticket_messages')
    op.drop_table('support_tickets')
    op.drop_table('payments')
    op.drop_table('subscriptions')
    op.drop_table('knowledge_base')
    op.drop_table('ai_feedback')
    op.drop_table('ai_messages')
    op.drop_table('contracts')
    op.drop_table('users')
