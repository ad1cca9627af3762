"""initial meu nps schema

Revision ID: 001
Revises:
Create Date: 2025-06-02

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
import json

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


SURVEY_CUSTOMIZATION = {
    "backgroundType": "color",
    "backgroundColor": "#f8fafc",
    "primaryColor": "#073143",
    "textColor": "#1f2937",
}
AUTOMATION = {
    "enabled": False,
    "action": "return_only",
    "successMessage": "Obrigado pelo seu feedback!",
    "errorMessage": "Ocorreu um erro. Tente novamente.",
}
PREFERENCES = {
    "language": "pt-BR",
    "theme": "light",
    "emailNotifications": {"newResponses": True, "weeklyReports": True, "productUpdates": False},
}
COMPANY = {"name": "", "document": "", "address": "", "email": "", "phone": ""}
INTEGRATIONS = {
    "smtp": {
        "enabled": False, "host": "", "port": 587, "secure": False,
        "username": "", "password": "", "fromName": "", "fromEmail": "",
    },
    "zenvia": {
        "email": {"enabled": False, "apiKey": "", "fromEmail": "", "fromName": ""},
        "sms": {"enabled": False, "apiKey": "", "from": ""},
        "whatsapp": {"enabled": False, "apiKey": "", "from": ""},
    },
}
BANK_ACCOUNT = {"type": "", "bank": "", "agency": "", "account": "", "pixKey": "", "pixType": ""}
PERMISSIONS = {"view_users": True, "view_subscriptions": True}


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()'))


def _owner(unique=False):
    return sa.Column(
        'user_id', postgresql.UUID(as_uuid=True),
        sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=unique,
    )


def _json(name, default):
    return sa.Column(
        name, postgresql.JSONB(astext_type=sa.Text()), nullable=False,
        server_default=sa.text(f"'{json.dumps(default)}'::jsonb"),
    )


def _timestamps(updated=True):
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP'))
        )
    return columns


def _taxonomy(table, color=None):
    columns = [
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
    ]
    if color:
        columns.append(sa.Column('color', sa.String(length=20), nullable=True, server_default=color))
    op.create_table(
        table,
        *columns,
        _owner(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(f'ix_{table}_user_id', table, ['user_id'])


def upgrade():
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=1024), nullable=True),
        sa.Column('is_deactivated', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('trial_start_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='users_email_key'),
    )

    _taxonomy('sources', color='#3B82F6')
    _taxonomy('situations', color='#10B981')
    _taxonomy('groups')

    op.create_table(
        'campaigns',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('default_source_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('sources.id', ondelete='SET NULL'), nullable=True),
        sa.Column('default_group_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('groups.id', ondelete='SET NULL'), nullable=True),
        _json('survey_customization', SURVEY_CUSTOMIZATION),
        _json('automation', AUTOMATION),
        _owner(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_campaigns_user_id', 'campaigns', ['user_id'])

    op.create_table(
        'campaign_forms',
        _id(),
        sa.Column('campaign_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False, unique=True),
        _json('fields', []),
        _owner(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'nps_responses',
        _id(),
        sa.Column('campaign_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('source_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('sources.id', ondelete='SET NULL'), nullable=True),
        sa.Column('situation_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('situations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('group_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('groups.id', ondelete='SET NULL'), nullable=True),
        _json('form_responses', {}),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('score >= 0 AND score <= 10', name='nps_responses_score_range'),
    )
    op.create_index('ix_nps_responses_campaign_id', 'nps_responses', ['campaign_id'])

    op.create_table(
        'contacts',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        _json('group_ids', []),
        _json('tags', []),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('last_contact_date', sa.DateTime(timezone=True), nullable=True),
        _owner(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contacts_user_id', 'contacts', ['user_id'])

    op.create_table(
        'user_profiles',
        _id(),
        _owner(unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=1024), nullable=True),
        _json('preferences', PREFERENCES),
        sa.Column('trial_start_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'app_configs',
        _id(),
        _owner(unique=True),
        sa.Column('theme_color', sa.String(length=20), nullable=False, server_default='#00ac75'),
        sa.Column('language', sa.String(length=10), nullable=False, server_default='pt-BR'),
        _json('company', COMPANY),
        _json('integrations', INTEGRATIONS),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'user_affiliates',
        _id(),
        _owner(unique=True),
        sa.Column('affiliate_code', sa.String(length=16), nullable=False, unique=True),
        _json('bank_account', BANK_ACCOUNT),
        sa.Column('total_referrals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_received', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_pending', sa.Numeric(12, 2), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'affiliate_referrals',
        _id(),
        sa.Column('affiliate_user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('referred_user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subscription_id', sa.String(length=255), nullable=True),
        sa.Column('commission_amount', sa.Numeric(12, 2), nullable=False, server_default='25.00'),
        sa.Column('commission_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "commission_status IN ('pending', 'paid', 'cancelled')",
            name='affiliate_referrals_status_check',
        ),
    )
    op.create_index('ix_affiliate_referrals_affiliate_user_id', 'affiliate_referrals', ['affiliate_user_id'])

    op.create_table(
        'user_admin',
        _id(),
        _owner(unique=True),
        _json('permissions', PERMISSIONS),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    for table in (
        'user_admin',
        'affiliate_referrals',
        'user_affiliates',
        'app_configs',
        'user_profiles',
        'contacts',
        'nps_responses',
        'campaign_forms',
        'campaigns',
        'groups',
        'situations',
        'sources',
        'users',
    ):
        op.drop_table(table)
