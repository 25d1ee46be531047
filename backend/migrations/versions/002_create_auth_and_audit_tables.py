"""Create login_tokens, org_invites and audit_log tables

Revision ID: 002
Revises: 001
Create Date: 2026-09-01 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'login_tokens',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('token_hash', sa.Text(), nullable=False),
        sa.Column('code_hash', sa.Text(), nullable=False),
        sa.Column('redirect_path', sa.Text(), nullable=True),
        sa.Column('attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('consumed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_login_tokens_email_created_at', 'login_tokens', ['email', 'created_at'])
    op.create_index('ix_login_tokens_token_hash', 'login_tokens', ['token_hash'], unique=True)

    op.create_table(
        'org_invites',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('token_hash', sa.Text(), nullable=False),
        sa.Column('invited_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('accepted_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('revoked_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by'], ['app_user.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['accepted_by'], ['app_user.id'], ondelete='SET NULL'),
        sa.CheckConstraint("role IN ('admin', 'member')", name='ck_org_invites_role'),
    )
    op.create_index('ix_org_invites_org_id_created_at', 'org_invites', ['org_id', 'created_at'])
    op.create_index('ix_org_invites_token_hash', 'org_invites', ['token_hash'], unique=True)

    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.Text(), nullable=True),
        sa.Column('entity_id', sa.Text(), nullable=True),
        sa.Column('metadata_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['app_user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_log_org_id', 'audit_log', ['org_id'])
    op.create_index('ix_audit_log_org_id_created_at', 'audit_log', ['org_id', 'created_at'])


def downgrade():
    op.drop_index('ix_audit_log_org_id_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_org_id', table_name='audit_log')
    op.drop_table('audit_log')

    op.drop_index('ix_org_invites_token_hash', table_name='org_invites')
    op.drop_index('ix_org_invites_org_id_created_at', table_name='org_invites')
    op.drop_table('org_invites')

    op.drop_index('ix_login_tokens_token_hash', table_name='login_tokens')
    op.drop_index('ix_login_tokens_email_created_at', table_name='login_tokens')
    op.drop_table('login_tokens')
