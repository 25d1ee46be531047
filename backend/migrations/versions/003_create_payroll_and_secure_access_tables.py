"""Create payroll and secure access tables

Revision ID: 003
Revises: 002
Create Date: 2026-09-02 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'payroll_employees',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), server_default='', nullable=False),
        sa.Column('role', sa.Text(), server_default='', nullable=False),
        sa.Column('department', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_payroll_employees_org_id_created_at', 'payroll_employees', ['org_id', 'created_at'])

    op.create_table(
        'payroll_profiles',
        sa.Column('employee_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('pay_type', sa.Text(), server_default='Hourly', nullable=False),
        sa.Column('hourly_rate', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('salary_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('pto_accrual_rate', sa.Numeric(8, 2), server_default='0', nullable=False),
        sa.Column('stipend', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('notes', sa.Text(), server_default='', nullable=False),
        sa.Column('pay_periods_per_year', sa.Integer(), server_default='26', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('department_rates', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('effective_date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('employee_id'),
        sa.ForeignKeyConstraint(['employee_id'], ['payroll_employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
        sa.CheckConstraint("pay_type IN ('Hourly', 'Salary')", name='ck_payroll_profiles_pay_type'),
    )
    op.create_index('ix_payroll_profiles_org_id', 'payroll_profiles', ['org_id'])

    op.execute("""
        CREATE TRIGGER update_payroll_profiles_updated_at
        BEFORE UPDATE ON payroll_profiles
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)

    op.create_table(
        'payroll_change_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('employee_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('employee_name', sa.Text(), server_default='', nullable=False),
        sa.Column('actor_name', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('summary', sa.Text(), server_default='', nullable=False),
        sa.Column('fields_changed', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('change_type', sa.Text(), nullable=True),
        sa.Column('note_before', sa.Text(), nullable=True),
        sa.Column('note_after', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['payroll_employees.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_payroll_change_logs_org_id_created_at', 'payroll_change_logs', ['org_id', 'created_at'])

    op.create_table(
        'secure_access_vendors',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), server_default='', nullable=False),
        sa.Column('website', sa.Text(), server_default='', nullable=False),
        sa.Column('password_encrypted', sa.Text(), nullable=True),
        sa.Column('account_number', sa.Text(), server_default='', nullable=False),
        sa.Column('contact_phone', sa.Text(), server_default='', nullable=False),
        sa.Column('contact_email', sa.Text(), server_default='', nullable=False),
        sa.Column('last_updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('last_updated_by', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_secure_access_vendors_org_id_created_at', 'secure_access_vendors', ['org_id', 'created_at'])

    # No foreign key on vendor_id: deletion events outlive the vendor row
    op.create_table(
        'secure_access_activity',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('org_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vendor_id', sa.Text(), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('actor_name', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('fields_changed', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['org_id'], ['org.id'], ondelete='CASCADE'),
    )
    op.create_index(
        'ix_secure_access_activity_org_vendor_created',
        'secure_access_activity',
        ['org_id', 'vendor_id', 'created_at'],
    )


def downgrade():
    op.drop_index('ix_secure_access_activity_org_vendor_created', table_name='secure_access_activity')
    op.drop_table('secure_access_activity')

    op.drop_index('ix_secure_access_vendors_org_id_created_at', table_name='secure_access_vendors')
    op.drop_table('secure_access_vendors')

    op.drop_index('ix_payroll_change_logs_org_id_created_at', table_name='payroll_change_logs')
    op.drop_table('payroll_change_logs')

    op.execute('DROP TRIGGER IF EXISTS update_payroll_profiles_updated_at ON payroll_profiles')
    op.drop_index('ix_payroll_profiles_org_id', table_name='payroll_profiles')
    op.drop_table('payroll_profiles')

    op.drop_index('ix_payroll_employees_org_id_created_at', table_name='payroll_employees')
    op.drop_table('payroll_employees')
