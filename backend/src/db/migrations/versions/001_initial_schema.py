"""Initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-01-12

Creates the organisation and user tables, the compliance record tables
scanned by the compliance checks, and the notifications table.

Every table carries a UUIDv7 column backing its external GUID.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = (
    'READ_ONLY', 'CARER', 'SENIOR_CARER', 'OFFICE_STAFF',
    'MANAGER', 'ORG_ADMIN', 'SUPER_ADMIN',
)


def _uuid_column() -> sa.Column:
    return sa.Column(
        'uuid',
        postgresql.UUID(as_uuid=True).with_variant(sa.LargeBinary(16), 'sqlite'),
        nullable=False,
    )


def _index_uuid(table: str) -> None:
    op.create_index(f'ix_{table}_uuid', table, ['uuid'], unique=True)


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'organisations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_uuid('organisations')
    op.create_index('ix_organisations_name', 'organisations', ['name'], unique=True)
    op.create_index('ix_organisations_is_active', 'organisations', ['is_active'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column(
            'role',
            sa.Enum(*USER_ROLES, name='user_role', create_constraint=True),
            nullable=False,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['organisation_id'], ['organisations.id'], name='fk_users_organisation_id'
        ),
    )
    _index_uuid('users')
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_organisation_id', 'users', ['organisation_id'])
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    # Workforce
    op.create_table(
        'staff_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
    )
    _index_uuid('staff_members')
    op.create_index('ix_staff_members_organisation_id', 'staff_members', ['organisation_id'])
    op.create_index('ix_staff_members_status', 'staff_members', ['status'])

    op.create_table(
        'staff_pvg_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('staff_member_id', sa.Integer(), nullable=False),
        sa.Column('certificate_number', sa.String(length=50), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('renewal_date', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['staff_member_id'], ['staff_members.id']),
    )
    _index_uuid('staff_pvg_records')
    op.create_index('ix_staff_pvg_records_staff_member_id', 'staff_pvg_records', ['staff_member_id'])
    op.create_index('ix_staff_pvg_records_renewal_date', 'staff_pvg_records', ['renewal_date'])

    op.create_table(
        'staff_registrations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('staff_member_id', sa.Integer(), nullable=False),
        sa.Column('registration_type', sa.String(length=20), nullable=False),
        sa.Column('registration_number', sa.String(length=50), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['staff_member_id'], ['staff_members.id']),
    )
    _index_uuid('staff_registrations')
    op.create_index('ix_staff_registrations_staff_member_id', 'staff_registrations', ['staff_member_id'])
    op.create_index('ix_staff_registrations_expiry_date', 'staff_registrations', ['expiry_date'])

    op.create_table(
        'staff_training_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('staff_member_id', sa.Integer(), nullable=False),
        sa.Column('training_type', sa.String(length=100), nullable=False),
        sa.Column('is_mandatory', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['staff_member_id'], ['staff_members.id']),
    )
    _index_uuid('staff_training_records')
    op.create_index('ix_staff_training_records_staff_member_id', 'staff_training_records', ['staff_member_id'])
    op.create_index('ix_staff_training_records_expiry_date', 'staff_training_records', ['expiry_date'])

    # Clients
    op.create_table(
        'service_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
    )
    _index_uuid('service_users')
    op.create_index('ix_service_users_organisation_id', 'service_users', ['organisation_id'])
    op.create_index('ix_service_users_status', 'service_users', ['status'])

    op.create_table(
        'personal_plans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('service_user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('next_review_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_user_id'], ['service_users.id']),
    )
    _index_uuid('personal_plans')
    op.create_index('ix_personal_plans_service_user_id', 'personal_plans', ['service_user_id'])
    op.create_index('ix_personal_plans_status', 'personal_plans', ['status'])
    op.create_index('ix_personal_plans_next_review_date', 'personal_plans', ['next_review_date'])

    op.create_table(
        'service_user_reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('service_user_id', sa.Integer(), nullable=False),
        sa.Column('review_date', sa.Date(), nullable=False),
        sa.Column('outcome', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_user_id'], ['service_users.id']),
    )
    _index_uuid('service_user_reviews')
    op.create_index('ix_service_user_reviews_service_user_id', 'service_user_reviews', ['service_user_id'])
    op.create_index('ix_service_user_reviews_review_date', 'service_user_reviews', ['review_date'])

    # Organisation records
    op.create_table(
        'policies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('policy_name', sa.String(length=255), nullable=False),
        sa.Column('version', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('next_review_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
    )
    _index_uuid('policies')
    op.create_index('ix_policies_organisation_id', 'policies', ['organisation_id'])
    op.create_index('ix_policies_status', 'policies', ['status'])
    op.create_index('ix_policies_next_review_date', 'policies', ['next_review_date'])

    op.create_table(
        'equipment_checks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('equipment_name', sa.String(length=255), nullable=False),
        sa.Column('serial_number', sa.String(length=100), nullable=True),
        sa.Column('last_check_date', sa.Date(), nullable=True),
        sa.Column('next_check_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
    )
    _index_uuid('equipment_checks')
    op.create_index('ix_equipment_checks_organisation_id', 'equipment_checks', ['organisation_id'])
    op.create_index('ix_equipment_checks_next_check_date', 'equipment_checks', ['next_check_date'])

    op.create_table(
        'incidents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('service_user_id', sa.Integer(), nullable=True),
        sa.Column('incident_type', sa.String(length=100), nullable=False),
        sa.Column('incident_date', sa.DateTime(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='open'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
        sa.ForeignKeyConstraint(['service_user_id'], ['service_users.id']),
    )
    _index_uuid('incidents')
    op.create_index('ix_incidents_organisation_id', 'incidents', ['organisation_id'])
    op.create_index('ix_incidents_service_user_id', 'incidents', ['service_user_id'])
    op.create_index('ix_incidents_incident_date', 'incidents', ['incident_date'])
    op.create_index('ix_incidents_status', 'incidents', ['status'])

    # Notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.String(length=1000), nullable=False),
        sa.Column('entity_type', sa.String(length=30), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
    )
    _index_uuid('notifications')
    op.create_index('ix_notifications_organisation_id', 'notifications', ['organisation_id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index(
        'ix_notifications_org_user_read', 'notifications',
        ['organisation_id', 'user_id', 'is_read'],
    )
    op.create_index(
        'ix_notifications_dedup', 'notifications',
        ['organisation_id', 'user_id', 'title', 'entity_type', 'entity_id', 'created_at'],
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        'notifications',
        'incidents',
        'equipment_checks',
        'policies',
        'service_user_reviews',
        'personal_plans',
        'service_users',
        'staff_training_records',
        'staff_registrations',
        'staff_pvg_records',
        'staff_members',
        'users',
        'organisations',
    ):
        op.drop_table(table)

    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
