"""initial schema of sport venue booking

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLE = sa.Enum(
    'CUSTOMER', 'MEMBER', 'STAFF', 'ADMIN', 'SUPERADMIN', name='user_role',
)
RESERVATION_STATUS = sa.Enum(
    'PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED',
    name='reservation_status',
)
PAYMENT_STATUS = sa.Enum(
    'PENDING', 'PAID', 'FAILED', 'REFUNDED', name='payment_status',
)
TRANSACTION_TYPE = sa.Enum('INCOME', 'EXPENSE', name='transaction_type')


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column(
            'is_active',
            sa.Boolean(),
            server_default=sa.true(),
            nullable=False,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'user',
        *_base_columns(),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('hashed_password', sa.String(length=1024), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column(
            'role',
            USER_ROLE,
            server_default='CUSTOMER',
            nullable=False,
        ),
        sa.CheckConstraint('phone IS NOT NULL OR email IS NOT NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_username', 'user', ['username'], unique=True)
    op.create_index('ix_user_role', 'user', ['role'])

    op.create_table(
        'venuetype',
        *_base_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_venuetype_name', 'venuetype', ['name'], unique=True)

    op.create_table(
        'venue',
        *_base_columns(),
        sa.Column('venue_type_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'capacity',
            sa.Integer(),
            server_default='0',
            nullable=False,
        ),
        sa.Column('base_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('weekend_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('facilities', sa.JSON(), nullable=False),
        sa.Column('rules', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.CheckConstraint('base_price >= 0', name='ck_venue_base_price'),
        sa.CheckConstraint(
            'weekend_price IS NULL OR weekend_price >= 0',
            name='ck_venue_weekend_price',
        ),
        sa.CheckConstraint('capacity >= 0', name='ck_venue_capacity'),
        sa.ForeignKeyConstraint(
            ['venue_type_id'], ['venuetype.id'], ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_venue_name', 'venue', ['name'], unique=True)
    op.create_index('ix_venue_venue_type_id', 'venue', ['venue_type_id'])

    op.create_table(
        'timeslot',
        *_base_columns(),
        sa.Column('venue_id', sa.Uuid(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column(
            'price_multiplier_weekday',
            sa.Numeric(4, 2),
            server_default='1.00',
            nullable=False,
        ),
        sa.Column(
            'price_multiplier_weekend',
            sa.Numeric(4, 2),
            server_default='1.00',
            nullable=False,
        ),
        sa.Column(
            'is_available',
            sa.Boolean(),
            server_default=sa.true(),
            nullable=False,
        ),
        sa.CheckConstraint(
            'start_time < end_time', name='ck_time_slot_interval',
        ),
        sa.CheckConstraint(
            'price_multiplier_weekday > 0 AND price_multiplier_weekend > 0',
            name='ck_time_slot_multipliers',
        ),
        sa.ForeignKeyConstraint(
            ['venue_id'], ['venue.id'], ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'venue_id',
            'start_time',
            'end_time',
            name='uq_time_slot_venue_window',
        ),
    )
    op.create_index('ix_timeslot_venue_id', 'timeslot', ['venue_id'])

    op.create_table(
        'reservation',
        *_base_columns(),
        sa.Column('reservation_code', sa.String(length=20), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('venue_id', sa.Uuid(), nullable=False),
        sa.Column('time_slot_id', sa.Uuid(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('duration_hours', sa.Numeric(4, 2), nullable=False),
        sa.Column('base_price', sa.Numeric(12, 2), nullable=False),
        sa.Column(
            'discount_percentage',
            sa.Numeric(5, 2),
            server_default='0',
            nullable=False,
        ),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column(
            'status',
            RESERVATION_STATUS,
            server_default='PENDING',
            nullable=False,
        ),
        sa.Column(
            'payment_status',
            PAYMENT_STATUS,
            server_default='PENDING',
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint(
            'start_time < end_time', name='ck_reservation_interval',
        ),
        sa.CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_reservation_discount',
        ),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['venue_id'], ['venue.id'], ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['time_slot_id'], ['timeslot.id'], ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_code'),
    )
    op.create_index('ix_reservation_user_id', 'reservation', ['user_id'])
    op.create_index('ix_reservation_venue_id', 'reservation', ['venue_id'])
    op.create_index(
        'ix_reservation_reservation_date', 'reservation', ['reservation_date'],
    )
    op.create_index('ix_reservation_status', 'reservation', ['status'])
    op.create_index(
        'ix_reservation_venue_date_window',
        'reservation',
        ['venue_id', 'reservation_date', 'start_time', 'end_time'],
    )
    op.create_index(
        'uq_reservation_active_window',
        'reservation',
        ['venue_id', 'reservation_date', 'start_time', 'end_time'],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'CONFIRMED')"),
    )

    op.create_table(
        'financialtransaction',
        *_base_columns(),
        sa.Column('reservation_id', sa.Uuid(), nullable=True),
        sa.Column('transaction_type', TRANSACTION_TYPE, nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column(
            'transaction_date',
            sa.Date(),
            server_default=sa.func.current_date(),
            nullable=False,
        ),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_financial_amount_positive'),
        sa.ForeignKeyConstraint(
            ['reservation_id'], ['reservation.id'], ondelete='SET NULL',
        ),
        sa.ForeignKeyConstraint(
            ['created_by'], ['user.id'], ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_financialtransaction_reservation_id',
        'financialtransaction',
        ['reservation_id'],
    )
    op.create_index(
        'ix_financialtransaction_transaction_type',
        'financialtransaction',
        ['transaction_type'],
    )
    op.create_index(
        'ix_financialtransaction_transaction_date',
        'financialtransaction',
        ['transaction_date'],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('financialtransaction')
    op.drop_table('reservation')
    op.drop_table('timeslot')
    op.drop_table('venue')
    op.drop_table('venuetype')
    op.drop_table('user')
    bind = op.get_bind()
    for enum in (TRANSACTION_TYPE, PAYMENT_STATUS, RESERVATION_STATUS):
        enum.drop(bind, checkfirst=True)
    USER_ROLE.drop(bind, checkfirst=True)
