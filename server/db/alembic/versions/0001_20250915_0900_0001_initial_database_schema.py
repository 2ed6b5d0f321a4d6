"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2025-09-15 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create travels table
    op.create_table('travels',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=1024), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('whatsapp', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rating >= 0 AND rating <= 5', name='ck_travel_rating_range'),
        sa.CheckConstraint('review_count >= 0', name='ck_travel_review_count_non_negative'),
        sa.CheckConstraint('length(slug) > 0', name='ck_travel_slug_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_travels_owner_id'), 'travels', ['owner_id'], unique=True)
    op.create_index(op.f('ix_travels_slug'), 'travels', ['slug'], unique=True)
    op.create_index(op.f('ix_travels_verified'), 'travels', ['verified'], unique=False)
    op.create_index(op.f('ix_travels_is_active'), 'travels', ['is_active'], unique=False)
    op.create_index(op.f('ix_travels_created_at'), 'travels', ['created_at'], unique=False)

    # Create packages table
    op.create_table('packages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('package_type', sa.String(length=20), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('hotel_makkah', sa.String(length=255), nullable=True),
        sa.Column('hotel_madinah', sa.String(length=255), nullable=True),
        sa.Column('hotel_star', sa.Integer(), nullable=False),
        sa.Column('airline', sa.String(length=255), nullable=True),
        sa.Column('flight_type', sa.String(length=20), nullable=False),
        sa.Column('meal_type', sa.String(length=20), nullable=False),
        sa.Column('facilities', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('duration_days >= 1', name='ck_package_duration_positive'),
        sa.CheckConstraint('hotel_star >= 1 AND hotel_star <= 5', name='ck_package_hotel_star_range'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_packages_travel_id'), 'packages', ['travel_id'], unique=False)
    op.create_index(op.f('ix_packages_package_type'), 'packages', ['package_type'], unique=False)
    op.create_index(op.f('ix_packages_is_active'), 'packages', ['is_active'], unique=False)
    op.create_index(op.f('ix_packages_created_at'), 'packages', ['created_at'], unique=False)

    # Create departures table
    op.create_table('departures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('departure_date', sa.Date(), nullable=False),
        sa.Column('return_date', sa.Date(), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('original_price', sa.BigInteger(), nullable=True),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_departure_price_non_negative'),
        sa.CheckConstraint('total_seats >= 0', name='ck_departure_total_seats_non_negative'),
        sa.CheckConstraint('available_seats >= 0', name='ck_departure_available_non_negative'),
        sa.CheckConstraint('available_seats <= total_seats', name='ck_departure_available_lte_total'),
        sa.CheckConstraint('return_date > departure_date', name='ck_departure_return_after_departure'),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_departures_package_id'), 'departures', ['package_id'], unique=False)
    op.create_index(op.f('ix_departures_departure_date'), 'departures', ['departure_date'], unique=False)
    op.create_index(op.f('ix_departures_status'), 'departures', ['status'], unique=False)
    op.create_index(op.f('ix_departures_created_at'), 'departures', ['created_at'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('departure_id', sa.Uuid(), nullable=True),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('booking_code', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('number_of_pilgrims', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.BigInteger(), nullable=False),
        sa.Column('paid_amount', sa.BigInteger(), nullable=False),
        sa.Column('remaining_amount', sa.BigInteger(), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=False),
        sa.Column('contact_phone', sa.String(length=32), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('agent_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            'number_of_pilgrims >= 1 AND number_of_pilgrims <= 50', name='ck_booking_pilgrims_range'
        ),
        sa.CheckConstraint('total_price >= 0', name='ck_booking_total_non_negative'),
        sa.CheckConstraint('paid_amount >= 0', name='ck_booking_paid_non_negative'),
        sa.CheckConstraint('length(booking_code) > 0', name='ck_booking_code_not_empty'),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['departure_id'], ['departures.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_package_id'), 'bookings', ['package_id'], unique=False)
    op.create_index(op.f('ix_bookings_departure_id'), 'bookings', ['departure_id'], unique=False)
    op.create_index(op.f('ix_bookings_travel_id'), 'bookings', ['travel_id'], unique=False)
    op.create_index(op.f('ix_bookings_booking_code'), 'bookings', ['booking_code'], unique=True)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_created_at'), 'bookings', ['created_at'], unique=False)

    # Create payment_schedules table
    op.create_table('payment_schedules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('payment_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('paid_amount', sa.BigInteger(), nullable=True),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reminder_sent_h7', sa.Boolean(), nullable=False),
        sa.Column('reminder_sent_h3', sa.Boolean(), nullable=False),
        sa.Column('reminder_sent_h1', sa.Boolean(), nullable=False),
        sa.Column('reminder_sent_overdue', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_payment_schedule_amount_positive'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_schedules_booking_id'), 'payment_schedules', ['booking_id'], unique=False)
    op.create_index(op.f('ix_payment_schedules_due_date'), 'payment_schedules', ['due_date'], unique=False)
    op.create_index(op.f('ix_payment_schedules_is_paid'), 'payment_schedules', ['is_paid'], unique=False)
    op.create_index(op.f('ix_payment_schedules_created_at'), 'payment_schedules', ['created_at'], unique=False)

    # Create payment_notifications table
    op.create_table('payment_notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('payment_schedule_id', sa.Uuid(), nullable=True),
        sa.Column('notification_type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['payment_schedule_id'], ['payment_schedules.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_notifications_user_id'), 'payment_notifications', ['user_id'], unique=False)
    op.create_index(
        op.f('ix_payment_notifications_booking_id'), 'payment_notifications', ['booking_id'], unique=False
    )
    op.create_index(op.f('ix_payment_notifications_sent_at'), 'payment_notifications', ['sent_at'], unique=False)

    # Create departure_notifications table
    op.create_table('departure_notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('notification_type', sa.String(length=10), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_id', 'notification_type', name='uq_departure_notification_booking_type')
    )
    op.create_index(
        op.f('ix_departure_notifications_user_id'), 'departure_notifications', ['user_id'], unique=False
    )
    op.create_index(
        op.f('ix_departure_notifications_booking_id'), 'departure_notifications', ['booking_id'], unique=False
    )
    op.create_index(
        op.f('ix_departure_notifications_sent_at'), 'departure_notifications', ['sent_at'], unique=False
    )

    # Create agent_notifications table
    op.create_table('agent_notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('notification_type', sa.String(length=30), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('reference_id', sa.Uuid(), nullable=True),
        sa.Column('reference_type', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_agent_notifications_travel_id'), 'agent_notifications', ['travel_id'], unique=False)
    op.create_index(
        op.f('ix_agent_notifications_notification_type'), 'agent_notifications', ['notification_type'], unique=False
    )
    op.create_index(
        op.f('ix_agent_notifications_reference_id'), 'agent_notifications', ['reference_id'], unique=False
    )
    op.create_index(op.f('ix_agent_notifications_created_at'), 'agent_notifications', ['created_at'], unique=False)

    # Create package_credits table
    op.create_table('package_credits',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('credits_remaining', sa.Integer(), nullable=False),
        sa.Column('credits_used', sa.Integer(), nullable=False),
        sa.Column('last_purchase_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('credits_remaining >= 0', name='ck_package_credits_remaining_non_negative'),
        sa.CheckConstraint('credits_used >= 0', name='ck_package_credits_used_non_negative'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_package_credits_travel_id'), 'package_credits', ['travel_id'], unique=True)
    op.create_index(op.f('ix_package_credits_created_at'), 'package_credits', ['created_at'], unique=False)

    # Create credit_transactions table
    op.create_table('credit_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=True),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=True),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=128), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount <> 0', name='ck_credit_transaction_amount_non_zero'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_credit_transactions_travel_id'), 'credit_transactions', ['travel_id'], unique=False)
    op.create_index(
        op.f('ix_credit_transactions_transaction_type'), 'credit_transactions', ['transaction_type'], unique=False
    )
    op.create_index(op.f('ix_credit_transactions_status'), 'credit_transactions', ['status'], unique=False)
    op.create_index(op.f('ix_credit_transactions_created_at'), 'credit_transactions', ['created_at'], unique=False)

    # Create featured_packages table
    op.create_table('featured_packages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('credits_used', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('credits_used >= 0', name='ck_featured_credits_non_negative'),
        sa.CheckConstraint('end_date > start_date', name='ck_featured_end_after_start'),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_featured_packages_package_id'), 'featured_packages', ['package_id'], unique=False)
    op.create_index(op.f('ix_featured_packages_travel_id'), 'featured_packages', ['travel_id'], unique=False)
    op.create_index(op.f('ix_featured_packages_position'), 'featured_packages', ['position'], unique=False)
    op.create_index(op.f('ix_featured_packages_end_date'), 'featured_packages', ['end_date'], unique=False)
    op.create_index(op.f('ix_featured_packages_status'), 'featured_packages', ['status'], unique=False)
    op.create_index(op.f('ix_featured_packages_created_at'), 'featured_packages', ['created_at'], unique=False)

    # Create memberships table
    op.create_table('memberships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('plan_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_memberships_travel_id'), 'memberships', ['travel_id'], unique=False)
    op.create_index(op.f('ix_memberships_status'), 'memberships', ['status'], unique=False)
    op.create_index(op.f('ix_memberships_end_date'), 'memberships', ['end_date'], unique=False)
    op.create_index(op.f('ix_memberships_created_at'), 'memberships', ['created_at'], unique=False)

    # Create platform_settings table
    op.create_table('platform_settings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_platform_settings_key'), 'platform_settings', ['key'], unique=True)
    op.create_index(op.f('ix_platform_settings_created_at'), 'platform_settings', ['created_at'], unique=False)

    # Create subscription_plans table
    op.create_table('subscription_plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_yearly', sa.BigInteger(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_subscription_plans_created_at'), 'subscription_plans', ['created_at'], unique=False)

    # Create user_subscriptions table
    op.create_table('user_subscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('plan_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('payment_amount', sa.BigInteger(), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.Column('verified_by', sa.String(length=128), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['subscription_plans.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_subscriptions_user_id'), 'user_subscriptions', ['user_id'], unique=True)
    op.create_index(op.f('ix_user_subscriptions_status'), 'user_subscriptions', ['status'], unique=False)
    op.create_index(op.f('ix_user_subscriptions_end_date'), 'user_subscriptions', ['end_date'], unique=False)
    op.create_index(op.f('ix_user_subscriptions_created_at'), 'user_subscriptions', ['created_at'], unique=False)

    # Create feedback table
    op.create_table('feedback',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=True),
        sa.Column('feedback_type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('screenshot_url', sa.String(length=1024), nullable=True),
        sa.Column('device_info', sa.JSON(), nullable=True),
        sa.Column('app_version', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rating IS NULL OR (rating >= 1 AND rating <= 5)', name='ck_feedback_rating_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_feedback_user_id'), 'feedback', ['user_id'], unique=False)
    op.create_index(op.f('ix_feedback_feedback_type'), 'feedback', ['feedback_type'], unique=False)
    op.create_index(op.f('ix_feedback_status'), 'feedback', ['status'], unique=False)
    op.create_index(op.f('ix_feedback_created_at'), 'feedback', ['created_at'], unique=False)

    # Create content_ratings table
    op.create_table('content_ratings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('content_type', sa.String(length=50), nullable=False),
        sa.Column('content_id', sa.String(length=64), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_content_rating_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'content_type', 'content_id', name='uq_content_rating_user_content')
    )
    op.create_index(op.f('ix_content_ratings_user_id'), 'content_ratings', ['user_id'], unique=False)
    op.create_index(op.f('ix_content_ratings_created_at'), 'content_ratings', ['created_at'], unique=False)

    # Create package_inquiries table
    op.create_table('package_inquiries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('departure_id', sa.Uuid(), nullable=True),
        sa.Column('travel_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=True),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=15), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('message', sa.String(length=500), nullable=True),
        sa.Column('number_of_people', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('agent_notes', sa.Text(), nullable=True),
        sa.Column('contacted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('number_of_people >= 1 AND number_of_people <= 50', name='ck_inquiry_people_range'),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['departure_id'], ['departures.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['travel_id'], ['travels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_package_inquiries_package_id'), 'package_inquiries', ['package_id'], unique=False)
    op.create_index(op.f('ix_package_inquiries_travel_id'), 'package_inquiries', ['travel_id'], unique=False)
    op.create_index(op.f('ix_package_inquiries_user_id'), 'package_inquiries', ['user_id'], unique=False)
    op.create_index(op.f('ix_package_inquiries_status'), 'package_inquiries', ['status'], unique=False)
    op.create_index(op.f('ix_package_inquiries_created_at'), 'package_inquiries', ['created_at'], unique=False)

    # Create shop_sellers table
    op.create_table('shop_sellers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('shop_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shop_sellers_user_id'), 'shop_sellers', ['user_id'], unique=True)
    op.create_index(op.f('ix_shop_sellers_status'), 'shop_sellers', ['status'], unique=False)
    op.create_index(op.f('ix_shop_sellers_created_at'), 'shop_sellers', ['created_at'], unique=False)

    # Create shop_categories table
    op.create_table('shop_categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_shop_categories_created_at'), 'shop_categories', ['created_at'], unique=False)

    # Create shop_products table
    op.create_table('shop_products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('seller_id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('compare_price', sa.BigInteger(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('weight_gram', sa.Integer(), nullable=True),
        sa.Column('thumbnail_url', sa.String(length=1024), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_shop_product_price_non_negative'),
        sa.CheckConstraint('stock >= 0', name='ck_shop_product_stock_non_negative'),
        sa.ForeignKeyConstraint(['seller_id'], ['shop_sellers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['shop_categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shop_products_seller_id'), 'shop_products', ['seller_id'], unique=False)
    op.create_index(op.f('ix_shop_products_category_id'), 'shop_products', ['category_id'], unique=False)
    op.create_index(op.f('ix_shop_products_slug'), 'shop_products', ['slug'], unique=False)
    op.create_index(op.f('ix_shop_products_is_active'), 'shop_products', ['is_active'], unique=False)
    op.create_index(op.f('ix_shop_products_created_at'), 'shop_products', ['created_at'], unique=False)

    # Create shop_orders table
    op.create_table('shop_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('order_code', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_amount', sa.BigInteger(), nullable=False),
        sa.Column('shipping_name', sa.String(length=255), nullable=False),
        sa.Column('shipping_phone', sa.String(length=32), nullable=False),
        sa.Column('shipping_address', sa.Text(), nullable=False),
        sa.Column('shipping_city', sa.String(length=100), nullable=True),
        sa.Column('shipping_postal_code', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('tracking_number', sa.String(length=100), nullable=True),
        sa.Column('courier', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('total_amount >= 0', name='ck_shop_order_total_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shop_orders_user_id'), 'shop_orders', ['user_id'], unique=False)
    op.create_index(op.f('ix_shop_orders_order_code'), 'shop_orders', ['order_code'], unique=True)
    op.create_index(op.f('ix_shop_orders_status'), 'shop_orders', ['status'], unique=False)
    op.create_index(op.f('ix_shop_orders_created_at'), 'shop_orders', ['created_at'], unique=False)

    # Create shop_order_items table
    op.create_table('shop_order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('seller_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('product_price', sa.BigInteger(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.BigInteger(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_shop_order_item_quantity_positive'),
        sa.ForeignKeyConstraint(['order_id'], ['shop_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['shop_products.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['seller_id'], ['shop_sellers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shop_order_items_order_id'), 'shop_order_items', ['order_id'], unique=False)
    op.create_index(op.f('ix_shop_order_items_product_id'), 'shop_order_items', ['product_id'], unique=False)
    op.create_index(op.f('ix_shop_order_items_seller_id'), 'shop_order_items', ['seller_id'], unique=False)

    # Create prayer_categories table
    op.create_table('prayer_categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_arabic', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_prayer_categories_created_at'), 'prayer_categories', ['created_at'], unique=False)

    # Create prayers table
    op.create_table('prayers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('title_arabic', sa.String(length=255), nullable=True),
        sa.Column('arabic_text', sa.Text(), nullable=False),
        sa.Column('transliteration', sa.Text(), nullable=True),
        sa.Column('translation', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=255), nullable=True),
        sa.Column('benefits', sa.Text(), nullable=True),
        sa.Column('audio_url', sa.String(length=1024), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['prayer_categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_prayers_category_id'), 'prayers', ['category_id'], unique=False)
    op.create_index(op.f('ix_prayers_created_at'), 'prayers', ['created_at'], unique=False)

    # Create checklists table
    op.create_table('checklists',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('phase', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_checklists_category'), 'checklists', ['category'], unique=False)
    op.create_index(op.f('ix_checklists_created_at'), 'checklists', ['created_at'], unique=False)

    # Create user_checklists table
    op.create_table('user_checklists',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('checklist_id', sa.Uuid(), nullable=False),
        sa.Column('is_checked', sa.Boolean(), nullable=False),
        sa.Column('checked_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['checklist_id'], ['checklists.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'checklist_id', name='uq_user_checklist_user_item')
    )
    op.create_index(op.f('ix_user_checklists_user_id'), 'user_checklists', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_checklists_created_at'), 'user_checklists', ['created_at'], unique=False)

    # Create manasik_guides table
    op.create_table('manasik_guides',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('title_arabic', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('video_url', sa.String(length=1024), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_manasik_guides_category'), 'manasik_guides', ['category'], unique=False)
    op.create_index(op.f('ix_manasik_guides_created_at'), 'manasik_guides', ['created_at'], unique=False)

    # Create idempotency_records table
    op.create_table('idempotency_records',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('idempotency_key', sa.String(length=255), nullable=False),
        sa.Column('method', sa.String(length=100), nullable=False),
        sa.Column('request_body_hash', sa.String(length=64), nullable=False),
        sa.Column('response_status_code', sa.Integer(), nullable=False),
        sa.Column('response_body', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=True),
        sa.CheckConstraint('length(idempotency_key) > 0', name='ck_idempotency_key_not_empty'),
        sa.CheckConstraint('length(request_body_hash) = 64', name='ck_idempotency_hash_length'),
        sa.CheckConstraint(
            'response_status_code >= 100 AND response_status_code <= 599', name='ck_idempotency_status_code_valid'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'idempotency_key', 'method', name='uq_idempotency_user_key_method')
    )
    op.create_index(
        op.f('ix_idempotency_records_idempotency_key'), 'idempotency_records', ['idempotency_key'], unique=False
    )
    op.create_index(op.f('ix_idempotency_records_method'), 'idempotency_records', ['method'], unique=False)
    op.create_index(op.f('ix_idempotency_records_expires_at'), 'idempotency_records', ['expires_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('idempotency_records')
    op.drop_table('manasik_guides')
    op.drop_table('user_checklists')
    op.drop_table('checklists')
    op.drop_table('prayers')
    op.drop_table('prayer_categories')
    op.drop_table('shop_order_items')
    op.drop_table('shop_orders')
    op.drop_table('shop_products')
    op.drop_table('shop_categories')
    op.drop_table('shop_sellers')
    op.drop_table('package_inquiries')
    op.drop_table('content_ratings')
    op.drop_table('feedback')
    op.drop_table('user_subscriptions')
    op.drop_table('subscription_plans')
    op.drop_table('platform_settings')
    op.drop_table('memberships')
    op.drop_table('featured_packages')
    op.drop_table('credit_transactions')
    op.drop_table('package_credits')
    op.drop_table('agent_notifications')
    op.drop_table('departure_notifications')
    op.drop_table('payment_notifications')
    op.drop_table('payment_schedules')
    op.drop_table('bookings')
    op.drop_table('departures')
    op.drop_table('packages')
    op.drop_table('travels')
