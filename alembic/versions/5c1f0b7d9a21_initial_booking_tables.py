"""initial booking tables

Revision ID: 5c1f0b7d9a21
Revises:
Create Date: 2026-10-18 10:12:44.318202

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5c1f0b7d9a21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Barbers, keyed by phone
    op.create_table(
        'barbers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('phone_number', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('refresh_token_encrypted', sa.LargeBinary(), nullable=True),
        sa.Column('selected_calendar_id', sa.String(255), nullable=False, server_default='primary'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_barbers_phone_number', 'barbers', ['phone_number'], unique=True)

    # 2. Clients, keyed by phone
    op.create_table(
        'clients',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('phone_number', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('preferred_barber_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('barbers.id'), nullable=True),
        sa.Column('conversation_history', sa.JSON(), nullable=True),
        sa.Column('last_booking_state', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_clients_phone_number', 'clients', ['phone_number'], unique=True)

    # 3. Appointments, linked to calendar events
    op.create_table(
        'appointments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('client_phone', sa.String(20), nullable=False),
        sa.Column('barber_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('barbers.id'), nullable=False),
        sa.Column('service_type', sa.String(200), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('google_calendar_event_id', sa.String(1024), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('end_time > start_time', name='ck_appointments_end_after_start'),
    )
    op.create_index('ix_appointments_client_phone', 'appointments', ['client_phone'])

    # 4. Conversation sessions and messages
    op.create_table(
        'conversation_sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('phone_number', sa.String(20), nullable=False),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_conversation_sessions_phone_number', 'conversation_sessions', ['phone_number'], unique=True)

    op.create_table(
        'conversation_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('session_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('conversation_sessions.id'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        'ix_conversation_messages_session_created', 'conversation_messages', ['session_id', 'created_at']
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_conversation_messages_session_created', table_name='conversation_messages')
    op.drop_table('conversation_messages')
    op.drop_index('ix_conversation_sessions_phone_number', table_name='conversation_sessions')
    op.drop_table('conversation_sessions')
    op.drop_index('ix_appointments_client_phone', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_clients_phone_number', table_name='clients')
    op.drop_table('clients')
    op.drop_index('ix_barbers_phone_number', table_name='barbers')
    op.drop_table('barbers')
