"""Create customer, invoice and delivery tables

Revision ID: 001_create_invoice_schema
Revises:
Create Date: 2025-01-15 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_invoice_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('whatsapp_number', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Create invoices table
    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('public_token', sa.String(), nullable=True),
        sa.Column('pdf_path', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id']),
    )

    # Unique lookups on invoice_number and public_token
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_public_token', 'invoices', ['public_token'], unique=True)
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])

    # Create invoice_items table
    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id']),
        sa.CheckConstraint('quantity > 0', name='check_invoice_item_quantity'),
        sa.CheckConstraint('price > 0', name='check_invoice_item_price'),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    # Create delivery_messages table
    op.create_table(
        'delivery_messages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_id', sa.Uuid(), nullable=False),
        sa.Column('message_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('error', sa.String(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id']),
        sa.CheckConstraint("status IN ('sent','failed','delivered')", name='check_delivery_message_status'),
    )
    op.create_index('ix_delivery_messages_invoice_id', 'delivery_messages', ['invoice_id'])
    op.create_index('ix_delivery_messages_message_id', 'delivery_messages', ['message_id'])


def downgrade():
    # Drop tables in reverse order
    op.drop_table('delivery_messages')
    op.drop_table('invoice_items')
    op.drop_table('invoices')
    op.drop_table('customers')
