"""create students, fee payments and institute settings

Revision ID: 4b7d2e91c0a3
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7d2e91c0a3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'students',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('father_name', sa.String(length=128), nullable=False),
        sa.Column('aadhar_number', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact_number', sa.String(length=32), nullable=True),
        sa.Column('course', sa.String(length=8), nullable=False),
        sa.Column('photo_path', sa.String(length=255), nullable=True),
        sa.Column('admission_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("course IN ('DOA','DCA','DCAC','DDTP','ADCA')", name='ck_student_course'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('aadhar_number'),
    )

    op.create_table(
        'fee_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('month', sa.String(length=16), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_fee_payment_amount_non_negative'),
        sa.CheckConstraint(
            "month IN ('January','February','March','April','May','June',"
            "'July','August','September','October','November','December')",
            name='ck_fee_payment_month',
        ),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_fee_payments_student_id', 'fee_payments', ['student_id'])
    op.create_index('ix_fee_payments_period', 'fee_payments', ['student_id', 'year', 'month'])

    op.create_table(
        'institute_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('institute_name', sa.String(length=255), nullable=False),
        sa.Column('institute_address', sa.Text(), nullable=False),
        sa.Column('institute_phone', sa.String(length=32), nullable=False),
        sa.Column('institute_email', sa.String(length=128), nullable=False),
        sa.Column('logo_path', sa.String(length=255), nullable=True),
        sa.Column('receipt_prefix', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('institute_settings')
    op.drop_index('ix_fee_payments_period', table_name='fee_payments')
    op.drop_index('ix_fee_payments_student_id', table_name='fee_payments')
    op.drop_table('fee_payments')
    op.drop_table('students')
