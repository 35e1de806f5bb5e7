"""create users table

Revision ID: 3f8a2c1d9b7e
Revises:
Create Date: 2025-03-01 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f8a2c1d9b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='用户ID（自增）'),
        sa.Column('username', sa.String(length=50), nullable=False, comment='用户名（唯一）'),
        sa.Column('email', sa.String(length=100), nullable=False, comment='邮箱（唯一）'),
        sa.Column('password', sa.String(length=255), nullable=False, comment='密码哈希'),
        sa.Column('real_name', sa.String(length=50), nullable=True, comment='真实姓名'),
        sa.Column('phone', sa.String(length=20), nullable=True, comment='手机号'),
        sa.Column('status', sa.Integer(), server_default='1', nullable=False, comment='状态：0-禁用，1-启用'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
