from alembic import op
import sqlalchemy as sa

revision = '0002_submissions'
down_revision = '0001_users'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('size', sa.BigInteger, nullable=False),
        sa.Column('mime_type', sa.String(length=128), nullable=False),
        sa.Column('url', sa.Text, nullable=False),
        sa.Column('path', sa.String(length=512), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )
    op.create_index('ix_submissions_user_id', 'submissions', ['user_id'])
    op.create_index('ix_submissions_user_created', 'submissions', ['user_id', 'created_at'])

def downgrade():
    op.drop_index('ix_submissions_user_created', table_name='submissions')
    op.drop_index('ix_submissions_user_id', table_name='submissions')
    op.drop_table('submissions')
