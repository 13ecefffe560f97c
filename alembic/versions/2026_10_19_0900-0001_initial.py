"""initial tutor selection schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('Lecturer', 'Candidate', 'Admin', name='userrole', native_enum=False), nullable=False),
        sa.Column('is_blocked', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'])
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.String(length=20), nullable=True),
        sa.Column('end_date', sa.String(length=20), nullable=True),
        sa.Column('lecturer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_courses_id'), 'courses', ['id'])
    op.create_index(op.f('ix_courses_code'), 'courses', ['code'], unique=True)
    op.create_index(op.f('ix_courses_lecturer_id'), 'courses', ['lecturer_id'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('course_code', sa.String(length=20), sa.ForeignKey('courses.code'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.Enum('Tutor', 'Lab Assistant', name='applicationtype', native_enum=False), nullable=False),
        sa.Column('selected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('availability', sa.String(length=50), nullable=True),
        sa.Column('academic_credentials', sa.Text(), nullable=True),
        sa.Column('previous_roles', sa.Text(), nullable=True),
        sa.Column('skills', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_applications_id'), 'applications', ['id'])
    op.create_index(op.f('ix_applications_course_code'), 'applications', ['course_code'])
    op.create_index(op.f('ix_applications_user_id'), 'applications', ['user_id'])

    op.create_table(
        'selected_applications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('rank > 0', name='ck_selected_applications_rank_positive'),
    )
    op.create_index(op.f('ix_selected_applications_id'), 'selected_applications', ['id'])
    op.create_index(op.f('ix_selected_applications_user_id'), 'selected_applications', ['user_id'])
    op.create_index('idx_selected_applications_rank', 'selected_applications', ['rank'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('selected_application_id', sa.Integer(), sa.ForeignKey('selected_applications.id'), nullable=False),
        sa.Column('author_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_comments_id'), 'comments', ['id'])
    op.create_index(op.f('ix_comments_selected_application_id'), 'comments', ['selected_application_id'])


def downgrade() -> None:
    op.drop_table('comments')
    op.drop_table('selected_applications')
    op.drop_table('applications')
    op.drop_table('courses')
    op.drop_table('users')
