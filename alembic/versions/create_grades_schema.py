"""Create roster and grades tables

Revision ID: 3a9c1e7d4b20
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a9c1e7d4b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, classes, subjects, assignments, enrollments and grades."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=True, unique=True),
        sa.Column('role', sa.String(), nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'classes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.String(), nullable=True),
    )
    op.create_index('ix_classes_id', 'classes', ['id'])
    op.create_index('ix_classes_name', 'classes', ['name'])

    op.create_table(
        'subjects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False, unique=True),
    )
    op.create_index('ix_subjects_id', 'subjects', ['id'])
    op.create_index('ix_subjects_name', 'subjects', ['name'])

    op.create_table(
        'teacher_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('subject_id', sa.Integer(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.Column('academic_year', sa.String(length=9), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('teacher_id', 'class_id', 'subject_id', name='uq_teacher_class_subject'),
    )
    op.create_index('ix_teacher_assignments_teacher_id', 'teacher_assignments', ['teacher_id'])
    op.create_index('ix_teacher_assignments_class_id', 'teacher_assignments', ['class_id'])
    op.create_index('ix_teacher_assignments_subject_id', 'teacher_assignments', ['subject_id'])

    op.create_table(
        'class_students',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.UniqueConstraint('class_id', 'student_id', name='uq_class_student'),
    )
    op.create_index('ix_class_students_class_id', 'class_students', ['class_id'])
    op.create_index('ix_class_students_student_id', 'class_students', ['student_id'])

    op.create_table(
        'grades',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('subject_id', sa.Integer(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.Column('grade_value', sa.Numeric(4, 2), nullable=False),
        sa.Column('grade_type', sa.String(), nullable=False, server_default='homework'),
        sa.Column('weight', sa.Numeric(5, 2), nullable=False, server_default='1.0'),
        sa.Column('term', sa.String(), nullable=False, server_default='1'),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('recorded_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_grades_id', 'grades', ['id'])
    op.create_index('idx_grade_lookup', 'grades', ['student_id', 'subject_id', 'class_id', 'term', 'academic_year'])
    op.create_index('idx_class_subject_term', 'grades', ['class_id', 'subject_id', 'term'])
    op.create_index('idx_student_term_year', 'grades', ['student_id', 'term', 'academic_year'])


def downgrade() -> None:
    """Drop the grades schema, dependents first."""
    op.drop_index('idx_student_term_year', table_name='grades')
    op.drop_index('idx_class_subject_term', table_name='grades')
    op.drop_index('idx_grade_lookup', table_name='grades')
    op.drop_index('ix_grades_id', table_name='grades')
    op.drop_table('grades')
    op.drop_table('class_students')
    op.drop_table('teacher_assignments')
    op.drop_table('subjects')
    op.drop_table('classes')
    op.drop_table('users')
