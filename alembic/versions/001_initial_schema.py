"""Initial schema: users, content, study activity, gamification.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id UUID PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            role VARCHAR(16) NOT NULL DEFAULT 'user',
            subscription_tier VARCHAR(32) NOT NULL DEFAULT 'free',
            subscription_expires_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_preferences (
            user_id UUID PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            difficulty_level VARCHAR(16),
            study_goals JSONB NOT NULL DEFAULT '[]',
            notifications_enabled BOOLEAN NOT NULL DEFAULT true,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS password_reset_tokens (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            token_hash VARCHAR(64) UNIQUE NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            expires_at TIMESTAMPTZ NOT NULL,
            used_at TIMESTAMPTZ
        )
    """)

    # --- Content ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS certifications (
            id UUID PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            type VARCHAR(32) NOT NULL,
            description TEXT,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS knowledge_areas (
            id UUID PRIMARY KEY,
            certification_id UUID NOT NULL REFERENCES certifications(id) ON DELETE CASCADE,
            name VARCHAR(200) NOT NULL,
            description TEXT,
            display_order INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_knowledge_areas_certification
        ON knowledge_areas(certification_id, display_order)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS questions (
            id UUID PRIMARY KEY,
            certification_id UUID NOT NULL REFERENCES certifications(id) ON DELETE CASCADE,
            knowledge_area_id UUID NOT NULL REFERENCES knowledge_areas(id) ON DELETE CASCADE,
            question_text TEXT NOT NULL,
            explanation TEXT,
            difficulty VARCHAR(16) NOT NULL DEFAULT 'medium',
            domain VARCHAR(64),
            question_type VARCHAR(32) NOT NULL DEFAULT 'multiple_choice',
            question_metadata JSONB,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_questions_certification ON questions(certification_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_questions_knowledge_area
        ON questions(knowledge_area_id, created_at DESC)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS answers (
            id UUID PRIMARY KEY,
            question_id UUID NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            answer_text TEXT NOT NULL,
            is_correct BOOLEAN NOT NULL DEFAULT false,
            display_order INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_answers_question ON answers(question_id, display_order)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS flashcards (
            id UUID PRIMARY KEY,
            front_face TEXT NOT NULL,
            back_face TEXT NOT NULL,
            knowledge_area VARCHAR(200) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_flashcards_knowledge_area ON flashcards(knowledge_area)
    """)

    # --- Study activity ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS mock_exams (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            certification_id UUID NOT NULL REFERENCES certifications(id) ON DELETE CASCADE,
            exam_type VARCHAR(16) NOT NULL DEFAULT 'mock',
            total_questions INTEGER NOT NULL,
            correct_answers INTEGER,
            score DOUBLE PRECISION,
            question_ids JSONB NOT NULL DEFAULT '[]',
            started_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_mock_exams_user ON mock_exams(user_id, started_at DESC)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_answers (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            question_id UUID NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            answer_id UUID REFERENCES answers(id) ON DELETE SET NULL,
            mock_exam_id UUID REFERENCES mock_exams(id) ON DELETE SET NULL,
            is_correct BOOLEAN NOT NULL,
            answered_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_answers_user ON user_answers(user_id, answered_at DESC)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_answers_exam ON user_answers(mock_exam_id)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_progress (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            certification_id UUID NOT NULL REFERENCES certifications(id) ON DELETE CASCADE,
            total_questions_answered INTEGER NOT NULL DEFAULT 0,
            correct_answers INTEGER NOT NULL DEFAULT 0,
            accuracy DOUBLE PRECISION NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_progress_user_id_certification_id_key UNIQUE(user_id, certification_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS missed_questions_reviewed (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            question_id UUID NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            reviewed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT missed_questions_reviewed_user_id_question_id_key UNIQUE(user_id, question_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS bookmarks (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            question_id UUID NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT bookmarks_user_id_question_id_key UNIQUE(user_id, question_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_flashcard_progress (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            flashcard_id UUID NOT NULL REFERENCES flashcards(id) ON DELETE CASCADE,
            is_marked BOOLEAN NOT NULL DEFAULT false,
            times_reviewed INTEGER NOT NULL DEFAULT 0,
            times_correct INTEGER NOT NULL DEFAULT 0,
            times_incorrect INTEGER NOT NULL DEFAULT 0,
            last_reviewed_at TIMESTAMPTZ,
            CONSTRAINT user_flashcard_progress_user_id_flashcard_id_key UNIQUE(user_id, flashcard_id)
        )
    """)

    # --- Gamification ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS streaks (
            user_id UUID PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_activity_date DATE,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT streaks_longest_ge_current CHECK (longest_streak >= current_streak)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_type VARCHAR(64) NOT NULL,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT badges_user_id_badge_type_key UNIQUE(user_id, badge_type)
        )
    """)


def downgrade() -> None:
    for table in (
        "badges",
        "streaks",
        "user_flashcard_progress",
        "bookmarks",
        "missed_questions_reviewed",
        "user_progress",
        "user_answers",
        "mock_exams",
        "flashcards",
        "answers",
        "questions",
        "knowledge_areas",
        "certifications",
        "password_reset_tokens",
        "user_preferences",
        "users",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
