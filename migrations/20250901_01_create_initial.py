from yoyo import step

steps = [
    step(
        """
        CREATE EXTENSION IF NOT EXISTS pgcrypto;
        """,
        """
        SELECT 1;
        """
    ),

    step(
        """
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            first_name VARCHAR(100) NOT NULL DEFAULT '',
            last_name VARCHAR(100) NOT NULL DEFAULT '',
            email VARCHAR(255) NOT NULL,
            phone VARCHAR(50) NOT NULL DEFAULT '',
            auth_sub VARCHAR(255),
            profile_image_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ,
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            deleted_at TIMESTAMPTZ
        );
        CREATE INDEX idx_users_email_lower ON users (lower(email)) WHERE NOT is_deleted;
        CREATE INDEX idx_users_auth_sub ON users (auth_sub) WHERE NOT is_deleted;
        """,
        """
        DROP INDEX IF EXISTS idx_users_auth_sub;
        DROP INDEX IF EXISTS idx_users_email_lower;
        DROP TABLE users;
        """
    ),

    step(
        """
        CREATE TABLE personas (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            display_name VARCHAR(100) NOT NULL,
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            profile_image_url TEXT,
            training_file_path TEXT,
            created_by VARCHAR(255),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ,
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            deleted_at TIMESTAMPTZ
        );
        CREATE INDEX idx_personas_display_name_lower ON personas (lower(display_name)) WHERE NOT is_deleted;
        CREATE INDEX idx_personas_created_at ON personas (created_at DESC);
        """,
        """
        DROP INDEX IF EXISTS idx_personas_created_at;
        DROP INDEX IF EXISTS idx_personas_display_name_lower;
        DROP TABLE personas;
        """
    ),

    step(
        """
        CREATE TABLE chats (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            persona_id UUID NOT NULL REFERENCES personas(id),
            user_id UUID NOT NULL REFERENCES users(id),
            title VARCHAR(255),
            last_message_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ,
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            deleted_at TIMESTAMPTZ
        );
        CREATE INDEX idx_chats_user_created_at ON chats (user_id, created_at DESC);
        CREATE INDEX idx_chats_persona ON chats (persona_id) WHERE NOT is_deleted;
        """,
        """
        DROP INDEX IF EXISTS idx_chats_persona;
        DROP INDEX IF EXISTS idx_chats_user_created_at;
        DROP TABLE chats;
        """
    ),

    step(
        """
        CREATE TABLE messages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            seq BIGSERIAL NOT NULL,
            chat_id UUID NOT NULL,
            role VARCHAR(20) NOT NULL,
            content TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ,
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            deleted_at TIMESTAMPTZ,
            CONSTRAINT chk_messages_role CHECK (role IN ('user', 'assistant'))
        );
        CREATE INDEX idx_messages_chat_created_seq
        ON messages (chat_id, created_at DESC, seq DESC);
        """,
        """
        DROP INDEX IF EXISTS idx_messages_chat_created_seq;
        DROP TABLE messages;
        """
    ),
]
