"""Database initialization and schema management.

Only the problem bank tables are created here. Cycles, step records,
users and institutions belong to the main application and are read as-is.
"""

import logging
from typing import Any, Dict

from psycopg.errors import DatabaseError

from ..errors import PersistenceError
from .connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Problem bank
CREATE TABLE IF NOT EXISTS problem_bank (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    original_cycle_id UUID UNIQUE,
    source_type TEXT NOT NULL DEFAULT 'cycle',
    source_year INTEGER,
    source_event TEXT,
    title VARCHAR(200) NOT NULL,
    problem_statement TEXT NOT NULL,
    theme TEXT,
    who_affected TEXT,
    when_occurs TEXT,
    where_occurs TEXT,
    frequency TEXT,
    severity_rating INTEGER CHECK (severity_rating BETWEEN 1 AND 10),
    current_workaround TEXT,
    validation_status TEXT NOT NULL DEFAULT 'unvalidated' CHECK (validation_status IN (
        'unvalidated', 'user_tested', 'desperate_user_confirmed', 'market_validated'
    )),
    users_interviewed INTEGER NOT NULL DEFAULT 0,
    desperate_user_count INTEGER NOT NULL DEFAULT 0,
    desperate_user_score INTEGER CHECK (desperate_user_score BETWEEN 0 AND 5),
    institution_id UUID,
    submitted_by UUID,
    status TEXT NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'solved')),
    is_open_for_attempts BOOLEAN NOT NULL DEFAULT TRUE,
    best_solution_cycle_id UUID,
    search_content TEXT,
    metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Evidence (append-only)
CREATE TABLE IF NOT EXISTS problem_evidence (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    problem_id UUID NOT NULL REFERENCES problem_bank(id),
    evidence_type TEXT NOT NULL DEFAULT 'interview',
    content TEXT NOT NULL,
    source_name TEXT,
    source_role TEXT,
    pain_level INTEGER CHECK (pain_level BETWEEN 1 AND 10),
    collected_at TIMESTAMPTZ,
    collected_by UUID,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Similarity edges, one row per unordered pair
CREATE TABLE IF NOT EXISTS problem_similarities (
    problem_id_a UUID NOT NULL REFERENCES problem_bank(id),
    problem_id_b UUID NOT NULL REFERENCES problem_bank(id),
    similarity_score REAL NOT NULL CHECK (similarity_score >= 0 AND similarity_score <= 1),
    similarity_type TEXT NOT NULL DEFAULT 'keyword',
    computed_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    algorithm_version TEXT NOT NULL,
    PRIMARY KEY (problem_id_a, problem_id_b),
    CHECK (problem_id_a < problem_id_b)
);

-- Clusters
CREATE TABLE IF NOT EXISTS problem_clusters (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    primary_theme TEXT,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'archived')),
    problem_count INTEGER NOT NULL DEFAULT 0,
    avg_severity REAL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Cluster members
CREATE TABLE IF NOT EXISTS problem_cluster_members (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    cluster_id UUID NOT NULL REFERENCES problem_clusters(id),
    problem_id UUID NOT NULL REFERENCES problem_bank(id),
    membership_score REAL NOT NULL CHECK (membership_score >= 0 AND membership_score <= 1),
    is_centroid BOOLEAN NOT NULL DEFAULT FALSE,
    added_by TEXT NOT NULL DEFAULT 'auto' CHECK (added_by IN ('manual', 'auto')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (cluster_id, problem_id)
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_problem_bank_status ON problem_bank(status);
CREATE INDEX IF NOT EXISTS idx_problem_bank_theme ON problem_bank(theme);
CREATE INDEX IF NOT EXISTS idx_problem_evidence_problem_id ON problem_evidence(problem_id);
CREATE INDEX IF NOT EXISTS idx_problem_similarities_b ON problem_similarities(problem_id_b);
CREATE INDEX IF NOT EXISTS idx_problem_clusters_theme ON problem_clusters(primary_theme);
CREATE INDEX IF NOT EXISTS idx_cluster_members_cluster_id ON problem_cluster_members(cluster_id);

-- Update trigger function
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ language 'plpgsql';

-- Create update triggers
CREATE OR REPLACE TRIGGER update_problem_bank_updated_at BEFORE UPDATE ON problem_bank
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER update_problem_clusters_updated_at BEFORE UPDATE ON problem_clusters
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER update_problem_cluster_members_updated_at BEFORE UPDATE ON problem_cluster_members
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""


def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                result = cur.fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


def init_database(config: Dict[str, Any]) -> None:
    """Initialize database schema."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
                conn.commit()
                logger.info("Database schema initialized successfully")
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise PersistenceError(f"Failed to initialize database schema: {e}") from e
