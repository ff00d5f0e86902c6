"""
Migration: Add vendor trust & recovery fields.

Adds the trust columns to vendor_profiles (for databases where the profile
table predates the trust engine), the `version` compare-and-swap column, and
the trust_admin_actions audit table.

`version` is bumped only by the application's ProfileStore. The server-side
update_vendor_trust_score() function must leave it untouched.
"""
from sqlalchemy import create_engine, text
import os

# Use same DB URL pattern as main app
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('USER', 'postgres')}@localhost:5432/vendor_trust"
)

TRUST_COLUMNS = [
    ("trust_score", "INTEGER NOT NULL DEFAULT 70"),
    ("trust_tier", "VARCHAR(50) NOT NULL DEFAULT 'New or Improving'"),
    ("last_trust_score_update", "TIMESTAMP"),
    ("trust_score_last_drop_reason", "TEXT"),
    ("verified_vendor", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("orders_fulfilled", "INTEGER NOT NULL DEFAULT 0"),
    ("disputes_count", "INTEGER NOT NULL DEFAULT 0"),
    ("warnings_count", "INTEGER NOT NULL DEFAULT 0"),
    ("positive_reviews", "INTEGER NOT NULL DEFAULT 0"),
    ("acknowledged_latest_policies", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("trust_recovery_active", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("trust_recovery_start", "TIMESTAMP"),
    ("trust_recovery_goals", "JSON NOT NULL DEFAULT '[]'"),
    ("trust_recovery_goals_generated_at", "TIMESTAMP"),
    ("trust_recovery_progress", "DOUBLE PRECISION NOT NULL DEFAULT 0"),
    ("trust_recovery_completed", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("version", "INTEGER NOT NULL DEFAULT 1"),
]


def column_exists(conn, table_name: str, column_name: str) -> bool:
    """Check if a column exists in the table."""
    result = conn.execute(text("""
        SELECT EXISTS (
            SELECT FROM information_schema.columns
            WHERE table_name = :table_name
            AND column_name = :column_name
        )
    """), {"table_name": table_name, "column_name": column_name})
    return result.fetchone()[0]


def run_migration():
    """Add trust fields to vendor_profiles and create trust_admin_actions."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        for column, ddl in TRUST_COLUMNS:
            if column_exists(conn, "vendor_profiles", column):
                print(f"{column} column already exists")
                continue
            conn.execute(text(f"ALTER TABLE vendor_profiles ADD COLUMN {column} {ddl}"))
            print(f"Added {column} column")

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS trust_admin_actions (
                id VARCHAR(36) PRIMARY KEY,
                vendor_id VARCHAR(36) NOT NULL REFERENCES vendor_profiles(id) ON DELETE CASCADE,
                action_type VARCHAR(50) NOT NULL,
                actor VARCHAR(20) NOT NULL,
                actor_user_id VARCHAR(36),
                notes TEXT,
                event_metadata JSON,
                created_at TIMESTAMP NOT NULL DEFAULT NOW()
            )
        """))
        print("Ensured trust_admin_actions table")

        conn.execute(text("""
            CREATE INDEX IF NOT EXISTS idx_trust_admin_actions_vendor
            ON trust_admin_actions(vendor_id)
        """))

        # Admin console filters on recovery status
        conn.execute(text("""
            CREATE INDEX IF NOT EXISTS idx_vendor_profiles_recovery_active
            ON vendor_profiles(trust_recovery_active)
            WHERE trust_recovery_active = TRUE
        """))
        print("Created indexes")

        conn.commit()
        print("\nVendor trust fields migration completed successfully!")


def rollback_migration():
    """Remove the version column and audit table. Trust data columns are kept."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        conn.execute(text("DROP INDEX IF EXISTS idx_vendor_profiles_recovery_active"))
        conn.execute(text("DROP TABLE IF EXISTS trust_admin_actions"))
        print("Dropped trust_admin_actions table")

        if column_exists(conn, "vendor_profiles", "version"):
            conn.execute(text("ALTER TABLE vendor_profiles DROP COLUMN version"))
            print("Dropped version column")

        conn.commit()
        print("\nVendor trust fields rollback completed!")


if __name__ == "__main__":
    import sys
    if len(sys.argv) > 1 and sys.argv[1] == "rollback":
        rollback_migration()
    else:
        run_migration()
