"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user / _row_to_admin_user are the
mappers. Route and action code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Schema ownership:
  `metadata` is the single source of truth for the CMS schema. Alembic
  (migrations/env.py) migrates against it. Real databases get their tables
  from `upgrade_head()` only; create_all() without an alembic_version row
  would make 0001_initial fail later. UserStore(create_schema=True) is for
  throwaway in-memory stores in tests.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Index, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from auth.models import AdminUser, User
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("google_id", Text, nullable=False, unique=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("role", String(30), nullable=False, server_default="admin"),
    Column("created_at", String(32), nullable=False),
)

admin_users = Table(
    "admin_users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("name", String(255), nullable=False, server_default=""),
    Column("is_base_admin", Boolean, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Index("idx_admin_users_base_admin", "is_base_admin"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode. Set per-connection; PRAGMAs are not pooled."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and AdminUser entities.

    Usage:
        store = UserStore()
        store.create_admin_user(AdminUser(email="editor@example.com"))
        row = store.get_admin_user(1)
        store.close()
    """

    def __init__(self, db_url: str | None = None, create_schema: bool = False) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        if create_schema:
            metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Users (signed-in identities)
    # ------------------------------------------------------------------

    def get_user_by_id(self, user_id: int) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_email(self, email: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def upsert_user(self, email: str, google_id: str) -> int:
        """Insert a user or refresh google_id for an existing email. Returns the id.

        Emails are matched exactly; callers normalize before calling.
        """
        with self.engine.connect() as conn:
            existing = conn.execute(users.select().where(users.c.email == email)).fetchone()
            if existing is not None:
                conn.execute(users.update().where(users.c.id == existing.id).values(google_id=google_id))
                conn.commit()
                return existing.id
            result = conn.execute(
                users.insert().values(email=email, google_id=google_id, role="admin", created_at=_now_iso())
            )
            conn.commit()
            return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Admin allow-list
    # ------------------------------------------------------------------

    def list_admin_users(self) -> list[AdminUser]:
        """Return the allow-list: base admin first, then oldest to newest."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                admin_users.select().order_by(
                    admin_users.c.is_base_admin.desc(),
                    admin_users.c.created_at.asc(),
                    admin_users.c.id.asc(),
                )
            ).fetchall()
        return [_row_to_admin_user(r) for r in rows]

    def get_admin_user(self, user_id: int) -> AdminUser | None:
        """Look up an allow-list entry by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(admin_users.select().where(admin_users.c.id == user_id)).fetchone()
        return _row_to_admin_user(row) if row is not None else None

    def get_admin_user_by_email(self, email: str) -> AdminUser | None:
        with self.engine.connect() as conn:
            row = conn.execute(admin_users.select().where(admin_users.c.email == email)).fetchone()
        return _row_to_admin_user(row) if row is not None else None

    def create_admin_user(self, admin: AdminUser) -> int | None:
        """Insert an allow-list entry. Returns the new id, or None if the email is taken.

        Uses INSERT ... ON CONFLICT DO NOTHING so a concurrent insert of the
        same address resolves to a single row instead of an IntegrityError.
        """
        stmt = (
            sqlite_insert(admin_users)
            .values(
                email=admin.email,
                name=admin.name,
                is_base_admin=admin.is_base_admin,
                created_at=_now_iso(),
            )
            .on_conflict_do_nothing(index_elements=["email"])
        )
        with self.engine.connect() as conn:
            result = conn.execute(stmt)
            conn.commit()
        if result.rowcount == 0:
            return None
        return result.inserted_primary_key[0]

    def upsert_base_admin(self, email: str) -> None:
        """Ensure `email` is on the allow-list with is_base_admin set."""
        stmt = sqlite_insert(admin_users).values(email=email, name="", is_base_admin=True, created_at=_now_iso())
        stmt = stmt.on_conflict_do_update(index_elements=["email"], set_={"is_base_admin": True})
        with self.engine.connect() as conn:
            conn.execute(stmt)
            conn.commit()

    def delete_admin_user(self, user_id: int) -> bool:
        """Permanently delete an allow-list entry. Returns True if a row was removed.

        The store does not protect the base admin -- auth.actions.remove_user()
        owns that check.
        """
        with self.engine.connect() as conn:
            result = conn.execute(admin_users.delete().where(admin_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        google_id=row.google_id,
        role=row.role,
        created_at=row.created_at,
    )


def _row_to_admin_user(row) -> AdminUser:
    return AdminUser(
        id=row.id,
        email=row.email,
        name=row.name or "",
        is_base_admin=bool(row.is_base_admin),
        created_at=row.created_at,
    )
