# profilehub/storage/database.py
# Relational backend: user-scoped normalized rows in SQLite, reassembled into profiles & master data on load

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from ..core.exceptions import (
    SnapshotCorruptError,
    SnapshotNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..core.models import Category, DataBundle, Item, PersonalInfo, Profile
from .base import PersistenceGateway
from .types import StorageInfo, StorageSnapshot

SCHEMA = """
CREATE TABLE IF NOT EXISTS personal_info (
    user_id TEXT PRIMARY KEY,
    full_name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL,
    location TEXT NOT NULL,
    linkedin TEXT,
    github TEXT,
    website TEXT,
    summary TEXT
);

CREATE TABLE IF NOT EXISTS experiences (
    user_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    company TEXT NOT NULL,
    date TEXT NOT NULL,
    subtitle TEXT,
    PRIMARY KEY (user_id, id)
);

CREATE TABLE IF NOT EXISTS projects (
    user_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    link TEXT,
    subtitle TEXT,
    PRIMARY KEY (user_id, id)
);

CREATE TABLE IF NOT EXISTS skills (
    user_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    details TEXT NOT NULL,
    subtitle TEXT,
    PRIMARY KEY (user_id, id)
);

CREATE TABLE IF NOT EXISTS educations (
    user_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    details TEXT NOT NULL,
    subtitle TEXT,
    PRIMARY KEY (user_id, id)
);

CREATE TABLE IF NOT EXISTS experience_bullets (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    content TEXT NOT NULL,
    entry_order INTEGER NOT NULL,
    PRIMARY KEY (user_id, item_id, entry_order)
);

CREATE TABLE IF NOT EXISTS experience_tags (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    content TEXT NOT NULL,
    entry_order INTEGER NOT NULL,
    PRIMARY KEY (user_id, item_id, entry_order)
);

CREATE TABLE IF NOT EXISTS project_bullets (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    content TEXT NOT NULL,
    entry_order INTEGER NOT NULL,
    PRIMARY KEY (user_id, item_id, entry_order)
);

CREATE TABLE IF NOT EXISTS project_tags (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    content TEXT NOT NULL,
    entry_order INTEGER NOT NULL,
    PRIMARY KEY (user_id, item_id, entry_order)
);

CREATE TABLE IF NOT EXISTS profiles (
    user_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    template_name TEXT NOT NULL,
    config TEXT NOT NULL,
    PRIMARY KEY (user_id, id)
);

CREATE TABLE IF NOT EXISTS profile_items (
    user_id TEXT NOT NULL,
    profile_id TEXT NOT NULL,
    item_type TEXT NOT NULL,
    item_id TEXT NOT NULL,
    item_order INTEGER NOT NULL,
    title_override TEXT,
    description_override TEXT,
    PRIMARY KEY (user_id, profile_id, item_type, item_id)
);

CREATE INDEX IF NOT EXISTS profile_items_order_idx
    ON profile_items (user_id, profile_id, item_type, item_order);
"""

# category -> (table, scalar columns besides id)
ITEM_TABLES: dict[Category, tuple[str, tuple[str, ...]]] = {
    Category.EXPERIENCE: ("experiences", ("title", "company", "date", "subtitle")),
    Category.PROJECT: ("projects", ("title", "link", "subtitle")),
    Category.SKILL: ("skills", ("name", "details", "subtitle")),
    Category.EDUCATION: ("educations", ("title", "details", "subtitle")),
}

# ordered list-valued item fields stored as sub-rows
LIST_TABLES: dict[tuple[Category, str], str] = {
    (Category.EXPERIENCE, "bullets"): "experience_bullets",
    (Category.EXPERIENCE, "tags"): "experience_tags",
    (Category.PROJECT, "bullets"): "project_bullets",
    (Category.PROJECT, "tags"): "project_tags",
}

PERSONAL_COLUMNS = (
    "full_name",
    "email",
    "phone",
    "location",
    "linkedin",
    "github",
    "website",
    "summary",
)

# profile keys kept as columns or profile_items rows rather than in the config JSON
_PROFILE_ROW_KEYS = {
    "id",
    "name",
    "template",
    "experienceIds",
    "projectIds",
    "skillIds",
    "educationIds",
}


class DatabaseGateway(PersistenceGateway):
    """Gateway over a SQLite database scoped to one authenticated user id.

    Profiles and master data decompose into normalized rows: one row per
    item with ordered bullet and tag sub-rows, one row per profile holding
    its template and a config JSON column, and one generic ``profile_items``
    row per (profile, category, item) membership.
    """

    backend_name = "database"

    def __init__(self, db_path: Path | str, user_id: str):
        self.db_path = Path(db_path).expanduser()
        self.user_id = user_id

    def check_available(self) -> None:
        if not self.user_id:
            raise StorageUnavailableError("Database storage requires a signed-in user id")
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Database not available: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageUnavailableError(f"Database not available: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.executescript(SCHEMA)
        return conn

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        with closing(self._connect()) as conn:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    # * Replace this user's rows w/ the snapshot in one transaction
    def write_snapshot(self, snapshot: StorageSnapshot, payload_text: str) -> None:
        with closing(self._connect()) as conn:
            with conn:
                self._delete_user_rows(conn)
                self._insert_personal_info(conn, snapshot.data.personal_info)
                for category in Category:
                    for position, item in enumerate(snapshot.data.items(category)):
                        self._insert_item(conn, category, position, item)
                for position, profile in enumerate(snapshot.profiles):
                    self._insert_profile(conn, position, profile)

    def _delete_user_rows(self, conn: sqlite3.Connection) -> None:
        tables = ["personal_info", "profiles", "profile_items"]
        tables += [table for table, _ in ITEM_TABLES.values()]
        tables += list(LIST_TABLES.values())
        for table in tables:
            conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (self.user_id,))

    def _insert_personal_info(self, conn: sqlite3.Connection, info: PersonalInfo) -> None:
        placeholders = ", ".join("?" for _ in PERSONAL_COLUMNS)
        conn.execute(
            f"INSERT INTO personal_info (user_id, {', '.join(PERSONAL_COLUMNS)}) "
            f"VALUES (?, {placeholders})",
            (self.user_id, *(getattr(info, c) for c in PERSONAL_COLUMNS)),
        )

    def _insert_item(
        self, conn: sqlite3.Connection, category: Category, position: int, item: Item
    ) -> None:
        table, columns = ITEM_TABLES[category]
        placeholders = ", ".join("?" for _ in columns)
        conn.execute(
            f"INSERT INTO {table} (user_id, id, position, {', '.join(columns)}) "
            f"VALUES (?, ?, ?, {placeholders})",
            (self.user_id, item.id, position, *(getattr(item, c) for c in columns)),
        )
        for (list_category, field_name), list_table in LIST_TABLES.items():
            if list_category is not category:
                continue
            conn.executemany(
                f"INSERT INTO {list_table} (user_id, item_id, content, entry_order) "
                "VALUES (?, ?, ?, ?)",
                [
                    (self.user_id, item.id, content, order)
                    for order, content in enumerate(getattr(item, field_name))
                ],
            )

    def _insert_profile(self, conn: sqlite3.Connection, position: int, profile: Profile) -> None:
        raw = profile.to_dict()
        config = {k: v for k, v in raw.items() if k not in _PROFILE_ROW_KEYS}
        conn.execute(
            "INSERT INTO profiles (user_id, id, position, name, template_name, config) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                self.user_id,
                profile.id,
                position,
                profile.name,
                profile.template.value,
                json.dumps(config, ensure_ascii=False),
            ),
        )
        rows = []
        for category in Category:
            overrides = profile.overrides_for(category)
            # the (profile, type, item) key is unique: keep first occurrence of repeated ids
            for order, item_id in enumerate(dict.fromkeys(profile.ids_for(category))):
                values = overrides[item_id].values if item_id in overrides else {}
                title = values.get("title", values.get("name"))
                description = values.get("details")
                rows.append(
                    (
                        self.user_id,
                        profile.id,
                        category.db_type,
                        item_id,
                        order,
                        title if isinstance(title, str) else None,
                        description if isinstance(description, str) else None,
                    )
                )
        conn.executemany(
            "INSERT INTO profile_items (user_id, profile_id, item_type, item_id, "
            "item_order, title_override, description_override) VALUES (?, ?, ?, ?, ?, ?, ?)",
            rows,
        )

    # * Reassemble the snapshot from this user's rows
    def read_snapshot(self) -> StorageSnapshot:
        with closing(self._connect()) as conn:
            personal = conn.execute(
                "SELECT * FROM personal_info WHERE user_id = ?", (self.user_id,)
            ).fetchone()
            if personal is None:
                raise SnapshotNotFoundError("No data found")
            try:
                data = self._read_data(conn, personal)
                profiles = self._read_profiles(conn)
            except (ValidationError, json.JSONDecodeError) as e:
                raise SnapshotCorruptError(f"Invalid data structure: {e}") from e
        return StorageSnapshot(profiles=profiles, data=data)

    def _read_data(self, conn: sqlite3.Connection, personal: sqlite3.Row) -> DataBundle:
        bundle = DataBundle(
            personal_info=PersonalInfo(**{c: personal[c] for c in PERSONAL_COLUMNS})
        )
        for category in Category:
            table, _ = ITEM_TABLES[category]
            rows = conn.execute(
                f"SELECT * FROM {table} WHERE user_id = ? ORDER BY position",
                (self.user_id,),
            ).fetchall()
            items = []
            for row in rows:
                record = {k: row[k] for k in row.keys() if k not in ("user_id", "position")}
                for (list_category, field_name), list_table in LIST_TABLES.items():
                    if list_category is category:
                        record[field_name] = self._read_list(conn, list_table, row["id"])
                items.append(category.item_class.from_dict(record))
            bundle = bundle.with_items(category, items)
        return bundle

    def _read_list(self, conn: sqlite3.Connection, table: str, item_id: str) -> list[str]:
        rows = conn.execute(
            f"SELECT content FROM {table} WHERE user_id = ? AND item_id = ? ORDER BY entry_order",
            (self.user_id, item_id),
        ).fetchall()
        return [row["content"] for row in rows]

    def _read_profiles(self, conn: sqlite3.Connection) -> list[Profile]:
        rows = conn.execute(
            "SELECT * FROM profiles WHERE user_id = ? ORDER BY position", (self.user_id,)
        ).fetchall()
        profiles = []
        for row in rows:
            raw = json.loads(row["config"])
            if not isinstance(raw, dict):
                raise ValidationError(f"Profile {row['id']} config must be an object")
            raw.update(id=row["id"], name=row["name"], template=row["template_name"])
            items = conn.execute(
                "SELECT item_type, item_id FROM profile_items "
                "WHERE user_id = ? AND profile_id = ? ORDER BY item_type, item_order",
                (self.user_id, row["id"]),
            ).fetchall()
            for category in Category:
                raw[_ids_key(category.ids_attr)] = [
                    i["item_id"] for i in items if i["item_type"] == category.db_type
                ]
            profiles.append(Profile.from_dict(raw))
        return profiles

    def clear_storage(self) -> None:
        with closing(self._connect()) as conn:
            with conn:
                self._delete_user_rows(conn)

    def storage_info(self) -> StorageInfo:
        used = self.db_path.stat().st_size if self.db_path.exists() else 0
        return StorageInfo(backend=self.backend_name, used=used, available=0)


def _ids_key(attr: str) -> str:
    # "experience_ids" -> "experienceIds"
    head, tail = attr.split("_", 1)
    return head + tail.title()
