# -*- coding: utf-8 -*-
"""
Generic CRUD over the content tables.

Every table is described by a ``TableSpec``:
- columns        — whitelist of client-writable columns; any other key in a
                   payload is dropped before it can reach a query;
- rules          — per-field validation, checked in declaration order;
- array_fields   — list-of-strings columns, stored as JSON text;
- featured       — the table keeps at most one row with featured = 1;
- ordered        — list order is (order_num, created_at) instead of created_at;
- published_only — anonymous tag reads only see published rows.

``ContentEngine`` runs the same operations for any spec.
"""

import json
from collections import Counter
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, delete, update
from sqlalchemy.exc import SQLAlchemyError

from errors import NotFound, StorageError, ValidationError
from extensions import db, logger
from utils import new_id

STRING, NUMBER, ARRAY, FLAG = "string", "number", "array", "flag"


class Rule:
    """Validation for one field."""

    def __init__(self, type: str = STRING, required: bool = False, max_length: Optional[int] = None,
                 min_length: Optional[int] = None, label: Optional[str] = None) -> None:
        self.type = type
        self.required = required
        self.max_length = max_length
        self.min_length = min_length
        self.label = label

    def check(self, field: str, value) -> None:
        label = self.label or field
        if value is None or (isinstance(value, str) and not value.strip()):
            if self.required:
                raise ValidationError(field, f"{label} is required")
            return

        if not _is_type(value, self.type):
            raise ValidationError(field, f"{label} must be of type {self.type}")

        if isinstance(value, str):
            if self.max_length is not None and len(value) > self.max_length:
                raise ValidationError(field, f"{label} must be less than {self.max_length} characters")
            if self.min_length is not None and len(value) < self.min_length:
                raise ValidationError(field, f"{label} must be at least {self.min_length} characters")


def _is_type(value, expected: str) -> bool:
    if expected == STRING:
        return isinstance(value, str)
    if expected == NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == FLAG:
        return isinstance(value, (bool, int, float))
    if expected == ARRAY:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return False


def _bulk(statement):
    # plain UPDATE/DELETE so rowcount is the number of matched rows
    return statement.execution_options(synchronize_session=False)


class TableSpec:
    def __init__(self, name: str, model, columns: Iterable[str], rules: Dict[str, Rule],
                 array_fields: Iterable[str] = (), featured: bool = False, ordered: bool = True,
                 published_only: bool = False) -> None:
        self.name = name
        self.model = model
        self.columns = tuple(columns)
        self.rules = rules
        self.array_fields = tuple(array_fields)
        self.featured = featured
        self.ordered = ordered
        self.published_only = published_only

    @property
    def flag_fields(self):
        return tuple(f for f, rule in self.rules.items() if rule.type == FLAG)


class ContentEngine:
    """CRUD operations for one table."""

    def __init__(self, spec: TableSpec) -> None:
        self.spec = spec
        self.model = spec.model

    # ------ encoding ------

    def validate(self, data) -> None:
        if not isinstance(data, dict):
            raise ValidationError(None, "Request body must be a JSON object")
        for field, rule in self.spec.rules.items():
            rule.check(field, data.get(field))

    def encode(self, data: dict) -> dict:
        """Whitelisted columns only, arrays as JSON text, flags as 0/1."""
        values = {}
        for column in self.spec.columns:
            if column not in data:
                continue
            value = data[column]
            if column in self.spec.array_fields and isinstance(value, list):
                value = json.dumps(value, ensure_ascii=False)
            elif column in self.spec.flag_fields:
                value = 1 if value else 0
            values[column] = value
        return values

    def serialize(self, row) -> dict:
        item = {}
        for column in row.__table__.columns:
            value = getattr(row, column.name)
            if column.name == "created_at" and value is not None:
                value = value.isoformat(sep=" ", timespec="seconds")
            item[column.name] = value
        for field in self.spec.array_fields:
            raw = item.get(field)
            if isinstance(raw, str):
                try:
                    item[field] = json.loads(raw)
                except ValueError:
                    logger.error("Could not decode %s.%s for row %s", self.spec.name, field, item.get("id"))
        return item

    # ------ reads ------

    def _order(self):
        if self.spec.ordered:
            return (self.model.order_num, self.model.created_at)
        return (self.model.created_at,)

    def _fetch(self, query):
        try:
            return query.all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error fetching %s", self.spec.name)
            raise StorageError(f"Error fetching {self.spec.name}") from exc

    def list(self, include_hidden: bool = False) -> List[dict]:
        query = self.model.query
        if not include_hidden:
            query = query.filter(self.model.hidden == 0)
        rows = self._fetch(query.order_by(*self._order()))
        return [self.serialize(row) for row in rows]

    def get(self, item_id: str, include_hidden: bool = True) -> dict:
        """The row as a dict. Hidden rows are ``NotFound`` unless ``include_hidden``."""
        try:
            row = db.session.get(self.model, item_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error fetching %s %s", self.spec.name, item_id)
            raise StorageError(f"Error fetching {self.spec.name}") from exc
        if row is None or (row.hidden and not include_hidden):
            raise NotFound("Not found")
        return self.serialize(row)

    def featured_and_recent(self, include_hidden: bool = False, recent_limit: int = 3) -> dict:
        """The featured row (if any) plus the newest non-featured rows."""
        m = self.model
        if include_hidden:
            query = m.query.filter((m.featured == 1) | (m.hidden == 0))
        else:
            query = m.query.filter(m.hidden == 0)
        rows = self._fetch(query.order_by(m.featured.desc(), m.created_at.desc()))
        items = [self.serialize(row) for row in rows]
        featured = [item for item in items if item["featured"] == 1]
        recent = [item for item in items if item["featured"] != 1][:recent_limit]
        return {"featured": featured, "recent": recent, "all": featured + recent}

    def _public_tag_query(self):
        m = self.model
        query = m.query.filter(m.hidden == 0)
        if self.spec.published_only:
            query = query.filter(m.published == 1)
        return query

    def by_category(self, tag: str, include_hidden: bool = False) -> List[dict]:
        """Rows whose tags contain exactly ``tag``, newest first."""
        m = self.model
        query = m.query if include_hidden else self._public_tag_query()
        # LIKE on the encoded element narrows the scan; the exact match happens after decoding
        query = query.filter(m.tags.contains(json.dumps(tag, ensure_ascii=False), autoescape=True))
        rows = self._fetch(query.order_by(m.created_at.desc()))
        items = [self.serialize(row) for row in rows]
        return [item for item in items if isinstance(item.get("tags"), list) and tag in item["tags"]]

    def categories(self) -> List[dict]:
        """Distinct tags over visible rows with counts, most used first."""
        m = self.model
        query = self._public_tag_query().filter(m.tags.isnot(None), m.tags != "[]")
        counts = Counter()
        for row in self._fetch(query.order_by(m.created_at)):
            try:
                tags = json.loads(row.tags)
            except ValueError:
                logger.error("Could not decode %s.tags for row %s", self.spec.name, row.id)
                continue
            if isinstance(tags, list):
                counts.update(tag for tag in tags if isinstance(tag, str))
        return [{"name": name, "count": count} for name, count in counts.most_common()]

    # ------ writes ------

    def _claims_featured(self, values: dict) -> bool:
        return self.spec.featured and values.get("featured") == 1

    def _write(self, action: str, fn):
        try:
            result = fn()
            db.session.commit()
            return result
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error during %s on %s", action, self.spec.name)
            raise StorageError(f"Could not {action} {self.spec.name} item") from exc

    def create(self, data) -> str:
        self.validate(data)
        values = self.encode(data)
        item_id = new_id()

        def insert():
            if self._claims_featured(values):
                db.session.execute(_bulk(update(self.model).where(self.model.featured == 1).values(featured=0)))
            db.session.add(self.model(id=item_id, **values))

        self._write("create", insert)
        return item_id

    def update(self, item_id: str, data) -> int:
        """Returns the number of rows changed; 0 means ``item_id`` does not exist."""
        self.validate(data)
        values = self.encode(data)
        m = self.model
        if not values:
            return self._fetch_count(item_id)

        try:
            if self._claims_featured(values):
                db.session.execute(
                    _bulk(update(m).where(m.featured == 1, m.id != item_id).values(featured=0))
                )
            changes = db.session.execute(_bulk(update(m).where(m.id == item_id).values(**values))).rowcount
            if changes:
                db.session.commit()
            else:
                # unknown id: leave the other rows' featured flags alone
                db.session.rollback()
            return changes
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error during update on %s", self.spec.name)
            raise StorageError(f"Could not update {self.spec.name} item") from exc

    def _fetch_count(self, item_id: str) -> int:
        try:
            return self.model.query.filter_by(id=item_id).count()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error fetching %s %s", self.spec.name, item_id)
            raise StorageError(f"Error fetching {self.spec.name}") from exc

    def delete(self, item_id: str) -> int:
        return self._write(
            "delete",
            lambda: db.session.execute(_bulk(delete(self.model).where(self.model.id == item_id))).rowcount,
        )

    def toggle_hidden(self, item_id: str) -> int:
        """Flip ``hidden`` in one conditional UPDATE."""
        m = self.model
        flipped = case((m.hidden == 0, 1), else_=0)
        return self._write(
            "toggle",
            lambda: db.session.execute(_bulk(update(m).where(m.id == item_id).values(hidden=flipped))).rowcount,
        )
