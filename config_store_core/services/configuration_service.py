"""
Configuration store: owner-scoped records with ownerless defaults.

Writes are single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING``
statements against the partial unique indexes of the configurations table,
so concurrent upserts of the same ``(key, owner)`` pair never create two
rows. All input is validated before the first statement is sent.
"""

import uuid
from typing import Any, Iterable, List, Optional, Type

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..config import StoreConfig, get_config
from ..constants import ANONYMOUS_ACTOR
from ..context.operation_context import operation
from ..db.db_base import utc_now
from ..db.db_configuration_models import ConfigurationRecord
from ..exceptions import internal_error, validation_failed
from ..schemas.configuration_schemas import (
    ConfigurationQuery,
    ConfigurationRead,
    ConfigurationUpsert,
    DefaultConfiguration,
    KeySelector,
    OwnerSelector,
    RecordSelector,
    UpsertResult,
)
from ..utils.validation_utils import normalize_keys
from .base_service import SessionService, TModel

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ConfigurationService(SessionService):
    """Upsert, resolve and delete configuration records."""

    resource_type = "ConfigurationRecord"

    def __init__(self, session: Session, store_config: Optional[StoreConfig] = None):
        super().__init__(session)
        self.limits = store_config or get_config().store

    # Validation

    def _validate(self, schema: Type[TModel], **data: Any) -> TModel:
        """Validate input against ``schema`` using this store's limits."""
        return self._parse(schema, data, context=self.limits.model_dump())

    def _validate_defaults(self, items: Iterable[Any], actor: str) -> List[ConfigurationUpsert]:
        validated = []
        for item in items:
            if isinstance(item, DefaultConfiguration):
                item = item.model_dump()
            if not isinstance(item, dict):
                raise validation_failed("items", item, "Each default must be a mapping with key and value")
            default = self._parse(DefaultConfiguration, item, context=self.limits.model_dump())
            validated.append(
                self._validate(ConfigurationUpsert, key=default.key, value=default.value, actor=actor)
            )
        return validated

    # Statements

    def _insert(self):
        dialect_name = self.session.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect_name)
        if insert is None:
            raise internal_error(f"Upsert is not supported on {dialect_name}", dialect=dialect_name)
        return insert

    def _upsert_record(self, request: ConfigurationUpsert) -> ConfigurationRecord:
        now = utc_now()
        stmt = self._insert()(ConfigurationRecord).values(
            id=str(uuid.uuid4()),
            key=request.key,
            owner=request.owner,
            value=request.value,
            version=1,
            created_at=now,
            created_by=request.actor,
            updated_at=now,
            updated_by=request.actor,
        )

        # Conflict target must name the partial index the row falls under
        if request.owner is None:
            target = {
                "index_elements": ["key"],
                "index_where": ConfigurationRecord.owner.is_(None),
            }
        else:
            target = {
                "index_elements": ["key", "owner"],
                "index_where": ConfigurationRecord.owner.isnot(None),
            }

        stmt = stmt.on_conflict_do_update(
            **target,
            set_={
                "value": stmt.excluded["value"],
                "updated_at": stmt.excluded["updated_at"],
                "updated_by": stmt.excluded["updated_by"],
                "version": ConfigurationRecord.version + 1,
            },
        ).returning(ConfigurationRecord)

        return self.session.scalars(stmt, execution_options={"populate_existing": True}).one()

    # Writes

    @operation()
    def upsert(
        self, key: str, value: Any, owner: Optional[str] = None, actor: str = ANONYMOUS_ACTOR
    ) -> UpsertResult:
        """
        Create or update the record for ``(key, owner)``.

        ``owner=None`` writes the default record for ``key``. ``created_*``
        is only set by the insert; every call sets ``updated_*``.

        Returns:
            UpsertResult with ``upserted=True`` only when a new record was created

        Raises:
            ConfigStoreError: INVALID_INPUT for a bad key, owner, value or actor,
                in which case nothing is written
        """
        request = self._validate(
            ConfigurationUpsert, key=key, value=value, owner=owner, actor=actor
        )

        with self._transaction("upsert", key=request.key, owner=request.owner):
            record = self._upsert_record(request)
            result = UpsertResult(
                record=ConfigurationRead.model_validate(record), upserted=record.version == 1
            )

        self.logger.info(
            "Configuration upserted",
            extra={
                "key": request.key,
                "owner": request.owner,
                "actor": request.actor,
                "upserted": result.upserted,
            },
        )
        return result

    @operation()
    def upsert_defaults(
        self, items: Iterable[Any], actor: str = ANONYMOUS_ACTOR
    ) -> List[UpsertResult]:
        """
        Upsert ownerless default records in one transaction.

        Every item is validated before anything is written; one bad item
        rejects the whole batch.
        """
        requests = self._validate_defaults(items, actor)
        results = []

        with self._transaction("upsert_defaults", count=len(requests)):
            for request in requests:
                record = self._upsert_record(request)
                results.append(
                    UpsertResult(
                        record=ConfigurationRead.model_validate(record),
                        upserted=record.version == 1,
                    )
                )

        self.logger.info(
            "Default configurations upserted", extra={"count": len(results), "actor": actor}
        )
        return results

    # Reads

    @operation()
    def resolve(
        self, owner: Optional[str], keys: Optional[Iterable[str]] = None
    ) -> List[ConfigurationRead]:
        """
        Read configuration for ``owner`` with fallback to defaults.

        Without keys, returns the owner's own records (defaults only when
        ``owner`` is None), at most ``max_page_size`` of them. With keys,
        returns the owner's record for each requested key that has one,
        followed by the default record for each remaining key. Keys with
        neither are absent from the result. Duplicate keys count once.

        Raises:
            ConfigStoreError: INVALID_INPUT for a bad owner, a bad key, a bare
                string in place of ``keys`` or more than ``max_page_size`` keys
        """
        query = self._validate(ConfigurationQuery, owner=owner, keys=normalize_keys(keys))
        requested = query.keys

        if not requested:
            stmt = (
                select(ConfigurationRecord)
                .where(self._owner_clause(owner))
                .order_by(ConfigurationRecord.key)
                .limit(self.limits.max_page_size)
            )
            return self._to_reads(self.session.scalars(stmt))

        owned: List[ConfigurationRecord] = []
        if owner is not None:
            owned = list(
                self.session.scalars(
                    select(ConfigurationRecord)
                    .where(
                        ConfigurationRecord.owner == owner,
                        ConfigurationRecord.key.in_(requested),
                    )
                    .order_by(ConfigurationRecord.key)
                )
            )

        found = {record.key for record in owned}
        missing = [key for key in requested if key not in found]

        defaults: List[ConfigurationRecord] = []
        if missing:
            defaults = list(
                self.session.scalars(
                    select(ConfigurationRecord)
                    .where(
                        ConfigurationRecord.owner.is_(None),
                        ConfigurationRecord.key.in_(missing),
                    )
                    .order_by(ConfigurationRecord.key)
                )
            )

        return self._to_reads(owned + defaults)

    @staticmethod
    def _owner_clause(owner: Optional[str]):
        if owner is None:
            return ConfigurationRecord.owner.is_(None)
        return ConfigurationRecord.owner == owner

    @staticmethod
    def _to_reads(records: Iterable[ConfigurationRecord]) -> List[ConfigurationRead]:
        return [ConfigurationRead.model_validate(record) for record in records]

    # Deletes

    def _delete(self, operation_name: str, *criteria, **context: Any) -> int:
        stmt = delete(ConfigurationRecord)
        if criteria:
            stmt = stmt.where(*criteria)
        with self._transaction(operation_name, **context):
            result = self.session.execute(stmt)
        self.logger.info(
            "Configurations deleted",
            extra={"operation_name": operation_name, "deleted": result.rowcount, **context},
        )
        return result.rowcount

    @operation()
    def delete_by_key(self, key: str, actor: str = ANONYMOUS_ACTOR) -> int:
        """Delete every record for ``key``: all owners and the default."""
        self._validate(KeySelector, key=key)
        return self._delete(
            "delete_by_key", ConfigurationRecord.key == key, key=key, actor=actor
        )

    @operation()
    def delete_by_owner(self, owner: str, actor: str = ANONYMOUS_ACTOR) -> int:
        """Delete every record owned by ``owner``. Defaults are untouched."""
        self._validate(OwnerSelector, owner=owner)
        return self._delete(
            "delete_by_owner", ConfigurationRecord.owner == owner, owner=owner, actor=actor
        )

    @operation()
    def delete_by_key_and_owner(
        self, key: str, owner: Optional[str], actor: str = ANONYMOUS_ACTOR
    ) -> int:
        """Delete a single record. ``owner=None`` deletes the default for ``key``."""
        self._validate(RecordSelector, key=key, owner=owner)
        return self._delete(
            "delete_by_key_and_owner",
            ConfigurationRecord.key == key,
            self._owner_clause(owner),
            key=key,
            owner=owner,
            actor=actor,
        )

    @operation()
    def delete_all(self, actor: str = ANONYMOUS_ACTOR, confirm: bool = False) -> int:
        """
        Delete every configuration record.

        Raises:
            ConfigStoreError: INTERNAL_SERVER_ERROR unless ``confirm`` is True
        """
        if confirm is not True:
            raise internal_error(
                "delete_all requires confirm=True", resource_type=self.resource_type, actor=actor
            )
        return self._delete("delete_all", actor=actor)
