# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unique-checked CRUD for records linked to a user account.

Students and teachers share the same shape: a server-assigned id, audit
timestamps, a unique business identifier, a unique user link and one
dependent collection. RecordService implements the rules once and is
configured per entity with a RecordSpec:

- create: validate, pre-check the business identifier and the user link,
  insert; a uniqueness rejection from the store is reported as a conflict.
- update: validate, load (NotFoundError if missing), re-check the
  business identifier against the other records, apply only the supplied
  fields; returns None if the row disappeared before the write.
- delete: apply the dependent collection's DeletePolicy, then delete.

The pre-checks give early, friendly errors. Under concurrent writers the
store's unique constraints decide.

Example:
    >>> records = RecordService(StudentRepository(db), STUDENT_RECORDS)
    >>> student = await records.create({"user_id": "u1", ...})
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.records.errors import ConflictError, NotFoundError, ValidationError
from src.infrastructure.database.models import Base
from src.infrastructure.database.repository import IntegrityConflictError, Repository
from src.models.common import PatchModel, RequestModel, normalize_identifier
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

USER_LINK_FIELD = "user_id"


class DeletePolicy(str, enum.Enum):
    """What deleting an owner does to its dependent records."""

    CASCADE = "cascade"
    """Dependents are deleted together with the owner."""

    ORPHAN = "orphan"
    """Dependents are kept and their link to the owner is cleared."""

    RESTRICT = "restrict"
    """Deletion is refused with ConflictError while dependents exist."""


@dataclass(frozen=True)
class DependentRelation:
    """A collection of records that point at the owner.

    Attributes:
        name: Collection name used in messages ("enrollments").
        repository_factory: Builds the dependent repository on a session.
        foreign_key: Column on the dependent holding the owner's id.
        policy: Behavior when the owner is deleted.
    """

    name: str
    repository_factory: Callable[[AsyncSession], Repository[Any]]
    foreign_key: str
    policy: DeletePolicy


@dataclass(frozen=True)
class RecordSpec:
    """Per-entity configuration of RecordService.

    Attributes:
        entity_name: Display name ("Student").
        unique_key: Business identifier column ("student_number").
        create_model: Request model validated on create.
        update_model: Patch model validated on update.
        defaults_to_now: Date fields filled with the creation time when omitted.
        dependents: Collections affected by deletion.
    """

    entity_name: str
    unique_key: str
    create_model: type[RequestModel]
    update_model: type[PatchModel]
    defaults_to_now: tuple[str, ...] = ()
    dependents: tuple[DependentRelation, ...] = field(default_factory=tuple)


def parse_record_id(record_id: Any) -> str | None:
    """Canonicalize a record id, or None if it cannot be one.

    An id that is not a UUID cannot match any record, so lookups treat it
    as absent instead of sending it to the store.
    """
    if record_id is None:
        return None
    try:
        return str(UUID(str(record_id)))
    except ValueError:
        return None


class RecordService(Generic[ModelT]):
    """Unique-checked CRUD over one repository.

    Attributes:
        spec: Entity configuration.
    """

    def __init__(
        self,
        repository: Repository[ModelT],
        spec: RecordSpec,
        dependent_repositories: Mapping[str, Repository[Any]] | None = None,
    ) -> None:
        """Initialize the record service.

        Args:
            repository: Repository for the owning entity.
            spec: Entity configuration.
            dependent_repositories: Repositories to use for dependent
                collections, keyed by collection name. Built from the
                owner repository's session when not given.
        """
        self._repo = repository
        self.spec = spec
        self._dependent_repositories = dict(dependent_repositories or {})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_all(self) -> list[ModelT]:
        """Get every record. Empty list when there are none."""
        return await self._repo.list()

    async def get(self, record_id: Any) -> ModelT | None:
        """Get a record by id, or None."""
        parsed = parse_record_id(record_id)
        if parsed is None:
            return None
        return await self._repo.find_by_id(parsed)

    async def get_by_user_id(self, user_id: str) -> ModelT | None:
        """Get the record linked to a user account, or None."""
        if not user_id:
            return None
        return await self._repo.find_by_unique(USER_LINK_FIELD, user_id)

    async def get_by_key(self, value: str) -> ModelT | None:
        """Get the record holding a business identifier, or None."""
        normalized = normalize_identifier(value or "")
        if not normalized:
            return None
        return await self._repo.find_by_unique(self.spec.unique_key, normalized)

    async def key_exists(self, value: str, exclude_id: str | None = None) -> bool:
        """Check whether a business identifier is taken.

        Uses the same normalization as create and update.

        Args:
            value: Business identifier to test.
            exclude_id: Record to ignore (the one being updated).
        """
        normalized = normalize_identifier(value or "")
        if not normalized:
            return False
        return await self._repo.exists(self.spec.unique_key, normalized, exclude_id=exclude_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: Any) -> ModelT:
        """Create a record.

        Args:
            data: Create request model or mapping of its fields.

        Returns:
            The created record.

        Raises:
            ValidationError: If required fields are missing or malformed.
            ConflictError: If the business identifier or user link is taken.
        """
        request = self._validate(self.spec.create_model, data)
        key = self.spec.unique_key
        key_value = getattr(request, key)

        if await self._repo.exists(key, key_value):
            raise ConflictError(
                f"{self.spec.entity_name} with {key} '{key_value}' already exists",
                field=key,
                value=key_value,
            )

        user_id = getattr(request, USER_LINK_FIELD)
        if await self._repo.exists(USER_LINK_FIELD, user_id):
            raise ConflictError(
                f"User '{user_id}' already has a {self.spec.entity_name.lower()} record",
                field=USER_LINK_FIELD,
                value=user_id,
            )

        now = utc_now()
        values = request.model_dump()
        for date_field in self.spec.defaults_to_now:
            if values.get(date_field) is None:
                values[date_field] = now

        entity = self._repo.model(**values, created_at=now, updated_at=now)
        try:
            entity = await self._repo.insert(entity)
            await self._repo.commit()
        except IntegrityConflictError as e:
            raise self._conflict_from_store(e, values) from e

        logger.info(
            "%s created: %s (%s=%s, user=%s)",
            self.spec.entity_name,
            entity.id,
            key,
            key_value,
            user_id,
        )
        return entity

    async def update(self, record_id: Any, patch: Any) -> ModelT | None:
        """Apply a partial update.

        Args:
            record_id: Record identifier.
            patch: Patch model or mapping holding only the fields to change.

        Returns:
            The updated record, or None if it was deleted between load and save.

        Raises:
            ValidationError: If the patch is malformed.
            NotFoundError: If the record does not exist.
            ConflictError: If the new business identifier belongs to another record.
        """
        request = self._validate(self.spec.update_model, patch)

        parsed = parse_record_id(record_id)
        entity = await self._repo.find_by_id(parsed) if parsed else None
        if entity is None:
            raise NotFoundError(f"{self.spec.entity_name} {record_id} not found")

        changes = request.changes()
        key = self.spec.unique_key
        if key in changes and await self._repo.exists(key, changes[key], exclude_id=entity.id):
            raise ConflictError(
                f"{self.spec.entity_name} with {key} '{changes[key]}' already exists",
                field=key,
                value=changes[key],
            )

        changes["updated_at"] = utc_now()
        try:
            updated = await self._repo.update(entity.id, changes)
            if updated is None:
                await self._repo.rollback()
                logger.warning(
                    "%s %s vanished before update could be saved",
                    self.spec.entity_name,
                    entity.id,
                )
                return None
            await self._repo.commit()
        except IntegrityConflictError as e:
            raise self._conflict_from_store(e, changes) from e

        logger.info(
            "%s updated: %s (fields=%s)",
            self.spec.entity_name,
            updated.id,
            sorted(k for k in changes if k != "updated_at"),
        )
        return updated

    async def delete(self, record_id: Any) -> bool:
        """Delete a record and apply the dependent collection policies.

        Returns:
            True if the record was deleted, False if it did not exist.

        Raises:
            ConflictError: If a RESTRICT collection still has dependents.
        """
        parsed = parse_record_id(record_id)
        entity = await self._repo.find_by_id(parsed) if parsed else None
        if entity is None:
            return False

        for relation in self.spec.dependents:
            await self._apply_delete_policy(relation, entity.id)

        if not await self._repo.delete(entity.id):
            await self._repo.rollback()
            return False
        await self._repo.commit()

        logger.info("%s deleted: %s", self.spec.entity_name, entity.id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _dependent_repository(self, relation: DependentRelation) -> Repository[Any]:
        repo = self._dependent_repositories.get(relation.name)
        if repo is None:
            repo = relation.repository_factory(self._repo.db)
            self._dependent_repositories[relation.name] = repo
        return repo

    async def _apply_delete_policy(self, relation: DependentRelation, owner_id: str) -> None:
        repo = self._dependent_repository(relation)

        if relation.policy is DeletePolicy.CASCADE:
            removed = await repo.delete_where(relation.foreign_key, owner_id)
            logger.debug(
                "Cascade: removed %s %s of %s %s",
                removed,
                relation.name,
                self.spec.entity_name,
                owner_id,
            )
        elif relation.policy is DeletePolicy.ORPHAN:
            detached = await repo.update_where(
                relation.foreign_key,
                owner_id,
                {relation.foreign_key: None, "updated_at": utc_now()},
            )
            logger.debug(
                "Orphan: detached %s %s from %s %s",
                detached,
                relation.name,
                self.spec.entity_name,
                owner_id,
            )
        elif relation.policy is DeletePolicy.RESTRICT:
            remaining = await repo.count(repo.column(relation.foreign_key) == owner_id)
            if remaining:
                raise ConflictError(
                    f"{self.spec.entity_name} {owner_id} still has "
                    f"{remaining} {relation.name}",
                    field=relation.name,
                    value=remaining,
                )

    def _validate(self, model_cls: type[BaseModel], data: Any) -> Any:
        if isinstance(data, model_cls):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        try:
            return model_cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.spec.entity_name.lower()} data",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def _conflict_from_store(
        self,
        error: IntegrityConflictError,
        values: Mapping[str, Any],
    ) -> ConflictError:
        constraint = error.constraint
        for candidate in (self.spec.unique_key, USER_LINK_FIELD):
            if candidate in constraint and candidate in values:
                logger.warning(
                    "%s rejected by store constraint on %s",
                    self.spec.entity_name,
                    candidate,
                )
                return ConflictError(
                    f"{self.spec.entity_name} with {candidate} "
                    f"'{values[candidate]}' already exists",
                    field=candidate,
                    value=values[candidate],
                )
        logger.warning(
            "%s rejected by store constraint: %s",
            self.spec.entity_name,
            constraint or error,
        )
        return ConflictError(f"{self.spec.entity_name} conflicts with an existing record")
