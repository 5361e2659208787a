import uuid
from typing import ClassVar

from django.db import models, transaction
from django.db.models.options import Options
from django.utils.timezone import now


class SoftDeleteManager(models.Manager):  # noqa: R0903
    """Manager to retrieve only non-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet whose ``delete`` marks rows instead of removing them."""

    def delete(self):
        return self.update(deleted_at=now())

    def hard_delete(self):
        return super().delete()


class BaseModel(models.Model):  # noqa: R0903
    """
    Base table for every bakery record.

    UUID primary key, creation/update timestamps and soft delete. Deleting a
    row stamps ``deleted_at`` and cascades the stamp to rows that reference it
    with ``on_delete=CASCADE``; ``restore`` undoes both.
    """

    _meta: ClassVar[Options]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = SoftDeleteManager.from_queryset(SoftDeleteQuerySet)()
    all_objects = models.Manager()

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    @transaction.atomic
    def delete(self, using=None, keep_parents=False, _seen=None):  # noqa: A003
        """Marks the row as deleted and cascades to dependent rows."""
        if self.is_deleted:
            return

        _seen = _seen if _seen is not None else set()
        key = (self.__class__, self.pk)
        if key in _seen:
            return
        _seen.add(key)

        self.deleted_at = now()
        self.save(update_fields=["deleted_at", "updated_at"])

        for relation in self._cascading_relations():
            for obj in self._related_rows(relation):
                obj.delete(_seen=_seen)

    def hard_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)

    def restore(self):
        """Clears the deletion stamp here and on soft-deleted dependents."""
        if not self.is_deleted:
            return

        self.deleted_at = None
        self.save(update_fields=["deleted_at", "updated_at"])

        for relation in self._cascading_relations():
            related_model = relation.related_model
            rows = related_model.all_objects.filter(
                **{relation.field.name: self}, deleted_at__isnull=False
            )
            for obj in rows.iterator():
                obj.restore()

    def _cascading_relations(self):
        return [
            relation
            for relation in self._meta.related_objects
            if getattr(relation, "on_delete", None) is models.CASCADE
            and issubclass(relation.related_model, BaseModel)
        ]

    def _related_rows(self, relation):
        accessor = relation.get_accessor_name()
        try:
            related = getattr(self, accessor)
        except relation.related_model.DoesNotExist:
            return []
        if relation.one_to_one:
            return [related]
        return list(related.all())

    class Meta:  # noqa: R0903
        abstract = True
