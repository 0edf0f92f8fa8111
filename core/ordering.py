"""
Dense ordering of rows inside partitions.

An ordered partition is every row of a model sharing one value of a
partition field (a board column, the checklist of one task, ...). Rows carry
an integer position and, after every operation of
:class:`OrderedPartitionManager`, the positions of a partition of ``n`` rows
are exactly ``0..n-1``.

Every public operation runs as one transaction on the database alias given
at construction. A database error rolls the whole operation back and is
reported as :class:`common.exceptions.StorageFailure`.
"""
import logging
from functools import wraps

from django.db import DEFAULT_DB_ALIAS, DatabaseError, models, transaction
from django.db.models import Max
from django.utils import timezone

from common.exceptions import NotFound, StorageFailure

logger = logging.getLogger(__name__)


def clamp(index, upper):
    return max(0, min(index, upper))


def unit_of_work(operation):
    """Run a manager operation atomically on the manager's database."""

    @wraps(operation)
    def wrapper(self, *args, **kwargs):
        try:
            with transaction.atomic(using=self.using):
                return operation(self, *args, **kwargs)
        except DatabaseError as exc:
            action = operation.__name__.replace('_', ' ')
            logger.exception("Failed to %s for %s", action, self.label)
            raise StorageFailure(f"Failed to {action} for {self.label}") from exc

    return wrapper


class OrderedPartitionManager:
    """
    Keeps ``position`` dense and gap-free within each partition of ``model``.

    Args:
        model: Django model class holding the rows
        partition_field: name of the field grouping rows (plain field or FK)
        position_field: name of the integer ordering field
        using: database alias every read and write goes to
    """

    def __init__(self, model, partition_field, position_field='position', using=DEFAULT_DB_ALIAS):
        self.model = model
        self.partition_field = partition_field
        field = model._meta.get_field(partition_field)
        self.partition_attname = field.attname
        # FK partitions have a parent row to lock, value partitions don't
        self.parent_model = field.related_model if field.is_relation else None
        self.position_field = position_field
        # bulk_update bypasses auto_now, moved rows get these set explicitly
        self.touch_fields = [
            f.name for f in model._meta.concrete_fields if getattr(f, 'auto_now', False)
        ]
        self.using = using

    def __repr__(self):
        return f"<OrderedPartitionManager {self.model.__name__} by {self.partition_field} on {self.using!r}>"

    @property
    def label(self):
        return self.model._meta.verbose_name

    def _queryset(self):
        return self.model._default_manager.using(self.using)

    def _key(self, key):
        # FK partitions accept either the related instance or its pk
        if isinstance(key, models.Model):
            return key.pk
        return key

    def _get(self, pk):
        try:
            return self._queryset().select_for_update().get(pk=pk)
        except self.model.DoesNotExist:
            raise NotFound(f"{self.label.capitalize()} not found") from None

    def partition_key(self, obj):
        return getattr(obj, self.partition_attname)

    def _touch(self, obj):
        now = timezone.now()
        for name in self.touch_fields:
            setattr(obj, name, now)

    # Partition reader

    def siblings(self, key, exclude=None, lock=False):
        """
        Rows of one partition ordered by position, optionally without ``exclude``.

        With ``lock``, the parent row of an FK partition is locked first so
        writers into an empty partition still queue behind each other.
        """
        key = self._key(key)
        if lock and self.parent_model is not None:
            list(
                self.parent_model._default_manager.using(self.using)
                .select_for_update().filter(pk=key).values_list('pk', flat=True)
            )
        qs = self._queryset().filter(**{self.partition_attname: key})
        if exclude is not None:
            qs = qs.exclude(pk=exclude)
        if lock:
            qs = qs.select_for_update()
        return list(qs.order_by(self.position_field, 'pk'))

    # Position allocator

    def next_position(self, key):
        current = self._queryset().filter(
            **{self.partition_attname: self._key(key)}
        ).aggregate(top=Max(self.position_field))['top']
        return 0 if current is None else current + 1

    # Reindexer

    def reindex(self, ordered, extra_fields=(), force=()):
        """
        Give the row at list index ``i`` position ``i``.

        Only rows whose position changes are written, plus any row in
        ``force``. ``extra_fields`` are written alongside the position.
        Returns the number of rows written.
        """
        forced = {obj.pk for obj in force}
        changed = []
        for index, obj in enumerate(ordered):
            if getattr(obj, self.position_field) != index or obj.pk in forced:
                setattr(obj, self.position_field, index)
                changed.append(obj)
        if changed:
            fields = [self.position_field, *extra_fields]
            self._queryset().bulk_update(changed, fields)
            logger.debug("Reindexed %d %s rows", len(changed), self.label)
        return len(changed)

    # Operations

    @unit_of_work
    def append(self, key, **values):
        """Create a row at the end of partition ``key``."""
        key = self._key(key)
        # lock existing rows so concurrent appends read the committed tail
        self.siblings(key, lock=True)
        values[self.partition_attname] = key
        values[self.position_field] = self.next_position(key)
        return self._queryset().create(**values)

    @unit_of_work
    def remove_and_compact(self, pk):
        """Delete a row (and its cascaded dependents) and close the gap it leaves."""
        obj = self._get(pk)
        remaining = self.siblings(self.partition_key(obj), exclude=obj.pk, lock=True)
        obj.delete(using=self.using)
        self.reindex(remaining)
        logger.info("Removed %s %s, %d siblings left", self.label, pk, len(remaining))

    @unit_of_work
    def move_within_partition(self, pk, target_index):
        """Move a row to ``target_index`` of its own partition, clamped to the valid range."""
        obj = self._get(pk)
        ordered = self.siblings(self.partition_key(obj), exclude=obj.pk, lock=True)
        index = clamp(target_index, len(ordered))
        ordered.insert(index, obj)
        if getattr(obj, self.position_field) != index:
            self._touch(obj)
        self.reindex(ordered, extra_fields=self.touch_fields)
        return obj

    @unit_of_work
    def move_across_partition(self, pk, new_key, target_index):
        """
        Move a row into partition ``new_key`` at ``target_index``.

        The source partition is compacted before the destination order is
        read, so the destination never sees the gap left by the moved row.
        """
        obj = self._get(pk)
        new_key = self._key(new_key)
        old_key = self.partition_key(obj)
        if new_key == old_key:
            return self.move_within_partition(obj.pk, target_index)

        self.reindex(self.siblings(old_key, exclude=obj.pk, lock=True))

        destination = self.siblings(new_key, lock=True)
        destination.insert(clamp(target_index, len(destination)), obj)
        setattr(obj, self.partition_attname, new_key)
        self._touch(obj)
        self.reindex(destination, extra_fields=[self.partition_field, *self.touch_fields], force=[obj])
        logger.info("Moved %s %s from %s to %s", self.label, obj.pk, old_key, new_key)
        return obj
