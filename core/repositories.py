"""
Repository pattern implementation.
Abstracts data access and provides a clean interface for domain services.
"""
from contextlib import contextmanager
from typing import Generic, TypeVar, Optional, List
from django.db import DatabaseError, IntegrityError
from django.db.models import QuerySet, Model
import logging

from core.exceptions import StorageFailureError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Model)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.
    Database failures are logged with detail and surfaced as StorageFailureError;
    IntegrityError is left to the caller, which knows what the constraint means.
    """

    def __init__(self, model: type[T]):
        self.model = model

    @contextmanager
    def storage_errors(self, operation: str):
        """Translate unexpected database errors into StorageFailureError"""
        try:
            yield
        except IntegrityError:
            raise
        except DatabaseError as e:
            logger.error(f"Database error during {operation} on {self.model.__name__}: {e}", exc_info=True)
            raise StorageFailureError(details={'operation': operation}) from e

    def get_by_id(self, id: int, **filters) -> Optional[T]:
        """Get a single instance by ID"""
        with self.storage_errors('get_by_id'):
            return self.model.objects.filter(id=id, **filters).first()

    def get_all(self, **filters) -> QuerySet[T]:
        """Get all instances matching filters"""
        return self.model.objects.filter(**filters)

    def create(self, **kwargs) -> T:
        """Create a new instance"""
        with self.storage_errors('create'):
            return self.model.objects.create(**kwargs)

    def update(self, instance: T, **kwargs) -> T:
        """Update an existing instance"""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        with self.storage_errors('update'):
            instance.save()
        return instance

    def delete(self, instance: T) -> None:
        """Delete an instance"""
        with self.storage_errors('delete'):
            instance.delete()

    def exists(self, **filters) -> bool:
        """Check if instance exists"""
        with self.storage_errors('exists'):
            return self.model.objects.filter(**filters).exists()

    def count(self, **filters) -> int:
        """Count instances matching filters"""
        with self.storage_errors('count'):
            return self.model.objects.filter(**filters).count()

    def get_queryset(self) -> QuerySet[T]:
        """Get base queryset for custom queries"""
        return self.model.objects.all()

    def evaluate(self, queryset: QuerySet[T], operation: str = 'query') -> List[T]:
        """Evaluate a queryset, translating database failures"""
        with self.storage_errors(operation):
            return list(queryset)
