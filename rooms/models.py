from django.db import models


class RoomLock(models.Model):
    """
    One row per room number, locked with select_for_update() while a member
    is assigned to that room so capacity checks and writes are serialized.
    Rows are created on first use; the room table itself lives in settings.
    """
    room_number = models.CharField(max_length=20, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['room_number']
        verbose_name = "Room Lock"
        verbose_name_plural = "Room Locks"

    def __str__(self):
        return f"Lock for room {self.room_number}"

    @classmethod
    def acquire(cls, room_number):
        """Lock the room's row for the rest of the current transaction"""
        cls.objects.get_or_create(room_number=room_number)
        return cls.objects.select_for_update().get(room_number=room_number)
