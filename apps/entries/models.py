import uuid

from django.db import models


def new_entry_id() -> str:
    return uuid.uuid4().hex


class Entry(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=new_entry_id, editable=False)
    timestamp = models.DateTimeField(db_index=True)
    username = models.TextField()
    amount = models.CharField(max_length=64, db_index=True)
    image = models.TextField(blank=True)
    prize = models.FloatField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'entries'
        ordering = ['-timestamp']
        verbose_name_plural = 'entries'

    def __str__(self) -> str:
        return f"{self.timestamp:%Y-%m-%d %H:%M} {self.username} {self.amount} -> {self.prize:g}"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'username': self.username,
            'amount': self.amount,
            'image': self.image,
            'prize': self.prize,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
