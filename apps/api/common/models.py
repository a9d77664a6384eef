# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    Abstract model that stamps creation / modification time.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
