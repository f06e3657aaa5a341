# staffbook/models/db.py
from tortoise import fields
from tortoise.models import Model


class Document(Model):
    id = fields.IntField(pk=True)
    collection = fields.CharField(max_length=100, index=True)  # employees, shifts, holidays, ...
    data = fields.JSONField(default=dict)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "documents"
        ordering = ["id"]
