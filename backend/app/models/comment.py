# app/models/comment.py
import uuid
from tortoise import fields, models

class Comment(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    content = fields.CharField(max_length=1000)
    author = fields.ForeignKeyField("models.User", related_name="comments", on_delete=fields.CASCADE)
    snippet = fields.ForeignKeyField("models.Snippet", related_name="comments", on_delete=fields.CASCADE)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "comments"
