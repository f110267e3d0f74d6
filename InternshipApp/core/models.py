"""Abstract models shared by task-level and submission-level attachments."""

from django.db import models


class AttachmentBase(models.Model):
    """A file already accepted by the upload service: only its metadata is stored."""
    url = models.URLField(max_length=1000)
    filename = models.CharField(max_length=255)
    size_bytes = models.PositiveBigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["id"]

    def as_dict(self) -> dict:
        return {
            "url": self.url,
            "filename": self.filename,
            "size_bytes": self.size_bytes,
            "mime_type": self.mime_type or None,
        }
