"""
Helpers for files pushed to object storage (avatars, payment receipts).
"""
import os
import uuid

from django.conf import settings
from rest_framework import serializers

IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/webp')
RECEIPT_TYPES = IMAGE_TYPES + ('application/pdf',)


def validate_upload(file, allowed_types, max_bytes=None):
    """Rejects missing, oversized or wrongly typed uploads."""
    if file is None:
        raise serializers.ValidationError({'file': 'No file provided.'})

    limit = max_bytes or settings.UPLOAD_MAX_BYTES
    if file.size > limit:
        raise serializers.ValidationError(
            {'file': f'File size too large. Maximum {limit // (1024 * 1024)}MB allowed.'}
        )

    content_type = getattr(file, 'content_type', None)
    if content_type not in allowed_types:
        raise serializers.ValidationError(
            {'file': f"Invalid file type. Allowed: {', '.join(allowed_types)}."}
        )
    return file


def owner_filename(owner_id, filename):
    """``<owner>/<random>.<ext>`` so re-uploads never overwrite each other."""
    ext = os.path.splitext(filename)[1].lower() or '.bin'
    return f"{owner_id}/{uuid.uuid4().hex}{ext}"


def public_url(field_file, request=None):
    if not field_file:
        return None
    url = field_file.url
    if request is not None and url.startswith('/'):
        return request.build_absolute_uri(url)
    return url
