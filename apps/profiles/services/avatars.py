import logging

from django.db import transaction

from utils.uploads import IMAGE_TYPES, owner_filename, validate_upload

logger = logging.getLogger(__name__)


@transaction.atomic
def replace_avatar(profile, file):
    """Stores ``file`` as the profile avatar, removing the previous one."""
    validate_upload(file, IMAGE_TYPES)

    old = profile.avatar.name if profile.avatar else None
    profile.avatar.save(owner_filename(profile.user_id, file.name), file, save=False)
    profile.save(update_fields=['avatar', 'updated_at'])

    if old:
        profile.avatar.storage.delete(old)
        logger.info("Replaced avatar %s for user %s", old, profile.user_id)
    return profile


@transaction.atomic
def remove_avatar(profile):
    if profile.avatar:
        profile.avatar.delete(save=False)
    profile.avatar = None
    profile.save(update_fields=['avatar', 'updated_at'])
    return profile
