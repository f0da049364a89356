"""Size-based rotation trigger."""

from logsink.config import RetentionMode, RotationConfig


def rotation_enabled(config: RotationConfig) -> bool:
    """An archive count of 1 under count-bound retention turns rotation off."""
    return config.retention_mode is RetentionMode.AGE_BOUND or config.max_archive_count > 1


def should_rotate(current_size_bytes: int, config: RotationConfig) -> bool:
    if not rotation_enabled(config):
        return False
    return current_size_bytes > config.max_active_size_bytes
