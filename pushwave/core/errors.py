"""Domain errors; HTTP mapping lives in pushwave.main."""


class PushwaveError(Exception):
    """Base class for pushwave errors."""


class CredentialsError(PushwaveError):
    """No usable VAPID key pair in the configuration. Fatal at startup."""


class InvalidSubscriptionError(PushwaveError):
    """Subscription payload lacks endpoint, keys.p256dh or keys.auth."""


class NoSubscribersError(PushwaveError):
    """Broadcast requested while the registry is empty."""


class RegistryStorageError(PushwaveError):
    """Subscription store exists but could not be read or written."""
