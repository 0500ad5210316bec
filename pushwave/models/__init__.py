from .subscription import Subscription, SubscriptionKeys

__all__ = ["Subscription", "SubscriptionKeys"]
