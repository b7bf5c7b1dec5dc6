from .delivery import Channel, DeliveryResult

__all__ = ["Channel", "DeliveryResult"]
