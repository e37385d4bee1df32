from spoke.handlers import probes

__all__ = ["probes"]
