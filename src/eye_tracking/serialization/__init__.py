from .codec import KeyCasing, SessionCodec

__all__ = ["KeyCasing", "SessionCodec"]
