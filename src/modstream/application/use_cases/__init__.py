from .get_streams import GetStreamsUseCase

__all__ = ["GetStreamsUseCase"]
