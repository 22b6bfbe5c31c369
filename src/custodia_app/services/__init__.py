from .gateway import Gateway, RemoteDataGateway

__all__ = ["Gateway", "RemoteDataGateway"]
