from .routes import logout_router

__all__ = ["logout_router"]
