from .routes import public_bp
from .api_routes import public_api_bp

__all__ = ['public_bp', 'public_api_bp']
