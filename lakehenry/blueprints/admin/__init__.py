from .routes import admin_bp
from .api_routes import admin_api_bp
from .photo_routes import admin_photos_bp
from .raffle_routes import admin_raffle_bp

__all__ = ['admin_bp', 'admin_api_bp', 'admin_photos_bp', 'admin_raffle_bp']
