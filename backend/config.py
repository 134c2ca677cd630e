"""
Configuration file for the risk-aware routing backend.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Directions provider (Mapbox). VITE_MAPBOX_TOKEN is shared with the dashboard frontend.
    MAPBOX_ACCESS_TOKEN = os.getenv('MAPBOX_ACCESS_TOKEN') or os.getenv('VITE_MAPBOX_TOKEN')
    MAPBOX_BASE_URL = os.getenv('MAPBOX_BASE_URL', 'https://api.mapbox.com/directions/v5/mapbox')

    # Routing engine limits
    ROUTING_TIMEOUT_SECONDS = float(os.getenv('ROUTING_TIMEOUT_SECONDS', '10'))
    ROUTING_CONNECT_TIMEOUT_SECONDS = float(os.getenv('ROUTING_CONNECT_TIMEOUT_SECONDS', '3.05'))
    ROUTING_BATCH_TIMEOUT_SECONDS = float(os.getenv('ROUTING_BATCH_TIMEOUT_SECONDS', '30'))
    ROUTING_MAX_RETRIES = int(os.getenv('ROUTING_MAX_RETRIES', '1'))
    ROUTING_MAX_WORKERS = int(os.getenv('ROUTING_MAX_WORKERS', '4'))

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:5173,http://localhost:3000').split(',')

    # Rate Limiting
    RATE_LIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')
    RATE_LIMIT_ENABLED = os.getenv('RATE_LIMIT_ENABLED', 'True').lower() == 'true'


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    RATE_LIMIT_ENABLED = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(name: str = None):
    """Return the config class for `name` (falls back to FLASK_ENV, then default)."""
    name = name or os.getenv('FLASK_ENV', 'default')
    return config.get(name, config['default'])
