from pathlib import Path
import os
from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
if not JWT_SECRET_KEY:
    raise ValueError("JWT_SECRET_KEY is not set")

JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')

# 7 days
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRE_MINUTES', '10080'))
if JWT_ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
    raise ValueError("JWT_ACCESS_TOKEN_EXPIRE_MINUTES must be positive")

ADMIN_SESSION_EXPIRE_DAYS = int(os.getenv('ADMIN_SESSION_EXPIRE_DAYS', '7'))

BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '12'))
if not 4 <= BCRYPT_ROUNDS <= 31:
    raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")

USE_SQLITE = os.getenv('USE_SQLITE', 'false').lower() == 'true'
SQLITE_PATH = os.getenv('SQLITE_PATH', './cinemamax.db')

DB_USER = os.getenv('DB_USER')
DB_PASSWORD = os.getenv('DB_PASSWORD')
DB_HOST = os.getenv('DB_HOST')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_NAME = os.getenv('DB_NAME', 'cinemamax')

if not USE_SQLITE:
    if not DB_USER:
        raise ValueError("DB_USER is not set")
    if not DB_PASSWORD:
        raise ValueError("DB_PASSWORD is not set")
    if not DB_HOST:
        raise ValueError("DB_HOST is not set")

# an empty key disables the provider, every catalog fallback then misses
TMDB_API_KEY = os.getenv('TMDB_API_KEY', '')
TMDB_BASE_URL = os.getenv('TMDB_BASE_URL', 'https://api.themoviedb.org/3')
TMDB_TIMEOUT = float(os.getenv('TMDB_TIMEOUT', '10'))
TMDB_CACHE_TTL_SECONDS = int(os.getenv('TMDB_CACHE_TTL_SECONDS', '300'))

CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

LOG_DIR = os.getenv('LOG_DIR', 'logs')
