import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./docshare.db")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")

# 10 МБ по умолчанию
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", "10485760"))

ALLOWED_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "application/zip",
)

# В продакшене обязательно задать через переменную окружения
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

# Стоимость bcrypt для паролей пользователей и ссылок
BCRYPT_ROUNDS = 10

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Адрес API для клиента
API_URL = os.getenv("API_URL", "http://localhost:8000")
