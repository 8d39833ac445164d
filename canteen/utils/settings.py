# canteen/utils/settings.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./canteen.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in ("1", "true", "yes")

MENU_SERVICE_URL = os.getenv("MENU_SERVICE_URL", "http://menu-service:8000")
ORDER_SERVICE_URL = os.getenv("ORDER_SERVICE_URL", "http://order-service:8000")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 2))

#pricing policy, free delivery inside the hospital
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.05"))
DELIVERY_FEE = Decimal(os.getenv("DELIVERY_FEE", "0.00"))

ORDER_POLL_INTERVAL_SECONDS = float(os.getenv("ORDER_POLL_INTERVAL_SECONDS", 30))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
