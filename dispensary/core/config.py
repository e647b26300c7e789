import os
from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dispensary.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

# Sessão (JWT em cookie HTTP-only)
SESSION_SECRET = os.getenv("SESSION_SECRET", "")
SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "app_session_id")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", str(365 * 24 * 60 * 60)))
SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", "0" if IS_DEV else "1")
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax" if IS_DEV else "none").strip().lower()
if SESSION_COOKIE_SAMESITE not in {"lax", "strict", "none"}:
    SESSION_COOKIE_SAMESITE = "lax" if IS_DEV else "none"

# Identidade promovida a admin no upsert (dono da loja)
OWNER_OPEN_ID = os.getenv("OWNER_OPEN_ID", "").strip()

# LLM (endpoint compatível com OpenAI chat completions)
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "http" if os.getenv("LLM_API_URL") else "mock").strip().lower()
LLM_API_URL = os.getenv("LLM_API_URL", "").strip()
LLM_API_KEY = os.getenv("LLM_API_KEY", "").strip()
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini").strip()
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "15"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "300"))

# Pedidos
ORDER_PREPARATION_HOURS = int(os.getenv("ORDER_PREPARATION_HOURS", "2"))
ORDER_DECREMENT_STOCK = _env_flag("ORDER_DECREMENT_STOCK", "1")

# Chat
CHAT_RATE_LIMIT_PER_MINUTE = int(os.getenv("CHAT_RATE_LIMIT_PER_MINUTE", "30"))

# Scripts de bootstrap (admin local)
DEV_BOOTSTRAP_ALLOW = _env_flag("DEV_BOOTSTRAP_ALLOW", "0")
