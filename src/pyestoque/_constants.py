"""Internal constants shared across the library."""

DEFAULT_BASE_URL = "http://localhost:5000"
CEP_BASE_URL = "https://viacep.com.br/ws"
USER_AGENT = "pyestoque"

DEFAULT_LANGUAGE = "pt-BR"

# ------------------------------------------------------------------
# Persisted preference keys (client storage)
# ------------------------------------------------------------------

LANGUAGE_STORAGE_KEY = "preferred-language"
SIDEBAR_STORAGE_KEY = "sidebar-open"
THEME_STORAGE_KEY = "theme"
AUTH_USER_STORAGE_KEY = "auth_user"
COMPANY_STORAGE_KEY = "company"

# ------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------

LOGIN_PATH = "/login"
HOME_PATH = "/"
ONBOARDING_PATH = "/onboarding"

# ------------------------------------------------------------------
# Session inactivity
# ------------------------------------------------------------------

INACTIVITY_TIMEOUT_S: float = 15 * 60
INACTIVITY_WARNING_S: float = 30

SIDEBAR_BREAKPOINT_PX = 768

CEP_LENGTH = 8
