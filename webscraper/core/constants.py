# Timing (in seconds)
DEFAULT_SCRAPE_INTERVAL = 30
DEFAULT_RENDER_TIMEOUT = 15
DEFAULT_NAVIGATION_TIMEOUT = 30
NETWORK_IDLE_GRACE_TIMEOUT = 5

# Render-wait retries on timeout
DEFAULT_TIMEOUT_ATTEMPTS = 1
DEFAULT_RETRY_WAIT = 2

# Browser Settings
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
DEFAULT_VIEWPORT = {"width": 1280, "height": 800}

# Output
DEFAULT_OUTPUT_FILE = "data.json"
CYCLE_HISTORY_SIZE = 20

# Resource Limits
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5
