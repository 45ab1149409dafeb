import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/food_admin_db")

# Application Metadata
PROJECT_NAME = "Food Ordering Admin"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Inventory
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", 10)) # Items at or below this count are flagged
RECENT_ADJUSTMENTS_LIMIT = int(os.getenv("RECENT_ADJUSTMENTS_LIMIT", 20))
ADJUSTMENT_MAX_RETRIES = int(os.getenv("ADJUSTMENT_MAX_RETRIES", 3)) # Attempts when another admin wrote the same item first

# Outbox Poller Configuration (feeds the live change stream)
RUN_OUTBOX_POLLER = os.getenv("RUN_OUTBOX_POLLER", "true").lower() in ("1", "true", "yes")
POLLING_INTERVAL = float(os.getenv("POLLING_INTERVAL", 1)) # Poller checks for new events every N seconds
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 5)) # Max retries for an event
BATCH_SIZE = int(os.getenv("BATCH_SIZE", 50)) # How many events to fetch per poll
