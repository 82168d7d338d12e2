# Question batch shape. Every generation produces exactly this many questions
# and every persisted record carries a position in 1..QUESTIONS_PER_BATCH.
QUESTIONS_PER_BATCH = 5
QUESTION_MIN_LENGTH = 20
QUESTION_MAX_LENGTH = 300

# Job posting bounds enforced at the HTTP boundary (after trimming)
JOB_POSTING_MIN_LENGTH = 100
JOB_POSTING_MAX_LENGTH = 10_000

# Sanitized text sent to the model is capped here; longer input gets a "..." marker
SANITIZED_MAX_LENGTH = 5_000
TRUNCATION_MARKER = "..."

# Only the head of a posting is sent for language detection
LANGUAGE_SAMPLE_LENGTH = 1_000

# Generation request tuning
GENERATION_TEMPERATURE = 0.7
GENERATION_MAX_TOKENS = 1_000
DETECTION_TEMPERATURE = 0
DETECTION_MAX_TOKENS = 10

# Outbound client defaults
DEFAULT_MODEL_ID = "openrouter:openai/gpt-3.5-turbo"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_OPENAI_TIMEOUT_SECONDS = 12.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_APP_URL = "http://localhost:3000"
APP_TITLE = "InterviewPrep"

# Demo mode simulated latency, seconds
DEMO_DELAY_RANGE = (1.5, 2.5)

# Listing
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

# Storage
DEFAULT_DATABASE_URL = "sqlite:///./interview_prep.db"
