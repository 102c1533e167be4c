STATE_DIR_NAME = ".virtual_kanban"
CONFIG_FILE = "config.yaml"
JOURNAL_FILE = "moves.jsonl"

DEFAULT_ITEM_HEIGHT = 50
DEFAULT_BUFFER_ITEMS = 5
DEFAULT_VIEWPORT_HEIGHT = 400

# Auto-scroll band and rate while dragging near a column edge
AUTO_SCROLL_MARGIN = 50
AUTO_SCROLL_SPEED = 10

PRIMARY_BUTTON = 1

DEFAULT_LOG_LEVEL = "INFO"
