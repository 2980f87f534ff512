# src/sysops/names.py

# anchors seeding the brace-matching scan
DATA_ANCHORS = ('{"data":', '{ "data":')

# synthetic payload handed downstream instead of an HTML error page
HTML_ERROR_MESSAGE = "Received HTML error page from server"

DEFAULT_SCRIPT_TITLE = "Generated Script"

# line markers indicating narrative script content
SCRIPT_MARKERS = ("NARRATOR", "VOICE OVER", "VO", "INT.", "EXT.", "SCENE")

DEFAULT_CONFIG = {
    "max_retries": 3,
    "base_delay_ms": 500,
    "min_script_length": 20,
    "basic_window": 5000,
    "basic_lead": 50,
    "min_block_length": 50,
    "max_chunks": 500,
    "duplicate_warnings": 5,
    "log_level": "INFO",
}


def get_config_value(cfg: dict, key: str):
    """
    Get a configuration value, falling back to the default.
    """
    value = (cfg or {}).get(key)
    if value is None:
        return DEFAULT_CONFIG[key]
    return value
