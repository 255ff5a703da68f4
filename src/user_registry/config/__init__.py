from .settings import Settings, get_settings, safe_log_db_url

__all__ = ["Settings", "get_settings", "safe_log_db_url"]
