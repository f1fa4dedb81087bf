from .logging import LOG_LEVELS, LogMessage, log_message

__all__ = ["LOG_LEVELS", "LogMessage", "log_message"]
