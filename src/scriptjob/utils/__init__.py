from scriptjob.utils.loggers import configure_default_logging, configure_logging, get_logger
from scriptjob.utils.strings import obscure

__all__ = ["configure_default_logging", "configure_logging", "get_logger", "obscure"]
