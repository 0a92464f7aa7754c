from openga.utils.logger_setup import RunLog, run_name_for, setup_logger

__all__ = ["RunLog", "run_name_for", "setup_logger"]
