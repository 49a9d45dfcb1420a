from .log_utils import LogUtilsMixin, fmt_msg, printer, debug_printer

__all__ = ["LogUtilsMixin", "fmt_msg", "printer", "debug_printer"]
