import logging
import traceback

from datetime import datetime


logger = logging.getLogger("ms_deconvolution.task")
logger.addHandler(logging.NullHandler())


def fmt_msg(*message):
    return u"%s %s" % (datetime.now().isoformat(' '), u', '.join(map(str, message)))


def printer(obj, *message):
    print(fmt_msg(*message))


def debug_printer(obj, *message):
    if obj.in_debug_mode():
        print(u"DEBUG:" + fmt_msg(*message))


class LogUtilsMixin(object):
    """Route a long running task's progress messages either to stdout or,
    after :meth:`log_with_logger`, to a :class:`logging.Logger`.
    """

    logger_state = None
    print_fn = printer
    debug_print_fn = debug_printer
    error_print_fn = printer
    _debug_enabled = None

    @classmethod
    def log_with_logger(cls, logger):
        cls.logger_state = logger
        cls.print_fn = logger.info
        cls.debug_print_fn = logger.debug
        cls.error_print_fn = logger.error

    def in_debug_mode(self):
        if self._debug_enabled is None:
            logger_state = self.logger_state
            if logger_state is not None:
                self._debug_enabled = logger_state.isEnabledFor(logging.DEBUG)
        return bool(self._debug_enabled)

    def log(self, *message):
        self.print_fn(u', '.join(map(str, message)))

    def debug(self, *message):
        self.debug_print_fn(u', '.join(map(str, message)))

    def error(self, *message, **kwargs):
        exception = kwargs.get("exception")
        self.error_print_fn(u', '.join(map(str, message)))
        if exception is not None:
            self.error_print_fn(u''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__)))
