import logging


__all__ = ["TRACE", "dump_hex", "dump_word"]


TRACE = 5

logging.TRACE = TRACE
logging.addLevelName(TRACE, "TRACE")

def _trace(self, msg, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)

logging.Logger.trace = _trace


class dump_hex:
    """Lazily formats a byte sequence as space-separated hex, so that building the string is
    skipped when the record is filtered out."""
    def __init__(self, data):
        self.data = data

    def __str__(self):
        return " ".join("{:02x}".format(byte) for byte in self.data)


class dump_word:
    def __init__(self, value, width=16):
        self.value = value
        self.width = width

    def __str__(self):
        return "{:0{}x}".format(self.value & ((1 << self.width) - 1), (self.width + 3) // 4)
