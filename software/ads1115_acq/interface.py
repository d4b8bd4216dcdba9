import logging
import numpy as np

from .support.logging import *
from .gateware.registers import CycleStatus, Gain, FULL_SCALE, config_word, code_to_volts


__all__ = ["ADS1115Error", "ADS1115AckError", "ADS1115TimeoutError", "ADS1115Interface",
           "codes_to_volts"]


class ADS1115Error(Exception):
    pass


class ADS1115AckError(ADS1115Error):
    pass


class ADS1115TimeoutError(ADS1115Error):
    pass


def codes_to_volts(codes, gain):
    return np.asarray(codes, dtype=np.int16).astype(np.float64) * (FULL_SCALE[Gain(gain)] / 32768)


class ADS1115Interface:
    """
    Drives an ``ADS1115Acquisition`` core from an ``amaranth.sim`` testbench.

    Every method takes the testbench context ``ctx``. ``timeout`` bounds, in clock cycles, how
    long to wait for the core to become ready or finish a cycle; the core itself never times
    out, so with ``timeout=None`` a wedged bus engine hangs the caller just like it hangs the
    core.
    """
    def __init__(self, core, logger, *, timeout=None):
        self.lower   = core
        self._logger = logger
        self._level  = logging.DEBUG if self._logger.name == __name__ else logging.TRACE
        self.timeout = timeout

    def _log(self, message, *args):
        self._logger.log(self._level, "ADS1115: " + message, *args)

    async def _wait_done(self, ctx, what):
        cycles = 0
        while not ctx.get(self.lower.done):
            if self.timeout is not None and cycles >= self.timeout:
                raise ADS1115TimeoutError("{} timeout after {} cycles; bus engine wedged?"
                                          .format(what, cycles))
            await ctx.tick()
            cycles += 1
        return cycles

    async def reset(self, ctx):
        self._log("reset")
        ctx.set(self.lower.rst, 1)
        await ctx.tick()
        ctx.set(self.lower.rst, 0)

    async def acquire(self, ctx, channel):
        """Runs one single-shot cycle on ``channel`` and returns the raw signed code."""
        if channel not in range(4):
            raise ADS1115Error("invalid channel {!r}; must be 0..3".format(channel))

        word = config_word(channel, gain=self.lower.gain, data_rate=self.lower.data_rate)
        self._log("ain%d config=<%s>", channel, dump_hex(word.to_bytes(2, "big")))

        await self._wait_done(ctx, "ready")

        ctx.set(self.lower.channel, channel)
        ctx.set(self.lower.start, 1)
        await ctx.tick()
        ctx.set(self.lower.start, 0)

        cycles = await self._wait_done(ctx, "conversion")

        status = ctx.get(self.lower.status)
        if status == CycleStatus.ABORTED:
            self._log("ain%d aborted after %d cycles", channel, cycles)
            raise ADS1115AckError("ADS1115 at {:#04x} did not acknowledge"
                                  .format(self.lower.address))

        code = ctx.get(self.lower.sample)
        self._log("ain%d code=%s (%d) after %d cycles", channel, dump_word(code), code, cycles)
        return code

    async def measure(self, ctx, channel):
        """Runs one single-shot cycle on ``channel`` and returns the input voltage."""
        code = await self.acquire(ctx, channel)
        return code_to_volts(code, self.lower.gain)
