from amaranth import *

from ..gateware.acquisition import ADS1115Acquisition
from ..gateware.bus import BusArbiter, I2CBusInterface
from .bus_model import ADS1115BusModel


__all__ = ["AcquisitionTestbench"]


class AcquisitionTestbench(Elaboratable):
    """
    Acquisition core wired to the ADS1115 bus model.

    The core's ``rst`` is treated as a system-wide reset and also resets the bus model and the
    arbiter. ``model_address`` places the emulated converter at a different address than the
    one the core talks to.

    With ``shared=True`` the engine sits behind a two-port ``BusArbiter``; the core is on port 0
    and ``other`` is a second initiator left for the testbench to drive.
    """
    def __init__(self, *, latency=4, shared=False, model_address=None, **kwargs):
        self.dut   = ADS1115Acquisition(**kwargs)
        if model_address is None:
            model_address = self.dut.address
        self.model = ADS1115BusModel(address=model_address, latency=latency)

        self.shared = shared
        if shared:
            self.arbiter = BusArbiter(2)
            self.other   = I2CBusInterface(name="other")

    def elaborate(self, platform):
        m = Module()

        m.submodules.dut = self.dut
        m.submodules.model = ResetInserter(self.dut.rst)(self.model)

        if self.shared:
            m.submodules.arbiter = ResetInserter(self.dut.rst)(self.arbiter)
            m.d.comb += [
                *self.dut.bus.connect(self.arbiter.ports[0]),
                *self.other.connect(self.arbiter.ports[1]),
                *self.arbiter.bus.connect(self.model.bus),
            ]
        else:
            m.d.comb += self.dut.bus.connect(self.model.bus)

        return m
