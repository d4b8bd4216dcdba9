from amaranth.sim import Simulator

from ads1115_acq.gateware.registers import ADS1115_ADDRESS


def run_simulation(top, bench, *, clk_period=1e-6, vcd_file=None):
    sim = Simulator(top)
    sim.add_clock(clk_period)
    sim.add_testbench(bench)
    if vcd_file is None:
        sim.run()
    else:
        with sim.write_vcd(vcd_file):
            sim.run()


async def run_cycle(ctx, dut, channel, *, limit=1000, engine=None, record=None):
    """Pulses start on an idle core and waits for done; returns the cycle count. Bytes
    accepted by ``engine`` on the way are appended to ``record`` as (rw, data_w, last)."""
    assert ctx.get(dut.done), "core is not idle"
    ctx.set(dut.channel, channel)
    ctx.set(dut.start, 1)
    await ctx.tick()
    ctx.set(dut.start, 0)
    cycles = 1
    while not ctx.get(dut.done):
        if record is not None and ctx.get(engine.en) and not ctx.get(engine.busy):
            record.append((ctx.get(engine.rw), ctx.get(engine.data_w), ctx.get(engine.last)))
        assert cycles < limit, "cycle did not finish in {} clocks".format(limit)
        await ctx.tick()
        cycles += 1
    return cycles


async def transfer(ctx, bus, *, rw, data=0, last, addr=ADS1115_ADDRESS, limit=100):
    """Runs one byte through a bus engine port; returns (data_r, ack_err)."""
    while ctx.get(bus.busy):
        await ctx.tick()
    ctx.set(bus.addr, addr)
    ctx.set(bus.rw, rw)
    ctx.set(bus.data_w, data)
    ctx.set(bus.last, last)
    ctx.set(bus.en, 1)
    await ctx.tick()
    ctx.set(bus.en, 0)
    for _ in range(limit):
        if not ctx.get(bus.busy):
            return ctx.get(bus.data_r), ctx.get(bus.ack_err)
        await ctx.tick()
    raise AssertionError("engine stayed busy for {} clocks".format(limit))
