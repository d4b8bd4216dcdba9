import sys
import logging
import argparse
from amaranth.back import rtlil
from amaranth.sim import Simulator

from .support.logging import *
from .gateware.registers import *
from .gateware.acquisition import ADS1115Acquisition
from .simulation.testbench import AcquisitionTestbench
from .interface import ADS1115Interface, ADS1115Error, codes_to_volts


logger = logging.getLogger(__name__)


def _int(value):
    return int(value, 0)


def _code(value):
    code = _int(value)
    if code not in range(-0x8000, 0x8000):
        raise argparse.ArgumentTypeError(
            "{} is not a signed 16-bit conversion code".format(value))
    return code


def get_argparser():
    parser = argparse.ArgumentParser(
        prog="ads1115-acq",
        description="Simulate or generate the ADS1115 single-shot acquisition core.")
    parser.add_argument(
        "-v", "--verbose", default=0, action="count",
        help="increase logging verbosity (-v for DEBUG, -vv for TRACE)")

    def add_core_arguments(parser):
        parser.add_argument(
            "-A", "--address", metavar="ADDR", type=_int, default=ADS1115_ADDRESS,
            help="I2C address of the converter (default: %(default)#04x)")
        parser.add_argument(
            "--gain", metavar="FSR", choices=[gain.name for gain in Gain],
            default=Gain.FSR_4V096.name,
            help="full-scale range (default: %(default)s)")
        parser.add_argument(
            "--data-rate", metavar="RATE", choices=[rate.name for rate in DataRate],
            default=DataRate.SPS_128.name,
            help="conversion data rate (default: %(default)s)")
        parser.add_argument(
            "--conversion-wait", metavar="CYCLES", type=int, default=0,
            help="hold for CYCLES between conversion start and read (default: %(default)s)")
        parser.add_argument(
            "--check-read-ack", default=False, action="store_true",
            help="also abort a cycle when the read is not acknowledged")

    p_operation = parser.add_subparsers(dest="operation", metavar="OPERATION", required=True)

    p_simulate = p_operation.add_parser("simulate",
        help="run acquisition cycles against a simulated converter")
    add_core_arguments(p_simulate)
    p_simulate.add_argument(
        "-c", "--channel", metavar="CHANNEL", type=int, action="append",
        choices=range(4), default=None,
        help="acquire CHANNEL; may be given several times (default: 0)")
    p_simulate.add_argument(
        "--ain", metavar="CODE", type=_code, nargs=4, default=[0, 0, 0, 0],
        help="conversion codes presented on AIN0..AIN3 (default: all zero)")
    p_simulate.add_argument(
        "--latency", metavar="CYCLES", type=int, default=4,
        help="bus engine busy time per byte (default: %(default)s)")
    p_simulate.add_argument(
        "--nack-at", metavar="BYTE", type=int, default=0,
        help="do not acknowledge the BYTE-th byte on the bus (default: never)")
    p_simulate.add_argument(
        "--clk-freq", metavar="FREQ", type=float, default=1e6,
        help="simulated clock frequency in Hz (default: %(default)s)")
    p_simulate.add_argument(
        "--vcd", metavar="FILE", type=str, default=None,
        help="write waveforms to FILE")

    p_generate = p_operation.add_parser("generate",
        help="write the acquisition core as RTLIL")
    add_core_arguments(p_generate)
    p_generate.add_argument(
        "file", metavar="FILE", type=str, nargs="?", default=None,
        help="write RTLIL to FILE (default: stdout)")

    return parser


def _core_kwargs(args):
    return dict(
        address=args.address,
        gain=Gain[args.gain],
        data_rate=DataRate[args.data_rate],
        conversion_wait=args.conversion_wait,
        check_read_ack=args.check_read_ack,
    )


def core_ports(core):
    return [
        core.rst, core.start, core.channel,
        core.done, core.sample, core.status.as_value(), core.ack_err, core.updated,
        *core.bus.request_signals(), *core.bus.response_signals(),
    ]


def simulate(args):
    top = AcquisitionTestbench(latency=args.latency, **_core_kwargs(args))
    iface = ADS1115Interface(top.dut, logger)
    channels = args.channel or [0]
    codes = []

    async def bench(ctx):
        for n, code in enumerate(args.ain):
            ctx.set(top.model.ain[n], code)
        ctx.set(top.model.nack_at, args.nack_at)
        for channel in channels:
            try:
                codes.append(await iface.acquire(ctx, channel))
            except ADS1115Error as error:
                logger.error("ain%d: %s", channel, error)
                codes.append(None)

    sim = Simulator(top)
    sim.add_clock(1 / args.clk_freq)
    sim.add_testbench(bench)
    if args.vcd:
        with sim.write_vcd(args.vcd):
            sim.run()
    else:
        sim.run()

    acquired = [(channel, code) for channel, code in zip(channels, codes) if code is not None]
    if acquired:
        volts = codes_to_volts([code for _, code in acquired], Gain[args.gain])
        for (channel, code), voltage in zip(acquired, volts):
            logger.info("ain%d: code=%s (%d) %.6f V", channel, dump_word(code), code, voltage)
    return 0 if len(acquired) == len(channels) else 1


def generate(args):
    core = ADS1115Acquisition(**_core_kwargs(args))
    output = rtlil.convert(core, name="ads1115_acquisition", ports=core_ports(core))
    if args.file is None:
        sys.stdout.write(output)
    else:
        with open(args.file, "w") as file:
            file.write(output)
        logger.debug("wrote RTLIL to %s", args.file)
    return 0


def main(argv=None):
    args = get_argparser().parse_args(argv)

    level = {0: logging.INFO, 1: logging.DEBUG}.get(args.verbose, TRACE)
    logging.basicConfig(level=level, format="%(levelname)s: %(name)s: %(message)s")

    try:
        if args.operation == "simulate":
            return simulate(args)
        if args.operation == "generate":
            return generate(args)
    except ValueError as error:
        logger.error("%s", error)
        return 2


if __name__ == "__main__":
    sys.exit(main())
