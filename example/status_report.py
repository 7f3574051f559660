"""Print a status report of the attached DMD. Set DLPC900_DEBUG=3 to try it without hardware."""
import sys

import pretty_errors  # noqa: F401  (nicer tracebacks when run from a terminal)
from termcolor import colored

from dlpc900ctl import ControllerConfig, DeviceController, DMDerror, TransportError
from dlpc900ctl.status import describe_hardware_status, format_status_bits, hardware_status_report


def highlight_error(message: str) -> str:
    return colored("[ERROR] " + message, "red", attrs=["bold"])


def print_dmd_status(config: ControllerConfig):
    with DeviceController(config=config) as d:
        print("====" * 4, "DMD STATUS", "====" * 4)

        print(d.query_firmware_version().describe())
        print(f"Display Mode       : {d.query_display_mode().name}")

        print("Main Status        :")
        for flag in d.query_main_status().flags:
            print(f"  {flag.name:25}: {'Yes' if flag.value else 'No'}")

        state = d.state
        print(f"Power Mode         : {state.power.value}, {state.activity.value}")

        hw_status = d.query_hardware_status()
        print(f"Hardware Status    : {format_status_bits(hw_status)}")
        for line, is_error in hardware_status_report(hw_status):
            print("  " + (highlight_error(line) if is_error else line))
        _, hw_errors = describe_hardware_status(hw_status)
        print(f"Hardware Errors    : {hw_errors}")
        print("====================" * 2 + "=====")


if __name__ == "__main__":
    try:
        print_dmd_status(ControllerConfig.from_env())
    except TransportError as e:
        print(highlight_error(f"USB communication failed: {e}"))
        sys.exit(1)
    except DMDerror as e:
        print(highlight_error(str(e)))
        sys.exit(1)
