from argparse import ArgumentParser
import sys

from apptargets.details.defaults import Platform
from apptargets.details.logger import Logger
from apptargets.details.tools.generate import generate_main
from apptargets.details.tools.validate import validate_main
from apptargets.details.workspace import Workspace


def main():
    COMMANDS = {
        "generate": generate_main,
        "validate": validate_main,
    }
    # parse common arguments...
    parser = ArgumentParser(prog="apptargets")
    parser.add_argument("command", choices=COMMANDS.keys())
    parser.add_argument("--project-root", type=str, default=".")
    parser.add_argument("--targets-root", type=str, default="targets")
    parser.add_argument(
        "--platform",
        dest="platforms",
        action="append",
        choices=[p.value for p in Platform],
    )
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()
    logger = Logger(debug=args.debug)
    # load host app config and workspace...
    workspace = Workspace(args.project_root, args.targets_root)
    try:
        host = workspace.load_host()
    except (OSError, ValueError) as e:
        logger.error(f"failed to load app config: {e}")
        sys.exit(1)
    exit_code = COMMANDS[args.command](
        workspace=workspace,
        host=host,
        platforms=args.platforms,
        logger=logger,
    )
    if exit_code is not None:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
