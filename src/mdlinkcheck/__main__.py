import sys

from mdlinkcheck.handlers.check_links_handler import handle_check_links
from mdlinkcheck.managers.config_manager import config_manager
from mdlinkcheck.utils.configure_logging import configure_logger


def main() -> int:
    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        module_specific_levels=config_manager.get_nested("debug.module_levels"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers"),
    )
    return handle_check_links(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
