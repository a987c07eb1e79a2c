import logging

ROOT_LOGGER_NAME = "contractgen"

_CONFIGURED = False


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    global _CONFIGURED
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if not _CONFIGURED:
        root.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _CONFIGURED = True

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
