import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
HANDLER_NAME = 'persona_chat'


def configure_logging(level: str = 'INFO') -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    # safe to call again, e.g. once per lifespan in tests
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
